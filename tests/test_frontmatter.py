from datetime import date
from pathlib import Path

import pytest

from folio.errors import ParseError
from folio.frontmatter import (
    dump_frontmatter,
    has_frontmatter,
    parse_frontmatter,
    split_frontmatter,
)

POST = """---
layout: default
title: Logging in production
category: nodejs
tags: [logging, express]
---
First paragraph.

Second paragraph.
"""


def test_parse_extracts_every_key():
    meta, body = parse_frontmatter(POST)
    assert meta == {
        "layout": "default",
        "title": "Logging in production",
        "category": "nodejs",
        "tags": ["logging", "express"],
    }
    assert body == "First paragraph.\n\nSecond paragraph.\n"


def test_round_trip_preserves_keys_and_values():
    meta, body = parse_frontmatter(POST)
    meta["date"] = date(2020, 3, 25)
    meta["extra"] = {"nested": [1, 2], "unicode": "café"}
    text = dump_frontmatter(meta, body)
    again, again_body = parse_frontmatter(text)
    assert again == meta
    assert list(again) == list(meta)
    assert again_body == body


def test_dump_format_and_empty_block():
    assert dump_frontmatter({"layout": "default", "title": "Hi"}, "Body\n") == (
        "---\nlayout: default\ntitle: Hi\n---\nBody\n"
    )
    assert parse_frontmatter(dump_frontmatter({}, "Body")) == ({}, "Body")
    assert parse_frontmatter("---\n---\n") == ({}, "")


def test_crlf_and_bom_are_accepted():
    meta, body = parse_frontmatter("\ufeff---\r\ntitle: Hi\r\n---\r\nBody")
    assert meta == {"title": "Hi"}
    assert body == "Body"


def test_missing_block_raises_parse_error():
    with pytest.raises(ParseError) as excinfo:
        parse_frontmatter("# Just markdown\n", Path("post.md"))
    assert excinfo.value.source_path == Path("post.md")
    assert "missing front matter" in excinfo.value.message


def test_unterminated_block_raises():
    with pytest.raises(ParseError, match="unterminated"):
        parse_frontmatter("---\ntitle: Hi\nbody without end\n")


def test_invalid_yaml_raises():
    with pytest.raises(ParseError, match="invalid YAML"):
        parse_frontmatter("---\ntitle: [unclosed\n---\nbody")


def test_non_mapping_raises():
    with pytest.raises(ParseError, match="must be a mapping"):
        parse_frontmatter("---\n- a\n- b\n---\nbody")


def test_split_is_lenient_only_about_absence():
    assert split_frontmatter("plain text") == ({}, "plain text")
    assert split_frontmatter("---\nlayout: base\n---\n<main/>") == ({"layout": "base"}, "<main/>")
    with pytest.raises(ParseError):
        split_frontmatter("---\ntitle: [unclosed\n---\n")


def test_has_frontmatter():
    assert has_frontmatter("---\n")
    assert has_frontmatter("--- \r\ntitle: x")
    assert not has_frontmatter("----\n")
    assert not has_frontmatter("body\n---\n")
