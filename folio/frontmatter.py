"""Front matter parsing and serialization.

A front matter block is YAML between a `---` line at the very top of a
file and the next `---` line. Documents must carry one; layouts and
static files may.

Functions:
    has_frontmatter: Check whether text opens with a front matter block.
    parse_frontmatter: Strictly split text into (metadata, body).
    split_frontmatter: Lenient variant for files where the block is optional.
    dump_frontmatter: Serialize metadata and body back to text.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from .errors import ParseError

OPENING_RE = re.compile(r"\A---[ \t]*\r?\n")
FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


def has_frontmatter(text: str) -> bool:
    """Return True if text opens with a front matter delimiter line."""
    return bool(OPENING_RE.match(_strip_bom(text)))


def parse_frontmatter(
    text: str, source: Path | None = None
) -> tuple[dict[str, Any], str]:
    """Extract YAML front matter from content.

    Args:
        text: Raw file content.
        source: Path used in error messages.

    Returns:
        Tuple of (front matter dict, remaining body).

    Raises:
        ParseError: If the block is missing, unterminated, not valid YAML,
            or does not hold a mapping.
    """
    text = _strip_bom(text)
    if not OPENING_RE.match(text):
        raise ParseError(source, "missing front matter block (expected '---' on the first line)")
    match = FRONTMATTER_RE.match(text)
    if not match:
        raise ParseError(source, "unterminated front matter block (no closing '---' line)")
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        where = f" on line {mark.line + 2}" if mark is not None else ""
        raise ParseError(source, f"invalid YAML in front matter{where}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError(
            source, f"front matter must be a mapping, got {type(data).__name__}"
        )
    return data, text[match.end() :]


def split_frontmatter(
    text: str, source: Path | None = None
) -> tuple[dict[str, Any], str]:
    """Split optional front matter from text.

    Returns ({}, text) when no block opens the text; a block that is
    present but malformed still raises ParseError.
    """
    if not has_frontmatter(text):
        return {}, _strip_bom(text)
    return parse_frontmatter(text, source)


def dump_frontmatter(metadata: dict[str, Any], body: str = "") -> str:
    """Serialize metadata as a front matter block followed by body.

    Key order is preserved so that a parsed document re-serializes to
    the same key/value set.

    Examples:
        >>> dump_frontmatter({"layout": "default", "title": "Hi"}, "Body\\n")
        '---\\nlayout: default\\ntitle: Hi\\n---\\nBody\\n'
    """
    if metadata:
        block = yaml.safe_dump(
            metadata,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    else:
        block = ""
    return f"---\n{block}---\n{body}"
