from datetime import datetime
from pathlib import Path, PurePosixPath

import pytest

from folio.config import load_config
from folio.content import ContentProcessor, DocumentBuilder, FileContentLoader, UrlDeriver
from folio.errors import ConfigurationError, ParseError

NOW = datetime(2024, 1, 1)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def create_site(tmp_path: Path) -> Path:
    site = tmp_path / "blog"
    write(site / "_layouts" / "default.html", "<main>{{ content }}</main>")
    write(
        site / "_posts" / "2020-03-25-logging-in-production.md",
        "---\nlayout: default\ntitle: Logging in production\ncategory: nodejs\n"
        "tags: [logging, express]\n---\n"
        "Use a real logger.\n\n```js\napp.use(logger)\n```\n",
    )
    write(
        site / "_posts" / "2019-11-02-esp8266-blink.md",
        "---\nlayout: default\ntitle: Blinking an LED\ncategory: iot\n---\n"
        "Register-level GPIO.\n",
    )
    write(
        site / "_posts" / "2021-07-14-rx-streams.md",
        "---\ntitle: Reactive streams\ncategories: [python, rx]\n---\n"
        "## Composing\n\nStreams compose.\n",
    )
    write(site / "_drafts" / "unfinished-thoughts.md", "---\ntitle: Unfinished\n---\nSoon.\n")
    write(site / "about.md", "---\ntitle: About\n---\nWho writes here.\n")
    write(site / "index.html", "---\nlayout: default\n---\n{% for p in site.posts %}{{ p.title }}{% endfor %}")
    write(site / "404.html", "<h1>Not found</h1>")
    write(site / "assets" / "css" / "style.css", "---\n---\n@import \"{{ site.theme }}\";\n")
    write(site / "assets" / "img" / "logo.svg", "<svg/>")
    write(site / "README.md", "Not front-mattered; excluded by default.\n")
    write(site / "_site" / "stale.html", "old output")
    write(site / ".git" / "HEAD", "ref")
    return site


def load(site: Path, **kwargs):
    config = load_config(site)
    return ContentProcessor(site, config).load(now=NOW, **kwargs)


def test_content_processing_builds_documents(tmp_path):
    site = create_site(tmp_path)
    content = load(site)

    assert [p.slug for p in content.posts] == [
        "rx-streams",
        "logging-in-production",
        "esp8266-blink",
    ]
    post = content.posts[1]
    assert post.title == "Logging in production"
    assert post.date == datetime(2020, 3, 25)
    assert post.category == "nodejs"
    assert post.tags == ["logging", "express"]
    assert post.layout == "default"
    assert post.layout_explicit is True
    assert post.url == "/nodejs/2020/03/25/logging-in-production/"
    assert post.output_path == "nodejs/2020/03/25/logging-in-production/index.html"
    assert post.excerpt == "Use a real logger."
    assert post.excerpt_html.strip() == "<p>Use a real logger.</p>"
    assert 'class="highlight"' in post.content
    assert post.kind == "post"
    assert post.source_type == "markdown"
    assert post.relative_path == "2020-03-25-logging-in-production.md"

    rx = content.posts[0]
    assert rx.url == "/python/2021/07/14/rx-streams/"
    assert rx.layout == "default"
    assert rx.layout_explicit is False
    assert rx.toc[0].id == "composing"
    assert rx.excerpt == "## Composing"


def test_pages_assets_and_static_files(tmp_path):
    site = create_site(tmp_path)
    content = load(site)

    pages = {p.relative_path: p for p in content.pages}
    assert set(pages) == {"about.md", "index.html"}
    assert pages["about.md"].url == "/about/"
    assert pages["index.html"].url == "/"
    assert pages["index.html"].source_type == "html"

    assert [a.relative_path for a in content.assets] == ["assets/css/style.css"]
    assert content.assets[0].layout is None
    assert content.assets[0].url == "/assets/css/style.css"

    static = sorted(s.relative_path for s in content.static_files)
    assert static == ["404.html", "assets/img/logo.svg"]


def test_drafts_only_when_requested(tmp_path):
    site = create_site(tmp_path)
    assert all(not p.draft for p in load(site).posts)
    content = load(site, include_drafts=True)
    draft = next(p for p in content.posts if p.draft)
    assert draft.slug == "unfinished-thoughts"
    assert draft.title == "Unfinished"


def test_future_and_unpublished_posts_are_skipped(tmp_path, capsys):
    site = create_site(tmp_path)
    write(site / "_posts" / "2030-01-01-from-the-future.md", "---\ntitle: Later\n---\nx\n")
    write(
        site / "_posts" / "2020-01-01-hidden.md",
        "---\ntitle: Hidden\npublished: false\n---\nx\n",
    )
    slugs = [p.slug for p in load(site).posts]
    assert "from-the-future" not in slugs
    assert "hidden" not in slugs
    out = capsys.readouterr().out
    assert "Skipping future-dated post 2030-01-01-from-the-future.md" in out
    assert "Skipping unpublished post 2020-01-01-hidden.md" in out

    assert "from-the-future" in [p.slug for p in load(site, future=True).posts]


def test_post_without_front_matter_is_a_parse_error(tmp_path):
    site = create_site(tmp_path)
    bad = write(site / "_posts" / "2020-05-05-no-header.md", "# Forgot the header\n")
    with pytest.raises(ParseError) as excinfo:
        load(site)
    assert excinfo.value.source_path == bad


def test_page_with_malformed_front_matter_is_a_parse_error(tmp_path):
    site = create_site(tmp_path)
    write(site / "broken.md", "---\ntitle: [oops\n---\n")
    with pytest.raises(ParseError, match="invalid YAML"):
        load(site)


def test_post_filename_needs_a_date(tmp_path):
    site = create_site(tmp_path)
    write(site / "_posts" / "undated.md", "---\ntitle: Undated\n---\nx\n")
    with pytest.raises(ParseError, match="must start with a date"):
        load(site)


def test_output_collisions_are_reported(tmp_path):
    site = create_site(tmp_path)
    write(site / "about" / "index.md", "---\ntitle: Also about\n---\n")
    with pytest.raises(ConfigurationError, match="about/index.html"):
        load(site)


def test_front_matter_permalink_and_slug_override(tmp_path):
    site = create_site(tmp_path)
    write(
        site / "_posts" / "2020-02-02-custom.md",
        "---\ntitle: Custom\npermalink: /writing/custom.html\n---\nx\n",
    )
    write(site / "_posts" / "2020-02-03-renamed.md", "---\ntitle: R\nslug: better-name\n---\nx\n")
    posts = {p.title: p for p in load(site).posts}
    assert posts["Custom"].url == "/writing/custom.html"
    assert posts["Custom"].output_path == "writing/custom.html"
    assert posts["R"].url == "/2020/02/03/better-name/"


def test_permalink_escaping_root_is_rejected(tmp_path):
    site = create_site(tmp_path)
    write(site / "_posts" / "2020-02-02-evil.md", "---\npermalink: /../../etc/\n---\nx\n")
    with pytest.raises(ParseError, match="escapes the site root"):
        load(site)


def test_layout_none_and_default(tmp_path):
    site = tmp_path / "site"
    builder = DocumentBuilder(site, {"default_layout": "default", "permalink": "pretty"})
    raw = write(site / "raw.md", "---\nlayout: none\n---\nx\n")
    plain = write(site / "plain.md", "---\ntitle: Plain\n---\nx\n")
    assert builder.build(raw, "page").layout is None
    page = builder.build(plain, "page")
    assert page.layout == "default"
    assert page.layout_explicit is False


def test_theme_files_fill_in_missing_paths(tmp_path):
    site = create_site(tmp_path)
    theme = tmp_path / "theme"
    write(theme / "assets" / "img" / "logo.svg", "<svg id='theme'/>")
    write(theme / "assets" / "js" / "theme.js", "console.log('theme')")
    write(theme / "_layouts" / "default.html", "{{ content }}")
    config = load_config(site)
    loader = FileContentLoader(site, config, theme)
    found = loader.discover()
    static = {p.relative_to(root).as_posix(): root for root, p in found.static}
    assert static["assets/img/logo.svg"] == site
    assert static["assets/js/theme.js"] == theme
    assert "_layouts/default.html" not in static


def test_theme_pages_are_rendered_as_pages(tmp_path):
    site = create_site(tmp_path)
    theme = tmp_path / "theme"
    write(theme / "colophon.md", "---\ntitle: Colophon\n---\nBuilt with care.\n")
    write(theme / "archive.html", "---\ntitle: Archive\n---\n{{ site.posts | length }}")
    write(theme / "about.md", "---\ntitle: Theme about\n---\nShadowed.\n")
    write(theme / "fonts" / "serif.woff", "woff")
    config = load_config(site)
    content = ContentProcessor(site, config, theme).load(now=NOW)

    pages = {p.relative_path: p for p in content.pages}
    assert pages["colophon.md"].url == "/colophon/"
    assert pages["colophon.md"].output_path == "colophon/index.html"
    assert pages["colophon.md"].path == theme / "colophon.md"
    assert pages["archive.html"].output_path == "archive.html"
    assert pages["about.md"].title == "About"
    assert "colophon.md" not in [a.relative_path for a in content.assets]
    assert [s.relative_path for s in content.static_files if s.path.is_relative_to(theme)] == [
        "fonts/serif.woff"
    ]


def test_empty_permalink_falls_back_to_date_pattern(tmp_path):
    site = create_site(tmp_path)
    write(site / "_config.yml", "permalink:\n")
    content = load(site)
    post = next(p for p in content.posts if p.slug == "logging-in-production")
    assert post.url == "/nodejs/2020/03/25/logging-in-production/"
    assert post.output_path == "nodejs/2020/03/25/logging-in-production/index.html"


def test_url_deriver_patterns():
    deriver = UrlDeriver("/:category/:year/:month/:day/:title/")
    date = datetime(2020, 3, 25)
    assert deriver.post_url(date, "logging", ["Node JS"]) == "/node-js/2020/03/25/logging/"
    assert deriver.post_url(date, "logging", []) == "/2020/03/25/logging/"
    assert UrlDeriver("date").post_url(date, "x", ["a", "b"]) == "/a/b/2020/03/25/x.html"
    assert UrlDeriver("none").post_url(date, "x", []) == "/x.html"
    assert UrlDeriver("/:year/:i_month/:i_day/:slug").post_url(date, "x", []) == "/2020/3/25/x"
    assert UrlDeriver("ordinal").post_url(date, "x", []) == "/2020/085/x.html"

    assert deriver.page_url(PurePosixPath("index.html")) == "/"
    assert deriver.page_url(PurePosixPath("blog/index.md")) == "/blog/"
    assert deriver.page_url(PurePosixPath("About Me.md")) == "/about-me/"
    assert deriver.page_url(PurePosixPath("404.html")) == "/404.html"
    assert deriver.page_url(PurePosixPath("x.md"), "/custom/") == "/custom/"

    assert UrlDeriver.output_path("/") == "index.html"
    assert UrlDeriver.output_path("/a/b/") == "a/b/index.html"
    assert UrlDeriver.output_path("/feed.xml") == "feed.xml"
