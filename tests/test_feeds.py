from datetime import datetime
from pathlib import Path

from markupsafe import Markup

from folio.content import Document
from folio.feeds import (
    FeedGenerator,
    FeedRegistry,
    RSSGenerator,
    SitemapGenerator,
    create_default_feed_registry,
)


def make_document(slug, date, kind="post", url=None, front_matter=None, categories=None, tags=None):
    url = url or f"/{slug}/"
    return Document(
        title=slug.replace("-", " ").title(),
        layout=None,
        layout_explicit=False,
        category=(categories or [""])[0],
        categories=categories or [],
        tags=tags or [],
        date=date,
        slug=slug,
        url=url,
        output_path=url.strip("/") + "/index.html",
        body="",
        content=Markup(""),
        excerpt="",
        excerpt_html=Markup(f"<p>About {slug} & more</p>"),
        front_matter=front_matter or {},
        toc=[],
        draft=False,
        kind=kind,
        source_type="markdown",
        path=Path(f"{date:%Y-%m-%d}-{slug}.md"),
        relative_path=f"{date:%Y-%m-%d}-{slug}.md",
    )


CONFIG = {"url": "https://example.com", "baseurl": "", "title": "Notes & Things", "feed_limit": 20}


def test_feeds_skipped_without_url():
    docs = [make_document("a", datetime(2020, 1, 1))]
    assert RSSGenerator().generate(docs, {"url": ""}) is None
    assert SitemapGenerator().generate(docs, {}) is None


def test_rss_lists_posts_newest_first():
    docs = [
        make_document("old", datetime(2019, 1, 1)),
        make_document("logging", datetime(2020, 3, 25), categories=["nodejs"], tags=["logs"]),
        make_document("about", datetime(2018, 1, 1), kind="page"),
    ]
    rss = RSSGenerator().generate(docs, CONFIG)
    assert "<title>Notes &amp; Things</title>" in rss
    assert "<link>https://example.com/</link>" in rss
    assert rss.index("/logging/") < rss.index("/old/")
    assert "/about/" not in rss
    assert "<pubDate>Wed, 25 Mar 2020 00:00:00 +0000</pubDate>" in rss
    assert "<lastBuildDate>Wed, 25 Mar 2020 00:00:00 +0000</lastBuildDate>" in rss
    assert "<category>nodejs</category><category>logs</category>" in rss
    assert "&lt;p&gt;About logging &amp; more&lt;/p&gt;" in rss
    assert '<guid isPermaLink="true">https://example.com/logging/</guid>' in rss


def test_rss_respects_feed_limit():
    docs = [make_document(f"p{n}", datetime(2020, 1, n + 1)) for n in range(5)]
    rss = RSSGenerator().generate(docs, {**CONFIG, "feed_limit": 2})
    assert rss.count("<item>") == 2
    assert "/p4/" in rss and "/p3/" in rss


def test_sitemap_lists_pages_and_posts():
    docs = [
        make_document("logging", datetime(2020, 3, 25)),
        make_document("about", datetime(2018, 1, 1), kind="page"),
        make_document("hidden", datetime(2018, 1, 1), kind="page", front_matter={"sitemap": False}),
        make_document("style", datetime(2018, 1, 1), kind="asset", url="/assets/style.css"),
    ]
    sitemap = SitemapGenerator().generate(docs, {**CONFIG, "baseurl": "/blog"})
    assert "<loc>https://example.com/blog/about/</loc><lastmod>2018-01-01</lastmod>" in sitemap
    assert "<loc>https://example.com/blog/logging/</loc><lastmod>2020-03-25</lastmod>" in sitemap
    assert "hidden" not in sitemap
    assert "style.css" not in sitemap
    assert sitemap.index("/about/") < sitemap.index("/logging/")


def test_registry_writes_files(tmp_path):
    docs = [make_document("logging", datetime(2020, 3, 25))]
    registry = create_default_feed_registry()
    assert registry.generate_all(tmp_path, docs, CONFIG) == ["sitemap.xml", "feed.xml"]
    assert (tmp_path / "feed.xml").read_text(encoding="utf-8").startswith("<?xml")
    assert registry.generate_all(tmp_path / "unused", docs, {"url": ""}) == []


def test_custom_generator_can_be_registered(tmp_path):
    class TextFeed(FeedGenerator):
        @property
        def filename(self):
            return "posts.txt"

        def generate(self, documents, config):
            return "\n".join(d.url for d in documents)

    registry = FeedRegistry()
    registry.register(TextFeed())
    docs = [make_document("a", datetime(2020, 1, 1)), make_document("b", datetime(2020, 1, 2))]
    assert registry.generate_all(tmp_path, iter(docs), {}) == ["posts.txt"]
    assert (tmp_path / "posts.txt").read_text(encoding="utf-8") == "/a/\n/b/"
