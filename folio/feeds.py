"""Feed generation for Folio.

This module generates the RSS feed and sitemap from site content.
Feed generation is separate from build orchestration, and new formats
can be added by registering another FeedGenerator.

Both feeds need absolute URLs and are skipped when the site `url` is
not configured. Neither embeds the build time, so rebuilding unchanged
content produces identical files.

Classes:
    FeedGenerator: Abstract base for feed generators.
    SitemapGenerator: Generates sitemap.xml.
    RSSGenerator: Generates feed.xml (RSS 2.0).
    FeedRegistry: Runs every registered generator.

Functions:
    create_default_feed_registry: Create a registry with default generators.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .collections import sort_posts
from .urls import escape_xml, site_base_url

if TYPE_CHECKING:
    from .content import Document

RFC822_FORMAT = "%a, %d %b %Y %H:%M:%S +0000"


class FeedGenerator(ABC):
    """Abstract base class for feed generators."""

    @property
    @abstractmethod
    def filename(self) -> str:
        """Return the output filename for this feed."""
        ...

    @abstractmethod
    def generate(
        self,
        documents: Iterable[Document],
        config: dict[str, Any],
    ) -> str | None:
        """Generate feed content.

        Args:
            documents: Every rendered post and page.
            config: Site configuration containing the base URL.

        Returns:
            Feed content as a string, or None if the feed cannot be
            generated (e.g., no `url` configured).
        """
        ...

    def write(
        self,
        output_dir: Path,
        documents: Iterable[Document],
        config: dict[str, Any],
    ) -> bool:
        """Generate and write the feed to the output directory.

        Returns:
            True if the feed was written, False if skipped.
        """
        content = self.generate(documents, config)
        if content is None:
            return False
        output_path = output_dir / self.filename
        output_path.write_text(content, encoding="utf-8")
        return True


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml following the sitemaps.org protocol.

    Lists posts and HTML pages. Pages with `sitemap: false` in their
    front matter are left out.
    """

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(
        self,
        documents: Iterable[Document],
        config: dict[str, Any],
    ) -> str | None:
        base_url = site_base_url(config)
        if not base_url:
            return None

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
        ]
        for document in sorted(documents, key=lambda d: d.url):
            if document.kind == "asset" or document.front_matter.get("sitemap") is False:
                continue
            loc = escape_xml(f"{base_url}{document.url}")
            lastmod = document.date.strftime("%Y-%m-%d")
            lines.append(f"  <url><loc>{loc}</loc><lastmod>{lastmod}</lastmod></url>")
        lines.append("</urlset>")
        return "\n".join(lines) + "\n"


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed of the newest posts.

    Uses `title` and `description` from the config for the channel and
    `feed_limit` for the number of items.
    """

    @property
    def filename(self) -> str:
        return "feed.xml"

    def generate(
        self,
        documents: Iterable[Document],
        config: dict[str, Any],
    ) -> str | None:
        base_url = site_base_url(config)
        if not base_url:
            return None
        title = escape_xml(str(config.get("title") or "Folio Feed"))
        description = escape_xml(str(config.get("description") or ""))
        limit = int(config.get("feed_limit") or 0)

        posts = sort_posts(d for d in documents if d.is_post)
        if limit:
            posts = posts[:limit]

        items = []
        for post in posts:
            link = escape_xml(f"{base_url}{post.url}")
            summary = escape_xml(str(post.excerpt_html) or post.title)
            categories = "".join(
                f"<category>{escape_xml(c)}</category>" for c in [*post.categories, *post.tags]
            )
            items.append(
                f"<item><title>{escape_xml(post.title)}</title><link>{link}</link>"
                f'<guid isPermaLink="true">{link}</guid>'
                f"<description>{summary}</description>{categories}"
                f"<pubDate>{post.date.strftime(RFC822_FORMAT)}</pubDate></item>"
            )

        rss = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0"><channel>',
            f"<title>{title}</title>",
            f"<link>{escape_xml(base_url)}/</link>",
            f"<description>{description}</description>",
        ]
        if posts:
            rss.append(f"<lastBuildDate>{posts[0].date.strftime(RFC822_FORMAT)}</lastBuildDate>")
        rss.extend(items)
        rss.append("</channel></rss>")
        return "\n".join(rss) + "\n"


class FeedRegistry:
    """Registry for managing feed generators."""

    def __init__(self) -> None:
        self._generators: list[FeedGenerator] = []

    def register(self, generator: FeedGenerator) -> None:
        self._generators.append(generator)

    def generate_all(
        self,
        output_dir: Path,
        documents: Iterable[Document],
        config: dict[str, Any],
    ) -> list[str]:
        """Generate all registered feeds.

        Returns:
            List of filenames that were generated.
        """
        documents = list(documents)
        generated = []
        for generator in self._generators:
            if generator.write(output_dir, documents, config):
                generated.append(generator.filename)
        return generated


def create_default_feed_registry() -> FeedRegistry:
    """Create a registry with the sitemap and RSS generators."""
    registry = FeedRegistry()
    registry.register(SitemapGenerator())
    registry.register(RSSGenerator())
    return registry
