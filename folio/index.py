"""Index page generation for Folio.

The index lists every post newest first with its title, date, category
and excerpt, each linked to the post's URL. A site may provide its own
root `index.html` (or `index.md`) page; otherwise a built-in listing is
rendered into the default layout.

Key classes:
- IndexEntry: One listed post.
- Paginator: One page of the listing, exposed to templates as `paginator`.
- RenderedPage: An output file produced by the builder.
- IndexBuilder: Builds the index page(s).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from markupsafe import Markup

from .collections import sort_posts
from .content import UrlDeriver
from .utils import format_long_date

if TYPE_CHECKING:
    from .content import Document
    from .templates import TemplateEngine

DEFAULT_INDEX_TEMPLATE = """\
<section class="post-index">
{%- for entry in paginator.posts %}
  <article class="post-entry">
    <h2><a href="{{ entry.url | relative_url }}">{{ entry.title }}</a></h2>
    <p class="post-meta"><time datetime="{{ entry.date | date_to_xmlschema }}">{{ entry.date_display }}</time>
    {%- if entry.category %} &middot; <span class="post-category">{{ entry.category }}</span>{% endif %}</p>
    <div class="post-excerpt">{{ entry.excerpt }}</div>
  </article>
{%- endfor %}
{%- if paginator.total_pages > 1 %}
  <nav class="pagination">
    {%- if paginator.previous_page_path %}
    <a class="previous" href="{{ paginator.previous_page_path | relative_url }}">Newer posts</a>
    {%- endif %}
    <span class="page-number">Page {{ paginator.page }} of {{ paginator.total_pages }}</span>
    {%- if paginator.next_page_path %}
    <a class="next" href="{{ paginator.next_page_path | relative_url }}">Older posts</a>
    {%- endif %}
  </nav>
{%- endif %}
</section>
"""


@dataclass(frozen=True)
class IndexEntry:
    """A post as listed on the index page.

    Attributes:
        title: Post title.
        url: Rendered URL of the post.
        date: Publish date.
        date_display: Date formatted like "March 25, 2020".
        category: Primary category.
        tags: Post tags.
        excerpt: Rendered excerpt HTML.
    """

    title: str
    url: str
    date: datetime
    date_display: str
    category: str
    tags: list[str]
    excerpt: Markup

    @classmethod
    def from_document(cls, document: Document) -> IndexEntry:
        return cls(
            title=document.title,
            url=document.url,
            date=document.date,
            date_display=format_long_date(document.date),
            category=document.category,
            tags=list(document.tags),
            excerpt=Markup(document.excerpt_html),
        )


@dataclass
class Paginator:
    """One page of the post listing.

    Attributes:
        page: 1-based page number.
        per_page: Posts per page (0 when pagination is off).
        posts: Entries on this page.
        total_posts: Entries across all pages.
        total_pages: Number of pages.
        previous_page: Number of the newer page, if any.
        previous_page_path: URL of the newer page, if any.
        next_page: Number of the older page, if any.
        next_page_path: URL of the older page, if any.
    """

    page: int
    per_page: int
    posts: list[IndexEntry]
    total_posts: int
    total_pages: int
    previous_page: int | None = None
    previous_page_path: str | None = None
    next_page: int | None = None
    next_page_path: str | None = None


@dataclass
class RenderedPage:
    """An output file produced outside the per-document loop.

    Attributes:
        url: URL of the page.
        output_path: Output path relative to the destination.
        html: Rendered output.
        source: Source file the page came from, if any.
        entries: Entries listed on the page.
    """

    url: str
    output_path: str
    html: str
    source: Path | None = None
    entries: list[IndexEntry] = field(default_factory=list)


class IndexBuilder:
    """Builds the post listing page(s).

    Attributes:
        engine: Template engine with the site context installed.
        config: Site configuration.
    """

    def __init__(self, engine: TemplateEngine, config: dict[str, Any]):
        self.engine = engine
        self.config = config

    def entries(self, posts: Iterable[Document]) -> list[IndexEntry]:
        """List posts newest first; equal dates keep source filename order."""
        return [IndexEntry.from_document(post) for post in sort_posts(posts)]

    def paginate(self, entries: list[IndexEntry]) -> list[Paginator]:
        """Split entries into pages according to `paginate`."""
        per_page = int(self.config.get("paginate") or 0)
        if per_page <= 0:
            return [Paginator(page=1, per_page=0, posts=entries, total_posts=len(entries), total_pages=1)]
        total_pages = max(1, math.ceil(len(entries) / per_page))
        pages = []
        for number in range(1, total_pages + 1):
            start = (number - 1) * per_page
            paginator = Paginator(
                page=number,
                per_page=per_page,
                posts=entries[start : start + per_page],
                total_posts=len(entries),
                total_pages=total_pages,
            )
            if number > 1:
                paginator.previous_page = number - 1
                paginator.previous_page_path = self.page_url(number - 1)
            if number < total_pages:
                paginator.next_page = number + 1
                paginator.next_page_path = self.page_url(number + 1)
            pages.append(paginator)
        return pages

    def page_url(self, number: int) -> str:
        """URL of listing page `number`; page 1 is the site root."""
        if number == 1:
            return "/"
        pattern = str(self.config.get("paginate_path") or "/page:num/")
        return UrlDeriver.normalize(pattern.replace(":num", str(number)))

    def build(self, posts: Iterable[Document], index_page: Document | None = None) -> list[RenderedPage]:
        """Render the index page(s).

        Args:
            posts: Posts to list.
            index_page: The site's own root index page, if it has one.

        Returns:
            One RenderedPage per listing page.
        """
        entries = self.entries(posts)
        rendered: list[RenderedPage] = []
        for paginator in self.paginate(entries):
            url = self.page_url(paginator.page)
            extra = {"paginator": paginator, "entries": entries}
            if index_page is not None:
                page = replace(index_page, url=url, output_path=UrlDeriver.output_path(url))
                html = self.engine.render_document(page, extra)
                source = index_page.path
            else:
                html = self._render_default(url, extra)
                source = None
            rendered.append(
                RenderedPage(
                    url=url,
                    output_path=UrlDeriver.output_path(url),
                    html=html,
                    source=source,
                    entries=paginator.posts,
                )
            )
        return rendered

    def _render_default(self, url: str, extra: dict[str, Any]) -> str:
        page = {"title": self.config.get("title") or "Posts", "url": url, "layout": None}
        context = {"site": self.engine.site, "page": page, **extra}
        body = self.engine.render_string(DEFAULT_INDEX_TEMPLATE, context)
        layout = self.config.get("default_layout")
        if layout and self.engine.layout_resolver.exists(str(layout)):
            return self.engine.apply_layouts(str(layout), body, context)
        return body
