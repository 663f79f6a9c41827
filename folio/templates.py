"""Template rendering engine for Folio.

This module uses Jinja2 to render documents into their layouts.
Layout and include files may carry front matter; the loader strips it
before Jinja sees the source.

Key classes:
- FrontMatterLoader: FileSystemLoader that drops front matter blocks.
- TemplateEngine: Renders document bodies and layout chains.

Key functions:
- build_site_context: The `site` variable available to every template.
- page_context: The `page` variable for one document.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PrefixLoader,
    select_autoescape,
)
from markupsafe import Markup

from . import urls
from .collections import PostCollection, TermCollection
from .frontmatter import split_frontmatter
from .layouts import LAYOUTS_DIR, LayoutResolver
from .renderers import render_markdown
from .utils import build_terms_index, coerce_datetime, format_long_date, slugify

if TYPE_CHECKING:
    from .content import Document, SiteContent

INCLUDES_DIR = "_includes"
RFC822_FORMAT = "%a, %d %b %Y %H:%M:%S +0000"


class FrontMatterLoader(FileSystemLoader):
    """FileSystemLoader that strips an optional front matter block."""

    def get_source(self, environment, template):
        source, filename, uptodate = super().get_source(environment, template)
        _, body = split_frontmatter(source, Path(filename))
        return body, filename, uptodate


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, (datetime, date, str)):
        return coerce_datetime(value)
    return None


def long_date(value: Any) -> str:
    """Jinja filter: format a date like "March 25, 2020"."""
    parsed = _as_datetime(value)
    return format_long_date(parsed) if parsed else ""


def date_to_xmlschema(value: Any) -> str:
    parsed = _as_datetime(value)
    return parsed.isoformat() if parsed else ""


def date_to_rfc822(value: Any) -> str:
    parsed = _as_datetime(value)
    return parsed.strftime(RFC822_FORMAT) if parsed else ""


def xml_escape(value: Any) -> Markup:
    return Markup(urls.escape_xml("" if value is None else str(value)))


def markdownify(value: Any) -> Markup:
    html, _ = render_markdown("" if value is None else str(value))
    return Markup(html)


def _lookup(item: Any, key: str) -> Any:
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


def where(items: Iterable[Any], key: str, value: Any) -> list[Any]:
    """Jinja filter: keep items whose attribute (or key) equals value.

    List attributes such as tags match when they contain the value.
    """
    kept = []
    for item in items:
        found = _lookup(item, key)
        if found == value or (isinstance(found, (list, tuple, set)) and value in found):
            kept.append(item)
    return kept


def sort_by(items: Iterable[Any], key: str, reverse: bool = False) -> list[Any]:
    """Jinja filter: sort by attribute (or key); missing values sort last."""
    items = list(items)
    present = [item for item in items if _lookup(item, key) is not None]
    missing = [item for item in items if _lookup(item, key) is None]
    return sorted(present, key=lambda item: _lookup(item, key), reverse=reverse) + missing


def build_site_context(
    config: dict[str, Any],
    content: SiteContent,
    data: dict[str, Any],
    now: datetime,
) -> dict[str, Any]:
    """Build the `site` template variable.

    Config keys are available directly (`site.title`), alongside the
    post and page collections, tag and category indexes, `_data` files
    and the build time.
    """
    site = dict(config)
    site.update(
        {
            "posts": PostCollection(content.posts),
            "pages": PostCollection(content.pages),
            "tags": TermCollection(build_terms_index(content.posts, "tags")),
            "categories": TermCollection(build_terms_index(content.posts, "categories")),
            "static_files": [s.relative_path for s in content.static_files],
            "data": data,
            "time": now,
        }
    )
    return site


def page_context(document: Document, posts: PostCollection | None = None) -> dict[str, Any]:
    """Build the `page` template variable for a document.

    Every front matter key is passed through unchanged, then the computed
    attributes are layered on top. The parsed mapping itself stays
    reachable as `page.front_matter`.
    """
    context: dict[str, Any] = dict(document.front_matter)
    context.update(
        {
            "title": document.title,
            "date": document.date,
            "url": document.url,
            "id": document.id,
            "slug": document.slug,
            "category": document.category,
            "categories": document.categories,
            "tags": document.tags,
            "excerpt": document.excerpt_html,
            "layout": document.layout,
            "path": document.relative_path,
            "draft": document.draft,
            "toc": document.toc,
            "front_matter": document.front_matter,
            "previous": None,
            "next": None,
        }
    )
    if posts is not None and document.is_post:
        older, newer = posts.neighbours(document)
        context["previous"] = older
        context["next"] = newer
    return context


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        source_dir: Site source directory.
        config: Site configuration.
        layout_resolver: Resolver for layout names.
        env: Jinja2 environment.
        site: The `site` template variable.
    """

    def __init__(
        self,
        source_dir: Path,
        config: dict[str, Any],
        theme_dir: Path | None = None,
        layout_resolver: LayoutResolver | None = None,
    ):
        self.source_dir = source_dir
        self.config = config
        self.layout_resolver = layout_resolver or LayoutResolver(source_dir, theme_dir)
        include_dirs = [source_dir / INCLUDES_DIR]
        if theme_dir is not None:
            include_dirs.append(theme_dir / INCLUDES_DIR)
        layout_loader = ChoiceLoader(
            [FrontMatterLoader(str(d)) for d in self.layout_resolver.search_dirs]
        )
        self.env = Environment(
            loader=ChoiceLoader(
                [
                    PrefixLoader({LAYOUTS_DIR: layout_loader}),
                    FrontMatterLoader([str(d) for d in include_dirs]),
                ]
            ),
            autoescape=select_autoescape(["html", "htm", "xml", "jinja"]),
            keep_trailing_newline=True,
        )
        self.site: dict[str, Any] = dict(config)
        self._posts = PostCollection([])
        self._install_filters()

    def _install_filters(self) -> None:
        """Install filters and globals in the Jinja environment."""
        self.env.filters["long_date"] = long_date
        self.env.filters["date_to_xmlschema"] = date_to_xmlschema
        self.env.filters["date_to_rfc822"] = date_to_rfc822
        self.env.filters["xml_escape"] = xml_escape
        self.env.filters["markdownify"] = markdownify
        self.env.filters["slugify"] = slugify
        self.env.filters["where"] = where
        self.env.filters["sort_by"] = sort_by
        self.env.filters["relative_url"] = self.relative_url
        self.env.filters["absolute_url"] = self.absolute_url
        self.env.globals["site"] = self.site

    def update_site(self, site: dict[str, Any]) -> None:
        """Install the `site` variable built from the loaded content."""
        self.site = site
        self._posts = site.get("posts") or PostCollection([])
        self.env.globals["site"] = self.site

    def relative_url(self, path: Any) -> str:
        """Jinja filter: prefix a site path with `baseurl`."""
        return urls.relative_url(path, self.config)

    def absolute_url(self, path: Any) -> str:
        """Jinja filter: prefix a site path with `url` and `baseurl`."""
        return urls.absolute_url(path, self.config)

    def render_document(self, document: Document, extra: dict[str, Any] | None = None) -> str:
        """Render a document body and wrap it in its layout chain.

        A layout named in front matter must resolve; the configured default
        layout is skipped silently when the site does not define it.

        Args:
            document: Document to render.
            extra: Additional template variables (e.g. `paginator`).

        Returns:
            Rendered output.

        Raises:
            ConfigurationError: If an explicit layout cannot be resolved.
        """
        context = {
            "site": self.site,
            "page": page_context(document, self._posts),
            **(extra or {}),
        }
        body = self._render_body(document, context)
        if document.layout is None:
            return body
        if not document.layout_explicit and not self.layout_resolver.exists(document.layout):
            return body
        return self.apply_layouts(document.layout, body, context)

    def apply_layouts(self, layout_name: str, body: str, context: dict[str, Any]) -> str:
        """Wrap rendered HTML in a layout and its parents."""
        content = body
        for layout in self.layout_resolver.chain(layout_name):
            template = self.env.get_template(layout.template_name)
            content = template.render(
                content=Markup(content), layout=layout.front_matter, **context
            )
        return content

    def _render_body(self, document: Document, context: dict[str, Any]) -> str:
        if document.source_type == "html":
            return self.render_string(document.content, context)
        if document.source_type == "template":
            # assets such as CSS are not HTML
            source = f"{{% autoescape false %}}{document.content}{{% endautoescape %}}"
            return self.render_string(source, context)
        return document.content

    def render_string(self, template: str, context: dict[str, Any]) -> str:
        """Render a template string.

        Args:
            template: Template string to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        return self.env.from_string(str(template)).render(**context)
