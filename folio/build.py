"""Site building functionality for Folio.

This module contains the core logic for building a static site from source
files. It loads configuration and data, processes content, renders
templates, and generates output files.

Key function:
- build_site: Main function to build the entire site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import TemplateSyntaxError

from .config import load_config, load_data, resolve_theme_dir
from .content import ContentProcessor, Document, SiteContent
from .errors import BuildError, ConfigurationError, FolioError
from .feeds import create_default_feed_registry
from .index import IndexBuilder, IndexEntry, RenderedPage
from .static import OutputWriter
from .templates import TemplateEngine, build_site_context
from .utils import ensure_clean_dir


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        posts: Posts in index order (newest first).
        pages: Pages other than the posts.
        index: Entries listed on the index, in order.
        output_dir: Directory where the site was built.
        files: Output paths written, relative to output_dir.
        config: Effective site configuration.
    """

    posts: list[Document]
    pages: list[Document]
    index: list[IndexEntry]
    output_dir: Path
    files: list[str] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)


def build_site(
    source_dir: Path,
    include_drafts: bool = False,
    future: bool | None = None,
    destination: Path | None = None,
    clean_output: bool = True,
    now: datetime | None = None,
) -> BuildResult:
    """Build the entire static site.

    Args:
        source_dir: Site source directory (holds `_config.yml`, `_posts/`).
        include_drafts: Whether to build posts from `_drafts/`.
        future: Whether to build future-dated posts; defaults to config.
        destination: Optional output directory instead of config `destination`.
        clean_output: Whether to wipe the output directory before building.
        now: Build time, used for the future check and `site.time`.

    Returns:
        BuildResult describing what was written.

    Raises:
        ParseError: If a document's front matter or filename is malformed.
        ConfigurationError: If a layout, theme or config value is invalid.
        BuildError: If a template fails to render.
    """
    source_dir = Path(source_dir)
    now = now or datetime.now()
    config = load_config(source_dir)
    theme_dir = resolve_theme_dir(source_dir, config)
    if destination:
        config["destination"] = str(Path(destination).resolve())
    output_dir = source_dir / config["destination"]
    _check_output_dir(source_dir, output_dir)

    data = load_data(source_dir)
    content = ContentProcessor(source_dir, config, theme_dir).load(
        include_drafts=include_drafts, future=future, now=now
    )

    engine = TemplateEngine(source_dir, config, theme_dir)
    engine.update_site(build_site_context(config, content, data, now))

    index_page = next((p for p in content.pages if p.url == "/"), None)
    rendered: list[tuple[str, str]] = []
    for document in content.documents:
        if document is index_page:
            continue
        html = _render(document.path, lambda d=document: engine.render_document(d))
        rendered.append((document.output_path, html))

    index_builder = IndexBuilder(engine, config)
    listing = _render(
        index_page.path if index_page else source_dir,
        lambda: index_builder.build(content.posts, index_page),
    )
    _check_listing_collisions(content, index_page, listing)

    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
    writer = OutputWriter(output_dir)
    writer.copy_static(content.static_files)
    for output_path, html in rendered:
        writer.write_text(output_path, html)
    for page in listing:
        writer.write_text(page.output_path, page.html)

    documents = [*content.posts, *content.pages]
    for filename in create_default_feed_registry().generate_all(output_dir, documents, config):
        writer.written.append(filename)

    return BuildResult(
        posts=content.posts,
        pages=content.pages,
        index=index_builder.entries(content.posts),
        output_dir=output_dir,
        files=writer.written,
        config=config,
    )


def _check_output_dir(source_dir: Path, output_dir: Path) -> None:
    source = source_dir.resolve()
    output = output_dir.resolve()
    if output == source or output in source.parents:
        raise ConfigurationError(
            f"destination {output} would overwrite the source directory {source}"
        )


def _check_listing_collisions(
    content: SiteContent, index_page: Document | None, listing: list[RenderedPage]
) -> None:
    """Refuse documents and static files that would overwrite a listing page."""
    owners: dict[str, Path] = {s.relative_path: s.path for s in content.static_files}
    owners.update((d.output_path, d.path) for d in content.documents if d is not index_page)
    for page in listing:
        source = owners.get(page.output_path)
        if source is not None:
            raise ConfigurationError(
                f"output {page.output_path} is written by both the post index and {source}",
                source,
            )


def _render(source_path: Path, render):
    """Run a render callable, reporting template failures as BuildError."""
    try:
        return render()
    except FolioError:
        raise
    except TemplateSyntaxError as exc:
        path = Path(exc.filename) if exc.filename else source_path
        raise BuildError(
            path,
            f"Template syntax error on line {exc.lineno}: {exc.message}",
            exc,
        ) from exc
    except Exception as exc:
        raise BuildError(source_path, _format_error_message(exc), exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TemplateNotFound":
        return f"Template not found: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"
