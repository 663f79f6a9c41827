"""Content processing for Folio.

This module discovers source files, extracts their metadata, renders their
bodies, and creates Document objects representing posts and pages.

Key classes:
- Document: Frozen dataclass for a post, page or front-matter asset.
- StaticFile: A file copied to the output unchanged.
- SiteContent: Everything ContentProcessor found in a source tree.
- FileContentLoader: Discovers and classifies source files.
- UrlDeriver: Derives URLs from permalink patterns and paths.
- DocumentBuilder: Builds Document objects from source files.
- ContentProcessor: Facade tying the above together.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any

from markupsafe import Markup

from .collections import sort_posts
from .config import DEFAULT_CONFIG
from .errors import ConfigurationError, ParseError
from .extractors import CompositeMetadataExtractor
from .frontmatter import has_frontmatter
from .layouts import layout_name
from .renderers import Heading, RendererRegistry, default_renderer_registry, render_markdown
from .utils import is_html, is_internal_path, is_markdown, slugify, split_dated_name

POSTS_DIR = "_posts"
DRAFTS_DIR = "_drafts"

PERMALINK_STYLES = {
    "date": "/:categories/:year/:month/:day/:title.html",
    "pretty": "/:categories/:year/:month/:day/:title/",
    "ordinal": "/:categories/:year/:y_day/:title.html",
    "none": "/:categories/:title.html",
}
PLACEHOLDER_RE = re.compile(
    r":(categories|category|i_month|i_day|y_day|year|month|day|title|slug)"
)


@dataclass(frozen=True)
class Document:
    """A rendered post, page, or asset with front matter.

    Attributes:
        title: Human-readable title.
        layout: Layout name, or None to render without a layout.
        layout_explicit: Whether the layout came from front matter.
        category: Primary category ("" when there is none).
        categories: All categories, primary first.
        tags: Ordered unique tags.
        date: Publish date.
        slug: URL-friendly slug.
        url: URL path for the document.
        output_path: Path of the output file relative to the destination.
        body: Raw body text after the front matter block.
        content: Rendered body HTML (template source for HTML pages).
        excerpt: Raw excerpt markup.
        excerpt_html: Rendered excerpt.
        front_matter: Every front matter key exactly as parsed.
        toc: Headings for a table of contents.
        draft: Whether the document came from `_drafts`.
        kind: "post", "page" or "asset".
        source_type: "markdown", "html" or "template".
        path: Absolute source path.
        relative_path: Source path relative to its root, POSIX style.
    """

    title: str
    layout: str | None
    layout_explicit: bool
    category: str
    categories: list[str]
    tags: list[str]
    date: datetime
    slug: str
    url: str
    output_path: str
    body: str
    content: str
    excerpt: str
    excerpt_html: str
    front_matter: dict[str, Any]
    toc: list[Heading]
    draft: bool
    kind: str
    source_type: str
    path: Path
    relative_path: str

    @property
    def is_post(self) -> bool:
        return self.kind == "post"

    @property
    def id(self) -> str:
        return self.url.rstrip("/") or "/"


@dataclass(frozen=True)
class StaticFile:
    """A file copied to the output unchanged.

    Attributes:
        path: Absolute source path.
        relative_path: Output path relative to the destination.
    """

    path: Path
    relative_path: str


@dataclass
class SiteContent:
    """Everything ContentProcessor found in a source tree.

    Attributes:
        posts: Posts, newest first.
        pages: Pages, ordered by source path.
        assets: Non-HTML files with front matter, rendered without a layout.
        static_files: Files copied unchanged.
    """

    posts: list[Document] = field(default_factory=list)
    pages: list[Document] = field(default_factory=list)
    assets: list[Document] = field(default_factory=list)
    static_files: list[StaticFile] = field(default_factory=list)

    @property
    def documents(self) -> list[Document]:
        return [*self.posts, *self.pages, *self.assets]


@dataclass
class SourceFiles:
    """Source paths grouped by role. Paths are (root, path) pairs."""

    posts: list[Path] = field(default_factory=list)
    drafts: list[Path] = field(default_factory=list)
    pages: list[tuple[Path, Path]] = field(default_factory=list)
    assets: list[tuple[Path, Path]] = field(default_factory=list)
    static: list[tuple[Path, Path]] = field(default_factory=list)


class FileContentLoader:
    """Discovers and classifies source files.

    Posts come from `_posts/`, drafts from `_drafts/`. Every other file
    outside internal (`_` or `.` prefixed) directories is a page when it is
    Markdown or front-mattered HTML, an asset when it is any other file with
    front matter, and a static file otherwise. Theme files fill in any
    path the site does not provide.

    Attributes:
        source_dir: Site source directory.
        config: Site configuration.
        theme_dir: Optional theme directory.
    """

    def __init__(self, source_dir: Path, config: dict[str, Any], theme_dir: Path | None = None):
        self.source_dir = source_dir
        self.config = config
        self.theme_dir = theme_dir
        self._excluded_dirs = [
            (source_dir / config.get("destination", "_site")).resolve(),
        ]
        if theme_dir is not None:
            self._excluded_dirs.append(theme_dir.resolve())

    def discover(self, include_drafts: bool = False) -> SourceFiles:
        """Classify every source file.

        Args:
            include_drafts: Whether to return files from `_drafts/`.

        Returns:
            SourceFiles with each group sorted by path.
        """
        found = SourceFiles()
        found.posts = self._documents_in(self.source_dir / POSTS_DIR)
        if include_drafts:
            found.drafts = self._documents_in(self.source_dir / DRAFTS_DIR)

        seen: set[str] = set()
        roots = [self.source_dir]
        if self.theme_dir is not None:
            roots.append(self.theme_dir)
        for root in roots:
            for path in self._walk(root):
                rel = path.relative_to(root).as_posix()
                if rel in seen:
                    continue
                seen.add(rel)
                if root == self.source_dir and is_markdown(path):
                    found.pages.append((root, path))
                    continue
                if not _file_has_frontmatter(path):
                    found.static.append((root, path))
                elif is_markdown(path) or is_html(path):
                    found.pages.append((root, path))
                else:
                    found.assets.append((root, path))
        return found

    def _documents_in(self, folder: Path) -> list[Path]:
        if not folder.is_dir():
            return []
        return sorted(
            path
            for path in folder.rglob("*")
            if path.is_file()
            and (is_markdown(path) or is_html(path))
            and not any(p.startswith((".", "_")) for p in path.relative_to(folder).parts)
        )

    def _walk(self, root: Path) -> list[Path]:
        files: list[Path] = []
        include = set(self.config.get("include") or [])
        exclude = set(self.config.get("exclude") or [])
        for path in sorted(root.rglob("*")):
            if path.is_dir():
                continue
            rel = path.relative_to(root)
            if self._is_excluded_dir(path, root):
                continue
            if any(part in exclude for part in rel.parts) or rel.as_posix() in exclude:
                continue
            if is_internal_path(rel) and not any(part in include for part in rel.parts):
                continue
            files.append(path)
        return files

    def _is_excluded_dir(self, path: Path, root: Path) -> bool:
        resolved = path.resolve()
        root = root.resolve()
        return any(
            excluded in resolved.parents
            for excluded in self._excluded_dirs
            if excluded != root
        )


def _file_has_frontmatter(path: Path) -> bool:
    try:
        with open(path, encoding="utf-8") as f:
            head = f.read(8)
    except (UnicodeDecodeError, OSError):
        return False
    return has_frontmatter(head)


class UrlDeriver:
    """Derives URLs and output paths for documents.

    Attributes:
        permalink: Post permalink pattern or a built-in style name.
    """

    def __init__(self, permalink: str):
        self.permalink = PERMALINK_STYLES.get(permalink, permalink)

    def post_url(
        self,
        date: datetime,
        slug: str,
        categories: list[str],
        pattern: str | None = None,
    ) -> str:
        """Expand a permalink pattern for a post.

        Segments that expand to nothing are dropped, so a post without a
        category does not get an empty path segment.
        """
        template = pattern or self.permalink
        values = {
            "year": f"{date.year:04d}",
            "month": f"{date.month:02d}",
            "day": f"{date.day:02d}",
            "i_month": str(date.month),
            "i_day": str(date.day),
            "y_day": f"{date.timetuple().tm_yday:03d}",
            "title": slug,
            "slug": slug,
            "category": slugify(categories[0]) if categories else "",
            "categories": "/".join(slugify(c) for c in categories),
        }
        expanded = PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)
        return self.normalize(expanded)

    def page_url(self, rel: PurePosixPath, pattern: str | None = None) -> str:
        """Derive the URL for a page from its path.

        `index.*` maps to its folder, other Markdown pages to a folder of
        their own, and other HTML pages keep their filename.
        """
        if pattern:
            return self.normalize(pattern)
        parent = [p for p in rel.parent.parts if p not in ("", ".")]
        if rel.stem == "index":
            return self.normalize("/".join(parent) + "/")
        if is_markdown(Path(rel.name)):
            return self.normalize("/".join([*parent, slugify(rel.stem)]) + "/")
        return self.normalize("/".join([*parent, rel.name]))

    def asset_url(self, rel: PurePosixPath) -> str:
        return self.normalize(rel.as_posix())

    @staticmethod
    def normalize(url: str) -> str:
        trailing = url.endswith("/")
        parts = [p for p in url.split("/") if p]
        if any(p == ".." for p in parts):
            raise ValueError(f"URL escapes the site root: {url}")
        path = "/".join(parts)
        if not path:
            return "/"
        return f"/{path}/" if trailing else f"/{path}"

    @staticmethod
    def output_path(url: str) -> str:
        """Map a URL to an output file path relative to the destination."""
        path = url.strip("/")
        if url.endswith("/"):
            return f"{path}/index.html" if path else "index.html"
        return path


class DocumentBuilder:
    """Builds Document objects from source files.

    Attributes:
        source_dir: Site source directory.
        config: Site configuration.
        renderer_registry: Registry of body renderers.
        metadata_extractor: Composite metadata extractor.
        url_deriver: URL deriver instance.
    """

    def __init__(
        self,
        source_dir: Path,
        config: dict[str, Any],
        renderer_registry: RendererRegistry | None = None,
        metadata_extractor: CompositeMetadataExtractor | None = None,
    ):
        self.source_dir = source_dir
        self.config = config
        self.renderer_registry = renderer_registry or default_renderer_registry
        self.metadata_extractor = metadata_extractor or CompositeMetadataExtractor(
            excerpt_separator=config.get("excerpt_separator")
        )
        self.url_deriver = UrlDeriver(config.get("permalink") or DEFAULT_CONFIG["permalink"])

    def build(self, path: Path, kind: str, root: Path | None = None, draft: bool = False) -> Document:
        """Build a Document from a source file.

        Args:
            path: Path to the source file.
            kind: "post", "page" or "asset".
            root: Directory the relative path is computed from.
            draft: Whether the file came from `_drafts`.

        Returns:
            Document object.

        Raises:
            ParseError: If the front matter is missing or malformed, a post
                filename has no date prefix, or the permalink is invalid.
        """
        root = root or self.source_dir
        rel = PurePosixPath(path.relative_to(root).as_posix())
        text = path.read_text(encoding="utf-8")
        metadata = self.metadata_extractor.extract(text, path)
        front_matter = metadata["front_matter"]
        body = metadata["body"]

        if kind == "post" and not draft:
            dated = split_dated_name(path.stem)
            if dated is None:
                raise ParseError(
                    path, "post filename must start with a date: YYYY-MM-DD-title.ext"
                )
            slug = slugify(dated[1])
        else:
            slug = slugify(path.stem)
        if front_matter.get("slug"):
            slug = slugify(str(front_matter["slug"]))

        renderer = self.renderer_registry.get_renderer(path) if kind != "asset" else None
        if renderer is not None:
            source_type = renderer.source_type
            content, toc = renderer.render(body)
        else:
            source_type = "template"
            content, toc = body, []

        excerpt = metadata.get("excerpt", "")
        if source_type == "markdown" and excerpt:
            excerpt_html = render_markdown(excerpt)[0]
        else:
            excerpt_html = excerpt

        permalink = front_matter.get("permalink")
        permalink = str(permalink) if permalink else None
        try:
            if kind == "post":
                url = self.url_deriver.post_url(
                    metadata["date"], slug, metadata["categories"], permalink
                )
            elif kind == "asset":
                url = self.url_deriver.asset_url(rel)
            else:
                url = self.url_deriver.page_url(rel, permalink)
        except ValueError as exc:
            raise ParseError(path, str(exc)) from exc

        layout, explicit = self._layout_for(front_matter, kind)
        return Document(
            title=metadata["title"],
            layout=layout,
            layout_explicit=explicit,
            category=metadata["category"],
            categories=metadata["categories"],
            tags=metadata["tags"],
            date=metadata["date"],
            slug=slug,
            url=url,
            output_path=UrlDeriver.output_path(url),
            body=body,
            content=Markup(content),
            excerpt=excerpt,
            excerpt_html=Markup(excerpt_html),
            front_matter=front_matter,
            toc=toc,
            draft=draft,
            kind=kind,
            source_type=source_type,
            path=path,
            relative_path=rel.as_posix(),
        )

    def _layout_for(self, front_matter: dict[str, Any], kind: str) -> tuple[str | None, bool]:
        if "layout" in front_matter:
            return layout_name(front_matter["layout"]), True
        if kind == "asset":
            return None, False
        default = self.config.get("default_layout")
        return (str(default) if default else None), False


class ContentProcessor:
    """Facade for discovering sources and building Documents.

    Attributes:
        source_dir: Site source directory.
        config: Site configuration.
    """

    def __init__(
        self,
        source_dir: Path,
        config: dict[str, Any],
        theme_dir: Path | None = None,
        content_loader: FileContentLoader | None = None,
        document_builder: DocumentBuilder | None = None,
    ):
        self.source_dir = source_dir
        self.config = config
        self._content_loader = content_loader or FileContentLoader(source_dir, config, theme_dir)
        self._document_builder = document_builder or DocumentBuilder(source_dir, config)

    def load(
        self,
        include_drafts: bool = False,
        future: bool | None = None,
        now: datetime | None = None,
    ) -> SiteContent:
        """Load every source file.

        Args:
            include_drafts: Whether to include drafts as posts.
            future: Whether to keep future-dated posts; defaults to config.
            now: Reference time for the future check.

        Returns:
            SiteContent with posts sorted newest first.

        Raises:
            ParseError: For any malformed document.
            ConfigurationError: If two documents write the same output file.
        """
        future = bool(self.config.get("future")) if future is None else future
        now = now or datetime.now()
        found = self._content_loader.discover(include_drafts)
        site = SiteContent()

        posts_root = self.source_dir / POSTS_DIR
        drafts_root = self.source_dir / DRAFTS_DIR
        candidates = [(p, posts_root, False) for p in found.posts]
        candidates += [(p, drafts_root, True) for p in found.drafts]
        for path, root, draft in candidates:
            post = self._document_builder.build(path, "post", root=root, draft=draft)
            if post.front_matter.get("published") is False:
                print(f"Skipping unpublished post {post.relative_path}")
                continue
            if not future and not draft and post.date > now:
                print(f"Skipping future-dated post {post.relative_path} ({post.date:%Y-%m-%d})")
                continue
            site.posts.append(post)
        site.posts = sort_posts(site.posts)

        for root, path in found.pages:
            page = self._document_builder.build(path, "page", root=root)
            if page.front_matter.get("published") is False:
                print(f"Skipping unpublished page {page.relative_path}")
                continue
            site.pages.append(page)
        for root, path in found.assets:
            site.assets.append(self._document_builder.build(path, "asset", root=root))
        for root, path in found.static:
            site.static_files.append(
                StaticFile(path=path, relative_path=path.relative_to(root).as_posix())
            )

        self._check_collisions(site)
        return site

    @staticmethod
    def _check_collisions(site: SiteContent) -> None:
        owners: dict[str, Path] = {}
        entries = [(d.output_path, d.path) for d in site.documents]
        entries += [(s.relative_path, s.path) for s in site.static_files]
        for output, source in entries:
            if output in owners:
                raise ConfigurationError(
                    f"output {output} is written by both {owners[output]} and {source}"
                )
            owners[output] = source
