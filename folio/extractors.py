"""Metadata extractors for Folio.

This module contains implementations of the MetadataExtractor protocol.
Each extractor derives a single piece of document metadata from the
parsed front matter, the body, and the source path.

Key classes:
- TitleExtractor: Title from front matter, first heading, or filename.
- DateExtractor: Date from front matter, filename prefix, or mtime.
- CategoryExtractor: Category and categories from front matter.
- TagExtractor: Tags from front matter.
- ExcerptExtractor: Explicit or first-paragraph excerpt.
- CompositeMetadataExtractor: Parses front matter and runs the others.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from .errors import ParseError
from .frontmatter import parse_frontmatter
from .utils import coerce_datetime, extract_date_from_name, normalize_terms, titleize

DEFAULT_EXCERPT_SEPARATOR = "\n\n"


def extract_excerpt(body: str, separator: str = DEFAULT_EXCERPT_SEPARATOR) -> str:
    """Return the part of body before the first separator.

    The default separator is a blank line, so the excerpt is the first
    paragraph. With an explicit marker such as ``<!--more-->`` the excerpt
    is everything before the marker. When the separator does not occur the
    whole body is the excerpt. The result never contains the separator, so
    extracting twice gives the same text as extracting once.

    Args:
        body: Markup text with front matter already removed.
        separator: Excerpt delimiter.

    Returns:
        Stripped excerpt text.
    """
    text = body.replace("\r\n", "\n").strip()
    if separator and separator in text:
        text = text.split(separator, 1)[0]
    return text.strip()


class TitleExtractor:
    """Extracts the title.

    Uses front matter `title`, then a level-1 heading (# Title) in the
    body, then the titleized filename.
    """

    def extract(self, front_matter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        title = front_matter.get("title")
        if title not in (None, ""):
            return {"title": str(title)}
        for line in body.splitlines():
            stripped = line.strip()
            if stripped.startswith("# "):
                return {"title": stripped[2:].strip()}
        return {"title": titleize(path.name)}


class DateExtractor:
    """Extracts the publish date.

    Front matter `date` wins; otherwise the YYYY-MM-DD filename prefix;
    otherwise the file modification time (drafts and pages).
    """

    def extract(self, front_matter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        if "date" in front_matter and front_matter["date"] is not None:
            value = coerce_datetime(front_matter["date"])
            if value is None:
                raise ParseError(path, f"unrecognised date value: {front_matter['date']!r}")
            return {"date": value}
        date = extract_date_from_name(path.stem)
        if date is None:
            date = datetime.fromtimestamp(path.stat().st_mtime)
        return {"date": date}


class CategoryExtractor:
    """Extracts the primary category and the full category list."""

    def extract(self, front_matter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        categories = normalize_terms(front_matter.get("categories"))
        category = front_matter.get("category")
        if category not in (None, ""):
            category = str(category).strip()
            if category in categories:
                categories.remove(category)
            categories.insert(0, category)
        else:
            category = categories[0] if categories else ""
        return {"category": category, "categories": categories}


class TagExtractor:
    """Extracts tags from front matter `tags` (or `tag`)."""

    def extract(self, front_matter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        raw = front_matter.get("tags", front_matter.get("tag"))
        return {"tags": normalize_terms(raw)}


class ExcerptExtractor:
    """Extracts the raw excerpt.

    Front matter `excerpt` overrides extraction; front matter
    `excerpt_separator` overrides the site-wide separator.

    Attributes:
        separator: Site-wide excerpt separator.
    """

    def __init__(self, separator: str = DEFAULT_EXCERPT_SEPARATOR):
        self.separator = separator

    def extract(self, front_matter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        explicit = front_matter.get("excerpt")
        if explicit is not None:
            return {"excerpt": str(explicit).strip()}
        separator = front_matter.get("excerpt_separator") or self.separator
        return {"excerpt": extract_excerpt(body, str(separator))}


class CompositeMetadataExtractor:
    """Combines multiple metadata extractors.

    Parses the front matter block, then runs every registered extractor
    on it and merges their results. Later extractors can override
    earlier ones.
    """

    def __init__(self, extractors: list | None = None, excerpt_separator: str | None = None):
        """Initialize with a list of extractors.

        Args:
            extractors: List of MetadataExtractor implementations.
                If None, uses the default extractors.
            excerpt_separator: Separator for the default ExcerptExtractor.
        """
        if extractors is None:
            self._extractors = [
                TitleExtractor(),
                DateExtractor(),
                CategoryExtractor(),
                TagExtractor(),
                ExcerptExtractor(excerpt_separator or DEFAULT_EXCERPT_SEPARATOR),
            ]
        else:
            self._extractors = list(extractors)

    def add_extractor(self, extractor) -> None:
        self._extractors.append(extractor)

    def extract(self, text: str, path: Path) -> dict[str, Any]:
        """Extract all metadata from a document's raw text.

        Args:
            text: Raw file content including the front matter block.
            path: Path to the source file.

        Returns:
            Dictionary with 'front_matter', 'body' and every extracted key.

        Raises:
            ParseError: If the front matter block is missing or malformed.
        """
        front_matter, body = parse_frontmatter(text, path)
        result: dict[str, Any] = {"front_matter": front_matter, "body": body}
        for extractor in self._extractors:
            result.update(extractor.extract(front_matter, body, path))
        return result
