"""Utility functions for Folio.

This module contains small helpers used throughout the Folio codebase:
string processing, path handling, date extraction and formatting.

Key functions:
    slugify: Convert filenames and titles to URL slugs.
    titleize: Convert filenames to human-readable titles.
    extract_date_from_name: Extract date from a YYYY-MM-DD filename prefix.
    coerce_datetime: Normalize front matter date values.
    format_long_date: Format dates like "March 25, 2020".
    normalize_terms: Normalize tag and category values to a list.
    build_terms_index: Build an index of posts by tag or category.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path
from typing import Any

DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})-(.+)$")
TERM_SPLIT_RE = re.compile(r"[\s,]+")


def slugify(name: str) -> str:
    """Convert a filename stem or title to a slug, dropping any date prefix.

    Args:
        name: Filename stem or free text.

    Returns:
        URL-friendly slug.
    """
    match = DATE_PREFIX_RE.match(name)
    cleaned = match.group(4) if match else name
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Removes date prefixes (YYYY-MM-DD), replaces hyphens and underscores
    with spaces, and capitalizes each word.

    Args:
        filename: Filename with or without extension.

    Returns:
        Human-readable title string.

    Examples:
        >>> titleize("2020-03-25-logging-in-production.md")
        'Logging In Production'

        >>> titleize("about.md")
        'About'
    """
    base = Path(filename).stem
    match = DATE_PREFIX_RE.match(base)
    if match:
        base = match.group(4)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def split_dated_name(name: str) -> tuple[datetime, str] | None:
    """Split a YYYY-MM-DD-slug filename stem into its date and slug parts.

    Args:
        name: Filename stem (without extension).

    Returns:
        (datetime, remainder) tuple, or None if the stem has no valid date prefix.
    """
    match = DATE_PREFIX_RE.match(name)
    if not match:
        return None
    year, month, day, rest = match.groups()
    try:
        return datetime(int(year), int(month), int(day)), rest
    except ValueError:
        return None


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a filename with YYYY-MM-DD prefix.

    Args:
        name: Filename stem (without extension).

    Returns:
        datetime object if a valid date prefix is found, None otherwise.

    Examples:
        >>> extract_date_from_name("2020-03-25-logging-in-production")
        datetime.datetime(2020, 3, 25, 0, 0)

        >>> extract_date_from_name("about") is None
        True
    """
    parts = split_dated_name(name)
    return parts[0] if parts else None


def coerce_datetime(value: Any) -> datetime | None:
    """Normalize a front matter date value to a naive datetime.

    Timezone-aware values keep their wall-clock time.

    Args:
        value: date, datetime, or ISO 8601 string.

    Returns:
        A naive datetime, or None if the value cannot be interpreted.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        # "2020-03-25 10:00:00 +0100" is the common hand-written form
        text = re.sub(r"\s+([+-]\d{2}):?(\d{2})$", r"\1:\2", text)
        try:
            return datetime.fromisoformat(text).replace(tzinfo=None)
        except ValueError:
            return None
    return None


def format_long_date(value: datetime | date) -> str:
    """Format a date the way the index page shows it.

    Examples:
        >>> format_long_date(datetime(2020, 3, 25))
        'March 25, 2020'
    """
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def normalize_terms(value: Any) -> list[str]:
    """Normalize a tags or categories value to an ordered unique list.

    Accepts a list of strings or a single string separated by
    whitespace or commas.

    Args:
        value: Raw front matter value.

    Returns:
        List of unique, non-empty terms in first-seen order.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[Any] = TERM_SPLIT_RE.split(value)
    elif isinstance(value, (list, tuple, set)):
        items = value
    else:
        items = [value]
    seen: list[str] = []
    for item in items:
        term = str(item).strip()
        if term and term not in seen:
            seen.append(term)
    return seen


def build_terms_index(documents: Iterable, attribute: str) -> dict[str, list]:
    """Build an index mapping terms to the documents carrying them.

    Args:
        documents: Iterable of Document objects.
        attribute: Name of the list attribute to index ('tags' or 'categories').

    Returns:
        Dictionary mapping each term to the documents that carry it,
        with keys in sorted order.
    """
    index: dict[str, list] = {}
    for document in documents:
        for term in getattr(document, attribute):
            index.setdefault(term, []).append(document)
    return {key: index[key] for key in sorted(index)}


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file."""
    return path.suffix.lower() in (".md", ".markdown")


def is_html(path: Path) -> bool:
    """Check if a path is an HTML file."""
    return path.suffix.lower() in (".html", ".htm")


def is_internal_path(rel: Path) -> bool:
    """Check if a relative path has a component starting with _ or '.'.

    Internal paths hold layouts, includes, data, posts and drafts, and
    are never copied to the output as-is.
    """
    return any(part.startswith(("_", ".")) for part in rel.parts)
