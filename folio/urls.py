"""URL building and escaping shared by templates and feeds.

Site paths are rooted at "/" and prefixed with the configured `baseurl`;
absolute URLs additionally carry the site `url`. External URLs pass
through unchanged.

Functions:
    escape_xml: Escape text for HTML or XML output.
    join_url: Join a base and a path with a single slash.
    relative_url: Prefix a site path with `baseurl`.
    absolute_url: Prefix a site path with `url` and `baseurl`.
    site_base_url: The site's absolute root, or "" when `url` is unset.
"""

from __future__ import annotations

from typing import Any

EXTERNAL_PREFIXES = ("http://", "https://", "//", "mailto:")

_XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}


def escape_xml(text: str) -> str:
    """Escape text for element content or a quoted attribute value.

    Examples:
        >>> escape_xml('Tom & "Jerry"')
        'Tom &amp; &quot;Jerry&quot;'
    """
    return "".join(_XML_ESCAPES.get(char, char) for char in text)


def is_external(url: str) -> bool:
    return url.startswith(EXTERNAL_PREFIXES)


def join_url(base: str, path: str) -> str:
    """Join base and path with exactly one slash between them.

    An empty base yields the path rooted at "/".

    Examples:
        >>> join_url("https://example.com/", "about")
        'https://example.com/about'
        >>> join_url("", "about")
        '/about'
    """
    suffix = path if path.startswith("/") else f"/{path}"
    if not base:
        return suffix
    return f"{base.rstrip('/')}{suffix}"


def relative_url(path: Any, config: dict[str, Any]) -> str:
    """Prefix a site path with the configured `baseurl`."""
    path = "" if path is None else str(path)
    if is_external(path):
        return path
    return join_url(str(config.get("baseurl") or "").rstrip("/"), path)


def absolute_url(path: Any, config: dict[str, Any]) -> str:
    """Prefix a site path with `url` and `baseurl`."""
    relative = relative_url(path, config)
    if is_external(relative):
        return relative
    return join_url(str(config.get("url") or ""), relative)


def site_base_url(config: dict[str, Any]) -> str:
    """Return `url` joined with `baseurl`, or "" when `url` is unset."""
    if not str(config.get("url") or "").strip("/"):
        return ""
    return absolute_url("", config).rstrip("/")
