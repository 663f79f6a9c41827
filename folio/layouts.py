"""Layout resolution for Folio.

A layout is a template file under `_layouts/`, looked up in the site first
and then in the theme. A layout may carry front matter of its own; its
`layout:` key names the layout it is wrapped in.

Key classes:
- Layout: A resolved layout file.
- LayoutResolver: Resolves layout names and layout chains.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigurationError
from .frontmatter import split_frontmatter

LAYOUTS_DIR = "_layouts"
LAYOUT_SUFFIXES = (".html", ".html.jinja", ".jinja", "")
NO_LAYOUT = ("none", "null", "false")


@dataclass(frozen=True)
class Layout:
    """A resolved layout.

    Attributes:
        name: Name the layout was requested by.
        path: Layout file.
        template_name: Name the template engine loads it by.
        front_matter: The layout's own front matter.
        parent: Name of the enclosing layout, if any.
    """

    name: str
    path: Path
    template_name: str
    front_matter: dict[str, Any] = field(default_factory=dict)
    parent: str | None = None


class LayoutResolver:
    """Resolves layout names to files.

    Attributes:
        search_dirs: `_layouts` directories in lookup order.
    """

    def __init__(self, source_dir: Path, theme_dir: Path | None = None):
        self.search_dirs = [source_dir / LAYOUTS_DIR]
        if theme_dir is not None:
            self.search_dirs.append(theme_dir / LAYOUTS_DIR)
        self._cache: dict[str, Layout] = {}

    def exists(self, name: str) -> bool:
        return self._find(name) is not None

    def resolve(self, name: str) -> Layout:
        """Resolve a layout name.

        Args:
            name: Layout name as written in front matter, e.g. "default".

        Returns:
            The resolved Layout.

        Raises:
            ConfigurationError: If no layout file matches the name.
        """
        if name in self._cache:
            return self._cache[name]
        found = self._find(name)
        if found is None:
            searched = ", ".join(str(d) for d in self.search_dirs)
            raise ConfigurationError(f"layout '{name}' not found (searched {searched})")
        layout_dir, path = found
        front_matter, _ = split_frontmatter(path.read_text(encoding="utf-8"), path)
        parent = layout_name(front_matter.get("layout"))
        layout = Layout(
            name=name,
            path=path,
            template_name=f"{LAYOUTS_DIR}/{path.relative_to(layout_dir).as_posix()}",
            front_matter=front_matter,
            parent=parent,
        )
        self._cache[name] = layout
        return layout

    def chain(self, name: str) -> list[Layout]:
        """Resolve a layout and every layout enclosing it, innermost first.

        Raises:
            ConfigurationError: If a layout is missing or the chain loops.
        """
        layouts: list[Layout] = []
        seen: list[str] = []
        current: str | None = name
        while current:
            if current in seen:
                loop = " -> ".join([*seen, current])
                raise ConfigurationError(f"layout cycle: {loop}")
            seen.append(current)
            layout = self.resolve(current)
            layouts.append(layout)
            current = layout.parent
        return layouts

    def _find(self, name: str) -> tuple[Path, Path] | None:
        if not name or ".." in Path(name).parts or Path(name).is_absolute():
            return None
        for layout_dir in self.search_dirs:
            for suffix in LAYOUT_SUFFIXES:
                target = layout_dir / f"{name}{suffix}"
                if target.is_file():
                    return layout_dir, target
        return None


def layout_name(value: Any) -> str | None:
    """Normalise a front matter `layout:` value; "none", "null", false and empty mean no layout."""
    if value is None or value is False:
        return None
    name = str(value).strip()
    if not name or name.lower() in NO_LAYOUT:
        return None
    return name
