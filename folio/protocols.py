"""Protocol definitions for Folio.

These protocols describe the seams where Folio can be extended: body
renderers, metadata extractors and content loaders. Implementations are
plain classes; nothing needs to inherit from these.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .content import SourceFiles
    from .renderers import Heading


@runtime_checkable
class ContentRenderer(Protocol):
    """Protocol for rendering a document body to HTML.

    Implementations handle specific content types (Markdown, HTML).
    """

    @abstractmethod
    def can_render(self, path: Path) -> bool:
        """Check if this renderer can handle the given file."""
        ...

    @abstractmethod
    def render(self, content: str) -> tuple[str, list[Heading]]:
        """Render content to HTML.

        Args:
            content: Body text with front matter removed.

        Returns:
            Tuple of (rendered HTML, list of headings for TOC).
        """
        ...

    @property
    @abstractmethod
    def source_type(self) -> str:
        """Return the source type identifier (e.g., 'markdown', 'html')."""
        ...


@runtime_checkable
class MetadataExtractor(Protocol):
    """Protocol for deriving one piece of document metadata."""

    @abstractmethod
    def extract(self, front_matter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        """Extract metadata.

        Args:
            front_matter: Parsed front matter mapping.
            body: Body text after the front matter block.
            path: Path to the source file.

        Returns:
            Dictionary of extracted metadata.
        """
        ...


@runtime_checkable
class ContentLoader(Protocol):
    """Protocol for discovering and classifying source files."""

    @abstractmethod
    def discover(self, include_drafts: bool = False) -> SourceFiles:
        """Classify every source file.

        Args:
            include_drafts: Whether to include draft files.
        """
        ...
