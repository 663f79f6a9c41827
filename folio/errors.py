"""Exceptions raised by Folio.

Every failure surfaced to a site author derives from FolioError so the CLI
can report it with file context and a non-zero exit code.

Classes:
    FolioError: Base class for all Folio errors.
    ParseError: Malformed or missing front matter, bad post filename or date.
    ConfigurationError: Unresolvable layout, bad config file or value.
    BuildError: Template failure while rendering a document.
"""

from __future__ import annotations

from pathlib import Path


class FolioError(Exception):
    """Base class for errors reported to the site author.

    Attributes:
        source_path: File the error relates to, if any.
        message: Human-readable error message.
    """

    def __init__(self, message: str, source_path: Path | None = None):
        self.source_path = source_path
        self.message = message
        if source_path is not None:
            super().__init__(f"{source_path}: {message}")
        else:
            super().__init__(message)


class ParseError(FolioError):
    """A document's front matter or filename could not be parsed."""

    def __init__(self, source_path: Path | None, message: str):
        super().__init__(message, source_path)


class ConfigurationError(FolioError):
    """The site configuration references something that does not exist."""


class BuildError(FolioError):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.original_error = original_error
        super().__init__(message, source_path)
