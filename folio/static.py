"""Output writing for Folio.

Static files are copied unchanged; rendered documents and listing pages
are written under the destination at their output paths.

Key class:
- OutputWriter: Writes rendered text and copies static files.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from .content import StaticFile


class OutputWriter:
    """Writes build output below a destination directory.

    Attributes:
        output_dir: Destination directory.
        written: Relative paths written so far, in write order.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.written: list[str] = []

    def write_text(self, relative_path: str, text: str) -> Path:
        """Write rendered output, creating parent directories.

        Args:
            relative_path: Output path relative to the destination.
            text: Rendered content.

        Returns:
            Absolute path of the written file.
        """
        target = self.output_dir / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(text)
        self.written.append(relative_path)
        return target

    def copy_static(self, static_files: Iterable[StaticFile]) -> int:
        """Copy static files unchanged.

        Returns:
            Number of files copied.
        """
        count = 0
        for static in static_files:
            target = self.output_dir / static.relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(static.path, target)
            self.written.append(static.relative_path)
            count += 1
        return count
