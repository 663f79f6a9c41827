from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .content import Document


def sort_posts(posts: Iterable[Document]) -> list[Document]:
    """Order posts newest first; equal dates fall back to source filename."""
    by_name = sorted(posts, key=lambda p: p.path.name)
    return sorted(by_name, key=lambda p: p.date, reverse=True)


class PostCollection(Sequence["Document"]):
    """Lightweight helper for working with lists of Documents in templates and code.

    Iteration order is whatever order the collection was built with;
    use .sorted() for newest first.
    """

    def __init__(self, documents: Iterable[Document]):
        self._documents = list(documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return PostCollection(self._documents[item])
        return self._documents[item]

    def with_tag(self, tag: str) -> PostCollection:
        return PostCollection(d for d in self._documents if tag in d.tags)

    def in_category(self, category: str) -> PostCollection:
        return PostCollection(d for d in self._documents if category in d.categories)

    def drafts(self) -> PostCollection:
        return PostCollection(d for d in self._documents if d.draft)

    def published(self) -> PostCollection:
        return PostCollection(d for d in self._documents if not d.draft)

    def sorted(self, reverse: bool = True) -> PostCollection:
        """Sort by date, newest first unless reverse is False.

        Documents with equal dates keep source filename order in both
        directions.
        """
        ordered = sort_posts(self._documents)
        if not reverse:
            by_name = sorted(self._documents, key=lambda d: d.path.name)
            ordered = sorted(by_name, key=lambda d: d.date)
        return PostCollection(ordered)

    def latest(self, count: int = 5) -> PostCollection:
        return self.sorted()[:count]

    def neighbours(self, document: Document) -> tuple[Document | None, Document | None]:
        """Return (older, newer) neighbours of a post in date order."""
        ordered = self.sorted()._documents
        for index, candidate in enumerate(ordered):
            if candidate.path == document.path:
                older = ordered[index + 1] if index + 1 < len(ordered) else None
                newer = ordered[index - 1] if index > 0 else None
                return older, newer
        return None, None

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._documents)} documents)"


class TermCollection(Mapping[str, PostCollection]):
    """Mapping of tag or category name to PostCollection."""

    def __init__(self, mapping: Mapping[str, Iterable[Document]]):
        self._mapping = {k: PostCollection(v) for k, v in mapping.items()}

    def __getitem__(self, key: str) -> PostCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def get(self, key: str, default: Any = None):
        return self._mapping.get(key, default)

    def counts(self) -> dict[str, int]:
        return {key: len(value) for key, value in self._mapping.items()}

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TermCollection({len(self._mapping)} terms)"
