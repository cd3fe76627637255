from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence

from .content import Page
from .utils import chronological_key


class PageCollection(Sequence[Page]):
    """Immutable, ordered sequence of Pages with query helpers."""

    def __init__(self, pages: Iterable[Page]):
        self._pages = tuple(pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return PageCollection(self._pages[item])
        return self._pages[item]

    def of_kind(self, kind: str) -> PageCollection:
        return PageCollection(p for p in self._pages if p.kind == kind)

    def with_tag(self, tag: str) -> PageCollection:
        return PageCollection(p for p in self._pages if tag in p.tags)

    def sorted(self) -> PageCollection:
        """Sort pages newest first, then by source path.

        The order is total: two pages never compare equal because source
        paths are unique.
        """
        return PageCollection(sorted(self._pages, key=chronological_key))

    def latest(self, count: int = 5) -> PageCollection:
        return self.sorted()[:count]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageCollection({len(self._pages)} pages)"


class TagCollection(Mapping[str, PageCollection]):
    """Mapping of tag name to chronologically ordered PageCollection.

    Tags iterate in alphabetical order.
    """

    def __init__(self, mapping: Mapping[str, Iterable[Page]]):
        self._mapping = {
            k: PageCollection(v).sorted() for k, v in sorted(mapping.items())
        }

    def __getitem__(self, key: str) -> PageCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    @classmethod
    def from_pages(cls, pages: Iterable[Page]) -> TagCollection:
        """Group pages by each of their tags."""
        grouped: dict[str, list[Page]] = {}
        for page in pages:
            for tag in page.tags:
                grouped.setdefault(tag, []).append(page)
        return cls(grouped)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TagCollection({len(self._mapping)} tags)"
