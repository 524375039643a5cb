"""Application finder – PagedSearchResult."""
from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class PagedSearchResult(Generic[T]):
    """Matched items with the echoed paging bounds of the scan that produced them.

    ``start``/``count`` are ``None`` for results that were not paged, such as
    a single item found by a direct lookup.
    """

    items: list[T]
    start: int | None = None
    count: int | None = None
    total_processed: int | None = None
    lookup_limit: int | None = None
    lookup_limit_reached: bool = False
    last_processed_item: T | None = None

    @property
    def actual_count(self) -> int:
        return len(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    @classmethod
    def empty(cls) -> "PagedSearchResult[T]":
        return cls(items=[])


__all__ = ["PagedSearchResult"]
