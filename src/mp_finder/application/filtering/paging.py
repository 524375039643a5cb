"""Application filtering – PagingFilter, page window and scan budget bounds."""
from __future__ import annotations

from typing import TypeVar

from mp_finder.application.filtering.base import ItemFilter, ProxyFilter

T = TypeVar("T")


class PagingFilter(ProxyFilter[T]):
    """Adds a result page ``[start, start + count)`` and a scan budget to a filter.

    ``count`` of ``None`` means an unbounded page, ``lookup_limit`` of
    ``None`` an unbounded scan. Both bounds are independent: a small page
    located far into the sequence is still cut off by the budget.
    """

    def __init__(
        self,
        inner: ItemFilter[T],
        start: int | None = None,
        count: int | None = None,
        lookup_limit: int | None = None,
    ) -> None:
        super().__init__(inner)
        if start is not None and start < 0:
            raise ValueError("start must be >= 0")
        if count is not None and count < 0:
            raise ValueError("count must be >= 0")
        if lookup_limit is not None and lookup_limit < 0:
            raise ValueError("lookup_limit must be >= 0")
        self.start = start
        self.count = count
        self.lookup_limit = lookup_limit

    @property
    def effective_start(self) -> int:
        return self.start or 0

    def is_included_by_range(self, matched_index: int) -> bool:
        """``matched_index`` counts only items that passed :meth:`is_included`, zero-based."""
        if matched_index < self.effective_start:
            return False
        return self.count is None or matched_index < self.effective_start + self.count

    def is_page_full(self, matched_count: int) -> bool:
        return self.count is not None and matched_count >= self.effective_start + self.count

    def is_lookup_limit_exhausted(self, processed_count: int) -> bool:
        return self.lookup_limit is not None and processed_count >= self.lookup_limit

    def is_below_upper_range_limit(self, matched_count: int, processed_count: int) -> bool:
        """True while the page is not full and the scan budget is not used up."""
        if self.count == 0:
            return False
        return not self.is_page_full(matched_count) and not self.is_lookup_limit_exhausted(processed_count)

    def __repr__(self) -> str:  # pragma: no cover
        return f"PagingFilter(start={self.start}, count={self.count}, lookup_limit={self.lookup_limit})"


__all__ = ["PagingFilter"]
