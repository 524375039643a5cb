"""Application filtering – FilterItemProcessor, the streaming scan."""
from __future__ import annotations

from collections.abc import Iterable
from typing import Generic, TypeVar

from mp_finder.application.filtering.paging import PagingFilter

T = TypeVar("T")


class FilterItemProcessor(Generic[T]):
    """Apply a :class:`PagingFilter` to a candidate sequence, one item at a time.

    For every candidate: stop immediately when the filter asks to (the item
    is not counted), otherwise count it as processed, skip it when excluded,
    and collect it when its matched index falls into the page. The scan ends
    once the page is full or the budget is used up.

    A processor is single-use; :meth:`process` consumes *items* lazily and
    never pulls more candidates than needed.
    """

    def __init__(self, item_filter: PagingFilter[T]) -> None:
        self._filter = item_filter
        self._result: list[T] = []
        self._matched = 0
        self._processed = 0
        self._last_processed: T | None = None
        self._lookup_limit_reached = item_filter.is_lookup_limit_exhausted(0) and not item_filter.is_page_full(0)
        self._finished = not item_filter.is_below_upper_range_limit(0, 0)

    def process_item(self, item: T) -> bool:
        """Handle one candidate; return ``False`` when the scan must end."""
        if self._finished:
            return False
        if self._filter.should_stop(item):
            self._finished = True
            return False
        self._processed += 1
        self._last_processed = item
        if self._filter.is_included(item):
            if self._filter.is_included_by_range(self._matched):
                self._result.append(item)
            self._matched += 1
        if not self._filter.is_below_upper_range_limit(self._matched, self._processed):
            self._lookup_limit_reached = not self._filter.is_page_full(
                self._matched
            ) and self._filter.is_lookup_limit_exhausted(self._processed)
            self._finished = True
            return False
        return True

    def process(self, items: Iterable[T]) -> "FilterItemProcessor[T]":
        if self._finished:
            return self
        for item in items:
            if not self.process_item(item):
                break
        return self

    @property
    def result(self) -> list[T]:
        return self._result

    @property
    def total_items_processed(self) -> int:
        return self._processed

    @property
    def matched_count(self) -> int:
        return self._matched

    @property
    def lookup_limit_reached(self) -> bool:
        return self._lookup_limit_reached

    @property
    def last_processed_item(self) -> T | None:
        return self._last_processed


__all__ = ["FilterItemProcessor"]
