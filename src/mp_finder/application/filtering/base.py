"""Application filtering – ItemFilter contract and its composites."""
from __future__ import annotations

import abc
from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

T = TypeVar("T")


class ItemFilter(abc.ABC, Generic[T]):
    """Per-item inclusion predicate with an optional early-stop hook.

    ``should_stop`` is a stronger signal than exclusion: for ordered
    sources it ends the scan at the first item past a boundary.

    Example::

        recent = ItemFilter.of(lambda b: b.finished > since)
        not_personal = ~ItemFilter.of(lambda b: b.personal)
        combined = recent & not_personal
    """

    @abc.abstractmethod
    def is_included(self, item: T) -> bool: ...

    def should_stop(self, item: T) -> bool:
        return False

    @staticmethod
    def of(
        predicate: Callable[[T], bool],
        *,
        stop: Callable[[T], bool] | None = None,
        name: str = "",
    ) -> "PredicateFilter[T]":
        return PredicateFilter(predicate, stop=stop, name=name)

    # Operator overloads -----------------------------------------------
    def __and__(self, other: "ItemFilter[T]") -> "MultiCheckerFilter[T]":
        return MultiCheckerFilter([self, other])

    def __or__(self, other: "ItemFilter[T]") -> "AnyOfFilter[T]":
        return AnyOfFilter([self, other])

    def __invert__(self) -> "NotFilter[T]":
        return NotFilter(self)


class PredicateFilter(ItemFilter[T]):
    """Wraps plain callables as an :class:`ItemFilter`."""

    def __init__(
        self,
        predicate: Callable[[T], bool],
        *,
        stop: Callable[[T], bool] | None = None,
        name: str = "",
    ) -> None:
        self._predicate = predicate
        self._stop = stop
        self.name: str = name or getattr(predicate, "__name__", "<lambda>")

    def is_included(self, item: T) -> bool:
        return self._predicate(item)

    def should_stop(self, item: T) -> bool:
        return self._stop is not None and self._stop(item)

    def __repr__(self) -> str:  # pragma: no cover
        return f"PredicateFilter({self.name!r})"


class MultiCheckerFilter(ItemFilter[T]):
    """AND of several filters; stops at the first failing checker.

    Stops the scan as soon as any checker asks to stop.
    """

    def __init__(self, filters: Iterable[ItemFilter[T]] = ()) -> None:
        self._filters: list[ItemFilter[T]] = list(filters)

    def add(self, item_filter: ItemFilter[T]) -> "MultiCheckerFilter[T]":
        self._filters.append(item_filter)
        return self

    def __len__(self) -> int:
        return len(self._filters)

    def is_included(self, item: T) -> bool:
        return all(f.is_included(item) for f in self._filters)

    def should_stop(self, item: T) -> bool:
        return any(f.should_stop(item) for f in self._filters)


class AnyOfFilter(ItemFilter[T]):
    """OR of several filters. Stops only when every alternative would stop."""

    def __init__(self, filters: Iterable[ItemFilter[T]]) -> None:
        self._filters: list[ItemFilter[T]] = list(filters)

    def is_included(self, item: T) -> bool:
        return any(f.is_included(item) for f in self._filters)

    def should_stop(self, item: T) -> bool:
        return bool(self._filters) and all(f.should_stop(item) for f in self._filters)


class NotFilter(ItemFilter[T]):
    """Negation of a filter's inclusion test. Never stops the scan."""

    def __init__(self, inner: ItemFilter[T]) -> None:
        self._inner = inner

    def is_included(self, item: T) -> bool:
        return not self._inner.is_included(item)


class ProxyFilter(ItemFilter[T]):
    """Delegates everything to *inner*; subclasses override only what differs."""

    def __init__(self, inner: ItemFilter[T]) -> None:
        self._inner = inner

    @property
    def inner(self) -> ItemFilter[T]:
        return self._inner

    def is_included(self, item: T) -> bool:
        return self._inner.is_included(item)

    def should_stop(self, item: T) -> bool:
        return self._inner.should_stop(item)


class _IncludeAll(ItemFilter[object]):
    def is_included(self, item: object) -> bool:
        return True

    def __repr__(self) -> str:  # pragma: no cover
        return "INCLUDE_ALL"


INCLUDE_ALL: ItemFilter[object] = _IncludeAll()


def and_all(filters: Iterable[ItemFilter[T]]) -> ItemFilter[T]:
    """Combine *filters*; a single filter is returned unchanged."""
    items = list(filters)
    if not items:
        return INCLUDE_ALL  # type: ignore[return-value]
    if len(items) == 1:
        return items[0]
    return MultiCheckerFilter(items)


def any_of(filters: Iterable[ItemFilter[T]]) -> ItemFilter[T]:
    items = list(filters)
    if len(items) == 1:
        return items[0]
    return AnyOfFilter(items)


__all__ = [
    "AnyOfFilter",
    "INCLUDE_ALL",
    "ItemFilter",
    "MultiCheckerFilter",
    "NotFilter",
    "PredicateFilter",
    "ProxyFilter",
    "and_all",
    "any_of",
]
