"""Application filtering – item holders, the lazily produced candidate sources.

An item holder is any iterable; the helpers here build the common shapes
without materialising the backing collection.
"""
from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator, MutableSet
from typing import TypeVar

T = TypeVar("T")

ItemHolder = Iterable


def empty() -> Iterator[T]:
    return iter(())


def lazy(supplier: Callable[[], Iterable[T]]) -> Iterator[T]:
    """Call *supplier* only when the first candidate is requested."""
    yield from supplier()


def concat(holders: Iterable[Iterable[T]]) -> Iterator[T]:
    for holder in holders:
        yield from holder


def filtered(items: Iterable[T], predicate: Callable[[T], bool]) -> Iterator[T]:
    return (item for item in items if predicate(item))


def deduplicated(
    items: Iterable[T],
    seen: MutableSet[Hashable] | None = None,
    key: Callable[[T], Hashable] | None = None,
) -> Iterator[T]:
    """Yield each item once, remembering keys in *seen* (a fresh set by default)."""
    container: MutableSet[Hashable] = set() if seen is None else seen
    for item in items:
        marker = key(item) if key is not None else item
        if marker in container:
            continue
        container.add(marker)
        yield item


__all__ = ["ItemHolder", "concat", "deduplicated", "empty", "filtered", "lazy"]
