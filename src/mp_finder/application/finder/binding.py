"""Application finder – data bindings, the finder's view of an item universe."""
from __future__ import annotations

import abc
from collections.abc import Hashable, Iterable, MutableSet, Sequence
from typing import Generic, TypeVar

from mp_finder.application.filtering import INCLUDE_ALL, ItemFilter
from mp_finder.kernel.locator import DescriptionProvider, Locator

T = TypeVar("T")


class LocatorDataBinding(abc.ABC, Generic[T]):
    """Candidate source and filter derived from one locator."""

    @abc.abstractmethod
    def get_prefiltered_items(self) -> Iterable[T]:
        """Items to scan; may be narrowed by a cheap native lookup."""

    @abc.abstractmethod
    def get_filter(self) -> ItemFilter[T]: ...


class StaticLocatorDataBinding(LocatorDataBinding[T]):
    def __init__(self, items: Iterable[T], item_filter: ItemFilter[T] | None = None) -> None:
        self._items = items
        self._filter = item_filter

    def get_prefiltered_items(self) -> Iterable[T]:
        return self._items

    def get_filter(self) -> ItemFilter[T]:
        return self._filter if self._filter is not None else INCLUDE_ALL  # type: ignore[return-value]


class FinderDataBinding(abc.ABC, Generic[T]):
    """Entity-kind specific hooks a :class:`~mp_finder.application.finder.FinderImpl` is built on.

    Only the abstract methods are mandatory; the rest default to "not
    supported".
    """

    @abc.abstractmethod
    def get_known_dimensions(self) -> Sequence[str]: ...

    def get_hidden_dimensions(self) -> Sequence[str]:
        return ()

    def get_locator_description_provider(self) -> DescriptionProvider | None:
        return None

    def get_default_page_size(self) -> int | None:
        return None

    def get_default_lookup_limit(self) -> int | None:
        return None

    def find_single_item(self, locator: Locator) -> T | None:
        """Direct lookup by a unique key; ``None`` falls through to the scan.

        May raise :class:`~mp_finder.kernel.errors.NotFoundError` when the
        key is present but matches nothing.
        """
        return None

    @abc.abstractmethod
    def get_locator_data_binding(self, locator: Locator) -> LocatorDataBinding[T]: ...

    @abc.abstractmethod
    def get_item_locator(self, item: T) -> str:
        """Canonical locator of *item*, resolving back to that same item."""

    def create_container_set(self) -> MutableSet[Hashable] | None:
        """Set used to drop duplicate candidates; ``None`` disables ``unique``."""
        return None


__all__ = ["FinderDataBinding", "LocatorDataBinding", "StaticLocatorDataBinding"]
