"""Application finder – DelegatingFinder."""
from __future__ import annotations

from typing import Generic, TypeVar

from mp_finder.application.filtering import ItemFilter
from mp_finder.application.finder.context import FinderContext
from mp_finder.application.finder.finder import Finder
from mp_finder.application.finder.result import PagedSearchResult
from mp_finder.kernel.errors import OperationError
from mp_finder.kernel.locator import Locator

T = TypeVar("T")


class DelegatingFinder(Generic[T]):
    """Finder whose implementation is supplied after construction.

    Lets mutually dependent finders (builds referring to build types and
    back) be wired once all of them exist.
    """

    def __init__(self, name: str | None = None) -> None:
        self._delegate: Finder[T] | None = None
        self._name = name

    def set_delegate(self, delegate: Finder[T]) -> None:
        if self._delegate is not None:
            raise OperationError(f"Delegate of finder {self.name} is already set")
        self._delegate = delegate

    @property
    def delegate(self) -> Finder[T]:
        if self._delegate is None:
            raise OperationError(f"Delegate of finder {self.name} is not set")
        return self._delegate

    @property
    def name(self) -> str:
        if self._name is not None:
            return self._name
        if self._delegate is not None:
            return self._delegate.name
        return type(self).__name__

    def get_item(
        self, locator_text: str | None, *, defaults: Locator | None = None, context: FinderContext | None = None
    ) -> T:
        return self.delegate.get_item(locator_text, defaults=defaults, context=context)

    def get_items(
        self, locator_text: str | None, *, defaults: Locator | None = None, context: FinderContext | None = None
    ) -> PagedSearchResult[T]:
        return self.delegate.get_items(locator_text, defaults=defaults, context=context)

    def get_filter(self, locator_text: str, *, context: FinderContext | None = None) -> ItemFilter[T]:
        return self.delegate.get_filter(locator_text, context=context)

    def get_canonical_locator(self, item: T) -> str:
        return self.delegate.get_canonical_locator(item)


__all__ = ["DelegatingFinder"]
