"""Application finder – the Finder contract and its locator-driven implementation.

A finder resolves locator text against one entity kind:

* ``get_item`` returns exactly one item or raises
  :class:`~mp_finder.kernel.errors.NotFoundError`;
* ``get_items`` returns a :class:`PagedSearchResult`;
* ``get_filter`` returns only the composed :class:`ItemFilter`;
* ``get_canonical_locator`` renders the locator that finds an item again.

Resolution first tries the binding's direct lookup (fast path) and falls
back to a bounded scan over the prefiltered candidates (slow path).
"""
from __future__ import annotations

import time
from collections.abc import Iterable
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from mp_finder.application.filtering import (
    FilterItemProcessor,
    ItemFilter,
    NotFilter,
    PagingFilter,
    and_all,
    any_of,
    holders,
)
from mp_finder.application.finder.binding import FinderDataBinding, LocatorDataBinding
from mp_finder.application.finder.context import FinderContext
from mp_finder.application.finder.dimensions import (
    CONTEXT_ITEM,
    COUNT,
    ITEM,
    LOGIC_OP_AND,
    LOGIC_OP_NOT,
    LOGIC_OP_OR,
    LOOKUP_LIMIT,
    NO_COUNT,
    REPORT_ERROR_ON_NOTHING_FOUND,
    START,
    UNIQUE,
)
from mp_finder.application.finder.result import PagedSearchResult
from mp_finder.config.settings import FinderSettings
from mp_finder.kernel.errors import (
    AmbiguousMatchError,
    BadRequestError,
    LocatorProcessError,
    NotFoundError,
    OperationError,
)
from mp_finder.kernel.locator import Locator, LocatorOptions, get_string_locator
from mp_finder.observability.logging import get_logger

T = TypeVar("T")

_log = get_logger(__name__)


@runtime_checkable
class Finder(Protocol[T]):
    """Resolves locator text against one entity kind."""

    @property
    def name(self) -> str: ...

    def get_item(
        self, locator_text: str | None, *, defaults: Locator | None = None, context: FinderContext | None = None
    ) -> T: ...

    def get_items(
        self, locator_text: str | None, *, defaults: Locator | None = None, context: FinderContext | None = None
    ) -> PagedSearchResult[T]: ...

    def get_filter(self, locator_text: str, *, context: FinderContext | None = None) -> ItemFilter[T]: ...

    def get_canonical_locator(self, item: T) -> str: ...


def unique_match(items: Iterable[T], description: str) -> T | None:
    """Return the only element of *items*, ``None`` when empty.

    Raises :class:`AmbiguousMatchError` when several items match a lookup
    that assumes uniqueness, e.g. a name.
    """
    found = list(items)
    if not found:
        return None
    if len(found) > 1:
        raise AmbiguousMatchError(
            f"Several matching items ({len(found)}) are found by {description}.", matches=len(found)
        )
    return found[0]


class FinderImpl(Generic[T]):
    """Locator-driven :class:`Finder` over a :class:`FinderDataBinding`.

    Besides the binding's own dimensions every locator accepts ``start``,
    ``count``, ``lookupLimit`` and the hidden ``or``, ``and``, ``not``,
    ``item``, ``unique``, ``$reportErrorOnNothingFound`` and ``$contextItem``.

    Args:
        data_binding: Entity-kind hooks; may be set later, once.
        name: Name used in logs and messages.
        settings: Defaults and reporting policy; ``FinderSettings()`` if omitted.
    """

    def __init__(
        self,
        data_binding: FinderDataBinding[T] | None = None,
        *,
        name: str | None = None,
        settings: FinderSettings | None = None,
    ) -> None:
        self._binding = data_binding
        self._name = name
        self._settings = settings or FinderSettings()
        self._options = LocatorOptions.from_settings(self._settings)

    def set_data_binding(self, data_binding: FinderDataBinding[T]) -> None:
        if self._binding is not None:
            raise OperationError("Cannot re-initialize data binding of finder " + self.name)
        self._binding = data_binding

    @property
    def data_binding(self) -> FinderDataBinding[T]:
        if self._binding is None:
            raise OperationError(f"Data binding of finder {self.name} is not set")
        return self._binding

    @property
    def name(self) -> str:
        return self._name or type(self).__name__

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def settings(self) -> FinderSettings:
        return self._settings

    def __str__(self) -> str:
        return self.name

    # Finder -----------------------------------------------------------
    def get_canonical_locator(self, item: T) -> str:
        return self.data_binding.get_item_locator(item)

    def get_item(
        self,
        locator_text: str | None,
        *,
        defaults: Locator | None = None,
        context: FinderContext | None = None,
    ) -> T:
        if not locator_text:
            raise BadRequestError("Empty locator is not supported.")
        locator = self.create_locator(locator_text, defaults, context)
        single_value = locator.is_single_value()
        if not single_value:
            locator.set_dimension(COUNT, "1")
            locator.add_hidden_dimensions(COUNT)

        result = self._items_by_locator(locator, multiple=False, context=context)
        if not result.items:
            details = self._describe(locator)
            if not result.lookup_limit_reached:
                raise NotFoundError(f"Nothing is found by {details}.")
            _log.debug(
                "finder.lookup_limit_not_found",
                finder=self.name,
                locator=str(locator),
                last_processed_item=repr(result.last_processed_item),
            )
            raise NotFoundError(
                f"Nothing is found by {details} while processing first {result.lookup_limit} items. "
                f"Set {LOOKUP_LIMIT} dimension to larger value to process more items."
            )
        if len(result.items) != 1:
            if single_value:
                raise AmbiguousMatchError(
                    f"Several matching items ({len(result.items)}) are found by {self._describe(locator)}.",
                    matches=len(result.items),
                )
            raise OperationError(
                f"Found {len(result.items)} items for {self._describe(locator)} while a single item is expected."
            )
        return result.items[0]

    def get_items(
        self,
        locator_text: str | None,
        *,
        defaults: Locator | None = None,
        context: FinderContext | None = None,
    ) -> PagedSearchResult[T]:
        """Return the page of items matching *locator_text*.

        ``None`` returns every item without paging.
        """
        if locator_text is None and defaults is None:
            return self._items_by_locator(None, multiple=True, context=context)
        locator = self.create_locator(locator_text, defaults, context)
        return self._items_by_locator(locator, multiple=True, context=context)

    def get_filter(self, locator_text: str, *, context: FinderContext | None = None) -> ItemFilter[T]:
        locator = self.create_locator(locator_text, None, context)
        try:
            result = self._filter_with_logic_ops(locator, self.data_binding.get_locator_data_binding(locator), context)
        except BadRequestError as exc:
            if locator.is_help_requested():
                raise self._with_help(locator, exc) from exc
            raise
        locator.check_locator_fully_processed()
        return result

    # Locator ----------------------------------------------------------
    def supported_dimensions(self) -> list[str]:
        known = list(dict.fromkeys(self.data_binding.get_known_dimensions()))
        extra = (*self.data_binding.get_hidden_dimensions(), START, COUNT, LOOKUP_LIMIT)
        for name in (*extra, REPORT_ERROR_ON_NOTHING_FOUND, CONTEXT_ITEM):
            if name not in known:
                known.append(name)
        return known

    def create_locator(
        self,
        locator_text: str | None,
        defaults: Locator | None = None,
        context: FinderContext | None = None,
    ) -> Locator:
        """Parse *locator_text* and register the finder-wide dimensions on it.

        Absent text yields an empty locator carrying only *defaults*.
        """
        pool = context.pool if context is not None else None
        supported = self.supported_dimensions()
        if locator_text is None and defaults is None:
            result = Locator.empty(*supported, options=self._options, pool=pool)
        else:
            result = Locator.create(locator_text, defaults, supported, options=self._options, pool=pool)
        result.add_ignore_unused_dimensions(COUNT, REPORT_ERROR_ON_NOTHING_FOUND)
        result.add_hidden_dimensions(
            LOGIC_OP_OR, LOGIC_OP_AND, LOGIC_OP_NOT, ITEM, UNIQUE, REPORT_ERROR_ON_NOTHING_FOUND, CONTEXT_ITEM
        )
        result.add_hidden_dimensions(*self.data_binding.get_hidden_dimensions())
        provider = self.data_binding.get_locator_description_provider()
        if provider is not None:
            result.set_description_provider(provider)
        return result

    def get_paging_filter(self, locator: Locator, item_filter: ItemFilter[T]) -> PagingFilter[T]:
        start = locator.get_single_dimension_value_as_long(START)
        if start is not None and start < 0:
            raise LocatorProcessError(f"Invalid value of dimension '{START}': {start}. Should not be negative.")
        count = self._count_not_marking_used(locator)
        locator.mark_used(COUNT)
        lookup_limit = self._lookup_limit(locator)
        return PagingFilter(item_filter, start, count, lookup_limit)

    def _count_not_marking_used(self, locator: Locator) -> int | None:
        default = self.data_binding.get_default_page_size()
        if default is None:
            default = self._settings.default_page_size
        result = locator.lookup_single_dimension_value_as_long(COUNT, default)
        if result == NO_COUNT:
            return None
        if result is not None and result < 0:
            raise LocatorProcessError(f"Invalid value of dimension '{COUNT}': {result}. Should not be negative.")
        return result

    def _lookup_limit(self, locator: Locator) -> int | None:
        default = self.data_binding.get_default_lookup_limit()
        if default is None:
            default = self._settings.default_lookup_limit
        result = locator.get_single_dimension_value_as_long(LOOKUP_LIMIT, default)
        if result is not None and result < 0:
            raise LocatorProcessError(f"Invalid value of dimension '{LOOKUP_LIMIT}': {result}. Should not be negative.")
        if result is not None and locator.lookup_single_dimension_value(LOOKUP_LIMIT) is None:
            count = self._count_not_marking_used(locator)
            if count is not None and result < count:
                result = count
        return result

    # Resolution -------------------------------------------------------
    def _items_by_locator(
        self, original: Locator | None, *, multiple: bool, context: FinderContext | None
    ) -> PagedSearchResult[T]:
        started = time.perf_counter()
        unpaged = original is None
        if original is None:
            locator = self.create_locator(None, None, context)
        else:
            locator = original
            locator.process_help_request()

        context_name = locator.get_single_dimension_value(CONTEXT_ITEM)
        if context_name is not None:
            items = self._context_items(context_name, context)
            locator.check_locator_fully_processed()
            return PagedSearchResult(items)

        if not locator.is_empty():
            try:
                single = self.data_binding.find_single_item(locator)
            except NotFoundError:
                if multiple and not self._report_error_on_nothing_found(locator):
                    return PagedSearchResult.empty()
                raise
            if single is not None:
                return self._single_item_result(locator, single, multiple=multiple, context=context)
            locator.mark_all_unused()

        try:
            binding = _LogicOpsDataBinding(self, locator, context)
            candidates = binding.get_prefiltered_items()
            container = self.data_binding.create_container_set()
            if container is not None:
                deduplicate = locator.get_single_dimension_value_as_strict_boolean(
                    UNIQUE, locator.is_any_present(ITEM)
                )
                if deduplicate:
                    candidates = holders.deduplicated(candidates, container)
            if unpaged:
                paging: PagingFilter[T] = PagingFilter(binding.get_filter())
            else:
                paging = self.get_paging_filter(locator, binding.get_filter())
        except BadRequestError as exc:
            if locator.is_help_requested():
                raise self._with_help(locator, exc) from exc
            raise
        locator.check_locator_fully_processed()
        return self._scan(paging, candidates, locator, started)

    def _single_item_result(
        self, locator: Locator, item: T, *, multiple: bool, context: FinderContext | None
    ) -> PagedSearchResult[T]:
        used = sorted(locator.get_used_dimensions() - locator.hidden_dimensions)
        start = locator.get_single_dimension_value_as_long(START)
        if start is None or start != 0:
            locator.mark_unused(START)
        try:
            item_filter = _LogicOpsDataBinding(self, locator, context).get_filter()
        except NotFoundError as exc:
            raise NotFoundError(
                f"Invalid filter for found single item, try omitting extra dimensions: {exc.message}", cause=exc
            ) from exc
        except BadRequestError as exc:
            raise BadRequestError(
                f"Invalid filter for found single item, try omitting extra dimensions: {exc.message}", cause=exc
            ) from exc
        locator.mark_used(UNIQUE)
        locator.check_locator_fully_processed()
        if not item_filter.is_included(item):
            noun = "dimension" if len(used) == 1 else "dimensions"
            message = (
                f"Found single item by {noun} [{', '.join(used)}], "
                f"but that was filtered out using the entire locator '{locator}'"
            )
            if multiple and not self._report_error_on_nothing_found(locator):
                _log.debug("finder.single_item_filtered_out", finder=self.name, locator=str(locator), message=message)
                return PagedSearchResult.empty()
            raise NotFoundError(message)
        if multiple and locator.lookup_single_dimension_value_as_long(COUNT) == 0:
            return PagedSearchResult.empty()
        return PagedSearchResult([item])

    def _scan(
        self, paging: PagingFilter[T], candidates: Iterable[T], locator: Locator, started: float
    ) -> PagedSearchResult[T]:
        filtering_started = time.perf_counter()
        processor = FilterItemProcessor(paging).process(candidates)
        finished = time.perf_counter()
        result = processor.result
        processed = processor.total_items_processed
        elapsed_ms = int((finished - started) * 1000)

        if processed >= self._settings.processed_items_log_limit:
            _log.debug(
                "finder.items_processed",
                finder=self.name,
                locator=str(locator),
                matched=len(result),
                processed=processed,
                lookup_limit=paging.lookup_limit,
                lookup_limit_reached=processor.lookup_limit_reached,
                elapsed_ms=elapsed_ms,
                filtering_ms=int((finished - filtering_started) * 1000),
            )
        if self._is_heavy_request(elapsed_ms, processed, len(result)):
            _log.info(
                "finder.slow_request",
                finder=self.name,
                locator=str(locator),
                processed=processed,
                returned=len(result),
                elapsed_ms=elapsed_ms,
            )
        if not result and self._report_error_on_nothing_found(locator):
            raise NotFoundError(f"Nothing is found by {self._describe(locator)}.")
        return PagedSearchResult(
            result,
            paging.start,
            paging.count,
            processed,
            paging.lookup_limit,
            processor.lookup_limit_reached,
            processor.last_processed_item,
        )

    def _is_heavy_request(self, elapsed_ms: int, processed: int, returned: int) -> bool:
        settings = self._settings
        if elapsed_ms > settings.time_warn_limit_ms:
            return True
        if elapsed_ms < settings.minimum_time_warn_limit_ms:
            return False
        return (
            processed - returned > settings.processed_and_filtered_items_warn_limit
            or processed > settings.processed_items_warn_limit
        )

    # Logic operations -------------------------------------------------
    def _filter_with_logic_ops(
        self, locator: Locator, binding: LocatorDataBinding[T], context: FinderContext | None
    ) -> ItemFilter[T]:
        filters = [binding.get_filter()]
        or_text = locator.get_single_dimension_value(LOGIC_OP_OR)
        if or_text is not None:
            filters.append(any_of(self.get_filter(sub, context=context) for sub in _sub_locators(or_text)))
        and_text = locator.get_single_dimension_value(LOGIC_OP_AND)
        if and_text is not None:
            filters.append(self.get_filter(and_text, context=context))
        not_text = locator.get_single_dimension_value(LOGIC_OP_NOT)
        if not_text is not None:
            filters.append(NotFilter(self.get_filter(not_text, context=context)))
        return and_all(filters)

    def _items_of(self, locators: list[str], context: FinderContext | None) -> Iterable[T]:
        for text in locators:
            yield from self.get_items(text, context=context).items

    # Helpers ----------------------------------------------------------
    def _context_items(self, name: str, context: FinderContext | None) -> list[T]:
        value: Any = context.get_var(name) if context is not None else None
        if value is None:
            raise BadRequestError(f"Context variable '{name}' is used in locator, but is not present in the context")
        items = list(value) if isinstance(value, (list, tuple)) else [value]
        if not items:
            raise BadRequestError(
                f"Context variable '{name}' is used in locator, but the list does not contain any elements"
            )
        return items

    @staticmethod
    def _report_error_on_nothing_found(locator: Locator) -> bool:
        return bool(
            locator.get_single_dimension_value_as_strict_boolean(REPORT_ERROR_ON_NOTHING_FOUND, False)
        ) or locator.is_help_requested()

    @staticmethod
    def _describe(locator: Locator) -> str:
        return f"locator '{locator.get_string_representation()}'"

    @staticmethod
    def _with_help(locator: Locator, exc: BadRequestError) -> BadRequestError:
        include_hidden = bool(locator.help_options().get_single_dimension_value_as_strict_boolean("hidden", False))
        return BadRequestError(
            f"{exc.message}\nLocator details: {locator.get_locator_description(include_hidden)}", cause=exc
        )


class _LogicOpsDataBinding(LocatorDataBinding[T]):
    """Adds ``item`` candidates and ``or``/``and``/``not`` filters to the binding's own."""

    def __init__(self, finder: FinderImpl[T], locator: Locator, context: FinderContext | None) -> None:
        self._finder = finder
        self._locator = locator
        self._context = context
        self._inner: LocatorDataBinding[T] | None = None

    def _binding(self) -> LocatorDataBinding[T]:
        if self._inner is None:
            self._inner = self._finder.data_binding.get_locator_data_binding(self._locator)
        return self._inner

    def get_prefiltered_items(self) -> Iterable[T]:
        if self._locator.lookup_single_dimension_value_as_long(COUNT) == 0:
            return holders.empty()
        item_locators = self._locator.get_dimension_value(ITEM)
        if item_locators:
            return self._finder._items_of(item_locators, self._context)
        return self._binding().get_prefiltered_items()

    def get_filter(self) -> ItemFilter[T]:
        return self._finder._filter_with_logic_ops(self._locator, self._binding(), self._context)


def _sub_locators(text: str) -> list[str]:
    """Split ``or`` operands: ``(a:1,b:2)`` gives ``["a:1", "b:2"]``."""
    locator = Locator(text)
    if locator.is_single_value():
        return [locator.get_string_representation()]
    result = []
    for name in locator.defined_dimensions:
        for value in locator.get_dimension_value(name):
            result.append(get_string_locator(name, value))
    return result


__all__ = ["Finder", "FinderImpl", "unique_match"]
