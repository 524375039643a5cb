"""Application finder – TypedFinderBuilder, a declarative registry of typed dimensions.

A finder is described once as a table of :class:`Dimension` registrations,
each with a value parser, an optional item predicate and an optional item
producer. Resolving a locator folds its present dimensions against that
table: producers (first registered wins) supply the candidates, predicates
are AND-combined into the filter.

Example::

    ID = Dimension[int]("id")
    NAME = Dimension[str]("name")

    builder = TypedFinderBuilder[User]()
    builder.dimension_long(ID).description("internal id").value_for_default_filter(lambda u: u.id)
    builder.dimension_string(NAME).value_for_default_filter(lambda u: u.name)
    builder.multiple_convert_to_items(ALWAYS, lambda dimensions: users.all())
    builder.locator_provider(lambda u: f"id:{u.id}")
    finder = builder.build()
"""
from __future__ import annotations

import dataclasses
from collections.abc import Callable, Hashable, Iterable, Mapping, MutableSet, Sequence
from enum import Enum
from typing import Any, Generic, TypeVar

from mp_finder.application.filtering import ItemFilter, MultiCheckerFilter, PredicateFilter, and_all
from mp_finder.application.finder.binding import FinderDataBinding, LocatorDataBinding
from mp_finder.application.finder.finder import Finder, FinderImpl
from mp_finder.application.finder.value_types import (
    ValueType,
    boolean_matches,
    boolean_type,
    enum_type,
    enums_type,
    finder_filter_type,
    finder_items_type,
    fixed_text_type,
    locator_type,
    long_type,
    parameter_condition_type,
    set_of_type,
    string_type,
    value_condition_type,
)
from mp_finder.config.settings import FinderSettings
from mp_finder.kernel.conditions import ParameterCondition, ValueCondition
from mp_finder.kernel.errors import LocatorProcessError, OperationError
from mp_finder.kernel.locator import HELP_DIMENSION, SINGLE_VALUE_UNUSED_NAME, DescriptionProvider, Locator

T = TypeVar("T")
V = TypeVar("V")
X = TypeVar("X")
E = TypeVar("E", bound=Enum)


@dataclasses.dataclass(frozen=True)
class Dimension(Generic[V]):
    """A dimension name, typed by the value its parser produces.

    Instances are plain constants and may be shared by several finders.
    """

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise OperationError("Wrong dimension name: empty")

    @staticmethod
    def single() -> "Dimension[Any]":
        """The pseudo dimension holding the value of a single-value locator."""
        return Dimension(SINGLE_VALUE_UNUSED_NAME)

    def __str__(self) -> str:
        return f"Dimension '{self.name}'"


# Conditions -------------------------------------------------------------

ValuePredicate = Callable[[str], bool]


def present(value: str | None) -> bool:
    return value is not None


def equals(expected: str) -> ValuePredicate:
    return lambda value: value == expected


class DimensionCondition:
    """Decides from a locator whether a producer, filter or default applies."""

    def complies(self, locator: Locator) -> bool:
        return True

    def __repr__(self) -> str:
        return "DimensionCondition(always)"


ALWAYS = DimensionCondition()


class SingleValueCondition(DimensionCondition):
    def complies(self, locator: Locator) -> bool:
        return locator.is_single_value()


class DimensionConditions(DimensionCondition):
    """All listed dimensions are present, each with at least one complying value."""

    def __init__(self) -> None:
        self._conditions: list[tuple[Dimension[Any], ValuePredicate]] = []

    def when(self, dimension: Dimension[Any], predicate: ValuePredicate = present) -> "DimensionConditions":
        self._conditions.append((dimension, predicate))
        return self

    def complies(self, locator: Locator) -> bool:
        return all(
            any(predicate(value) for value in locator.lookup_dimension_value(dimension.name))
            for dimension, predicate in self._conditions
        )

    def __repr__(self) -> str:
        return "DimensionConditions(" + ", ".join(d.name for d, _ in self._conditions) + ")"


def when(dimension: Dimension[Any], predicate: ValuePredicate = present) -> DimensionConditions:
    return DimensionConditions().when(dimension, predicate)


# Parsed values ----------------------------------------------------------


class DimensionObjects:
    """Typed values of every registered dimension present in a locator.

    :meth:`get` records the dimension as consumed, :meth:`lookup` does not.
    """

    def __init__(self, values: Mapping[str, list[Any]]) -> None:
        self._values = dict(values)
        self._used: set[str] = set()

    def get(self, dimension: Dimension[V]) -> list[V] | None:
        self._used.add(dimension.name)
        return self.lookup(dimension)

    def lookup(self, dimension: Dimension[V]) -> list[V] | None:
        return self._values.get(dimension.name)

    @property
    def used_dimensions(self) -> set[str]:
        return self._used

    @property
    def unused_dimensions(self) -> set[str]:
        return set(self._values) - self._used


class _TrackingDimensionObjects(DimensionObjects):
    """Records which dimensions one producer or filter factory read."""

    def __init__(self, inner: DimensionObjects) -> None:
        self._inner = inner
        self._used = set()

    def get(self, dimension: Dimension[V]) -> list[V] | None:
        self._used.add(dimension.name)
        return self._inner.get(dimension)

    def lookup(self, dimension: Dimension[V]) -> list[V] | None:
        return self._inner.lookup(dimension)

    @property
    def unused_dimensions(self) -> set[str]:
        return self._inner.unused_dimensions


ItemsFromDimensions = Callable[[DimensionObjects], "list[T] | None"]
ItemHolderFromDimensions = Callable[[DimensionObjects], Iterable[T]]
ItemFilterFromDimensions = Callable[[DimensionObjects], "ItemFilter[T] | None"]


# Registrations ----------------------------------------------------------


class TypedDimension(Generic[T, V]):
    """Chainable registration of one dimension in a :class:`TypedFinderBuilder`."""

    def __init__(self, builder: "TypedFinderBuilder[T]", dimension: Dimension[V], value_type: ValueType[V]) -> None:
        self._builder = builder
        self.dimension = dimension
        self.value_type = value_type
        self.checker: Callable[[V], V] | None = None
        self._description: str | None = None
        self._hidden: bool | None = None
        self._default_filter: Callable[[V, Any], bool] | None = None

    @property
    def name(self) -> str:
        return self.dimension.name

    @property
    def is_hidden(self) -> bool:
        return bool(self._hidden)

    @property
    def description_text(self) -> str | None:
        return self._description

    def description(self, text: str) -> "TypedDimension[T, V]":
        if not text:
            raise OperationError("Wrong description: empty")
        if self._description is not None:
            raise OperationError(f"Attempt to redefine description: old: '{self._description}', new: '{text}'")
        self._description = text
        return self

    def hidden(self) -> "TypedDimension[T, V]":
        if self._hidden is not None:
            raise OperationError(f"Attempt to redefine hidden for {self.dimension}")
        self._hidden = True
        return self

    def with_default(self, value: str) -> "TypedDimension[T, V]":
        self._builder.defaults(ALWAYS, {self.name: value})
        return self

    def dimension_checker(self, checker: Callable[[V], V]) -> "TypedDimension[T, V]":
        """Wrap every parsed value, e.g. to validate it against the current user."""
        self.checker = checker
        return self

    def filter(self, predicate: Callable[[V, T], bool]) -> "TypedDimension[T, V]":
        """Include items for which ``predicate(value, item)`` holds for every value."""
        self._builder._dimension_filter(self.dimension, predicate)
        return self

    def to_items(self, producer: Callable[[V], "list[T] | None"]) -> "TypedDimension[T, V]":
        """Produce candidates from the value; several values intersect their items."""
        dimension = self.dimension

        def items_from_dimensions(dimensions: DimensionObjects) -> list[T] | None:
            values = dimensions.get(dimension)
            if not values:
                return None
            result: list[T] | None = None
            for value in values:
                items = producer(value)
                if items is None:
                    continue
                if result is None:
                    result = list(dict.fromkeys(items))
                else:
                    result = [item for item in result if item in items]
                if not result:
                    return []
            return result if result is not None else []

        self._builder.multiple_convert_to_items(when(dimension), items_from_dimensions)
        return self

    def default_filter(self, predicate: Callable[[V, X], bool]) -> "TypedDimension[T, V]":
        """Comparison between the parsed value and an item attribute, see :meth:`value_for_default_filter`."""
        if self._default_filter is not None:
            raise OperationError(f"Attempt to redefine default filter for {self.dimension}")
        self._default_filter = predicate
        return self

    def value_for_default_filter(self, accessor: Callable[[T], Any]) -> "TypedDimension[T, V]":
        """Filter items by the default comparison applied to ``accessor(item)``.

        Items whose attribute is ``None`` never match.
        """
        check = self._default_filter
        if check is None:
            raise OperationError(f"No default filter is defined for {self.dimension}")

        def predicate(value: V, item: T) -> bool:
            actual = accessor(item)
            if actual is None:
                return False
            return check(value, actual)

        return self.filter(predicate)


class TypedFinderBuilder(Generic[T]):
    """Collects dimension registrations and builds a :class:`FinderImpl`."""

    def __init__(self) -> None:
        self._dimensions: dict[str, TypedDimension[T, Any]] = {}
        self._defaults: list[tuple[DimensionCondition, dict[str, str]]] = []
        self._items_conditions: list[tuple[DimensionCondition, ItemsFromDimensions[T]]] = []
        self._holders_conditions: list[tuple[DimensionCondition, ItemHolderFromDimensions[T]]] = []
        self._filters_conditions: list[tuple[DimensionCondition, ItemFilterFromDimensions[T]]] = []
        self._single_dimension_handler: Callable[[str], list[T] | None] | None = None
        self._single_item_lookup: Callable[[Locator], T | None] | None = None
        self._locator_provider: Callable[[T], str] | None = None
        self._container_set_provider: Callable[[], MutableSet[Hashable]] | None = None
        self._default_page_size: int | None = None
        self._default_lookup_limit: int | None = None
        self._name: str | None = None

    # Dimension registration -------------------------------------------
    def dimension(self, dimension: Dimension[V], value_type: ValueType[V]) -> TypedDimension[T, V]:
        if dimension.name in self._dimensions:
            raise OperationError(f"Dimension with name '{dimension.name}' was already added")
        result: TypedDimension[T, V] = TypedDimension(self, dimension, value_type)
        self._dimensions[dimension.name] = result
        return result

    def dimension_string(self, dimension: Dimension[str]) -> TypedDimension[T, str]:
        return self.dimension(dimension, string_type()).default_filter(lambda value, actual: value == actual)

    def dimension_long(self, dimension: Dimension[int]) -> TypedDimension[T, int]:
        return self.dimension(dimension, long_type()).default_filter(lambda value, actual: value == actual)

    def dimension_boolean(self, dimension: Dimension[bool]) -> TypedDimension[T, bool]:
        return self.dimension(dimension, boolean_type()).default_filter(boolean_matches)

    def dimension_enum(self, dimension: Dimension[E], enum_cls: type[E]) -> TypedDimension[T, E]:
        return self.dimension(dimension, enum_type(enum_cls)).default_filter(lambda value, actual: value == actual)

    def dimension_enums(self, dimension: Dimension[frozenset[E]], enum_cls: type[E]) -> TypedDimension[T, frozenset[E]]:
        return self.dimension(dimension, enums_type(enum_cls)).default_filter(lambda values, actual: actual in values)

    def dimension_set_of(
        self, dimension: Dimension[frozenset[V]], description: str, convert: Callable[[str], V]
    ) -> TypedDimension[T, frozenset[V]]:
        return self.dimension(dimension, set_of_type(description, convert)).default_filter(
            lambda values, actual: actual in values
        )

    def dimension_locator(self, dimension: Dimension[Locator], *supported: str) -> TypedDimension[T, Locator]:
        """Nested locator such as ``owner:(name:Frodo)``; register a :meth:`TypedDimension.filter` to use it."""
        return self.dimension(dimension, locator_type(*supported))

    def dimension_fixed_text(self, dimension: Dimension[str], *values: str) -> TypedDimension[T, str]:
        return self.dimension(dimension, fixed_text_type(*values)).default_filter(
            lambda value, actual: value.lower() == str(actual).lower()
        )

    def dimension_value_condition(self, dimension: Dimension[ValueCondition]) -> TypedDimension[T, ValueCondition]:
        return self.dimension(dimension, value_condition_type()).default_filter(
            lambda condition, actual: condition.matches(actual)
        )

    def dimension_parameter_condition(
        self, dimension: Dimension[ParameterCondition]
    ) -> TypedDimension[T, ParameterCondition]:
        return self.dimension(dimension, parameter_condition_type()).default_filter(
            lambda condition, actual: condition.matches(actual)
        )

    def dimension_with_finder(
        self, dimension: Dimension[list[X]], finder: Finder[X], description: str
    ) -> TypedDimension[T, list[X]]:
        """Nested locator resolved by *finder*; matches when the item's collection shares an item."""
        return self.dimension(dimension, finder_items_type(finder, description)).default_filter(
            lambda found, actual: any(item in actual for item in found)
        )

    def dimension_finder_filter(
        self, dimension: Dimension[ItemFilter[X]], finder: Finder[X], description: str
    ) -> TypedDimension[T, ItemFilter[X]]:
        return self.dimension(dimension, finder_filter_type(finder, description)).default_filter(
            lambda item_filter, actual: item_filter.is_included(actual)
        )

    # Finder-level configuration ---------------------------------------
    def name(self, finder_name: str) -> "TypedFinderBuilder[T]":
        self._name = finder_name
        return self

    def single_dimension(self, handler: Callable[[str], "list[T] | None"]) -> "TypedFinderBuilder[T]":
        """Candidates for a single-value locator such as ``12345`` or ``Frodo``."""
        self._single_dimension_handler = handler
        return self

    def find_single_item(self, lookup: Callable[[Locator], "T | None"]) -> "TypedFinderBuilder[T]":
        """Direct unique-key lookup tried before any scan."""
        self._single_item_lookup = lookup
        return self

    def multiple_convert_to_items(
        self, condition: DimensionCondition, producer: ItemsFromDimensions[T]
    ) -> "TypedFinderBuilder[T]":
        """Register a candidate producer; ``None`` from *producer* means "not applicable"."""
        self._items_conditions.append((condition, producer))
        return self

    def multiple_convert_to_item_holder(
        self, condition: DimensionCondition, producer: ItemHolderFromDimensions[T]
    ) -> "TypedFinderBuilder[T]":
        """Like :meth:`multiple_convert_to_items` for lazily produced candidates."""
        self._holders_conditions.append((condition, producer))
        return self

    def filter(self, condition: DimensionCondition, factory: ItemFilterFromDimensions[T]) -> "TypedFinderBuilder[T]":
        if any(existing is condition for existing, _ in self._filters_conditions):
            raise OperationError(f"Overriding dimension condition '{condition!r}'")
        self._filters_conditions.append((condition, factory))
        return self

    def defaults(self, condition: DimensionCondition, pairs: Mapping[str, str]) -> "TypedFinderBuilder[T]":
        """Add dimensions absent from a complying dimension-list locator."""
        for index, (existing, current) in enumerate(self._defaults):
            if existing is condition:
                self._defaults[index] = (existing, {**current, **pairs})
                return self
        self._defaults.append((condition, dict(pairs)))
        return self

    def locator_provider(self, provider: Callable[[T], str]) -> "TypedFinderBuilder[T]":
        self._locator_provider = provider
        return self

    def container_set_provider(self, provider: Callable[[], MutableSet[Hashable]]) -> "TypedFinderBuilder[T]":
        """Enable the ``unique`` dimension with sets created by *provider*."""
        self._container_set_provider = provider
        return self

    def default_page_size(self, count: int) -> "TypedFinderBuilder[T]":
        self._default_page_size = count
        return self

    def default_lookup_limit(self, limit: int) -> "TypedFinderBuilder[T]":
        self._default_lookup_limit = limit
        return self

    def build(self, settings: FinderSettings | None = None) -> FinderImpl[T]:
        return FinderImpl(_TypedFinderDataBinding(self), name=self._name or type(self).__name__, settings=settings)

    # Introspection ----------------------------------------------------
    def get_known_dimensions(self) -> list[str]:
        result = [d.name for d in self._dimensions.values() if not d.is_hidden]
        if self._single_dimension_handler is not None:
            result.append(SINGLE_VALUE_UNUSED_NAME)
        return result

    def get_hidden_dimensions(self) -> list[str]:
        return [d.name for d in self._dimensions.values() if d.is_hidden]

    def get_locator_description_provider(self) -> DescriptionProvider:
        def describe(locator: Locator, include_hidden: bool) -> str:
            lines = ["Supported locator dimensions:"]
            for dimension in self._dimensions.values():
                if (
                    not include_hidden
                    and dimension.is_hidden
                    and not locator.lookup_dimension_value(dimension.name)
                ):
                    continue
                line = dimension.name
                if dimension.description_text is not None:
                    line += f" - {dimension.description_text}"
                if dimension.value_type.description is not None:
                    line += f" (type: {dimension.value_type.description})"
                lines.append(line)
            return "\n".join(lines) + "\n"

        return describe

    def get_dimension_objects(self, locator: Locator) -> DimensionObjects:
        """Apply defaults to *locator* and parse every registered dimension it holds."""
        self._patch_with_defaults(locator)
        values: dict[str, list[Any]] = {}
        for dimension in self._dimensions.values():
            parsed = self._typed_values(locator, dimension)
            if parsed:
                values[dimension.name] = parsed
        return DimensionObjects(values)

    # Internals --------------------------------------------------------
    def _dimension_filter(self, dimension: Dimension[V], predicate: Callable[[V, T], bool]) -> None:
        condition: DimensionCondition
        if dimension.name == SINGLE_VALUE_UNUSED_NAME:
            condition = SingleValueCondition()
        else:
            condition = when(dimension)

        def factory(dimensions: DimensionObjects) -> ItemFilter[T] | None:
            values = dimensions.get(dimension)
            if not values:
                return None
            return MultiCheckerFilter(
                PredicateFilter(lambda item, value=value: predicate(value, item), name=dimension.name)
                for value in values
            )

        self.filter(condition, factory)

    def _patch_with_defaults(self, locator: Locator) -> None:
        if locator.is_single_value():
            return
        for condition, pairs in self._defaults:
            if condition.complies(locator):
                for name in sorted(pairs):
                    locator.set_dimension_if_not_present(name, pairs[name])

    def _typed_values(self, locator: Locator, dimension: TypedDimension[T, Any]) -> list[Any] | None:
        if dimension.name == SINGLE_VALUE_UNUSED_NAME:
            single = locator.lookup_single_value()
            if single is not None:
                return [self._parse(dimension, single)]
        raw_values = locator.lookup_dimension_value(dimension.name)
        if not raw_values:
            return None
        result = []
        for raw in raw_values:
            value = self._parse(dimension, raw)
            if value is None:
                continue
            result.append(dimension.checker(value) if dimension.checker is not None else value)
        return result

    @staticmethod
    def _parse(dimension: TypedDimension[T, V], raw: str) -> V | None:
        try:
            return dimension.value_type.parse(raw)
        except LocatorProcessError as exc:
            if raw == HELP_DIMENSION:
                raise
            raise LocatorProcessError(
                f"Error in dimension '{dimension.name}', value: '{raw}': {exc.message}", cause=exc
            ) from exc

    def _prefiltered_items(self, locator: Locator, dimensions: DimensionObjects) -> Iterable[T]:
        if self._single_dimension_handler is not None and locator.is_single_value():
            items = self._single_dimension_handler(locator.get_single_value() or "")
            if items is None:
                raise OperationError("Single value items provider returned 'None', but it cannot be ignored")
            return items

        for condition, producer in self._items_conditions:
            if condition.complies(locator):
                tracking = _TrackingDimensionObjects(dimensions)
                items = producer(tracking)
                if items is not None:
                    locator.mark_used(*tracking.used_dimensions)
                    return items
        for condition, holder_producer in self._holders_conditions:
            if condition.complies(locator):
                tracking = _TrackingDimensionObjects(dimensions)
                holder = holder_producer(tracking)
                locator.mark_used(*tracking.used_dimensions)
                return holder
        raise OperationError("No conditions matched. Use multiple_convert_to_items and alike methods")

    def _filter(self, locator: Locator, dimensions: DimensionObjects) -> ItemFilter[T]:
        result: list[ItemFilter[T]] = []
        for condition, factory in self._filters_conditions:
            if not condition.complies(locator):
                continue
            already_used = set(dimensions.used_dimensions)
            tracking = _TrackingDimensionObjects(dimensions)
            checker = factory(tracking)
            if tracking.used_dimensions:
                locator.mark_used(*tracking.used_dimensions)
                if tracking.used_dimensions <= already_used:
                    continue
            if checker is not None:
                result.append(checker)
        return and_all(result)


class _TypedLocatorDataBinding(LocatorDataBinding[T]):
    def __init__(self, builder: TypedFinderBuilder[T], locator: Locator) -> None:
        self._builder = builder
        self._locator = locator
        self._dimensions: DimensionObjects | None = None
        self._items: Iterable[T] | None = None
        self._filter: ItemFilter[T] | None = None

    def _dimension_objects(self) -> DimensionObjects:
        if self._dimensions is None:
            self._dimensions = self._builder.get_dimension_objects(self._locator)
        return self._dimensions

    def get_prefiltered_items(self) -> Iterable[T]:
        if self._items is None:
            self._items = self._builder._prefiltered_items(self._locator, self._dimension_objects())
        return self._items

    def get_filter(self) -> ItemFilter[T]:
        if self._filter is None:
            self._filter = self._builder._filter(self._locator, self._dimension_objects())
        return self._filter


class _TypedFinderDataBinding(FinderDataBinding[T]):
    def __init__(self, builder: TypedFinderBuilder[T]) -> None:
        self._builder = builder

    def get_known_dimensions(self) -> Sequence[str]:
        return self._builder.get_known_dimensions()

    def get_hidden_dimensions(self) -> Sequence[str]:
        return self._builder.get_hidden_dimensions()

    def get_locator_description_provider(self) -> DescriptionProvider:
        return self._builder.get_locator_description_provider()

    def get_default_page_size(self) -> int | None:
        return self._builder._default_page_size

    def get_default_lookup_limit(self) -> int | None:
        return self._builder._default_lookup_limit

    def find_single_item(self, locator: Locator) -> T | None:
        lookup = self._builder._single_item_lookup
        return lookup(locator) if lookup is not None else None

    def get_locator_data_binding(self, locator: Locator) -> LocatorDataBinding[T]:
        return _TypedLocatorDataBinding(self._builder, locator)

    def get_item_locator(self, item: T) -> str:
        provider = self._builder._locator_provider
        if provider is None:
            raise OperationError("Incorrect configuration of the typed finder: locator provider not set")
        return provider(item)

    def create_container_set(self) -> MutableSet[Hashable] | None:
        provider = self._builder._container_set_provider
        return provider() if provider is not None else None


__all__ = [
    "ALWAYS",
    "Dimension",
    "DimensionCondition",
    "DimensionConditions",
    "DimensionObjects",
    "SingleValueCondition",
    "TypedDimension",
    "TypedFinderBuilder",
    "equals",
    "present",
    "when",
]
