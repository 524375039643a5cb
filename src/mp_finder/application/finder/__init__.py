"""Application finder – locator resolution, data bindings and the typed dimension registry."""
from mp_finder.application.finder import dimensions
from mp_finder.application.finder.binding import FinderDataBinding, LocatorDataBinding, StaticLocatorDataBinding
from mp_finder.application.finder.builder import (
    ALWAYS,
    Dimension,
    DimensionCondition,
    DimensionConditions,
    DimensionObjects,
    TypedDimension,
    TypedFinderBuilder,
    equals,
    present,
    when,
)
from mp_finder.application.finder.context import FinderContext
from mp_finder.application.finder.delegating import DelegatingFinder
from mp_finder.application.finder.finder import Finder, FinderImpl, unique_match
from mp_finder.application.finder.result import PagedSearchResult
from mp_finder.application.finder.value_types import ValueType

__all__ = [
    "ALWAYS",
    "DelegatingFinder",
    "Dimension",
    "DimensionCondition",
    "DimensionConditions",
    "DimensionObjects",
    "Finder",
    "FinderContext",
    "FinderDataBinding",
    "FinderImpl",
    "LocatorDataBinding",
    "PagedSearchResult",
    "StaticLocatorDataBinding",
    "TypedDimension",
    "TypedFinderBuilder",
    "ValueType",
    "dimensions",
    "equals",
    "present",
    "unique_match",
    "when",
]
