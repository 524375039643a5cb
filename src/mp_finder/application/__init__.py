"""Application – item filtering, finders and pagination."""

from mp_finder.application.filtering import FilterItemProcessor, ItemFilter, PagingFilter
from mp_finder.application.finder import (
    DelegatingFinder,
    Dimension,
    Finder,
    FinderContext,
    FinderDataBinding,
    FinderImpl,
    PagedSearchResult,
    TypedFinderBuilder,
)
from mp_finder.application.pagination import PagerData

__all__ = [
    "DelegatingFinder",
    "Dimension",
    "FilterItemProcessor",
    "Finder",
    "FinderContext",
    "FinderDataBinding",
    "FinderImpl",
    "ItemFilter",
    "PagedSearchResult",
    "PagerData",
    "PagingFilter",
    "TypedFinderBuilder",
]
