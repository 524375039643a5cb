"""Application filtering – item filters, paging bounds and the streaming scan."""
from mp_finder.application.filtering import holders
from mp_finder.application.filtering.base import (
    INCLUDE_ALL,
    AnyOfFilter,
    ItemFilter,
    MultiCheckerFilter,
    NotFilter,
    PredicateFilter,
    ProxyFilter,
    and_all,
    any_of,
)
from mp_finder.application.filtering.holders import ItemHolder
from mp_finder.application.filtering.paging import PagingFilter
from mp_finder.application.filtering.processor import FilterItemProcessor

__all__ = [
    "INCLUDE_ALL",
    "AnyOfFilter",
    "FilterItemProcessor",
    "ItemFilter",
    "ItemHolder",
    "MultiCheckerFilter",
    "NotFilter",
    "PagingFilter",
    "PredicateFilter",
    "ProxyFilter",
    "and_all",
    "any_of",
    "holders",
]
