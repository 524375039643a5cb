"""Application pagination – paging dimension names and navigation links."""
from mp_finder.application.pagination.dimensions import COUNT, LOOKUP_LIMIT, START
from mp_finder.application.pagination.pager import PagerData, next_lookup_limit

__all__ = ["COUNT", "LOOKUP_LIMIT", "PagerData", "START", "next_lookup_limit"]
