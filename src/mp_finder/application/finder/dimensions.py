"""Application finder – dimension names shared by every finder."""
from __future__ import annotations

from typing import Final

from mp_finder.application.pagination.dimensions import COUNT, LOOKUP_LIMIT, START

ID: Final = "id"
LOGIC_OP_OR: Final = "or"
LOGIC_OP_AND: Final = "and"
LOGIC_OP_NOT: Final = "not"
ITEM: Final = "item"
UNIQUE: Final = "unique"
REPORT_ERROR_ON_NOTHING_FOUND: Final = "$reportErrorOnNothingFound"
CONTEXT_ITEM: Final = "$contextItem"

# ``count:-1`` lifts the default page size.
NO_COUNT: Final = -1

__all__ = [
    "CONTEXT_ITEM",
    "COUNT",
    "ID",
    "ITEM",
    "LOGIC_OP_AND",
    "LOGIC_OP_NOT",
    "LOGIC_OP_OR",
    "LOOKUP_LIMIT",
    "NO_COUNT",
    "REPORT_ERROR_ON_NOTHING_FOUND",
    "START",
    "UNIQUE",
]
