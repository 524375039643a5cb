"""Application pagination – well-known paging dimension names."""
from __future__ import annotations

from typing import Final

START: Final = "start"
COUNT: Final = "count"
LOOKUP_LIMIT: Final = "lookupLimit"

__all__ = ["COUNT", "LOOKUP_LIMIT", "START"]
