"""Request-scoped string interning."""
from __future__ import annotations


class StringPool:
    """Return one shared instance per distinct string seen during a request."""

    def __init__(self) -> None:
        self._strings: dict[str, str] = {}

    def reuse(self, value: str | None) -> str | None:
        if value is None:
            return None
        return self._strings.setdefault(value, value)

    def __len__(self) -> int:
        return len(self._strings)


__all__ = ["StringPool"]
