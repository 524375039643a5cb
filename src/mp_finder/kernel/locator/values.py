"""Locator value helpers – boolean coercion and the ``$any`` literal."""
from __future__ import annotations

import re

from mp_finder.kernel.errors import LocatorProcessError
from mp_finder.kernel.locator.grammar import ANY_LITERAL

BOOLEAN_TRUE = "true"
BOOLEAN_FALSE = "false"
BOOLEAN_ANY = "any"

_TRUE_VALUES = frozenset({BOOLEAN_TRUE, "on", "yes", "in"})
_FALSE_VALUES = frozenset({BOOLEAN_FALSE, "off", "no", "out"})
_LONG_RE = re.compile(r"[+-]?\d+")


def is_any(value: str | None) -> bool:
    return value == ANY_LITERAL


def get_strict_boolean(value: str | None) -> bool | None:
    """Return ``True``/``False`` for recognised spellings, ``None`` otherwise ("any" included)."""
    if value is None:
        return None
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def get_boolean_allowing_any(value: str | None) -> bool | None:
    """Like :func:`get_strict_boolean` but ``any``/``all``/``$any`` mean "do not filter"."""
    if value is None or value.lower() in ("all", BOOLEAN_ANY) or is_any(value):
        return None
    result = get_strict_boolean(value)
    if result is not None:
        return result
    raise LocatorProcessError(f"Invalid boolean value '{value}'. Should be 'true', 'false' or 'any'.")


def get_strict_boolean_or_error(value: str) -> bool:
    result = get_strict_boolean(value)
    if result is not None:
        return result
    raise LocatorProcessError(f"Invalid strict boolean value '{value}'. Should be 'true' or 'false'.")


def parse_long(value: str, what: str) -> int:
    if not _LONG_RE.fullmatch(value):
        raise LocatorProcessError(f"Invalid {what}: '{value}'. Should be a number.")
    return int(value)


__all__ = [
    "BOOLEAN_ANY",
    "BOOLEAN_FALSE",
    "BOOLEAN_TRUE",
    "get_boolean_allowing_any",
    "get_strict_boolean",
    "get_strict_boolean_or_error",
    "is_any",
    "parse_long",
]
