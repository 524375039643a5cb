"""Kernel locator – the compact query language resolved by finders."""
from mp_finder.kernel.locator.grammar import (
    ANY_LITERAL,
    BASE64_ESCAPE_DIMENSION,
    HELP_DIMENSION,
    SINGLE_VALUE_UNUSED_NAME,
    render_value,
)
from mp_finder.kernel.locator.locator import (
    DescriptionProvider,
    Locator,
    LocatorOptions,
    get_string_locator,
    set_dimension,
    set_dimension_if_not_present,
)
from mp_finder.kernel.locator.pool import StringPool
from mp_finder.kernel.locator.values import (
    get_boolean_allowing_any,
    get_strict_boolean,
    get_strict_boolean_or_error,
    is_any,
)

__all__ = [
    "ANY_LITERAL",
    "BASE64_ESCAPE_DIMENSION",
    "DescriptionProvider",
    "HELP_DIMENSION",
    "Locator",
    "LocatorOptions",
    "SINGLE_VALUE_UNUSED_NAME",
    "StringPool",
    "get_boolean_allowing_any",
    "get_strict_boolean",
    "get_strict_boolean_or_error",
    "get_string_locator",
    "is_any",
    "render_value",
    "set_dimension",
    "set_dimension_if_not_present",
]
