"""Application finder – value types, parsers from a raw dimension value to a typed value."""
from __future__ import annotations

import dataclasses
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from mp_finder.kernel.conditions import ParameterCondition, ValueCondition
from mp_finder.kernel.errors import LocatorProcessError
from mp_finder.kernel.locator import HELP_DIMENSION, Locator, get_boolean_allowing_any
from mp_finder.kernel.locator.values import parse_long

if TYPE_CHECKING:
    from mp_finder.application.filtering import ItemFilter
    from mp_finder.application.finder.finder import Finder

V = TypeVar("V")
E = TypeVar("E", bound=Enum)
F = TypeVar("F")

SET_ITEM = "item"


@dataclasses.dataclass(frozen=True)
class ValueType(Generic[V]):
    """Parser of a raw dimension value; a parsed ``None`` means "do not filter"."""

    parse: Callable[[str], V | None]
    description: str | None = None


def process_help_request(value: str, description: str) -> None:
    if value == HELP_DIMENSION:
        raise LocatorProcessError(f"Locator help requested: {description}")


def string_type() -> ValueType[str]:
    return ValueType(lambda value: value, "text")


def long_type() -> ValueType[int]:
    return ValueType(lambda value: parse_long(value, "value"), "number")


def boolean_type() -> ValueType[bool]:
    return ValueType(get_boolean_allowing_any, "boolean")


def _enum_names(enum_cls: type[Enum]) -> list[str]:
    return [member.name.lower() for member in enum_cls]


def enum_value(value: str, enum_cls: type[E]) -> E:
    for member in enum_cls:
        if member.name.lower() == value.lower():
            return member
    raise LocatorProcessError(f"Unsupported value '{value}'. Supported values are: [{', '.join(_enum_names(enum_cls))}]")


def enum_type(enum_cls: type[E]) -> ValueType[E]:
    names = ", ".join(_enum_names(enum_cls))

    def parse(value: str) -> E:
        process_help_request(value, f"Supported values are: [{names}]")
        return enum_value(value, enum_cls)

    return ValueType(parse, f"one of [{names}]")


def set_values(value: str, description: str, convert: Callable[[str], V]) -> frozenset[V]:
    """Parse ``a`` or ``item:a,item:b`` into a set of converted values."""
    process_help_request(
        value, f'One value or multiple comma-separated "{SET_ITEM}:<value>" of supported values: {description}'
    )
    if "," not in value:
        return frozenset({convert(value)})
    result = set()
    for part in value.split(","):
        locator = Locator(part, SET_ITEM)
        item = locator.get_single_dimension_value(SET_ITEM)
        if item is None:
            raise LocatorProcessError(f'Unknown value "{part}": should be single value or contain "{SET_ITEM}" dimensions')
        result.add(convert(item))
        locator.check_locator_fully_processed()
    return frozenset(result)


def set_of_type(description: str, convert: Callable[[str], V]) -> ValueType[frozenset[V]]:
    return ValueType(lambda value: set_values(value, description, convert), f"one or more of {description}")


def enums_type(enum_cls: type[E]) -> ValueType[frozenset[E]]:
    names = f"[{', '.join(_enum_names(enum_cls))}]"
    return set_of_type(names, lambda value: enum_value(value, enum_cls))


def fixed_text_type(*values: str) -> ValueType[str]:
    lowered = {value.lower() for value in values}
    supported = ", ".join(values)

    def parse(value: str) -> str:
        if value.lower() in lowered:
            return value
        raise LocatorProcessError(f"Unsupported value '{value}'. Supported values are: {supported}")

    return ValueType(parse, f"one of {supported}")


def value_condition_type() -> ValueType[ValueCondition]:
    return ValueType(ValueCondition.parse, "value condition")


def parameter_condition_type() -> ValueType[ParameterCondition]:
    return ValueType(ParameterCondition.create, "parameter condition")


def locator_type(*supported: str) -> ValueType[Locator]:
    """Nested locator, e.g. ``project:(name:Core,archived:false)``."""
    return ValueType(lambda value: Locator(value, *supported), "locator")


def finder_items_type(finder: Finder[F], description: str) -> ValueType[list[F]]:
    """Resolve the value with another finder; an empty result is an error."""

    def parse(value: str) -> list[F]:
        items = finder.get_items(value).items
        if not items:
            raise LocatorProcessError(f"Nothing found by locator '{value}'")
        return items

    return ValueType(parse, description)


def finder_filter_type(finder: Finder[F], description: str) -> ValueType[ItemFilter[F]]:
    return ValueType(finder.get_filter, description)


def boolean_matches(value: bool | None, actual: Any) -> bool:
    """``None`` (``any``) matches everything."""
    return value is None or value == actual


__all__ = [
    "ValueType",
    "boolean_matches",
    "boolean_type",
    "enum_type",
    "enum_value",
    "enums_type",
    "finder_filter_type",
    "finder_items_type",
    "fixed_text_type",
    "locator_type",
    "long_type",
    "parameter_condition_type",
    "process_help_request",
    "set_of_type",
    "set_values",
    "string_type",
    "value_condition_type",
]
