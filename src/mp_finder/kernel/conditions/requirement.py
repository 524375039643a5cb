"""Kernel conditions – RequirementType, the comparison operators of a condition."""
from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum

Matcher = Callable[[str | None, str | None], bool]


def _number(value: str | None) -> float:
    if value is None:
        raise ValueError("no value to compare")
    return float(value.strip())


def _exists(operand: str | None, actual: str | None) -> bool:  # noqa: ARG001
    return actual is not None


def _not_exists(operand: str | None, actual: str | None) -> bool:  # noqa: ARG001
    return actual is None


def _equals(operand: str | None, actual: str | None) -> bool:
    return actual == operand


def _contains(operand: str | None, actual: str | None) -> bool:
    return actual is not None and operand is not None and operand in actual


def _starts_with(operand: str | None, actual: str | None) -> bool:
    return actual is not None and operand is not None and actual.startswith(operand)


def _ends_with(operand: str | None, actual: str | None) -> bool:
    return actual is not None and operand is not None and actual.endswith(operand)


def _matches(operand: str | None, actual: str | None) -> bool:
    return actual is not None and operand is not None and re.fullmatch(operand, actual) is not None


class RequirementType(Enum):
    """Operator of a :class:`~mp_finder.kernel.conditions.ValueCondition`.

    Each member carries ``(name, parameter_required, actual_value_required,
    actual_value_can_be_empty, matcher)``; the matcher receives
    ``(operand, actual)``.
    """

    EXISTS = ("exists", False, True, True, _exists)
    NOT_EXISTS = ("not-exists", False, False, True, _not_exists)
    EQUALS = ("equals", True, True, True, _equals)
    DOES_NOT_EQUAL = ("does-not-equal", True, False, True, lambda o, a: not _equals(o, a))
    CONTAINS = ("contains", True, True, True, _contains)
    DOES_NOT_CONTAIN = ("does-not-contain", True, False, True, lambda o, a: not _contains(o, a))
    STARTS_WITH = ("starts-with", True, True, True, _starts_with)
    ENDS_WITH = ("ends-with", True, True, True, _ends_with)
    MATCHES = ("matches", True, True, True, _matches)
    DOES_NOT_MATCH = ("does-not-match", True, False, True, lambda o, a: not _matches(o, a))
    MORE_THAN = ("more-than", True, True, False, lambda o, a: _number(a) > _number(o))
    NO_MORE_THAN = ("no-more-than", True, True, False, lambda o, a: _number(a) <= _number(o))
    LESS_THAN = ("less-than", True, True, False, lambda o, a: _number(a) < _number(o))
    NO_LESS_THAN = ("no-less-than", True, True, False, lambda o, a: _number(a) >= _number(o))

    def __init__(
        self,
        type_name: str,
        parameter_required: bool,
        actual_value_required: bool,
        actual_value_can_be_empty: bool,
        matcher: Matcher,
    ) -> None:
        self.type_name = type_name
        self.parameter_required = parameter_required
        self.actual_value_required = actual_value_required
        self.actual_value_can_be_empty = actual_value_can_be_empty
        self._matcher = matcher

    def match_values(self, operand: str | None, actual: str | None) -> bool:
        return self._matcher(operand, actual)

    @classmethod
    def find_by_name(cls, name: str) -> "RequirementType | None":
        lowered = name.strip().lower()
        for member in cls:
            if member.type_name == lowered:
                return member
        return None

    @classmethod
    def names(cls) -> list[str]:
        return [member.type_name for member in cls]


__all__ = ["RequirementType"]
