"""Kernel conditions – ValueCondition, an operator plus an optional operand."""
from __future__ import annotations

import dataclasses

from mp_finder.kernel.errors import LocatorProcessError
from mp_finder.kernel.conditions.requirement import RequirementType
from mp_finder.kernel.locator import Locator, get_strict_boolean_or_error

VALUE = "value"
MATCH_TYPE = "matchType"
IGNORE_CASE = "ignoreCase"


def parse_requirement(name: str | None, default: RequirementType) -> RequirementType:
    """Resolve a ``matchType`` value, *default* when absent."""
    if name is None:
        return default
    requirement = RequirementType.find_by_name(name)
    if requirement is None:
        raise LocatorProcessError(
            f"Unsupported match type '{name}'. Supported are: " + ", ".join(RequirementType.names())
        )
    return requirement


@dataclasses.dataclass(frozen=True)
class ValueCondition:
    """Evaluate ``(requirement, value)`` against an actual string.

    Construction never fails; a condition missing a required operand simply
    matches nothing. Comparison errors such as a non-numeric operand for
    ``more-than`` are reported as "no match".
    """

    requirement: RequirementType
    value: str | None = None
    ignore_case: bool | None = None

    def matches(self, actual: str | None) -> bool:
        req = self.requirement
        if req.parameter_required and self.value is None:
            return False
        if req.actual_value_required and actual is None:
            return False
        if not req.actual_value_can_be_empty and (actual is None or actual == ""):
            return False
        operand = self.value
        if self.ignore_case:
            operand = operand.lower() if operand is not None else None
            actual = actual.lower() if actual is not None else None
        try:
            return req.match_values(operand, actual)
        except Exception:  # noqa: BLE001
            return False

    def constant_value_if_simple_equals(self) -> str | None:
        """Return the operand when the condition is a case-sensitive ``equals``."""
        if self.requirement is RequirementType.EQUALS and not self.ignore_case:
            return self.value
        return None

    @classmethod
    def parse(cls, text: str, *, default: RequirementType = RequirementType.EQUALS) -> "ValueCondition":
        """Build a condition from ``value:x,matchType:contains,ignoreCase:true``.

        A single-value locator is an ``equals`` condition on that value.
        """
        return cls.from_locator(Locator(text, VALUE, MATCH_TYPE, IGNORE_CASE), default=default)

    @classmethod
    def from_locator(
        cls, locator: Locator, *, default: RequirementType = RequirementType.EQUALS
    ) -> "ValueCondition":
        if locator.is_single_value():
            return cls(RequirementType.EQUALS, locator.get_single_value())
        value = locator.get_single_dimension_value(VALUE)
        requirement = parse_requirement(
            locator.get_single_dimension_value(MATCH_TYPE),
            default if value is not None else RequirementType.EXISTS,
        )
        if requirement.parameter_required and value is None:
            raise LocatorProcessError(
                f"Match type '{requirement.type_name}' requires dimension '{VALUE}' to be specified."
            )
        ignore_case_text = locator.get_single_dimension_value(IGNORE_CASE)
        ignore_case = get_strict_boolean_or_error(ignore_case_text) if ignore_case_text is not None else None
        locator.check_locator_fully_processed()
        return cls(requirement, value, ignore_case)

    def __str__(self) -> str:
        result = f"{self.requirement.type_name}"
        if self.value is not None:
            result += f" '{self.value}'"
        if self.ignore_case:
            result += " (ignore case)"
        return result


__all__ = ["IGNORE_CASE", "MATCH_TYPE", "VALUE", "ValueCondition", "parse_requirement"]
