"""Kernel conditions – ParameterCondition, a named ValueCondition over a key/value map."""
from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping

from mp_finder.kernel.conditions.requirement import RequirementType
from mp_finder.kernel.conditions.value import MATCH_TYPE, VALUE, ValueCondition
from mp_finder.kernel.errors import LocatorProcessError
from mp_finder.kernel.locator import Locator

NAME = "name"

ParametersMatcher = Callable[[Mapping[str, str]], bool]


@dataclasses.dataclass(frozen=True)
class ParameterCondition:
    """Match a parameter map by parameter name and value.

    Locator form: ``name:<n>,value:<v>,matchType:<type>``. Without
    ``matchType`` the condition is ``contains`` when a value is given and
    ``exists`` otherwise. A single-value locator names the parameter.
    Without a name, the condition matches when any parameter value matches.
    """

    name: str | None
    condition: ValueCondition

    @classmethod
    def create(cls, text: str | None) -> "ParameterCondition | None":
        if text is None:
            return None
        locator = Locator(text, NAME, VALUE, MATCH_TYPE)
        if locator.is_single_value():
            return cls(locator.get_single_value(), ValueCondition(RequirementType.EXISTS))

        name = locator.get_single_dimension_value(NAME)
        value = locator.get_single_dimension_value(VALUE)
        requirement = RequirementType.CONTAINS if value is not None else RequirementType.EXISTS
        type_name = locator.get_single_dimension_value(MATCH_TYPE)
        if type_name is not None:
            found = RequirementType.find_by_name(type_name)
            if found is None:
                raise LocatorProcessError(
                    "Unsupported parameter match type. Supported are: " + ", ".join(RequirementType.names())
                )
            requirement = found
        if requirement.parameter_required and value is None:
            raise LocatorProcessError(
                f"Parameter match type '{requirement.type_name}' requires dimension '{VALUE}' to be specified."
            )
        locator.check_locator_fully_processed()
        return cls(name, ValueCondition(requirement, value))

    @classmethod
    def create_matcher(cls, texts: Iterable[str] | None) -> ParametersMatcher:
        """Combine several condition locators; a map must satisfy all of them."""
        conditions = [c for c in (cls.create(text) for text in texts or ()) if c is not None]
        return lambda parameters: all(c.matches(parameters) for c in conditions)

    def matches(self, parameters: Mapping[str, str]) -> bool:
        """Match a parameter map.

        A missing named parameter matches when the operand is the empty
        string; otherwise the condition is evaluated against ``None``.
        """
        if self.name:
            value = parameters.get(self.name)
            if value is None and self.condition.value == "":
                return True
            return self.condition.matches(value)
        return any(self.condition.matches(value) for value in parameters.values())

    def parameter_matches(self, name: str, value: str | None) -> bool:
        """Match a single ``name``/``value`` pair."""
        if self.name and self.name != name:
            return False
        return self.condition.matches(value)

    def matches_value(self, value: str | None) -> bool:
        return self.condition.matches(value)

    def __str__(self) -> str:
        result = f"Parameter condition (name:{self.name}, "
        if self.condition.value is not None:
            result += f"value:{self.condition.value}, "
        return result + f"matchType:{self.condition.requirement.type_name})"


__all__ = ["NAME", "ParameterCondition", "ParametersMatcher"]
