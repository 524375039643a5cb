"""Kernel conditions – typed leaf predicates parsed from locator values."""
from mp_finder.kernel.conditions.parameter import ParameterCondition, ParametersMatcher
from mp_finder.kernel.conditions.requirement import RequirementType
from mp_finder.kernel.conditions.value import ValueCondition, parse_requirement

__all__ = [
    "ParameterCondition",
    "ParametersMatcher",
    "RequirementType",
    "ValueCondition",
    "parse_requirement",
]
