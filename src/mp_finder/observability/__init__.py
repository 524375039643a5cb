"""Observability – logging for finders and locators."""
from mp_finder.observability.logging import JsonLoggerFactory, get_logger

__all__ = ["JsonLoggerFactory", "get_logger"]
