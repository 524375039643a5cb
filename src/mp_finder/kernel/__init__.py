"""Kernel – locator language, condition descriptors and the error hierarchy."""

from mp_finder.kernel.errors import (
    AmbiguousMatchError,
    BadRequestError,
    BaseError,
    LocatorProcessError,
    NotFoundError,
    OperationError,
    QueryError,
)

__all__ = [
    "AmbiguousMatchError",
    "BadRequestError",
    "BaseError",
    "LocatorProcessError",
    "NotFoundError",
    "OperationError",
    "QueryError",
]
