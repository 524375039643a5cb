"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── QueryError               (query.py, caller must fix the request)
    │   ├── BadRequestError
    │   │   ├── LocatorProcessError
    │   │   └── AmbiguousMatchError
    │   └── NotFoundError
    └── OperationError           (operation.py, finder wiring defect)
"""

from mp_finder.kernel.errors.base import BaseError
from mp_finder.kernel.errors.operation import OperationError
from mp_finder.kernel.errors.query import (
    AmbiguousMatchError,
    BadRequestError,
    LocatorProcessError,
    NotFoundError,
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
