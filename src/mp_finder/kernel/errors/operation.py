"""Internal-consistency errors – defects in finder wiring, never retried."""

from __future__ import annotations

from mp_finder.kernel.errors.base import BaseError


class OperationError(BaseError):
    """A finder was wired or used in a way its contract forbids."""

    default_code = "operation_error"
    status_code: int = 500


__all__ = ["OperationError"]
