"""Query errors – problems with the caller's locator, surfaced to the client."""

from __future__ import annotations

from typing import Any

from mp_finder.kernel.errors.base import BaseError


class QueryError(BaseError):
    """The request cannot be served as written; the caller should fix it."""

    default_code = "query_error"
    status_code: int = 400


class BadRequestError(QueryError):
    """Generic malformed or unsupported request."""

    default_code = "bad_request"


class LocatorProcessError(BadRequestError):
    """The locator text could not be parsed or was not fully processed.

    When raised for a syntax problem ``locator`` and ``position`` point at the
    offending character; for unused dimensions ``dimensions`` names them.
    """

    default_code = "locator_error"

    def __init__(
        self,
        message: str,
        *,
        locator: str | None = None,
        position: int | None = None,
        dimensions: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        if locator is not None and position is not None:
            message = f"Bad locator syntax: {message}. Details: locator: '{locator}', at position {position}"
        super().__init__(message, **kwargs)
        self.locator = locator
        self.position = position
        self.dimensions: list[str] = dimensions or []
        if self.dimensions:
            self.detail.setdefault("dimensions", self.dimensions)
        if locator is not None:
            self.detail.setdefault("locator", locator)


class AmbiguousMatchError(BadRequestError):
    """A lookup expected to be unique matched several items."""

    default_code = "ambiguous_match"

    def __init__(self, message: str, *, matches: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.matches = matches


class NotFoundError(QueryError):
    """Nothing matched a single-item lookup."""

    default_code = "not_found"
    status_code = 404


__all__ = [
    "AmbiguousMatchError",
    "BadRequestError",
    "LocatorProcessError",
    "NotFoundError",
    "QueryError",
]
