"""Application pagination – PagerData, next/previous links for a paged result."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from mp_finder.application.pagination.dimensions import COUNT, LOOKUP_LIMIT, START
from mp_finder.kernel.errors import OperationError
from mp_finder.kernel.locator import set_dimension

if TYPE_CHECKING:
    from mp_finder.application.finder.result import PagedSearchResult
    from mp_finder.config.settings import FinderSettings

_SAFE = ":,()$/"


def next_lookup_limit(current: int, multiplier: float = 2.0, max_step: int = 5000) -> int:
    """Grow *current* by *multiplier*, by at most *max_step* and at least one."""
    step = round(current * multiplier) - current
    if step > max_step:
        return current + max_step if max_step >= 1 else current + 1
    if current < 1 or step < 1:
        return current + 1
    return current + step


class _Href:
    """Mutable query of one link, parameters kept in their original order."""

    def __init__(self, href: str, locator_text: str | None) -> None:
        parts = urlsplit(href)
        self._parts = parts
        self.params: list[tuple[str, str]] = [
            (unquote(name), unquote(value))
            for name, _, value in (p.partition("=") for p in parts.query.split("&") if p)
        ]
        self.locator_text = locator_text

    def replace(self, name: str, value: Any) -> "_Href":
        """Replace the first *name* parameter (dropping repeats), appending it when absent; ``None`` removes it."""
        result: list[tuple[str, str]] = []
        replaced = False
        for key, current in self.params:
            if key != name:
                result.append((key, current))
            elif not replaced and value is not None:
                result.append((key, str(value)))
                replaced = True
        if not replaced and value is not None:
            result.append((name, str(value)))
        self.params = result
        return self

    def render(self, context_path: str | None = None) -> str:
        path = self._parts.path
        if context_path and path.startswith(context_path):
            path = path[len(context_path):]
        query = "&".join(f"{quote(k, safe=_SAFE)}={quote(v, safe=_SAFE)}" for k, v in self.params)
        return urlunsplit(("", "", path, query, self._parts.fragment))


class PagerData:
    """Links for navigating a page of ``[start, start + count)`` items.

    Args:
        href: The link of the current page (path plus query).
        start: Echoed start of the current page.
        count: Echoed page size; ``None`` for an unbounded page.
        actual_count: Number of items actually served on this page.
        lookup_limit: Scan budget used for the page.
        lookup_limit_reached: Whether the scan stopped on the budget.
        locator_text: Current locator; required with *locator_param*.
        locator_param: When set, start/count are written into this locator
            query parameter instead of top-level ``start``/``count``.
        context_path: Prefix stripped from the rendered links.
        settings: Growth policy for the lookupLimit of the next link.

    Example::

        pager = PagerData("/x", start=3, count=2, actual_count=2)
        pager.next_href   # "/x?start=5&count=2"
        pager.prev_href   # "/x?start=1&count=2"
    """

    def __init__(
        self,
        href: str,
        start: int | None,
        count: int | None,
        actual_count: int,
        lookup_limit: int | None = None,
        lookup_limit_reached: bool = False,
        locator_text: str | None = None,
        locator_param: str | None = None,
        *,
        context_path: str | None = None,
        settings: FinderSettings | None = None,
    ) -> None:
        self._base = href
        self._locator_text = locator_text
        self._locator_param = locator_param
        self.href = _Href(href, locator_text).render(context_path)

        next_link: _Href | None
        prev_link: _Href | None
        if not start:
            prev_link = None
            next_link = None if count is None or actual_count < count else self._modified(count, count)
        elif count is None:
            next_link = None
            prev_link = self._modified(0, start)
        else:
            next_link = None if actual_count < count else self._modified(start + count, count)
            if start - count < 0:
                prev_link = self._modified(0, start)
            else:
                prev_link = self._modified(start - count, count)

        if lookup_limit is not None and lookup_limit_reached:
            multiplier = settings.next_lookup_limit_multiplier if settings else 2.0
            max_step = settings.next_lookup_limit_max_step if settings else 5000
            next_link = self._grow_lookup_limit(
                start, count, lookup_limit, actual_count, next_lookup_limit(lookup_limit, multiplier, max_step)
            )

        self.next_href: str | None = next_link.render(context_path) if next_link is not None else None
        self.prev_href: str | None = prev_link.render(context_path) if prev_link is not None else None

    @classmethod
    def from_result(
        cls,
        href: str,
        result: PagedSearchResult[Any],
        *,
        locator_text: str | None = None,
        locator_param: str | None = None,
        context_path: str | None = None,
        settings: FinderSettings | None = None,
    ) -> "PagerData":
        return cls(
            href,
            result.start,
            result.count,
            result.actual_count,
            result.lookup_limit,
            result.lookup_limit_reached,
            locator_text,
            locator_param,
            context_path=context_path,
            settings=settings,
        )

    def _modified(self, start: int, count: int | None) -> _Href:
        link = _Href(self._base, self._locator_text)
        if not self._locator_param:
            link.replace(START, start)
            if count is not None:
                link.replace(COUNT, count)
            return link
        link.replace(START, None).replace(COUNT, None)
        text = set_dimension(self._locator_text, START, start)
        if count is not None:
            text = set_dimension(text, COUNT, count)
        link.locator_text = text
        link.replace(self._locator_param, text)
        return link

    def _grow_lookup_limit(
        self, start: int | None, count: int | None, lookup_limit: int, actual_count: int, new_limit: int
    ) -> _Href:
        if not self._locator_param:
            raise OperationError("lookupLimit is reached while no locator parameter name is specified.")
        if actual_count == 0:
            link = _Href(self._base, self._locator_text)
        else:
            link = self._modified((start or 0) + actual_count, count)
        text = set_dimension(link.locator_text, LOOKUP_LIMIT, new_limit)
        link.locator_text = text
        return link.replace(self._locator_param, text)

    def __repr__(self) -> str:
        return f"PagerData(href={self.href!r}, next={self.next_href!r}, prev={self.prev_href!r})"


__all__ = ["PagerData", "next_lookup_limit"]
