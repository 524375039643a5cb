"""Application finder – FinderContext, request-scoped state passed into resolution."""
from __future__ import annotations

import re
from types import TracebackType
from typing import Any

from mp_finder.kernel.errors import OperationError
from mp_finder.kernel.locator import StringPool

_VAR_NAME_RE = re.compile(r"[A-Za-z0-9_.\-]+")


class FinderContext:
    """Variables and a string pool for one request.

    The context is entered once per request and always left on exit;
    entering it again while active is a wiring defect.

    Example::

        with FinderContext() as ctx:
            ctx.set_var("builds", [build1, build2])
            finder.get_items("$contextItem:builds", context=ctx)
    """

    def __init__(self, variables: dict[str, Any] | None = None) -> None:
        self._vars: dict[str, Any] = {}
        self._pool = StringPool()
        self._active = False
        for name, value in (variables or {}).items():
            self.set_var(name, value)

    @property
    def pool(self) -> StringPool:
        return self._pool

    @property
    def active(self) -> bool:
        return self._active

    def activate(self) -> None:
        if self._active:
            raise OperationError("Finder context is already active, nested activation is not supported.")
        self._active = True

    def deactivate(self) -> None:
        self._active = False
        self._vars.clear()

    def __enter__(self) -> "FinderContext":
        self.activate()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.deactivate()

    def set_var(self, name: str, value: Any) -> None:
        if not _VAR_NAME_RE.fullmatch(name):
            raise OperationError(f"Invalid context variable name '{name}'.")
        self._vars[name] = value

    def get_var(self, name: str) -> Any:
        return self._vars.get(name)

    def var_names(self) -> list[str]:
        return sorted(self._vars)


__all__ = ["FinderContext"]
