"""Locator – a parsed, consumable locator query.

A :class:`Locator` is created once per incoming query string, read by one
resolution pass and then discarded. Every read through a ``get_*`` method
marks the dimension as consumed; :meth:`Locator.check_locator_fully_processed`
then reports dimensions nobody read, turning client typos into explicit
errors instead of silently ignored filters.

Example::

    locator = Locator("name:Frodo,age:14", "name", "age")
    locator.get_single_dimension_value("name")          # "Frodo"
    locator.get_single_dimension_value_as_long("age")   # 14
    locator.check_locator_fully_processed()
"""
from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from mp_finder.kernel.errors import LocatorProcessError, OperationError
from mp_finder.kernel.locator.grammar import (
    ANY_LITERAL,
    DIMENSIONS_DELIMITER,
    HELP_DIMENSION,
    NAME_VALUE_DELIMITER,
    SINGLE_VALUE_UNUSED_NAME,
    RawValue,
    has_dimensions,
    parse_dimensions,
    render_value,
    unescape_single_value,
)
from mp_finder.kernel.locator.pool import StringPool
from mp_finder.kernel.locator.values import (
    get_boolean_allowing_any,
    get_strict_boolean_or_error,
    parse_long,
)
from mp_finder.observability.logging import get_logger

if TYPE_CHECKING:
    from mp_finder.config.settings import FinderSettings

_log = get_logger(__name__)

DescriptionProvider = Callable[["Locator", bool], str]


@dataclasses.dataclass(frozen=True)
class LocatorOptions:
    """Parsing and reporting switches for a locator.

    ``extended`` allows value-less dimensions (``id,name,project(id)``) and
    ``-`` in dimension names. ``report_unused`` is one of ``error``, ``log``,
    ``log-warn`` or ``off``.
    """

    extended: bool = False
    allow_base64: bool = True
    report_unused: str = "error"

    @classmethod
    def from_settings(cls, settings: FinderSettings, *, extended: bool = False) -> "LocatorOptions":
        return cls(
            extended=extended,
            allow_base64=settings.allow_base64,
            report_unused=settings.report_unused_dimensions,
        )


def _format_names(names: Iterable[str]) -> str:
    return "[" + ", ".join(sorted(names)) + "]"


class Locator:
    """A single value or a set of named dimensions parsed from locator text.

    Args:
        text: The raw locator text; must not be empty.
        *supported: Dimension names the consumer knows. Names outside this set
            must be alpha-numeric and are reported as unknown when unused.
        options: Parsing/reporting switches.
        hidden: Names accepted but not advertised in descriptions.
        pool: Request-scoped :class:`StringPool` used to intern names.
    """

    def __init__(
        self,
        text: str | None,
        *supported: str,
        options: LocatorOptions | None = None,
        hidden: Iterable[str] = (),
        pool: StringPool | None = None,
    ) -> None:
        if not text:
            raise LocatorProcessError("Invalid locator. Cannot be empty.")
        self._options = options or LocatorOptions()
        self._pool = pool
        self._raw = self._reuse(text)
        self._modified = False
        self._supported: list[str] | None = list(supported) if supported else None
        self._used: set[str] = set()
        self._ignore_unused: set[str] = set()
        self._hidden: set[str] = set(hidden)
        self._description_provider: DescriptionProvider | None = None

        single = unescape_single_value(
            text, extended=self._options.extended, allow_base64=self._options.allow_base64
        )
        if single is not None:
            self._single_value: str | None = single
            self._dimensions: dict[str, list[RawValue]] = {}
        elif not self._options.extended and not has_dimensions(text):
            self._single_value = text
            self._dimensions = {}
        else:
            self._single_value = None
            self._hidden.add(HELP_DIMENSION)
            self._ignore_unused.add(HELP_DIMENSION)
            parsed = parse_dimensions(
                text,
                supported=self._supported,
                hidden=self._hidden,
                extended=self._options.extended,
                allow_base64=self._options.allow_base64,
            )
            self._dimensions = {self._reuse(name) or name: values for name, values in parsed.items()}

    # Construction helpers ---------------------------------------------
    @classmethod
    def empty(
        cls,
        *supported: str,
        options: LocatorOptions | None = None,
        pool: StringPool | None = None,
    ) -> "Locator":
        """Create a dimension-list locator without any dimensions."""
        result = cls.__new__(cls)
        result._options = options or LocatorOptions()
        result._pool = pool
        result._raw = ""
        result._modified = False
        result._supported = list(supported) if supported else None
        result._used = set()
        result._ignore_unused = {HELP_DIMENSION}
        result._hidden = {HELP_DIMENSION}
        result._description_provider = None
        result._single_value = None
        result._dimensions = {}
        return result

    @classmethod
    def create(
        cls,
        text: str | None,
        defaults: "Locator | None" = None,
        supported: Sequence[str] | None = None,
        *,
        options: LocatorOptions | None = None,
        pool: StringPool | None = None,
    ) -> "Locator":
        """Parse *text* and add every dimension of *defaults* it does not define.

        An absent *text* with *defaults* yields a locator built from the
        defaults alone. Defaults are never applied to a single-value locator.
        """
        names = tuple(supported or ())
        if text is not None or defaults is None:
            result = cls(text, *names, options=options, pool=pool)
        else:
            result = cls.empty(*names, options=options, pool=pool)

        if defaults is not None and not result.is_single_value():
            for name, values in defaults._dimensions.items():
                if not values:
                    continue
                result._set_dimension_if_not_present(name, list(values))
                if name in defaults._hidden:
                    result._hidden.add(name)
                if name in defaults._ignore_unused:
                    result._ignore_unused.add(name)
        return result

    @classmethod
    def of(cls, text: str | None) -> "Locator | None":
        return cls(text) if text is not None else None

    @classmethod
    def potentially_empty(cls, text: str | None) -> "Locator":
        return cls.empty() if not text else cls(text)

    @staticmethod
    def merge(main: str | None, defaults: str | None) -> str:
        """Return *main* with every dimension of *defaults* it does not define."""
        defaults_locator = Locator(defaults) if defaults is not None else None
        return Locator.create(main, defaults_locator).get_string_representation()

    def copy(self) -> "Locator":
        """Return an independent copy preserving the consumption state."""
        result = self.__class__.__new__(self.__class__)
        result._options = self._options
        result._pool = self._pool
        result._raw = self._raw
        result._modified = self._modified
        result._supported = list(self._supported) if self._supported is not None else None
        result._used = set(self._used)
        result._ignore_unused = set(self._ignore_unused)
        result._hidden = set(self._hidden)
        result._description_provider = self._description_provider
        result._single_value = self._single_value
        result._dimensions = {name: list(values) for name, values in self._dimensions.items()}
        return result

    def _reuse(self, value: str) -> str:
        if self._pool is None:
            return value
        return self._pool.reuse(value) or value

    # Declarations -----------------------------------------------------
    @property
    def options(self) -> LocatorOptions:
        return self._options

    @property
    def supported_dimensions(self) -> list[str]:
        return list(self._supported or ())

    def add_supported_dimensions(self, *names: str) -> None:
        if self._supported is None:
            self._supported = list(names)
        else:
            self._supported.extend(n for n in names if n not in self._supported)

    def add_ignore_unused_dimensions(self, *names: str) -> None:
        """Never report *names* as unused, e.g. paging dimensions consumed elsewhere."""
        self._ignore_unused.update(names)

    def add_hidden_dimensions(self, *names: str) -> None:
        """Accept *names* without advertising them in descriptions or reporting them as unused."""
        self._hidden.update(names)

    @property
    def hidden_dimensions(self) -> frozenset[str]:
        return frozenset(self._hidden)

    def set_description_provider(self, provider: DescriptionProvider) -> None:
        self._description_provider = provider

    # Single value -----------------------------------------------------
    def is_empty(self) -> bool:
        return self._single_value is None and not self._dimensions

    def is_single_value(self) -> bool:
        """``12345`` and ``bar`` are single values, ``foo:bar`` is not."""
        return self._single_value is not None

    def get_single_value(self) -> str | None:
        self.mark_used(SINGLE_VALUE_UNUSED_NAME)
        return self._single_value

    def lookup_single_value(self) -> str | None:
        return self._single_value

    def get_single_value_as_long(self) -> int | None:
        value = self.get_single_value()
        if value is None:
            return None
        return parse_long(value, "single value")

    # Dimensions -------------------------------------------------------
    def get_single_dimension_value(self, name: str) -> str | None:
        """Return the value of dimension *name* and mark it consumed.

        When the dimension is repeated the last value wins; ``$any`` and an
        absent dimension both return ``None``.
        """
        self.mark_used(name)
        return self.lookup_single_dimension_value(name)

    def lookup_single_dimension_value(self, name: str) -> str | None:
        values = self._dimensions.get(name)
        if not values:
            return None
        return values[-1]

    def get_single_dimension_value_as_long(self, name: str, default: int | None = None) -> int | None:
        self.mark_used(name)
        return self.lookup_single_dimension_value_as_long(name, default)

    def lookup_single_dimension_value_as_long(self, name: str, default: int | None = None) -> int | None:
        value = self.lookup_single_dimension_value(name)
        if value is None:
            return default
        return parse_long(value, f"value of dimension '{name}'")

    def get_single_dimension_value_as_boolean(self, name: str, default: bool | None = None) -> bool | None:
        """Return the boolean value of *name*, ``None`` for ``any``, *default* when absent."""
        self.mark_used(name)
        return self.lookup_single_dimension_value_as_boolean(name, default)

    def lookup_single_dimension_value_as_boolean(self, name: str, default: bool | None = None) -> bool | None:
        value = self.lookup_single_dimension_value(name)
        if value is None:
            return default
        try:
            return get_boolean_allowing_any(value)
        except LocatorProcessError as exc:
            raise LocatorProcessError(
                f"Invalid value of dimension '{name}': {exc.message}", cause=exc
            ) from exc

    def get_single_dimension_value_as_strict_boolean(self, name: str, default: bool | None = None) -> bool | None:
        value = self.get_single_dimension_value(name)
        if value is None:
            return default
        return get_strict_boolean_or_error(value)

    def get_nested(self, name: str) -> "Locator | None":
        """Return the value of *name* parsed as a locator (``foo:(bar:buz)`` gives ``bar:buz``)."""
        if self.is_empty():
            return None
        value = self.get_single_dimension_value(name)
        if value is None:
            return None
        if value == "":
            return Locator.empty(options=self._options, pool=self._pool)
        return Locator(value, options=self._options, pool=self._pool)

    def get_dimension_value(self, name: str) -> list[str]:
        """Return every value of *name* in text order and mark it consumed."""
        self.mark_used(name)
        return self.lookup_dimension_value(name)

    def lookup_dimension_value(self, name: str) -> list[str]:
        return [ANY_LITERAL if value is None else value for value in self._dimensions.get(name, ())]

    def is_any_present(self, *names: str) -> bool:
        return any(name in self._dimensions for name in names)

    def get_dimensions_count(self) -> int:
        return len(self._dimensions)

    @property
    def defined_dimensions(self) -> list[str]:
        return list(self._dimensions)

    # Mutation ---------------------------------------------------------
    def set_dimension(self, name: str, value: str | Sequence[str]) -> "Locator":
        """Replace all values of *name*. Only valid for dimension-list locators."""
        values = [value] if isinstance(value, str) else list(value)
        if self.is_single_value():
            raise OperationError(f"Attempt to set dimension '{name}' for single value locator.")
        self._dimensions[self._reuse(name)] = [None if v == ANY_LITERAL else v for v in values]
        self.mark_unused(name)
        self._modified = True
        return self

    def set_dimension_if_not_present(self, name: str, value: str | Sequence[str]) -> "Locator":
        if not self._dimensions.get(name):
            self.set_dimension(name, value)
        return self

    def _set_dimension_if_not_present(self, name: str, values: list[RawValue]) -> None:
        if not self._dimensions.get(name):
            self._dimensions[name] = values
            self.mark_unused(name)
            self._modified = True

    def remove_dimension(self, name: str) -> bool:
        if self.is_single_value():
            raise LocatorProcessError(f"Attempt to remove dimension '{name}' for single value locator.")
        present = self._dimensions.pop(name, None) is not None
        self._modified = True
        return present

    # Consumption tracking ---------------------------------------------
    def mark_used(self, *names: str) -> None:
        self._used.update(names)

    def mark_unused(self, *names: str) -> None:
        self._used.difference_update(names)

    def mark_all_unused(self) -> None:
        self._used.clear()

    def is_unused(self, name: str) -> bool:
        return name in self._dimensions and name not in self._used

    def get_used_dimensions(self) -> set[str]:
        return set(self._used)

    def get_unused_dimensions(self) -> set[str]:
        """Names never read and not declared ignorable."""
        if self.is_single_value():
            result = {SINGLE_VALUE_UNUSED_NAME}
        else:
            result = set(self._dimensions)
        return result - self._used - self._ignore_unused

    def check_locator_fully_processed(self) -> None:
        """Fail when a dimension present in the locator was neither consumed, ignorable nor hidden."""
        self.process_help_request()
        mode = self._options.report_unused
        if mode == "off":
            return
        unused = self.get_unused_dimensions() - self._hidden
        if not unused:
            return

        known = set(self._supported or ())
        ignored = unused & known if self._supported is not None else set()
        unknown = unused - ignored
        if not unknown and len(unused) == len(self._dimensions):
            message = "Unsupported locator: no dimensions are used, try another combination of the dimensions."
        elif len(unused) > 1:
            parts = []
            if ignored:
                parts.append(f"{_format_names(ignored)} {'is' if len(ignored) == 1 else 'are'} ignored")
            if unknown:
                parts.append(f"{_format_names(unknown)} {'is' if len(unknown) == 1 else 'are'} unknown")
            message = "Locator dimensions " + " and ".join(parts) + "."
        elif SINGLE_VALUE_UNUSED_NAME in unused:
            message = f"Single value locator '{self._single_value}' was ignored."
        elif self._supported is not None:
            state = "known but was ignored during processing. Try omitting the dimension." if ignored else "unknown."
            message = f"Locator dimension {_format_names(unused)} is {state}"
        else:
            message = f"Locator dimension {_format_names(unused)} is ignored or unknown."
        if self._supported:
            message = f"{message} {self.get_locator_description(False)}"

        if mode == "log-warn":
            _log.warning("locator.unused_dimensions", locator=str(self), dimensions=sorted(unused), message=message)
            return
        if mode == "log":
            _log.debug("locator.unused_dimensions", locator=str(self), dimensions=sorted(unused), message=message)
            return
        raise LocatorProcessError(message, dimensions=sorted(unused), detail={"locator": str(self)})

    # Help -------------------------------------------------------------
    def is_help_requested(self) -> bool:
        if self.is_single_value():
            return self._single_value == HELP_DIMENSION
        return self.get_single_dimension_value(HELP_DIMENSION) is not None

    def help_options(self) -> "Locator":
        return Locator.potentially_empty(self.get_single_dimension_value(HELP_DIMENSION))

    def process_help_request(self) -> None:
        if self.is_help_requested():
            include_hidden = bool(self.help_options().get_single_dimension_value_as_strict_boolean("hidden", False))
            raise LocatorProcessError("Locator help requested: " + self.get_locator_description(include_hidden))

    def get_locator_description(self, include_hidden: bool) -> str:
        if self._description_provider is not None:
            return self._description_provider(self, include_hidden)
        result = ""
        if self._supported is not None:
            visible = [name for name in self._supported if name not in self._hidden]
            result = "Supported dimensions are: [" + ", ".join(visible) + "]"
        if include_hidden and self._hidden:
            result += " Hidden supported are: [" + ", ".join(sorted(self._hidden)) + "]"
        return result

    # Rendering --------------------------------------------------------
    def get_string_representation(self) -> str:
        """Return the locator text; rebuilt in canonical (name-sorted) form once modified."""
        if self._single_value is not None:
            return render_value(self._single_value)
        if not self._modified:
            return self._raw
        parts = []
        for name in sorted(self._dimensions):
            for value in self._dimensions[name]:
                parts.append(f"{name}{NAME_VALUE_DELIMITER}{render_value(value)}")
        return DIMENSIONS_DELIMITER.join(parts)

    def __str__(self) -> str:
        return self.get_string_representation()

    def __repr__(self) -> str:
        return f"Locator({self.get_string_representation()!r})"


def get_string_locator(*pairs: str) -> str:
    """Build locator text from name/value pairs: ``("foo", "bar", "x", "y") -> "foo:bar,x:y"``."""
    if len(pairs) % 2 != 0:
        raise OperationError("The number of parameters should be even")
    result = Locator.empty()
    for index in range(0, len(pairs), 2):
        result.set_dimension(pairs[index], pairs[index + 1])
    return result.get_string_representation()


def set_dimension_if_not_present(text: str | None, name: str, value: str | None) -> str | None:
    """Return *text* with ``name:value`` added unless already defined.

    A single-value *text* is returned unchanged.
    """
    if value is None:
        return text
    if text is None:
        return get_string_locator(name, value)
    locator = Locator(text)
    if locator.is_single_value():
        return text
    return locator.set_dimension_if_not_present(name, value).get_string_representation()


def set_dimension(text: str | None, name: str, value: str | int) -> str:
    """Return *text* with every value of *name* replaced by *value*."""
    rendered = str(value)
    if text is None:
        return get_string_locator(name, rendered)
    locator = Locator(text)
    if locator.is_single_value():
        raise LocatorProcessError(f"Cannot replace locator values: single value locator '{text}'")
    return locator.set_dimension(name, rendered).get_string_representation()


__all__ = [
    "DescriptionProvider",
    "Locator",
    "LocatorOptions",
    "get_string_locator",
    "set_dimension",
    "set_dimension_if_not_present",
]
