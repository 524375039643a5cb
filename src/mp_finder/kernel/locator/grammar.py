"""Locator grammar – tokenising dimension lists and escaping values.

A locator is either a single value or a comma separated list of
``name:value`` dimensions. A value wrapped in ``(`` ``)`` may contain any
text with balanced parentheses, including nested locators::

    31
    name:Frodo,age:14
    text:(Freaking symbols:,name)
    buildType:(name:5,project:(id:Project_1))

Values that cannot be wrapped (unbalanced parentheses) are rendered as
``($base64:<url-safe base64>)``. A bare ``$any`` value means "dimension
present, no value".
"""
from __future__ import annotations

import base64
import binascii
from collections.abc import Collection

from mp_finder.kernel.errors import LocatorProcessError

NAME_VALUE_DELIMITER = ":"
DIMENSIONS_DELIMITER = ","
COMPLEX_VALUE_START = "("
COMPLEX_VALUE_END = ")"

BASE64_ESCAPE_DIMENSION = "$base64"
ANY_LITERAL = "$any"
HELP_DIMENSION = "$help"
SINGLE_VALUE_UNUSED_NAME = "$singleValue"

_DELIMITERS = (DIMENSIONS_DELIMITER, COMPLEX_VALUE_START, NAME_VALUE_DELIMITER)

# A parsed dimension value; ``None`` stands for an unescaped ``$any``.
RawValue = str | None


def has_dimensions(text: str) -> bool:
    if NAME_VALUE_DELIMITER in text:
        return True
    return COMPLEX_VALUE_START in text and COMPLEX_VALUE_END in text


def unescape_single_value(text: str, *, extended: bool = False, allow_base64: bool = True) -> str | None:
    """Return the single value carried by *text*, or ``None`` if it is not an escaped one.

    ``(a:b)`` is the single value ``a:b``; ``$base64:YTpi`` and ``($base64:YTpi)``
    are ``a:b`` as well.
    """
    if (
        len(text) > len(COMPLEX_VALUE_START) + len(COMPLEX_VALUE_END)
        and text.startswith(COMPLEX_VALUE_START)
        and text.endswith(COMPLEX_VALUE_END)
    ):
        inner = text[len(COMPLEX_VALUE_START):-len(COMPLEX_VALUE_END)]
        if allow_base64:
            decoded = decode_base64_value(inner, extended=extended)
            if decoded is not None:
                return decoded
        return inner
    if not allow_base64:
        return None
    return decode_base64_value(text, extended=extended)


def decode_base64_value(text: str, *, extended: bool = False) -> str | None:
    if not text.startswith(BASE64_ESCAPE_DIMENSION + NAME_VALUE_DELIMITER):
        return None
    try:
        parsed = parse_dimensions(
            text,
            supported=(BASE64_ESCAPE_DIMENSION,),
            hidden=(),
            extended=extended,
            allow_base64=False,
        )
    except LocatorProcessError:
        return None
    if len(parsed) != 1:
        return None

    values = parsed.get(BASE64_ESCAPE_DIMENSION) or []
    if not values:
        return None
    if len(values) != 1:
        raise LocatorProcessError(
            f"More then 1 {BASE64_ESCAPE_DIMENSION} values, only single one is supported"
        )
    encoded = values[0] or ""
    padded = (encoded + "=" * (-len(encoded) % 4)).encode("ascii", errors="replace")
    try:
        decoded = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as first:
        try:
            decoded = base64.b64decode(padded, validate=True)
        except (binascii.Error, ValueError):
            raise LocatorProcessError(
                f"Invalid Base64url character sequence: '{encoded}'", cause=first
            ) from first
    try:
        return decoded.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise LocatorProcessError(
            f"Error converting decoded '{encoded}' value bytes to UTF-8 string", cause=exc
        ) from exc


def is_valid_name(
    name: str,
    supported: Collection[str] | None,
    hidden: Collection[str],
    extended: bool,
) -> bool:
    if (supported is not None and name in supported) or name in hidden:
        return True
    return all(ch.isalnum() or (ch == "-" and extended) for ch in name)


def find_value_end(text: str, stop: str | None) -> int:
    """Scan *text* skipping ``(...)`` blocks.

    Returns the position of *stop* found outside parentheses, the position
    right after the closing ``)`` when *stop* is ``None``, or ``len(text)``.
    A negative result means the parentheses are not balanced.
    """
    pos = 0
    nesting = 0
    while pos < len(text):
        if text.startswith(COMPLEX_VALUE_START, pos):
            nesting += 1
            pos += len(COMPLEX_VALUE_START)
        elif text.startswith(COMPLEX_VALUE_END, pos):
            # out of order ")" is ignored
            if nesting > 0:
                nesting -= 1
            pos += len(COMPLEX_VALUE_END)
            if nesting == 0 and stop is None:
                return pos
        elif nesting == 0 and stop is not None and text.startswith(stop, pos):
            return pos
        else:
            pos += 1
    if nesting != 0:
        return -pos
    return pos


def parse_dimensions(
    text: str,
    *,
    supported: Collection[str] | None,
    hidden: Collection[str],
    extended: bool,
    allow_base64: bool = True,
) -> dict[str, list[RawValue]]:
    """Split a dimension-list locator into ``{name: [value, ...]}``.

    Repeated names keep every value in text order.
    """
    result: dict[str, list[RawValue]] = {}
    parsed = 0
    length = len(text)
    while parsed < length:
        name_end = length
        delimiter: str | None = None
        for index in range(parsed, length):
            if text[index] in _DELIMITERS:
                delimiter = text[index]
                name_end = index
                break

        if name_end == parsed:
            raise LocatorProcessError(
                f"Could not find dimension name, found '{delimiter}' instead",
                locator=text,
                position=parsed,
            )

        name = text[parsed:name_end]
        if not is_valid_name(name, supported, hidden, extended):
            known = "" if not supported else f" or be known one: [{', '.join(supported)}]"
            raise LocatorProcessError(
                f"Invalid dimension name :'{name}'. Should contain only alpha-numeric symbols{known}",
                locator=text,
                position=parsed,
            )

        value: RawValue = ""
        parsed = name_end
        if delimiter == DIMENSIONS_DELIMITER:
            parsed = name_end + len(DIMENSIONS_DELIMITER)
        elif delimiter is not None:
            if delimiter == NAME_VALUE_DELIMITER:
                parsed = name_end + len(NAME_VALUE_DELIMITER)
            rest = text[parsed:]
            if rest.startswith(COMPLEX_VALUE_START):
                end = find_value_end(rest, None)
                if end < 0:
                    raise LocatorProcessError(
                        f"Could not find matching '{COMPLEX_VALUE_END}'",
                        locator=text,
                        position=parsed + len(COMPLEX_VALUE_START),
                    )
                value = rest[len(COMPLEX_VALUE_START):end - len(COMPLEX_VALUE_END)]
                parsed += end
                if parsed != length:
                    if not text.startswith(DIMENSIONS_DELIMITER, parsed):
                        raise LocatorProcessError(
                            f"No dimensions delimiter '{DIMENSIONS_DELIMITER}' after complex value",
                            locator=text,
                            position=parsed,
                        )
                    parsed += len(DIMENSIONS_DELIMITER)
            else:
                end = find_value_end(rest, DIMENSIONS_DELIMITER)
                if end < 0:
                    raise LocatorProcessError(
                        f"Could not find matching '{COMPLEX_VALUE_END}'",
                        locator=text,
                        position=parsed,
                    )
                if end == len(rest):
                    value = rest
                    parsed = length
                else:
                    value = rest[:end]
                    parsed += end + len(DIMENSIONS_DELIMITER)
                if value == ANY_LITERAL:
                    value = None
            if value is not None and allow_base64:
                decoded = decode_base64_value(value, extended=extended)
                if decoded is not None:
                    value = decoded

        result.setdefault(name, []).append(value)
    return result


def _nesting(value: str) -> tuple[int, int, int]:
    """Return ``(min, max, final)`` parenthesis depth of *value*."""
    low = high = level = 0
    for ch in value:
        if ch == COMPLEX_VALUE_START:
            level += 1
            high = max(high, level)
        elif ch == COMPLEX_VALUE_END:
            level -= 1
            low = min(low, level)
    return low, high, level


def render_value(value: RawValue) -> str:
    """Escape *value* so that parsing the result yields *value* back."""
    if value is None:
        return ANY_LITERAL
    low, high, level = _nesting(value)
    if level != 0 or low < 0 or value.startswith(BASE64_ESCAPE_DIMENSION + NAME_VALUE_DELIMITER):
        encoded = base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")
        return f"{COMPLEX_VALUE_START}{BASE64_ESCAPE_DIMENSION}{NAME_VALUE_DELIMITER}{encoded}{COMPLEX_VALUE_END}"
    if (
        high > 0
        or DIMENSIONS_DELIMITER in value
        or NAME_VALUE_DELIMITER in value
        or value == ANY_LITERAL
    ):
        return f"{COMPLEX_VALUE_START}{value}{COMPLEX_VALUE_END}"
    return value


__all__ = [
    "ANY_LITERAL",
    "BASE64_ESCAPE_DIMENSION",
    "COMPLEX_VALUE_END",
    "COMPLEX_VALUE_START",
    "DIMENSIONS_DELIMITER",
    "HELP_DIMENSION",
    "NAME_VALUE_DELIMITER",
    "RawValue",
    "SINGLE_VALUE_UNUSED_NAME",
    "decode_base64_value",
    "find_value_end",
    "has_dimensions",
    "is_valid_name",
    "parse_dimensions",
    "render_value",
    "unescape_single_value",
]
