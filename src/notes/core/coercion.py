"""Type coercion for entity attributes.

Raw values arrive as whatever the storage driver or request parser produced,
usually strings. When an attribute has a declared type, :func:`coerce`
normalizes the value at ``set`` time so comparisons and serialization see
canonical Python types.

Manifesto:
    Coercion is a closed table, not a generic cast. Each declared type maps
    to one function; a value that does not fit raises instead of quietly
    turning into a zero, an empty string or ``False``.

    - **Explicit untyped marker:** ``AttributeType.ANY`` passes values through
    - **None is never coerced:** clearing an attribute stays distinguishable
      from writing a wrong-typed zero value
    - **Fail loudly:** :class:`~notes.core.errors.TypeCoercionError` carries
      the attribute, declared type and raw value

Architecture:
    ::

        AttributeType      coercer          accepts
        ─────────────      ───────          ───────
        ANY                passthrough      anything
        INTEGER            _to_integer      integral numbers (Decimal too), "42"
        STRING             _to_string       str, bytes (utf-8), any number
        BOOLEAN            _to_boolean      bool, 0/1, "true"/"false"/...
        FLOAT              _to_float        real numbers, Decimal, "1.5"
        DATETIME           _to_datetime     datetime, epoch seconds, ISO 8601

Examples:
    >>> coerce(AttributeType.INTEGER, "4", attribute="identifier")
    4
    >>> coerce(AttributeType.BOOLEAN, "off", attribute="favorite")
    False
    >>> coerce(AttributeType.INTEGER, None, attribute="identifier") is None
    True

Tags:
    coercion, types, entity, validation, notes-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import numbers
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from notes.core.errors import InvalidTypeDeclarationError, TypeCoercionError


class AttributeType(str, Enum):
    """Declared scalar type of an entity attribute."""

    ANY = "any"
    INTEGER = "integer"
    STRING = "string"
    BOOLEAN = "boolean"
    FLOAT = "float"
    DATETIME = "datetime"


# Short spellings accepted by resolve_type(), as found in settype()-style
# declarations.
_ALIASES: dict[str, AttributeType] = {
    "int": AttributeType.INTEGER,
    "str": AttributeType.STRING,
    "bool": AttributeType.BOOLEAN,
    "double": AttributeType.FLOAT,
}

_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "no", "n", "off", ""})


def resolve_type(declared: AttributeType | str | None, attribute: str = "") -> AttributeType:
    """Turn a type tag into an :class:`AttributeType`.

    ``None`` means "no declared type" and resolves to ``AttributeType.ANY``.
    Unknown tags raise :class:`InvalidTypeDeclarationError`.
    """
    if declared is None:
        return AttributeType.ANY
    if isinstance(declared, AttributeType):
        return declared
    if isinstance(declared, str):
        tag = declared.strip().lower()
        if tag in _ALIASES:
            return _ALIASES[tag]
        try:
            return AttributeType(tag)
        except ValueError:
            pass
    raise InvalidTypeDeclarationError(attribute, declared)


def _passthrough(value: Any) -> Any:
    return value


def _numeral(value: str | bytes) -> str:
    """Stripped text of *value*, if it is spelled with plain ASCII digits."""
    if isinstance(value, bytes):
        value = value.decode("ascii")
    text = value.strip()
    if not text.isascii() or "_" in text:
        raise ValueError("not a plain ASCII numeral")
    return text


def _to_integer(value: Any) -> int:
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, (numbers.Real, Decimal)):
        integral = int(value)
        if integral != value:
            raise ValueError("number has a fractional part")
        return integral
    if isinstance(value, (str, bytes)):
        return int(_numeral(value))
    raise TypeError(f"unsupported type {type(value).__name__}")


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, numbers.Number):
        return str(value)
    raise TypeError(f"unsupported type {type(value).__name__}")


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, numbers.Integral) and value in (0, 1):
        return bool(value)
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError("unrecognized boolean literal")
    raise TypeError(f"unsupported type {type(value).__name__}")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("refusing to read a boolean as a float")
    if isinstance(value, (numbers.Real, Decimal)):
        return float(value)
    if isinstance(value, (str, bytes)):
        return float(_numeral(value))
    raise TypeError(f"unsupported type {type(value).__name__}")


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        raise TypeError("refusing to read a boolean as a timestamp")
    if isinstance(value, (numbers.Real, Decimal)):
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise TypeError(f"unsupported type {type(value).__name__}")


COERCERS: dict[AttributeType, Callable[[Any], Any]] = {
    AttributeType.ANY: _passthrough,
    AttributeType.INTEGER: _to_integer,
    AttributeType.STRING: _to_string,
    AttributeType.BOOLEAN: _to_boolean,
    AttributeType.FLOAT: _to_float,
    AttributeType.DATETIME: _to_datetime,
}


def coerce(declared: AttributeType, value: Any, *, attribute: str) -> Any:
    """Coerce *value* to *declared*, leaving ``None`` untouched.

    Raises:
        TypeCoercionError: *value* cannot be represented as *declared*.
    """
    if value is None:
        return None
    try:
        return COERCERS[declared](value)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise TypeCoercionError(attribute, declared.value, value, cause=e) from e


__all__ = [
    "AttributeType",
    "COERCERS",
    "coerce",
    "resolve_type",
]
