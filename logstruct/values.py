"""Classification and normalisation of raw sample values."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable


class ValueKind(str, Enum):
    """The explicit cases a raw sample value can take."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"


def kind_of(value: Any) -> ValueKind:
    """Return the kind of a raw value."""

    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    return ValueKind.STRING


def flatten_values(values: Iterable[Any]) -> list[Any]:
    """Expand arrays (at any depth) into their elements and drop nulls."""

    flattened: list[Any] = []

    def _walk(value: Any) -> None:
        kind = kind_of(value)
        if kind is ValueKind.NULL:
            return
        if kind is ValueKind.ARRAY:
            for item in value:
                _walk(item)
            return
        flattened.append(value)

    for value in values:
        _walk(value)
    return flattened


def value_to_text(value: Any) -> str:
    """Render a scalar value the way it is matched and counted."""

    kind = kind_of(value)
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.STRING:
        return value if isinstance(value, str) else str(value)
    return str(value)


def is_scalar(value: Any) -> bool:
    return kind_of(value) not in {ValueKind.NULL, ValueKind.OBJECT, ValueKind.ARRAY}
