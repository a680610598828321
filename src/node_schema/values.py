"""Classification of example values into the kinds the builders branch on."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Mapping

from node_schema.dates import is_date


class ValueKind(Enum):
    """Closed set of shapes an example value can take."""

    NULL = "null"
    BOOLEAN = "boolean"
    STRING = "string"
    DATE = "date"
    INTEGER = "integer"
    FLOAT = "float"
    LIST = "list"
    OBJECT = "object"
    UNKNOWN = "unknown"

    @property
    def is_scalar(self) -> bool:
        return self in _SCALAR_KINDS


_SCALAR_KINDS = frozenset(
    {ValueKind.BOOLEAN, ValueKind.STRING, ValueKind.DATE, ValueKind.INTEGER, ValueKind.FLOAT}
)


def classify_value(value: Any, detect_dates: bool = True) -> ValueKind:
    """Return the kind of value.

    Numbers are integers when ``value % 1 == 0``. The decision is made on this
    one value only, so a field can come out as Int or Float depending on
    which record supplied the example.
    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, str):
        if detect_dates and is_date(value):
            return ValueKind.DATE
        return ValueKind.STRING
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return ValueKind.FLOAT
        return ValueKind.INTEGER if value % 1 == 0 else ValueKind.FLOAT
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    if isinstance(value, Mapping):
        return ValueKind.OBJECT
    return ValueKind.UNKNOWN
