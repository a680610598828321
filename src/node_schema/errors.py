"""Exceptions and inference diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NodeSchemaError(Exception):
    """Base class for node_schema errors."""


class TypeNotFoundError(NodeSchemaError, KeyError):
    """Raised when a type name is not present in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Type '{name}' not found")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class DateFormatError(NodeSchemaError, ValueError):
    """Raised when a date format string cannot be tokenized."""


class ConfigError(NodeSchemaError):
    """Raised when the site configuration cannot be loaded."""


class WarningKind(Enum):
    """Categories of non-fatal inference problems."""

    MISSING_TYPE = "missing_type"
    MISSING_NODE = "missing_node"
    FIELD_ERROR = "field_error"


@dataclass(frozen=True)
class InferenceWarning:
    """A non-fatal problem found while inferring one field."""

    selector: str
    message: str
    kind: WarningKind = WarningKind.MISSING_TYPE

    def __str__(self) -> str:
        return f"{self.selector}: {self.message}"
