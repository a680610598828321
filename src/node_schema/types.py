"""Type definitions for inferred node schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from node_schema.errors import TypeNotFoundError

if TYPE_CHECKING:
    from node_schema.context import ResolveInfo


# Resolver signature: (source record, field arguments, resolve info) -> value
Resolver = Callable[[Any, "dict[str, Any]", "ResolveInfo"], Any]


class ScalarType(Enum):
    """Built-in scalar types of the query schema."""

    BOOLEAN = "Boolean"
    STRING = "String"
    INT = "Int"
    FLOAT = "Float"


@dataclass
class TypeDefinition:
    """Base class for all type definitions."""

    name: str

    @property
    def is_scalar(self) -> bool:
        """Return whether this type is a scalar type."""
        return False

    @property
    def is_list(self) -> bool:
        """Return whether this type is a list type."""
        return False

    @property
    def is_object(self) -> bool:
        """Return whether this type is an output object type."""
        return False

    @property
    def is_input_object(self) -> bool:
        """Return whether this type is an input object type."""
        return False

    @property
    def is_enum(self) -> bool:
        """Return whether this type is an enum type."""
        return False

    def named_type(self) -> TypeDefinition:
        """Unwrap list and non-null wrappers to get the underlying named type."""
        return self


@dataclass
class ScalarTypeDefinition(TypeDefinition):
    """Type definition wrapping a scalar type."""

    scalar: ScalarType

    @property
    def is_scalar(self) -> bool:
        return True


@dataclass
class ListTypeDefinition(TypeDefinition):
    """Type definition for list types (e.g., [String])."""

    of_type: TypeDefinition

    @property
    def is_list(self) -> bool:
        return True

    def named_type(self) -> TypeDefinition:
        return self.of_type.named_type()


@dataclass
class NonNullTypeDefinition(TypeDefinition):
    """Type definition for non-null wrappers (e.g., [String]!)."""

    of_type: TypeDefinition

    @property
    def is_list(self) -> bool:
        return self.of_type.is_list

    def named_type(self) -> TypeDefinition:
        return self.of_type.named_type()


BOOLEAN = ScalarTypeDefinition(name=ScalarType.BOOLEAN.value, scalar=ScalarType.BOOLEAN)
STRING = ScalarTypeDefinition(name=ScalarType.STRING.value, scalar=ScalarType.STRING)
INT = ScalarTypeDefinition(name=ScalarType.INT.value, scalar=ScalarType.INT)
FLOAT = ScalarTypeDefinition(name=ScalarType.FLOAT.value, scalar=ScalarType.FLOAT)


def list_of(type_def: TypeDefinition) -> ListTypeDefinition:
    """Wrap a type in a list type."""
    return ListTypeDefinition(name=f"[{type_def.name}]", of_type=type_def)


def non_null(type_def: TypeDefinition) -> NonNullTypeDefinition:
    """Wrap a type in a non-null type."""
    return NonNullTypeDefinition(name=f"{type_def.name}!", of_type=type_def)


@dataclass
class ArgumentDefinition:
    """Definition of an argument accepted by an output field."""

    type_def: TypeDefinition
    description: str | None = None
    default_value: Any = None


@dataclass
class FieldDescriptor:
    """Inferred description of one output field.

    ``resolve`` is called at read time with the source record, the field
    arguments and a ``ResolveInfo``. When it is ``None`` the value is read
    straight from the source record.
    """

    type_def: TypeDefinition
    args: dict[str, ArgumentDefinition] = field(default_factory=dict)
    resolve: Resolver | None = None
    description: str | None = None


@dataclass
class ObjectTypeDefinition(TypeDefinition):
    """Type definition for output object types."""

    fields: dict[str, FieldDescriptor] = field(default_factory=dict)

    @property
    def is_object(self) -> bool:
        return True

    def get_field(self, name: str) -> FieldDescriptor | None:
        """Get a field by name."""
        return self.fields.get(name)


@dataclass
class InputFieldDefinition:
    """Definition of a field within an input object type."""

    type_def: TypeDefinition
    default_value: Any = None
    description: str | None = None


@dataclass
class InputObjectTypeDefinition(TypeDefinition):
    """Type definition for filter/query input object types."""

    fields: dict[str, InputFieldDefinition] = field(default_factory=dict)

    @property
    def is_input_object(self) -> bool:
        return True

    @property
    def operators(self) -> list[str]:
        """Names of the fields of this input type."""
        return list(self.fields)

    def get_field(self, name: str) -> InputFieldDefinition | None:
        """Get a field by name."""
        return self.fields.get(name)


@dataclass
class EnumValueDefinition:
    """A single value within an enum type."""

    name: str
    value: Any


@dataclass
class EnumTypeDefinition(TypeDefinition):
    """Enum type definition."""

    values: list[EnumValueDefinition] = field(default_factory=list)

    @property
    def is_enum(self) -> bool:
        return True

    @property
    def value_names(self) -> list[str]:
        return [v.name for v in self.values]

    def get_value(self, name: str) -> EnumValueDefinition | None:
        for v in self.values:
            if v.name == name:
                return v
        return None


@dataclass
class ProcessedNodeType:
    """A record type whose output object type has been built."""

    name: str
    node_object_type: ObjectTypeDefinition
    nodes: list[Any] = field(default_factory=list)


class TypeRegistry:
    """Registry of processed record types, keyed by type name."""

    def __init__(self) -> None:
        self._types: dict[str, ProcessedNodeType] = {}

    def register_stub(self, name: str, nodes: list[Any] | None = None) -> ProcessedNodeType:
        """Pre-register a type with an empty object type for self-references.

        Idempotent: returns the existing stub if name is still unpopulated.
        Raises ValueError if name is registered with a populated type.
        """
        if name in self._types:
            if self.is_stub(name):
                return self._types[name]
            raise ValueError(f"Type '{name}' is already defined")
        stub = ProcessedNodeType(
            name=name,
            node_object_type=ObjectTypeDefinition(name=name),
            nodes=list(nodes or []),
        )
        self._types[name] = stub
        return stub

    def is_stub(self, name: str) -> bool:
        """Check if a type is registered but has no fields yet."""
        processed = self._types.get(name)
        return processed is not None and not processed.node_object_type.fields

    def get(self, name: str) -> ProcessedNodeType | None:
        """Get a processed type by name."""
        return self._types.get(name)

    def get_or_raise(self, name: str) -> ProcessedNodeType:
        """Get a processed type by name, raising if not found."""
        processed = self._types.get(name)
        if processed is None:
            raise TypeNotFoundError(name)
        return processed

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return list(self._types.keys())
