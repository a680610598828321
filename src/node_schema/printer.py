"""Render inferred types as schema definition language text."""

from __future__ import annotations

import json
from typing import Any, Iterable

from node_schema.types import (
    EnumTypeDefinition,
    FieldDescriptor,
    InputFieldDefinition,
    InputObjectTypeDefinition,
    ListTypeDefinition,
    NonNullTypeDefinition,
    ObjectTypeDefinition,
    TypeDefinition,
)


def type_reference(type_def: TypeDefinition) -> str:
    """Return the reference form of a type, e.g. ``[String]!``."""
    if isinstance(type_def, NonNullTypeDefinition):
        return f"{type_reference(type_def.of_type)}!"
    if isinstance(type_def, ListTypeDefinition):
        return f"[{type_reference(type_def.of_type)}]"
    return type_def.name


def _child_types(type_def: TypeDefinition) -> list[TypeDefinition]:
    if isinstance(type_def, ObjectTypeDefinition):
        children = []
        for f in type_def.fields.values():
            children.append(f.type_def)
            children.extend(a.type_def for a in f.args.values())
        return children
    if isinstance(type_def, InputObjectTypeDefinition):
        return [f.type_def for f in type_def.fields.values()]
    return []


def collect_types(roots: Iterable[TypeDefinition]) -> list[TypeDefinition]:
    """Collect every object, input and enum type reachable from roots.

    Types are returned in the order they are first reached; scalars are
    skipped and each name appears once.
    """
    seen: set[str] = set()
    ordered: list[TypeDefinition] = []
    stack = list(roots)[::-1]
    while stack:
        named = stack.pop().named_type()
        if named.is_scalar or named.name in seen:
            continue
        seen.add(named.name)
        ordered.append(named)
        stack.extend(reversed(_child_types(named)))
    return ordered


def _format_default(value: Any, type_def: TypeDefinition) -> str:
    named = type_def.named_type()
    if isinstance(named, EnumTypeDefinition):
        for v in named.values:
            if v.value == value:
                return v.name
    return json.dumps(value)


def _print_output_field(name: str, field: FieldDescriptor) -> str:
    args = ""
    if field.args:
        rendered = [f"{arg_name}: {type_reference(arg.type_def)}" for arg_name, arg in field.args.items()]
        args = f"({', '.join(rendered)})"
    return f"  {name}{args}: {type_reference(field.type_def)}"


def _print_input_field(name: str, field: InputFieldDefinition) -> str:
    line = f"  {name}: {type_reference(field.type_def)}"
    if field.default_value is not None:
        line += f" = {_format_default(field.default_value, field.type_def)}"
    return line


def print_type(type_def: TypeDefinition) -> str:
    """Render one named type."""
    if isinstance(type_def, ObjectTypeDefinition):
        lines = [_print_output_field(n, f) for n, f in type_def.fields.items()]
        keyword = "type"
    elif isinstance(type_def, InputObjectTypeDefinition):
        lines = [_print_input_field(n, f) for n, f in type_def.fields.items()]
        keyword = "input"
    elif isinstance(type_def, EnumTypeDefinition):
        lines = [f"  {v.name}" for v in type_def.values]
        keyword = "enum"
    else:
        return f"scalar {type_def.name}"
    return "\n".join([f"{keyword} {type_def.name} {{", *lines, "}"])


def print_types(roots: Iterable[TypeDefinition]) -> str:
    """Render roots and every type they reference."""
    return "\n\n".join(print_type(t) for t in collect_types(roots))
