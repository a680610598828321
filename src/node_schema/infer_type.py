"""Inference of output object types from example values."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from node_schema.context import InferenceContext
from node_schema.errors import WarningKind
from node_schema.examples import extract_field_examples
from node_schema.relationships import (
    clean_field_key,
    infer_from_field_name,
    infer_from_mapping,
    infer_from_uri,
    is_node_link_key,
    should_infer_file,
)
from node_schema.resolvers import FILE_TYPE_NAME, DateResolver
from node_schema.types import (
    BOOLEAN,
    FLOAT,
    INT,
    STRING,
    ArgumentDefinition,
    FieldDescriptor,
    ObjectTypeDefinition,
    ProcessedNodeType,
    TypeDefinition,
    list_of,
)
from node_schema.values import ValueKind, classify_value

logger = logging.getLogger(__name__)

# Fields common to the top level of all nodes; they are added elsewhere
EXCLUDE_KEYS = frozenset({"type", "id", "parent", "children"})

_SCALAR_TYPES: dict[ValueKind, TypeDefinition] = {
    ValueKind.BOOLEAN: BOOLEAN,
    ValueKind.STRING: STRING,
    ValueKind.INTEGER: INT,
    ValueKind.FLOAT: FLOAT,
}


def _date_args() -> dict[str, ArgumentDefinition]:
    return {
        "formatString": ArgumentDefinition(
            type_def=STRING,
            description="Format the date using moment-style tokens, e.g. \"YYYY-MM-DD\"",
        ),
        "fromNow": ArgumentDefinition(
            type_def=BOOLEAN,
            description="Returns a string describing the date relative to now, e.g. \"3 days ago\"",
        ),
        "difference": ArgumentDefinition(
            type_def=STRING,
            description=(
                "Returns the difference between this date and the current time. "
                "Defaults to milliseconds but you can also pass in as the measurement "
                "years, months, weeks, days, hours, minutes, and seconds."
            ),
        ),
    }


def node_type_name(nodes: Sequence[Mapping[str, Any]]) -> str:
    """Return the record type shared by nodes."""
    if not nodes:
        return ""
    return str(nodes[0].get("type") or "")


def _infer_object_type(
    value: Mapping[str, Any],
    selector: str,
    nodes: Sequence[Mapping[str, Any]],
    context: InferenceContext,
) -> ObjectTypeDefinition | None:
    fields = infer_object_structure_from_nodes(
        nodes, context, selector=selector, example_value=value
    )
    # An object type needs at least one field
    if not fields:
        return None
    name = context.namer.type_name(f"{node_type_name(nodes)}.{selector}")
    return ObjectTypeDefinition(name=name, fields=fields)


def infer_field_type(
    value: Any,
    selector: str,
    nodes: Sequence[Mapping[str, Any]],
    context: InferenceContext,
    field_name: str | None = None,
) -> FieldDescriptor | None:
    """Infer the output field for one example value.

    Args:
        value: Example value of the field.
        selector: Dotted path of the field below the record root.
        nodes: All records of the type being built.
        context: Build context.
        field_name: Key read from the source record by date resolvers.
            Defaults to the last selector segment.

    Returns:
        The field descriptor, or None when the value cannot be typed.
    """
    if field_name is None:
        field_name = selector.split(".")[-1]

    kind = classify_value(value)

    if kind is ValueKind.LIST:
        if not value:
            return None
        head = value[0]
        head_kind = classify_value(head)
        if head_kind is ValueKind.NULL:
            return None
        # Arrays of objects get their own object type
        if head_kind is ValueKind.OBJECT:
            head_type = _infer_object_type(head, selector, nodes, context)
        else:
            head_field = infer_field_type(head, selector, nodes, context, field_name)
            head_type = head_field.type_def if head_field is not None else None
        if head_type is None:
            return None
        return FieldDescriptor(type_def=list_of(head_type))

    if kind is ValueKind.DATE:
        return FieldDescriptor(
            type_def=STRING,
            args=_date_args(),
            resolve=DateResolver(field_name=field_name),
        )

    if kind is ValueKind.OBJECT:
        object_type = _infer_object_type(value, selector, nodes, context)
        if object_type is None:
            return None
        return FieldDescriptor(type_def=object_type)

    scalar = _SCALAR_TYPES.get(kind)
    if scalar is None:
        return None
    return FieldDescriptor(type_def=scalar)


def infer_object_structure_from_nodes(
    nodes: Sequence[Mapping[str, Any]],
    context: InferenceContext,
    selector: str | None = None,
    example_value: Mapping[str, Any] | None = None,
) -> dict[str, FieldDescriptor]:
    """Infer the output fields of a record type, or of one nested object.

    Called for the top level of a record type (selector None) and
    recursively for every nested object (e.g. a markdown record and then its
    frontmatter). Fields that cannot be typed are left out; problems with a
    single field never abort the build.
    """
    if example_value is None:
        example_value = extract_field_examples(nodes)

    is_root = selector is None
    type_name = node_type_name(nodes)
    mapping = context.config.mapping

    inferred: dict[str, FieldDescriptor] = {}
    for key, value in example_value.items():
        if is_root and key in EXCLUDE_KEYS:
            continue

        next_selector = f"{selector}.{key}" if selector else key
        field_selector = f"{type_name}.{next_selector}"
        field_name = key

        try:
            # Manual field => type mappings from the site config come first
            if field_selector in mapping:
                field = infer_from_mapping(value, key, field_selector, context)
            # Then keys like author___NODE whose value is a node id
            elif is_node_link_key(key):
                field_name = clean_field_key(key)
                field = infer_from_field_name(value, key, field_selector, context)
            # Then relative paths to files, except on File records themselves
            elif type_name != FILE_TYPE_NAME and should_infer_file(value):
                field = infer_from_uri(key, field_selector, context)
            else:
                field = infer_field_type(value, next_selector, nodes, context, field_name=key)
        except Exception as e:
            context.warn(field_selector, f"Could not infer field: {e}", WarningKind.FIELD_ERROR)
            continue

        if field is None:
            logger.debug("No type inferred for %s", field_selector)
            continue
        inferred[field_name] = field

    return inferred


def infer_node_object_type(
    nodes: Sequence[Mapping[str, Any]], context: InferenceContext
) -> ProcessedNodeType:
    """Build and register the output object type for one record type.

    A stub is registered before the fields are inferred so that records
    linking to their own type resolve to the type being built. Building a
    type that is already registered (e.g. from ``context.new_build()``)
    repopulates the registered object type in place, so types built
    earlier keep pointing at it.
    """
    type_name = node_type_name(nodes)
    context.namer.reserve(type_name)
    processed = context.registry.get(type_name)
    if processed is None:
        processed = context.registry.register_stub(type_name, list(nodes))
    else:
        processed.nodes = list(nodes)
        processed.node_object_type.fields.clear()
    processed.node_object_type.fields.update(infer_object_structure_from_nodes(nodes, context))
    return processed
