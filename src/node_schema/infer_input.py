"""Inference of filter/query input types and sort inputs from example values."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from node_schema.context import InferenceContext
from node_schema.errors import WarningKind
from node_schema.examples import build_field_enum_values, extract_field_examples
from node_schema.infer_type import node_type_name
from node_schema.naming import lower_first, upper_first
from node_schema.relationships import clean_field_key
from node_schema.types import (
    BOOLEAN,
    FLOAT,
    INT,
    STRING,
    EnumTypeDefinition,
    EnumValueDefinition,
    InputFieldDefinition,
    InputObjectTypeDefinition,
    TypeDefinition,
    list_of,
    non_null,
)
from node_schema.values import ValueKind, classify_value

logger = logging.getLogger(__name__)

# Fields for traversing between nodes are not filterable
EXCLUDE_KEYS = frozenset({"parent", "children"})

SORT_ORDER_ASC = "asc"
SORT_ORDER_DESC = "desc"

_OPERAND_TYPES: dict[ValueKind, TypeDefinition] = {
    ValueKind.BOOLEAN: BOOLEAN,
    ValueKind.STRING: STRING,
    ValueKind.INTEGER: INT,
    ValueKind.FLOAT: FLOAT,
}

# Suffix of the generated input type name per scalar kind
_QUERY_TYPE_SUFFIXES: dict[ValueKind, str] = {
    ValueKind.BOOLEAN: "QueryBoolean",
    ValueKind.STRING: "QueryString",
    ValueKind.INTEGER: "QueryNumber",
    ValueKind.FLOAT: "QueryFloat",
}


def operator_fields(kind: ValueKind) -> dict[str, InputFieldDefinition]:
    """Comparison operators available for a scalar kind."""
    operand = _OPERAND_TYPES.get(kind)
    if operand is None:
        return {}
    fields = {
        "eq": InputFieldDefinition(type_def=operand),
        "ne": InputFieldDefinition(type_def=operand),
    }
    if kind is ValueKind.STRING:
        fields["regex"] = InputFieldDefinition(type_def=STRING)
        fields["glob"] = InputFieldDefinition(type_def=STRING)
    return fields


def _input_object(name: str, fields: dict[str, InputFieldDefinition]) -> InputFieldDefinition:
    return InputFieldDefinition(type_def=InputObjectTypeDefinition(name=name, fields=fields))


def _type_name(context: InferenceContext, path: str, prefix: str, suffix: str) -> str:
    return context.namer.type_name(f"{path}:{suffix}", base=f"{prefix}{suffix}")


def infer_input_fields(
    value: Any,
    nodes: Sequence[Mapping[str, Any]],
    prefix: str,
    context: InferenceContext,
    path: str | None = None,
) -> InputFieldDefinition | None:
    """Infer the filter input for one example value.

    prefix is the name stem of the generated input types, e.g.
    ``MarkdownRemarkFrontmatterTitle``. path is the dotted field path the
    value was found at (``MarkdownRemark.frontmatter.title``, with ``[]``
    appended for list elements) and defaults to prefix. Different paths
    never share a type name, even when their stems are equal.
    """
    if path is None:
        path = prefix
    kind = classify_value(value, detect_dates=False)

    if kind is ValueKind.LIST:
        if not value:
            return None
        head = value[0]
        head_kind = classify_value(head, detect_dates=False)

        # Element type for the in operator
        if head_kind in _OPERAND_TYPES:
            name = _type_name(context, path, prefix, "QueryList")
            in_type = _OPERAND_TYPES[head_kind]
        elif head_kind in (ValueKind.LIST, ValueKind.OBJECT):
            # The outer list takes the unsuffixed name before its element
            name = _type_name(context, path, prefix, "QueryList")
            head_field = infer_input_fields(head, nodes, prefix, context, path=f"{path}[]")
            if head_field is None:
                return None
            in_type = head_field.type_def
        else:
            return None

        fields = operator_fields(head_kind)
        fields["in"] = InputFieldDefinition(type_def=list_of(in_type))
        return _input_object(name, fields)

    if kind is ValueKind.OBJECT:
        fields = infer_input_object_structure_from_nodes(
            nodes, context, prefix=prefix, path=path, example_value=value
        )
        if not fields:
            return None
        return _input_object(_type_name(context, path, prefix, "InputObject"), fields)

    suffix = _QUERY_TYPE_SUFFIXES.get(kind)
    if suffix is None:
        return None
    return _input_object(_type_name(context, path, prefix, suffix), operator_fields(kind))


def build_sort_input(
    nodes: Sequence[Mapping[str, Any]], type_name: str
) -> InputFieldDefinition | None:
    """Build the ``sortBy`` input of a record type.

    Returns None when the records have no sortable field.
    """
    enum_values = build_field_enum_values(nodes)
    if not enum_values:
        return None

    sort_fields_enum = EnumTypeDefinition(
        name=f"{type_name}SortByFieldsEnum",
        values=[EnumValueDefinition(name=name, value=path) for name, path in enum_values.items()],
    )
    camel = lower_first(type_name)
    sort_order_enum = EnumTypeDefinition(
        name=f"{camel}SortOrderValues",
        values=[
            EnumValueDefinition(name="ASC", value=SORT_ORDER_ASC),
            EnumValueDefinition(name="DESC", value=SORT_ORDER_DESC),
        ],
    )
    sort_input = InputObjectTypeDefinition(
        name=f"{camel}SortBy",
        fields={
            "fields": InputFieldDefinition(type_def=non_null(list_of(sort_fields_enum))),
            "order": InputFieldDefinition(type_def=sort_order_enum, default_value=SORT_ORDER_ASC),
        },
    )
    return InputFieldDefinition(type_def=sort_input)


def infer_input_object_structure_from_nodes(
    nodes: Sequence[Mapping[str, Any]],
    context: InferenceContext,
    type_name: str | None = None,
    prefix: str | None = None,
    example_value: Mapping[str, Any] | None = None,
    path: str | None = None,
) -> dict[str, InputFieldDefinition]:
    """Infer the filter input fields of a record type, or of one nested object.

    The root call (no prefix) also gets a ``sortBy`` field. Fields are keyed
    by the stored record key, so ``author___NODE`` stays filterable under
    that name. path is the dotted path of the nested object and defaults
    to prefix.
    """
    if example_value is None:
        example_value = extract_field_examples(nodes)

    is_root = prefix is None
    if is_root:
        type_name = type_name or node_type_name(nodes)
        prefix = type_name
    if path is None:
        path = prefix

    inferred: dict[str, InputFieldDefinition] = {}
    for key, value in example_value.items():
        if is_root and key in EXCLUDE_KEYS:
            continue

        field_path = f"{path}.{key}"
        field_prefix = f"{prefix}{upper_first(clean_field_key(key))}"
        try:
            field = infer_input_fields(value, nodes, field_prefix, context, path=field_path)
        except Exception as e:
            context.warn(field_path, f"Could not infer input field: {e}", WarningKind.FIELD_ERROR)
            continue

        if field is None:
            logger.debug("No input type inferred for %s", field_path)
            continue
        inferred[key] = field

    # Sorting is only offered at the top level
    if is_root and type_name:
        sort_by = build_sort_input(nodes, type_name)
        if sort_by is not None:
            inferred["sortBy"] = sort_by

    return inferred
