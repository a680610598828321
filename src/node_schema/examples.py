"""Representative example values merged across records of one type."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

ENUM_DELIMITER = "___"
ENUM_MAX_DEPTH = 3

_INVALID_ENUM_CHARS = re.compile(r"[^_0-9A-Za-z]")


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _merge_values(values: list[Any]) -> Any:
    """Merge the non-null observations of one field into a single example.

    The first observation decides the shape. Mappings are merged key by key,
    sequences collapse into a one-element list holding the merged shape of
    every element, scalars keep the first value. Returns None when nothing
    usable remains.
    """
    head = values[0]

    if isinstance(head, Mapping):
        merged = extract_field_examples(v for v in values if isinstance(v, Mapping))
        return merged or None

    if _is_sequence(head):
        elements = [e for v in values if _is_sequence(v) for e in v if e is not None]
        if not elements:
            return None
        element = _merge_values(elements)
        if element is None:
            return None
        return [element]

    return head


def extract_field_examples(nodes: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Build one example value per field from a set of records.

    Keys keep the order in which they were first seen. Fields that are null,
    empty sequences or empty mappings on every record are left out.
    """
    observations: dict[str, list[Any]] = {}
    for node in nodes:
        for key, value in node.items():
            bucket = observations.setdefault(key, [])
            if value is not None:
                bucket.append(value)

    examples: dict[str, Any] = {}
    for key, values in observations.items():
        if not values:
            continue
        example = _merge_values(values)
        if example is not None:
            examples[key] = example
    return examples


def _flatten(value: Mapping[str, Any], prefix: tuple[str, ...], out: dict[tuple[str, ...], Any]) -> None:
    for key, child in value.items():
        path = prefix + (key,)
        if isinstance(child, Mapping) and child and len(path) < ENUM_MAX_DEPTH:
            _flatten(child, path, out)
        else:
            out[path] = child


def build_field_enum_values(nodes: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """Enumerate sortable field paths of a record type.

    Returns enum value name -> dotted field path, e.g.
    ``{"frontmatter___title": "frontmatter.title"}``. Nesting stops at three
    levels and sequences are treated as leaves.
    """
    leaves: dict[tuple[str, ...], Any] = {}
    _flatten(extract_field_examples(nodes), (), leaves)

    enum_values: dict[str, str] = {}
    for path in leaves:
        name = _INVALID_ENUM_CHARS.sub("_", ENUM_DELIMITER.join(path))
        if name[:1].isdigit():
            name = f"_{name}"
        enum_values.setdefault(name, ".".join(path))
    return enum_values
