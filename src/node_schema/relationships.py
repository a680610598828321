"""Detection of fields that link to other records.

Three strategies are tried in order by the object builder:

1. an explicit ``mapping`` entry in the site config,
2. the ``___NODE`` naming convention,
3. a relative file path that can be matched to a File record.

A strategy that recognises the field but cannot find the linked type
records a warning on the context and returns None.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import PurePosixPath, PureWindowsPath
from typing import Any
from urllib.parse import urlsplit

from node_schema.context import InferenceContext
from node_schema.errors import TypeNotFoundError, WarningKind
from node_schema.resolvers import (
    FILE_TYPE_NAME,
    FileLinkResolver,
    MappingResolver,
    NodeLinkResolver,
    find_linked_node,
)
from node_schema.types import FieldDescriptor, list_of

logger = logging.getLogger(__name__)

NODE_LINK_MARKER = "___NODE"
KEY_SEPARATOR = "___"

# Guessed types that say nothing about the value being a file
UNKNOWN_MIME_TYPES = frozenset(
    {
        None,
        "application/octet-stream",
        # domains ending with .com
        "application/x-msdownload",
        "application/x-msdos-program",
    }
)

# Built-in extension table only, so results do not depend on the host's mime.types
_mime_types = mimetypes.MimeTypes()


def is_node_link_key(key: str) -> bool:
    return NODE_LINK_MARKER in key


def clean_field_key(key: str) -> str:
    """Strip the ``___NODE`` suffix (and anything after it) from a field key."""
    if is_node_link_key(key):
        return key.split(KEY_SEPARATOR)[0]
    return key


def parse_node_link_key(key: str) -> tuple[str, str | None]:
    """Split ``name___NODE[___linked]`` into (name, linked field or None)."""
    parts = key.split(KEY_SEPARATOR)
    linked_field = parts[2] if len(parts) > 2 and parts[2] else None
    return parts[0], linked_field


def infer_from_mapping(
    value: Any, field_key: str, field_selector: str, context: InferenceContext
) -> FieldDescriptor | None:
    """Type a field configured in the site mapping as a link to the mapped type."""
    target_type = context.config.mapping[field_selector]
    try:
        processed = context.registry.get_or_raise(target_type)
    except TypeNotFoundError as e:
        context.warn(
            field_selector,
            f"Couldn't find a matching node type for \"{field_selector}\" ({e})",
        )
        return None

    is_list = isinstance(value, (list, tuple))
    type_def = processed.node_object_type
    logger.debug("%s linked to %s through mapping", field_selector, target_type)
    return FieldDescriptor(
        type_def=list_of(type_def) if is_list else type_def,
        resolve=MappingResolver(field_key=field_key, target_type=target_type, is_list=is_list),
    )


def infer_from_field_name(
    value: Any, key: str, field_selector: str, context: InferenceContext
) -> FieldDescriptor | None:
    """Type a ``___NODE`` field from the type of the record its value points at."""
    is_list = isinstance(value, (list, tuple))
    sample = value[0] if is_list else value
    _, linked_field = parse_node_link_key(key)

    linked_node = find_linked_node(context.store, sample, linked_field)
    if linked_node is None:
        context.warn(
            field_selector,
            f"Couldn't find a node linked from \"{key}\" with value {sample!r}",
            WarningKind.MISSING_NODE,
        )
        return None

    linked_type = str(linked_node.get("type") or "")
    try:
        processed = context.registry.get_or_raise(linked_type)
    except TypeNotFoundError as e:
        context.warn(field_selector, f"Couldn't find a matching node type for \"{key}\" ({e})")
        return None

    type_def = processed.node_object_type
    logger.debug("%s linked to %s by field name", field_selector, linked_type)
    return FieldDescriptor(
        type_def=list_of(type_def) if is_list else type_def,
        resolve=NodeLinkResolver(field_key=key, linked_field=linked_field, is_list=is_list),
    )


def _is_relative_path(value: str) -> bool:
    return not (PurePosixPath(value).is_absolute() or PureWindowsPath(value).is_absolute())


def _is_relative_url(value: str) -> bool:
    if value.startswith("//"):
        return False
    scheme = urlsplit(value).scheme
    # A single letter is a Windows drive, which the path check handles
    return not scheme or len(scheme) == 1


def should_infer_file(value: Any) -> bool:
    """Return whether value looks like a relative path to a file with a known type."""
    if not isinstance(value, str) or not value:
        return False
    mime_type, _ = _mime_types.guess_type(value, strict=False)
    return (
        mime_type not in UNKNOWN_MIME_TYPES
        and _is_relative_path(value)
        and _is_relative_url(value)
    )


def infer_from_uri(key: str, field_selector: str, context: InferenceContext) -> FieldDescriptor | None:
    """Type a relative path field as a link to a File record.

    Records a warning and returns None when no File type is registered.
    """
    try:
        processed = context.registry.get_or_raise(FILE_TYPE_NAME)
    except TypeNotFoundError as e:
        context.warn(field_selector, f"Couldn't link file path \"{key}\" ({e})")
        return None
    return FieldDescriptor(
        type_def=processed.node_object_type,
        resolve=FileLinkResolver(field_key=key),
    )
