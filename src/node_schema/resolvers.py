"""Field resolvers attached to inferred fields.

Each resolver is an immutable value object holding only what it needs to
find the field's value at read time. Resolvers are called as
``resolver(source, args, info)`` where ``source`` is the record being read and
``info`` is a ``ResolveInfo`` carrying the node store and dependency tracker.
Lookups are read-only; the only side effect is dependency recording.
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from typing import Any, Mapping

from node_schema.context import NodeStore, ResolveInfo
from node_schema.dates import difference, format_date, from_now, parse_strict

FILE_TYPE_NAME = "File"
FILE_DIR_FIELD = "dir"
FILE_ABSOLUTE_PATH_FIELD = "absolutePath"


def _record_dependency(info: ResolveInfo, node: Mapping[str, Any]) -> None:
    if info.path is not None and node.get("id") is not None:
        info.context.dependencies.add_page_dependency(info.path, node["id"])


def find_linked_node(store: NodeStore, value: Any, linked_field: str | None = None) -> Mapping[str, Any] | None:
    """Find the record a link value points at.

    Without linked_field the value is a record id. With linked_field the
    first record whose linked_field equals value is returned.
    """
    if linked_field:
        for node in store.get_nodes():
            if linked_field in node and node[linked_field] == value:
                return node
        return None
    return store.get_node(value)


@dataclass(frozen=True)
class DateResolver:
    """Reformats a stored date string according to the field arguments."""

    field_name: str

    def __call__(self, source: Mapping[str, Any], args: Mapping[str, Any], info: ResolveInfo) -> Any:
        raw = source.get(self.field_name)
        format_string = args.get("formatString")
        want_from_now = args.get("fromNow")
        unit = args.get("difference")
        if raw is None or not (format_string or want_from_now or unit):
            return raw

        parsed = parse_strict(raw)
        if parsed is None:
            # Another record of this type holds a non-date value here
            return raw
        if format_string:
            return format_date(parsed, format_string)
        if want_from_now:
            return from_now(parsed, info.context.clock())
        return difference(info.context.clock(), parsed, unit)


@dataclass(frozen=True)
class MappingResolver:
    """Resolves a field configured in the site mapping to records of target_type."""

    field_key: str
    target_type: str
    is_list: bool = False

    def _find(self, value: Any, info: ResolveInfo) -> Mapping[str, Any] | None:
        for node in info.context.store.get_nodes():
            if node.get("type") == self.target_type and node.get("id") == value:
                _record_dependency(info, node)
                return node
        return None

    def __call__(self, source: Mapping[str, Any], args: Mapping[str, Any], info: ResolveInfo) -> Any:
        value = source.get(self.field_key)
        if not value:
            return None
        if self.is_list:
            found = (self._find(v, info) for v in value)
            return [node for node in found if node is not None]
        return self._find(value, info)


@dataclass(frozen=True)
class NodeLinkResolver:
    """Resolves a ``<name>___NODE`` field holding one or more record ids.

    With linked_field set (``<name>___NODE___<linked_field>``) the value is
    matched against that field of every record instead of the id.
    """

    field_key: str
    linked_field: str | None = None
    is_list: bool = False

    def _find(self, value: Any, info: ResolveInfo) -> Mapping[str, Any] | None:
        node = find_linked_node(info.context.store, value, self.linked_field)
        if node is not None:
            _record_dependency(info, node)
        return node

    def __call__(self, source: Mapping[str, Any], args: Mapping[str, Any], info: ResolveInfo) -> Any:
        value = source.get(self.field_key)
        if not value:
            return None
        if self.is_list:
            found = (self._find(v, info) for v in value)
            return [node for node in found if node is not None]
        return self._find(value, info)


def resolve_file_path(directory: str, relative: str) -> str:
    """Resolve relative against directory to an absolute path with forward slashes."""
    joined = os.path.abspath(os.path.join(directory, relative))
    return posixpath.normpath(joined.replace("\\", "/"))


@dataclass(frozen=True)
class FileLinkResolver:
    """Resolves a relative path string to the File record it points at.

    The path is taken relative to the directory of the File record that is
    the parent of the source record.
    """

    field_key: str

    def __call__(self, source: Mapping[str, Any], args: Mapping[str, Any], info: ResolveInfo) -> Any:
        value = source.get(self.field_key)
        if not isinstance(value, str) or not value:
            return None

        store = info.context.store
        parent_id = source.get("parent")
        parent_file = next(
            (
                n
                for n in store.get_nodes()
                if n.get("type") == FILE_TYPE_NAME and n.get("id") == parent_id
            ),
            None,
        )
        if parent_file is None or not parent_file.get(FILE_DIR_FIELD):
            return None

        link_path = resolve_file_path(parent_file[FILE_DIR_FIELD], value)
        for node in store.get_nodes():
            if node.get("type") == FILE_TYPE_NAME and node.get(FILE_ABSOLUTE_PATH_FIELD) == link_path:
                _record_dependency(info, node)
                return node
        return None
