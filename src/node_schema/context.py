"""Collaborators consumed by the schema builders and the context that carries them."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Protocol, Sequence

from node_schema.errors import ConfigError, InferenceWarning, WarningKind
from node_schema.naming import TypeNamer
from node_schema.types import TypeRegistry

logger = logging.getLogger(__name__)

Node = Mapping[str, Any]


class NodeStore(Protocol):
    """Read access to every loaded record."""

    def get_node(self, node_id: Any) -> Node | None: ...

    def get_nodes(self) -> Sequence[Node]: ...


class InMemoryNodeStore:
    """Node store backed by a list of records, indexed by id."""

    def __init__(self, nodes: Iterable[Node] = ()) -> None:
        self._nodes: list[Node] = []
        self._by_id: dict[Any, Node] = {}
        for node in nodes:
            self.add(node)

    def add(self, node: Node) -> None:
        """Add a record; a record with the same id replaces the earlier one."""
        node_id = node.get("id")
        if node_id is not None and node_id in self._by_id:
            previous = self._by_id[node_id]
            self._nodes = [n for n in self._nodes if n is not previous]
        self._nodes.append(node)
        if node_id is not None:
            self._by_id[node_id] = node

    def get_node(self, node_id: Any) -> Node | None:
        try:
            return self._by_id.get(node_id)
        except TypeError:
            # Unhashable ids never match a stored record
            return None

    def get_nodes(self) -> Sequence[Node]:
        return list(self._nodes)

    def nodes_of_type(self, type_name: str) -> list[Node]:
        """Return the records whose ``type`` equals type_name, in insertion order."""
        return [n for n in self._nodes if n.get("type") == type_name]

    def __len__(self) -> int:
        return len(self._nodes)


class DependencyTracker:
    """Records which nodes a query result at a given path depends on."""

    def __init__(self) -> None:
        self._dependencies: dict[str, set[Any]] = {}

    def add_page_dependency(self, path: str, node_id: Any) -> None:
        """Record that the query at path depends on node_id. Duplicates are ignored."""
        self._dependencies.setdefault(path, set()).add(node_id)

    def dependencies_for(self, path: str) -> set[Any]:
        """Return the node ids the query at path depends on."""
        return set(self._dependencies.get(path, ()))

    @property
    def paths(self) -> list[str]:
        return list(self._dependencies)


@dataclass
class SiteConfig:
    """Site configuration read by the builders.

    ``mapping`` maps a fully-qualified field selector such as
    ``"MarkdownRemark.frontmatter.author"`` to the name of the record type the
    field links to.
    """

    mapping: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SiteConfig:
        """Build a config from a parsed mapping. Unknown keys are ignored."""
        if not data:
            return cls()
        mapping = data.get("mapping") or {}
        if not isinstance(mapping, Mapping):
            raise ConfigError(f"'mapping' must be an object, got {type(mapping).__name__}")
        return cls(mapping={str(k): str(v) for k, v in mapping.items()})

    @classmethod
    def load(cls, path: Path | str) -> SiteConfig:
        """Load a config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, Mapping):
            raise ConfigError(f"Config root in {path} must be an object")
        return cls.from_dict(data)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InferenceContext:
    """Everything one schema build pass needs, passed explicitly to the builders."""

    store: NodeStore
    registry: TypeRegistry = field(default_factory=TypeRegistry)
    config: SiteConfig = field(default_factory=SiteConfig)
    dependencies: DependencyTracker = field(default_factory=DependencyTracker)
    namer: TypeNamer = field(default_factory=TypeNamer)
    clock: Callable[[], datetime] = _utc_now
    warnings: list[InferenceWarning] = field(default_factory=list)

    @classmethod
    def from_nodes(cls, nodes: Iterable[Node], **kwargs: Any) -> InferenceContext:
        """Create a context over an in-memory store holding nodes."""
        return cls(store=InMemoryNodeStore(nodes), **kwargs)

    def warn(
        self, selector: str, message: str, kind: WarningKind = WarningKind.MISSING_TYPE
    ) -> None:
        """Record a non-fatal inference problem and log it."""
        warning = InferenceWarning(selector=selector, message=message, kind=kind)
        self.warnings.append(warning)
        logger.warning("%s", warning)

    def new_build(self) -> InferenceContext:
        """Return a context sharing the collaborators but with fresh names and warnings.

        Names of already registered record types stay reserved. Building a
        registered record type again repopulates its entry in the registry.
        """
        namer = TypeNamer()
        for name in self.registry.list_types():
            namer.reserve(name)
        return InferenceContext(
            store=self.store,
            registry=self.registry,
            config=self.config,
            dependencies=self.dependencies,
            namer=namer,
            clock=self.clock,
        )


@dataclass
class ResolveInfo:
    """Read-time information handed to field resolvers."""

    context: InferenceContext
    path: str | None = None
