"""Node Schema - query schema inference for loosely-typed content records."""

from node_schema.context import (
    DependencyTracker,
    InferenceContext,
    InMemoryNodeStore,
    NodeStore,
    ResolveInfo,
    SiteConfig,
)
from node_schema.errors import (
    ConfigError,
    DateFormatError,
    InferenceWarning,
    NodeSchemaError,
    TypeNotFoundError,
    WarningKind,
)
from node_schema.examples import build_field_enum_values, extract_field_examples
from node_schema.infer_input import infer_input_object_structure_from_nodes
from node_schema.infer_type import (
    infer_field_type,
    infer_node_object_type,
    infer_object_structure_from_nodes,
)
from node_schema.naming import TypeNamer, create_type_name
from node_schema.printer import print_types
from node_schema.types import (
    EnumTypeDefinition,
    FieldDescriptor,
    InputFieldDefinition,
    InputObjectTypeDefinition,
    ListTypeDefinition,
    ObjectTypeDefinition,
    ProcessedNodeType,
    ScalarType,
    ScalarTypeDefinition,
    TypeDefinition,
    TypeRegistry,
)

__all__ = [
    # Main API
    "infer_object_structure_from_nodes",
    "infer_input_object_structure_from_nodes",
    "infer_node_object_type",
    "infer_field_type",
    "extract_field_examples",
    "build_field_enum_values",
    "create_type_name",
    "print_types",
    # Context
    "InferenceContext",
    "NodeStore",
    "InMemoryNodeStore",
    "DependencyTracker",
    "SiteConfig",
    "ResolveInfo",
    "TypeNamer",
    # Type definitions
    "TypeDefinition",
    "ScalarType",
    "ScalarTypeDefinition",
    "ListTypeDefinition",
    "ObjectTypeDefinition",
    "InputObjectTypeDefinition",
    "EnumTypeDefinition",
    "FieldDescriptor",
    "InputFieldDefinition",
    "ProcessedNodeType",
    "TypeRegistry",
    # Errors
    "NodeSchemaError",
    "TypeNotFoundError",
    "DateFormatError",
    "ConfigError",
    "InferenceWarning",
    "WarningKind",
]

__version__ = "0.1.0"
