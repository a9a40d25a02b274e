"""
confmend schema package public API.

File: src/confmend/schema/__init__.py

Purpose
- Export schema node types, the validator, and the project schema/default document.

Functional requirements
- Import-time work is limited to building the immutable project context.
"""

from confmend.schema.context import ConfigContext, Normalizer
from confmend.schema.nodes import (
    LeafKind,
    LeafNode,
    ObjectNode,
    SchemaNode,
    ValueType,
    any_value,
    array_of,
    boolean,
    describe,
    enum,
    integer,
    literal,
    mapping,
    number,
    obj,
    string,
)
from confmend.schema.project import (
    DEFAULT_CONFIG,
    MIGRATABLE_KEYS,
    PROJECT_CONTEXT,
    PROJECT_SCHEMA,
    clean_repository_url,
    default_config,
)
from confmend.schema.validator import (
    ValidationIssue,
    format_path,
    is_valid,
    validate,
    validate_field,
)

__all__ = [
    "DEFAULT_CONFIG",
    "MIGRATABLE_KEYS",
    "PROJECT_CONTEXT",
    "PROJECT_SCHEMA",
    "ConfigContext",
    "LeafKind",
    "LeafNode",
    "Normalizer",
    "ObjectNode",
    "SchemaNode",
    "ValidationIssue",
    "ValueType",
    "any_value",
    "array_of",
    "boolean",
    "clean_repository_url",
    "default_config",
    "describe",
    "enum",
    "format_path",
    "integer",
    "is_valid",
    "literal",
    "mapping",
    "number",
    "obj",
    "string",
    "validate",
    "validate_field",
]
