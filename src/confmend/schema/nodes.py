"""
confmend - declarative schema nodes

File: src/confmend/schema/nodes.py

Purpose
- Describe the expected shape of a configuration document as a closed tagged
  variant: ``ObjectNode`` for nested mappings, ``LeafNode`` for everything else.

Functional requirements
- Nodes are immutable and hashable-free value objects; the engine never mutates them.
- An object node's required set must be a subset of its declared properties.
- Builder helpers mirror the usual JSON-schema vocabulary (string, integer,
  enum, literal, array, mapping).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, TypeAlias

JSONScalar: TypeAlias = str | int | float | bool | None


class LeafKind(StrEnum):
    """Constraint families a leaf node can express."""

    TYPE = "type"
    ENUM = "enum"
    LITERAL = "literal"
    ARRAY = "array"


class ValueType(StrEnum):
    """Primitive runtime types checked by ``LeafKind.TYPE`` nodes."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    MAPPING = "mapping"
    ANY = "any"


@dataclass(frozen=True, slots=True)
class LeafNode:
    """Primitive, enum, literal, or array constraint."""

    kind: LeafKind
    value_type: ValueType | None = None
    choices: tuple[JSONScalar, ...] = ()
    items: SchemaNode | None = None
    minimum: float | None = None
    maximum: float | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        if self.kind is LeafKind.TYPE and self.value_type is None:
            raise ValueError("type leaf requires value_type")
        if self.kind is LeafKind.ENUM and not self.choices:
            raise ValueError("enum leaf requires at least one choice")
        if self.kind is LeafKind.LITERAL and len(self.choices) != 1:
            raise ValueError("literal leaf requires exactly one value")
        if self.kind is LeafKind.ARRAY and self.items is None:
            raise ValueError("array leaf requires an items schema")

    def element_schema(self) -> SchemaNode:
        """Item schema of an array leaf; ``TypeError`` for any other kind."""

        if self.items is None:
            raise TypeError(f"{self.kind.value} leaf has no items schema")
        return self.items

    def checked_type(self) -> ValueType:
        if self.value_type is None:
            raise TypeError(f"{self.kind.value} leaf has no value type")
        return self.value_type


@dataclass(frozen=True, slots=True)
class ObjectNode:
    """Mapping with declared properties, a required subset, and unknown-key policy."""

    properties: Mapping[str, SchemaNode]
    required: frozenset[str] = field(default_factory=frozenset)
    additional_properties: bool = False
    description: str | None = None

    def __post_init__(self) -> None:
        # Freeze the property table while keeping declaration order.
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "required", frozenset(self.required))
        undeclared = sorted(self.required - set(self.properties))
        if undeclared:
            raise ValueError(f"required properties are not declared: {', '.join(undeclared)}")

    def child(self, name: str) -> SchemaNode | None:
        return self.properties.get(name)


SchemaNode: TypeAlias = ObjectNode | LeafNode


def is_object_node(node: object) -> bool:
    return isinstance(node, ObjectNode)


def obj(
    properties: Mapping[str, SchemaNode],
    *,
    optional: tuple[str, ...] = (),
    additional_properties: bool = False,
    description: str | None = None,
) -> ObjectNode:
    """Build an object node where every property is required unless listed in ``optional``."""

    missing = sorted(set(optional) - set(properties))
    if missing:
        raise ValueError(f"optional properties are not declared: {', '.join(missing)}")
    required = frozenset(name for name in properties if name not in optional)
    return ObjectNode(
        properties=properties,
        required=required,
        additional_properties=additional_properties,
        description=description,
    )


def string(*, description: str | None = None) -> LeafNode:
    return LeafNode(LeafKind.TYPE, ValueType.STRING, description=description)


def integer(
    *,
    minimum: int | None = None,
    maximum: int | None = None,
    description: str | None = None,
) -> LeafNode:
    return LeafNode(
        LeafKind.TYPE,
        ValueType.INTEGER,
        minimum=minimum,
        maximum=maximum,
        description=description,
    )


def number(
    *,
    minimum: float | None = None,
    maximum: float | None = None,
    description: str | None = None,
) -> LeafNode:
    return LeafNode(
        LeafKind.TYPE,
        ValueType.NUMBER,
        minimum=minimum,
        maximum=maximum,
        description=description,
    )


def boolean(*, description: str | None = None) -> LeafNode:
    return LeafNode(LeafKind.TYPE, ValueType.BOOLEAN, description=description)


def mapping(*, description: str | None = None) -> LeafNode:
    """Free-form JSON object whose keys are not declared by the schema."""

    return LeafNode(LeafKind.TYPE, ValueType.MAPPING, description=description)


def any_value(*, description: str | None = None) -> LeafNode:
    return LeafNode(LeafKind.TYPE, ValueType.ANY, description=description)


def enum(*choices: JSONScalar, description: str | None = None) -> LeafNode:
    return LeafNode(LeafKind.ENUM, choices=tuple(choices), description=description)


def literal(value: JSONScalar, *, description: str | None = None) -> LeafNode:
    return LeafNode(LeafKind.LITERAL, choices=(value,), description=description)


def array_of(items: SchemaNode, *, description: str | None = None) -> LeafNode:
    return LeafNode(LeafKind.ARRAY, items=items, description=description)


def describe(node: SchemaNode) -> dict[str, Any]:
    """Return a JSON-friendly description of ``node`` for diagnostics."""

    if isinstance(node, ObjectNode):
        return {
            "type": "object",
            "properties": {name: describe(child) for name, child in node.properties.items()},
            "required": sorted(node.required),
            "additionalProperties": node.additional_properties,
        }
    if node.kind is LeafKind.TYPE:
        payload: dict[str, Any] = {"type": node.checked_type().value}
        if node.minimum is not None:
            payload["minimum"] = node.minimum
        if node.maximum is not None:
            payload["maximum"] = node.maximum
        return payload
    if node.kind is LeafKind.ENUM:
        return {"enum": list(node.choices)}
    if node.kind is LeafKind.LITERAL:
        return {"const": node.choices[0]}
    return {"type": "array", "items": describe(node.element_schema())}


__all__ = [
    "JSONScalar",
    "LeafKind",
    "LeafNode",
    "ObjectNode",
    "SchemaNode",
    "ValueType",
    "any_value",
    "array_of",
    "boolean",
    "describe",
    "enum",
    "integer",
    "is_object_node",
    "literal",
    "mapping",
    "number",
    "obj",
    "string",
]
