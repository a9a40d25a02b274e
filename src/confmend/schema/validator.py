"""
confmend - schema validation

File: src/confmend/schema/validator.py

Purpose
- Check a value against a schema node and return every violation with a
  structured path, never just the first one.

Functional requirements
- Object nodes report missing required fields, recurse into declared fields,
  and report undeclared keys when additional properties are rejected.
- Leaf nodes report type, enum, literal, bound, and per-element failures.
- ``validate_field`` isolates a single property so repair can accept a valid
  field regardless of its siblings.

Non-functional requirements
- Deterministic issue ordering; no mutation of inputs.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from confmend.schema.nodes import LeafKind, LeafNode, ObjectNode, SchemaNode, ValueType

PathSegment: TypeAlias = str | int


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """Single structured validation failure."""

    path: tuple[PathSegment, ...]
    message: str

    @property
    def dotted(self) -> str:
        return format_path(self.path)

    def __str__(self) -> str:
        return f"{self.dotted}: {self.message}"


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ValidationIssue] = []

    def add(self, path: tuple[PathSegment, ...], message: str) -> None:
        self._items.append(ValidationIssue(path=path, message=message))

    def items(self) -> tuple[ValidationIssue, ...]:
        return tuple(self._items)


def validate(schema: SchemaNode, value: object) -> tuple[ValidationIssue, ...]:
    """Validate ``value`` against ``schema`` and return all issues in deterministic order."""

    issues = _IssueCollector()
    _visit(schema, value, (), issues)
    return issues.items()


def is_valid(schema: SchemaNode, value: object) -> bool:
    return not validate(schema, value)


def validate_field(name: str, child_schema: SchemaNode, value: object) -> bool:
    """Validate one property in isolation through a synthetic single-property object."""

    wrapper = ObjectNode(
        properties={name: child_schema},
        required=frozenset({name}),
        additional_properties=False,
    )
    return is_valid(wrapper, {name: value})


def format_path(path: Sequence[PathSegment]) -> str:
    """Render ``("a", "b", 2, "c")`` as ``a.b[2].c``; the empty path is ``<root>``."""

    if not path:
        return "<root>"
    rendered = ""
    for segment in path:
        if isinstance(segment, int):
            rendered += f"[{segment}]"
        elif rendered:
            rendered += f".{segment}"
        else:
            rendered = segment
    return rendered


def _visit(
    schema: SchemaNode,
    value: object,
    path: tuple[PathSegment, ...],
    issues: _IssueCollector,
) -> None:
    if isinstance(schema, ObjectNode):
        _visit_object(schema, value, path, issues)
    else:
        _visit_leaf(schema, value, path, issues)


def _visit_object(
    schema: ObjectNode,
    value: object,
    path: tuple[PathSegment, ...],
    issues: _IssueCollector,
) -> None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {_type_name(value)}")
        return

    for key in value:
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {_type_name(key)}")

    for name in schema.properties:
        if name in schema.required and name not in value:
            issues.add((*path, name), "missing required field")

    for name, child in schema.properties.items():
        if name in value:
            _visit(child, value[name], (*path, name), issues)

    extra = sorted(key for key in value if isinstance(key, str) and key not in schema.properties)
    for key in extra:
        if schema.additional_properties:
            _check_free_form(value[key], (*path, key), issues)
        else:
            issues.add((*path, key), "unknown field")


def _visit_leaf(
    schema: LeafNode,
    value: object,
    path: tuple[PathSegment, ...],
    issues: _IssueCollector,
) -> None:
    if schema.kind is LeafKind.TYPE:
        _check_type(schema, value, path, issues)
    elif schema.kind is LeafKind.ENUM:
        if not _is_member(value, schema.choices):
            expected = ", ".join(repr(choice) for choice in schema.choices)
            issues.add(path, f"invalid value {value!r}; expected one of: {expected}")
    elif schema.kind is LeafKind.LITERAL:
        if not _is_member(value, schema.choices):
            issues.add(path, f"expected literal {schema.choices[0]!r}, got {value!r}")
    else:
        if not isinstance(value, list):
            issues.add(path, f"expected array, got {_type_name(value)}")
            return
        items = schema.element_schema()
        for index, item in enumerate(value):
            _visit(items, item, (*path, index), issues)


def _check_type(
    schema: LeafNode,
    value: object,
    path: tuple[PathSegment, ...],
    issues: _IssueCollector,
) -> None:
    value_type = schema.checked_type()
    if value_type is ValueType.ANY:
        _check_free_form(value, path, issues)
        return
    if value_type is ValueType.STRING:
        if not isinstance(value, str):
            issues.add(path, f"expected string, got {_type_name(value)}")
        return
    if value_type is ValueType.BOOLEAN:
        if not isinstance(value, bool):
            issues.add(path, f"expected boolean, got {_type_name(value)}")
        return
    if value_type is ValueType.MAPPING:
        if not isinstance(value, Mapping) or not all(isinstance(key, str) for key in value):
            issues.add(path, f"expected object, got {_type_name(value)}")
            return
        _check_free_form(value, path, issues)
        return

    if value_type is ValueType.INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            issues.add(path, f"expected integer, got {_type_name(value)}")
            return
    elif isinstance(value, bool) or not isinstance(value, (int, float)):
        issues.add(path, f"expected number, got {_type_name(value)}")
        return
    elif not math.isfinite(value):
        issues.add(path, "must be finite")
        return

    if schema.minimum is not None and value < schema.minimum:
        issues.add(path, f"must be >= {_render_bound(schema.minimum)}")
    if schema.maximum is not None and value > schema.maximum:
        issues.add(path, f"must be <= {_render_bound(schema.maximum)}")


def _check_free_form(
    value: object,
    path: tuple[PathSegment, ...],
    issues: _IssueCollector,
) -> None:
    # Undeclared content must still be representable as strict JSON.
    if isinstance(value, float):
        if not math.isfinite(value):
            issues.add(path, "must be finite")
    elif isinstance(value, Mapping):
        for key, item in value.items():
            _check_free_form(item, (*path, str(key)), issues)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _check_free_form(item, (*path, index), issues)


def _is_member(value: object, choices: tuple[object, ...]) -> bool:
    # ``True == 1`` in Python; choices must match on type as well as value.
    return any(type(value) is type(choice) and value == choice for choice in choices)


def _render_bound(bound: float) -> str:
    if float(bound).is_integer():
        return str(int(bound))
    return str(bound)


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "array"
    return type(value).__name__


__all__ = [
    "PathSegment",
    "ValidationIssue",
    "format_path",
    "is_valid",
    "validate",
    "validate_field",
]
