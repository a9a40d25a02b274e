"""
confmend - line-by-line repair

File: src/confmend/config/repair.py

Purpose
- Heal a partially-invalid document field by field: every invalid or missing
  field takes its default counterpart while valid siblings are kept verbatim.

Functional requirements
- Object children recurse; nested changes are reported with a dotted prefix.
- Arrays of objects drop invalid elements; other arrays are leaves.
- Wrong-shaped leaves are replaced, never coerced.
- Undeclared keys are dropped unless the node accepts additional properties.
- A repaired document is stable under a second repair pass.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from confmend.constants import ENTIRE_OBJECT
from confmend.schema.context import Normalizer
from confmend.schema.nodes import LeafKind, LeafNode, ObjectNode, SchemaNode
from confmend.schema.validator import is_valid, validate_field

_logger = structlog.get_logger(__name__)

_DROP = object()


@dataclass(frozen=True, slots=True)
class RepairResult:
    """Repaired document plus the dotted paths that were replaced or filled."""

    fixed_config: Any
    changed_keys: tuple[str, ...] = ()
    missing_keys: tuple[str, ...] = ()

    @property
    def modified(self) -> bool:
        return bool(self.changed_keys or self.missing_keys)


@dataclass(slots=True)
class _Tally:
    changed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def repair(
    candidate: Any,
    default: Any,
    schema: SchemaNode,
    *,
    normalizers: Mapping[str, Normalizer] | None = None,
) -> RepairResult:
    """Repair ``candidate`` against ``schema`` using ``default`` for every rejected field."""

    tally = _Tally()
    fixed = _repair_node(candidate, default, schema, "", tally, normalizers or {})
    if tally.missing:
        _logger.info("config_missing_fields_filled", fields=list(tally.missing))
    if tally.changed:
        _logger.info("config_invalid_fields_replaced", fields=list(tally.changed))
    return RepairResult(
        fixed_config=fixed,
        changed_keys=tuple(tally.changed),
        missing_keys=tuple(tally.missing),
    )


def _repair_node(
    candidate: Any,
    default: Any,
    schema: SchemaNode,
    prefix: str,
    tally: _Tally,
    normalizers: Mapping[str, Normalizer],
) -> Any:
    if not isinstance(schema, ObjectNode) or not isinstance(candidate, Mapping):
        if is_valid(schema, candidate):
            return candidate
        tally.changed.append(prefix or ENTIRE_OBJECT)
        return copy.deepcopy(default)

    defaults: Mapping[str, Any] = default if isinstance(default, Mapping) else {}
    result: dict[str, Any] = copy.deepcopy(dict(defaults))

    for name, child in schema.properties.items():
        path = _join(prefix, name)
        has_default = name in defaults
        default_value = defaults.get(name)

        if name not in candidate:
            if has_default:
                tally.missing.append(path)
            continue

        value = candidate[name]

        if isinstance(child, ObjectNode):
            if not has_default and not isinstance(value, Mapping):
                tally.changed.append(path)
                result.pop(name, None)
                continue
            result[name] = _repair_node(value, default_value, child, path, tally, normalizers)
            continue

        if _is_array_of_objects(child):
            fixed_array = _repair_array(value, default_value, child, path, tally)
            if fixed_array is _DROP:
                result.pop(name, None)
            else:
                result[name] = fixed_array
            continue

        normalizer = normalizers.get(path)
        if normalizer is not None:
            normalized = normalizer(value)
            if normalized != value:
                tally.changed.append(path)
            value = normalized

        if validate_field(name, child, value):
            result[name] = value
        elif has_default:
            if path not in tally.changed:
                tally.changed.append(path)
            result[name] = copy.deepcopy(default_value)
        else:
            # Optional field with no default to fall back on.
            tally.changed.append(path)
            result.pop(name, None)

    if schema.additional_properties:
        for key, value in candidate.items():
            if key not in schema.properties:
                result[key] = value

    return result


def _is_array_of_objects(node: SchemaNode) -> bool:
    return (
        isinstance(node, LeafNode)
        and node.kind is LeafKind.ARRAY
        and isinstance(node.items, ObjectNode)
    )


def _repair_array(
    value: Any,
    default_value: Any,
    schema: LeafNode,
    path: str,
    tally: _Tally,
) -> Any:
    if not isinstance(value, list):
        tally.changed.append(path)
        if default_value is None:
            return _DROP
        return copy.deepcopy(default_value)

    items = schema.element_schema()
    kept: list[Any] = []
    for index, item in enumerate(value):
        if is_valid(items, item):
            kept.append(item)
        else:
            tally.changed.append(f"{path}[{index}]")
    return kept


def _join(prefix: str, name: str) -> str:
    if not prefix:
        return name
    return f"{prefix}.{name}"


__all__ = ["RepairResult", "repair"]
