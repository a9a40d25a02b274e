"""Deep merge used everywhere defaults, detected values, and partial updates are layered."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``override`` layered onto ``base`` without mutating either input.

    Mappings on both sides merge recursively; any other override value (lists
    included) replaces the base value outright. Keys mapped to ``None`` in
    ``override`` are treated as not provided and leave the base value in place.
    """

    merged = _copy_mapping(base)
    _merge_into(merged, override)
    return merged


def _merge_into(target: dict[str, Any], override: Mapping[str, Any]) -> None:
    for key, value in override.items():
        if value is None:
            continue
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _merge_into(existing, value)
        else:
            target[key] = _copy_value(value)


def _copy_mapping(value: Mapping[str, Any]) -> dict[str, Any]:
    return {key: _copy_value(item) for key, item in value.items()}


def _copy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return _copy_mapping(value)
    if isinstance(value, (list, tuple)):
        return [_copy_value(item) for item in value]
    return value


__all__ = ["deep_merge"]
