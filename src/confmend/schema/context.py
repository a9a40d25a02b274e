"""Explicit bundle of schema, default document, and policy handed to every engine call."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from confmend.schema.nodes import ObjectNode
from confmend.schema.validator import validate

Normalizer = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class ConfigContext:
    """Immutable reconciliation context.

    ``default`` must validate against ``schema``; construction fails otherwise so a
    broken default can never be written as a repair source. The stored default is
    deep-frozen: mappings become read-only views and lists become tuples.
    """

    schema: ObjectNode
    default: Mapping[str, Any]
    migratable_keys: tuple[str, ...] = ()
    normalizers: Mapping[str, Normalizer] = field(default_factory=dict)

    def __post_init__(self) -> None:
        issues = validate(self.schema, self.default)
        if issues:
            rendered = "; ".join(str(issue) for issue in issues)
            raise ValueError(f"default document does not satisfy its schema: {rendered}")
        undeclared = sorted(set(self.migratable_keys) - set(self.schema.properties))
        if undeclared:
            raise ValueError(f"migratable keys are not declared: {', '.join(undeclared)}")
        object.__setattr__(self, "default", _freeze(self.default))
        object.__setattr__(self, "normalizers", MappingProxyType(dict(self.normalizers)))

    def default_document(self) -> dict[str, Any]:
        """Return a deep, mutable copy of the default document."""

        thawed: dict[str, Any] = _thaw(self.default)
        return thawed


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(item) for item in value]
    return value


__all__ = ["ConfigContext", "Normalizer"]
