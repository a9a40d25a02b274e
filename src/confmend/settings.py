"""
confmend - engine settings loader

File: src/confmend/settings.py

Purpose
- Resolve the engine's own runtime settings (not the project document) from
  defaults, ``CONFMEND_*`` environment variables, and CLI overrides.

Functional requirements
- Precedence logic: CLI > env (CONFMEND_) > defaults.
- Strict string coercion; unparsable values raise ``SettingsError``.
- ``None`` CLI overrides mean "flag not given" and do not shadow env values.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, Final, Literal

from confmend.constants import CONFIG_FILE_NAME, ENV_PREFIX
from confmend.observability.logging import LOG_FORMATS, parse_log_level

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


class SettingsError(ValueError):
    """Raised when a setting cannot be coerced or fails validation."""


@dataclass(frozen=True, slots=True)
class EngineSettings:
    log_level: str = "INFO"
    log_format: str = "text"
    max_concurrent_reads: int = 8
    config_file_name: str = CONFIG_FILE_NAME
    no_color: bool = False

    def __post_init__(self) -> None:
        try:
            parse_log_level(self.log_level)
        except ValueError as exc:
            raise SettingsError(f"log_level: {exc}") from exc
        if self.log_format not in LOG_FORMATS:
            raise SettingsError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        if self.max_concurrent_reads < 1:
            raise SettingsError("max_concurrent_reads must be >= 1")
        name = self.config_file_name
        if not name or "/" in name or "\\" in name:
            raise SettingsError("config_file_name must be a bare file name")


_FieldKind = Literal["str", "int", "bool"]

_FIELD_KINDS: Final[dict[str, _FieldKind]] = {
    "log_level": "str",
    "log_format": "str",
    "max_concurrent_reads": "int",
    "config_file_name": "str",
    "no_color": "bool",
}


def load_settings(
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> EngineSettings:
    """Load effective settings with deterministic precedence: CLI > env > defaults."""

    env_map = os.environ if environ is None else environ
    values: dict[str, Any] = {}

    for name, kind in _FIELD_KINDS.items():
        env_name = env_name_for(name)
        raw = env_map.get(env_name)
        if raw is not None and raw.strip():
            values[name] = _coerce_env(raw, kind, env_name)

    known = {item.name for item in fields(EngineSettings)}
    for name, value in (overrides or {}).items():
        if name not in known:
            raise SettingsError(f"unknown setting {name!r}")
        if value is not None:
            values[name] = value

    if "log_level" in values and isinstance(values["log_level"], str):
        values["log_level"] = values["log_level"].strip().upper()
    return replace(EngineSettings(), **values)


def env_name_for(field_name: str) -> str:
    return ENV_PREFIX + field_name.upper()


def _coerce_env(raw: str, kind: _FieldKind, env_name: str) -> object:
    value = raw.strip()
    if kind == "str":
        return value
    if kind == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise SettingsError(f"{env_name} must be an integer") from exc

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise SettingsError(f"{env_name} must be a boolean")


__all__ = ["EngineSettings", "SettingsError", "env_name_for", "load_settings"]
