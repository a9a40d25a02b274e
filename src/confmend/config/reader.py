"""
confmend - config reader with layered recovery

File: src/confmend/config/reader.py

Purpose
- Turn whatever is on disk into a schema-valid document, escalating through
  progressively more invasive recovery layers.

Functional requirements
- accept -> merge defaults -> field repair -> restore backup -> give up.
- Parse errors and validation failures are recovered here and never raised.
- Every automated edit that is persisted logs the exact field paths it touched.
- Filesystem errors while reading or persisting raise ``IOFailure``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog

from confmend.config.errors import IOFailure, ParseError, UnrecoverableConfig
from confmend.config.jsonc import load_jsonc_file
from confmend.config.merge import deep_merge
from confmend.config.repair import repair
from confmend.config.store import write_config
from confmend.observability.logging import diagnostic_scope
from confmend.schema.context import ConfigContext
from confmend.schema.project import PROJECT_CONTEXT
from confmend.schema.validator import is_valid, validate
from confmend.utils.fs import backup_path_for, restore_from_backup

_logger = structlog.get_logger(__name__)

_MISSING = object()


def _load(path: Path) -> Any:
    if not path.is_file():
        return _MISSING
    return load_jsonc_file(path)


async def read_config(
    path: Path,
    *,
    context: ConfigContext = PROJECT_CONTEXT,
) -> dict[str, Any] | None:
    """Read ``path`` and return a valid document, or ``None`` when none can be produced.

    ``None`` covers a missing file, an empty document, and the case where every
    recovery layer failed; callers fall back to the default document.
    """

    path = Path(path)
    with diagnostic_scope(config_path=str(path)):
        try:
            loaded = await asyncio.to_thread(_load, path)
        except ParseError as exc:
            _logger.warning("config_parse_failed", error=exc.reason)
            return await _recover_from_backup(path, context)
        except OSError as exc:
            raise IOFailure(path, "read", str(exc)) from exc

        if loaded is _MISSING:
            _logger.debug("config_missing")
            return None
        if loaded is None or loaded == {}:
            _logger.info("config_empty")
            return None
        if not isinstance(loaded, dict):
            _logger.warning("config_root_not_object", found=type(loaded).__name__)
            return await _recover_from_backup(path, context)

        issues = validate(context.schema, loaded)
        if not issues:
            return loaded

        invalid_paths = [issue.dotted for issue in issues]
        _logger.info("config_invalid", issues=[str(issue) for issue in issues])

        merged = deep_merge(context.default, loaded)
        if is_valid(context.schema, merged):
            await write_config(path, merged, context=context)
            _logger.info("config_defaults_merged", invalid_paths=invalid_paths)
            return merged

        result = repair(
            loaded,
            context.default_document(),
            context.schema,
            normalizers=context.normalizers,
        )
        fixed = result.fixed_config
        if isinstance(fixed, dict) and is_valid(context.schema, fixed):
            await write_config(path, fixed, context=context)
            _logger.warning(
                "config_repaired",
                changed_keys=list(result.changed_keys),
                missing_keys=list(result.missing_keys),
                invalid_paths=invalid_paths,
            )
            return fixed

        _logger.warning("config_repair_failed", invalid_paths=invalid_paths)
        return await _recover_from_backup(path, context)


async def _recover_from_backup(path: Path, context: ConfigContext) -> dict[str, Any] | None:
    backup_path = backup_path_for(path)
    try:
        loaded = await asyncio.to_thread(_load, backup_path)
    except (ParseError, OSError) as exc:
        _logger.warning("config_backup_unusable", backup_path=str(backup_path), error=str(exc))
        return None

    if loaded is _MISSING:
        _logger.warning("config_unrecoverable", reason="no backup")
        return None
    if not isinstance(loaded, dict) or not is_valid(context.schema, loaded):
        _logger.warning("config_unrecoverable", reason="backup invalid")
        return None

    # The backup is valid even if copying it back fails; the failure is logged.
    await asyncio.to_thread(restore_from_backup, path)
    return loaded


async def require_config(
    path: Path,
    *,
    context: ConfigContext = PROJECT_CONTEXT,
) -> dict[str, Any]:
    """Like ``read_config`` but raise ``UnrecoverableConfig`` instead of returning ``None``."""

    document = await read_config(path, context=context)
    if document is None:
        raise UnrecoverableConfig(Path(path))
    return document


__all__ = ["read_config", "require_config"]
