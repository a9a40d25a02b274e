"""
confmend - legacy document import

File: src/confmend/config/migrate.py

Purpose
- Pull the allow-listed top-level fields out of an external document and merge
  them into the current configuration through the normal update path.

Functional requirements
- Keys outside ``ConfigContext.migratable_keys`` are discarded silently.
- The external source file is deleted only after the merged document has been
  written successfully; any failure leaves it in place.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from confmend.config.errors import ParseError
from confmend.config.jsonc import load_jsonc_file
from confmend.config.store import update_config
from confmend.schema.context import ConfigContext
from confmend.schema.project import PROJECT_CONTEXT

_logger = structlog.get_logger(__name__)


def select_migratable(document: Mapping[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    """Return the allow-listed entries of ``document`` that carry a value."""

    return {key: document[key] for key in allowed if document.get(key) is not None}


async def migrate_document(
    document: Mapping[str, Any],
    current_path: Path,
    *,
    context: ConfigContext = PROJECT_CONTEXT,
) -> bool:
    """Merge the recognized fields of ``document`` into the config at ``current_path``."""

    selected = select_migratable(document, context.migratable_keys)
    dropped = sorted(key for key in document if key not in selected)
    if dropped:
        _logger.debug("config_migration_keys_dropped", fields=dropped)

    success = await update_config(current_path, selected, context=context)
    if success:
        _logger.info("config_migrated", path=str(current_path), fields=sorted(selected))
    else:
        _logger.warning("config_migration_failed", path=str(current_path))
    return success


async def migrate(
    source_path: Path,
    current_path: Path,
    *,
    context: ConfigContext = PROJECT_CONTEXT,
) -> bool:
    """Import ``source_path`` into ``current_path`` and remove the source on success."""

    source_path = Path(source_path)
    try:
        parsed = await asyncio.to_thread(load_jsonc_file, source_path)
    except (ParseError, OSError) as exc:
        _logger.warning("config_migration_source_unreadable", source=str(source_path), error=str(exc))
        return False

    if not isinstance(parsed, dict):
        _logger.warning(
            "config_migration_source_unreadable",
            source=str(source_path),
            error="root is not an object",
        )
        return False

    if not await migrate_document(parsed, current_path, context=context):
        return False

    try:
        await asyncio.to_thread(source_path.unlink, missing_ok=True)
    except OSError as exc:
        _logger.warning("config_migration_cleanup_failed", source=str(source_path), error=str(exc))
    return True


__all__ = ["migrate", "migrate_document", "select_migratable"]
