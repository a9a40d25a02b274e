"""Load or create a project's configuration, with the auxiliary documents beside it."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import structlog

from confmend.config.aggregate import DEFAULT_MAX_CONCURRENCY, read_all
from confmend.config.detect import detected_overrides
from confmend.config.merge import deep_merge
from confmend.config.migrate import migrate
from confmend.config.reader import read_config
from confmend.config.store import write_config
from confmend.constants import CONFIG_FILE_NAME, MIGRATION_SOURCE_NAME, MULTI_CONFIG_DIRNAME
from confmend.schema.context import ConfigContext
from confmend.schema.project import PROJECT_CONTEXT

_logger = structlog.get_logger(__name__)

ConfigSource = Literal["file", "created", "defaults"]


@dataclass(frozen=True, slots=True)
class LoadedConfig:
    """Primary document, auxiliary documents, and where the primary came from."""

    config: dict[str, Any]
    extra: tuple[dict[str, Any], ...] = field(default_factory=tuple)
    source: ConfigSource = "file"


def _needs_creation(path: Path) -> bool:
    if not path.is_file():
        return True
    content = path.read_text(encoding="utf-8-sig", errors="replace").strip()
    return not content or content == "{}"


async def ensure_config(
    cwd: Path,
    *,
    context: ConfigContext = PROJECT_CONTEXT,
    config_file_name: str = CONFIG_FILE_NAME,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> LoadedConfig:
    """Return the project's configuration, writing a detected one when none exists.

    Auxiliary documents under ``<cwd>/confmend/`` are read alongside, and a
    pending ``confmend-tmp.jsonc`` import is applied. When the primary file
    cannot be recovered the default document is returned with
    ``source="defaults"`` and a warning is logged.
    """

    root = Path(cwd)
    config_path = root / config_file_name
    extra = await read_all(
        root / MULTI_CONFIG_DIRNAME,
        context=context,
        max_concurrency=max_concurrency,
        suffix=config_file_name,
    )
    if extra:
        _logger.info("config_auxiliary_documents_found", count=len(extra))

    source: ConfigSource = "file"
    if await asyncio.to_thread(_needs_creation, config_path):
        overrides = await asyncio.to_thread(detected_overrides, root)
        await write_config(config_path, deep_merge(context.default, overrides), context=context)
        _logger.info("config_created", path=str(config_path), detected=sorted(overrides))
        source = "created"

    legacy_path = root / MIGRATION_SOURCE_NAME
    if legacy_path.is_file():
        await migrate(legacy_path, config_path, context=context)

    document = await read_config(config_path, context=context)
    if document is None:
        _logger.warning(
            "config_fallback_to_defaults",
            path=str(config_path),
            reason="config could not be validated",
        )
        return LoadedConfig(config=context.default_document(), extra=tuple(extra), source="defaults")

    return LoadedConfig(config=document, extra=tuple(extra), source=source)


__all__ = ["ConfigSource", "LoadedConfig", "ensure_config"]
