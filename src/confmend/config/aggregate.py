"""Read every auxiliary ``*confmend.jsonc`` document in a directory."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog

from confmend.config.errors import ConfigError
from confmend.config.reader import read_config
from confmend.constants import CONFIG_FILE_NAME
from confmend.schema.context import ConfigContext
from confmend.schema.project import PROJECT_CONTEXT
from confmend.utils.concurrency import gather_bounded

_logger = structlog.get_logger(__name__)

DEFAULT_MAX_CONCURRENCY = 8


def discover_documents(directory: Path, *, suffix: str = CONFIG_FILE_NAME) -> list[Path]:
    """Return files in ``directory`` whose name ends with ``suffix``, sorted by name."""

    if not directory.is_dir():
        return []
    return sorted(
        (entry for entry in directory.iterdir() if entry.is_file() and entry.name.endswith(suffix)),
        key=lambda entry: entry.name,
    )


async def read_all(
    directory: Path,
    *,
    context: ConfigContext = PROJECT_CONTEXT,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    suffix: str = CONFIG_FILE_NAME,
) -> list[dict[str, Any]]:
    """Apply the recovering reader to each document; keep only the valid ones.

    Results follow file-name order. A per-file failure is logged and skipped;
    the batch itself never raises for document or filesystem problems.
    """

    directory = Path(directory)
    try:
        candidates = await asyncio.to_thread(discover_documents, directory, suffix=suffix)
    except OSError as exc:
        _logger.warning("config_directory_unreadable", directory=str(directory), error=str(exc))
        return []

    if not candidates:
        return []

    outcomes = await gather_bounded(
        (read_config(candidate, context=context) for candidate in candidates),
        max_concurrency,
    )

    documents: list[dict[str, Any]] = []
    for candidate, outcome in zip(candidates, outcomes, strict=True):
        if isinstance(outcome, (ConfigError, OSError)):
            _logger.warning("config_document_skipped", path=str(candidate), error=str(outcome))
            continue
        if isinstance(outcome, Exception):
            _logger.error("config_document_failed", path=str(candidate), error=repr(outcome))
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            _logger.warning("config_document_skipped", path=str(candidate), error="no valid document")
            continue
        documents.append(outcome)

    _logger.info(
        "config_documents_read",
        directory=str(directory),
        found=len(candidates),
        valid=len(documents),
    )
    return documents


__all__ = ["DEFAULT_MAX_CONCURRENCY", "discover_documents", "read_all"]
