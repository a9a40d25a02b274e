"""
confmend - config persistence

File: src/confmend/config/store.py

Purpose
- Serialize validated documents deterministically and commit them through the
  single durable-write primitive.

Functional requirements
- Validation happens before any filesystem access; invalid documents raise
  ``SchemaViolation`` and leave disk untouched.
- Declared keys are written in schema declaration order; free-form keys sorted.
- Filesystem errors surface as ``IOFailure`` chained to the original ``OSError``.
- ``update_config`` layers a partial document over the current one and reports
  success as a boolean.

Non-functional requirements
- Blocking I/O runs in a worker thread so a started write finishes even when
  the awaiting task is cancelled.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from confmend.config.annotate import annotate
from confmend.config.errors import ConfigError, IOFailure, SchemaViolation
from confmend.config.merge import deep_merge
from confmend.schema.context import ConfigContext
from confmend.schema.nodes import LeafKind, LeafNode, ObjectNode, SchemaNode
from confmend.schema.project import PROJECT_CONTEXT
from confmend.schema.validator import validate
from confmend.utils.fs import durable_write

_logger = structlog.get_logger(__name__)


def serialize(document: Mapping[str, Any], schema: ObjectNode) -> str:
    """Render ``document`` as annotated, two-space indented JSONC text."""

    ordered = _order(document, schema)
    text = json.dumps(ordered, indent=2, ensure_ascii=False, allow_nan=False)
    return annotate(text + "\n")


def _order(value: Any, schema: SchemaNode | None) -> Any:
    if isinstance(value, Mapping):
        if isinstance(schema, ObjectNode):
            ordered: dict[str, Any] = {}
            for name, child in schema.properties.items():
                if name in value:
                    ordered[name] = _order(value[name], child)
            for name in sorted(key for key in value if key not in schema.properties):
                ordered[name] = _order(value[name], None)
            return ordered
        return {name: _order(value[name], None) for name in sorted(value)}
    if isinstance(value, list):
        items = schema.items if isinstance(schema, LeafNode) and schema.kind is LeafKind.ARRAY else None
        return [_order(item, items) for item in value]
    return value


async def write_config(
    path: Path,
    document: Mapping[str, Any],
    *,
    context: ConfigContext = PROJECT_CONTEXT,
) -> None:
    """Validate, serialize, and durably replace ``path`` with ``document``."""

    issues = validate(context.schema, document)
    if issues:
        _logger.warning(
            "config_write_rejected",
            path=str(path),
            issues=[f"{issue.dotted}: {issue.message}" for issue in issues],
        )
        raise SchemaViolation(issues)

    text = serialize(document, context.schema)
    try:
        await asyncio.to_thread(durable_write, path, text)
    except OSError as exc:
        _logger.error("config_write_failed", path=str(path), error=str(exc))
        raise IOFailure(path, "write", str(exc)) from exc
    _logger.debug("config_written", path=str(path), bytes=len(text.encode("utf-8")))


async def update_config(
    path: Path,
    updates: Mapping[str, Any],
    *,
    context: ConfigContext = PROJECT_CONTEXT,
) -> bool:
    """Deep-merge ``updates`` into the document at ``path`` and persist the result.

    The current document comes from the recovering reader; when nothing valid
    can be read, the default document is the base. Returns ``False`` when the
    merged result is invalid or cannot be written.
    """

    from confmend.config.reader import read_config

    try:
        current = await read_config(path, context=context)
    except ConfigError as exc:
        _logger.warning("config_update_read_failed", path=str(path), error=str(exc))
        return False

    base = current if current is not None else context.default_document()
    merged = deep_merge(base, updates)
    try:
        await write_config(path, merged, context=context)
    except SchemaViolation as exc:
        _logger.warning(
            "config_update_invalid",
            path=str(path),
            issues=[f"{issue.dotted}: {issue.message}" for issue in exc.issues],
        )
        return False
    except IOFailure as exc:
        _logger.error("config_update_failed", path=str(path), error=str(exc))
        return False

    _logger.info("config_updated", path=str(path), fields=sorted(updates))
    return True


__all__ = ["serialize", "update_config", "write_config"]
