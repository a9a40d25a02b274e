"""
confmend - structured logging

File: src/confmend/observability/logging.py

Purpose
- Configure structlog once per process: level filtering, UTC timestamps,
  secret redaction, and either JSON-lines or console rendering.

Functional requirements
- Engine modules log through ``structlog.get_logger(__name__)`` with event-named
  messages and key-value fields; this module only decides how they render.
- ``diagnostic_scope`` binds correlation fields (for example ``config_path``)
  for the duration of a block, including across ``await`` points.
- Secret-looking keys and values never reach the sink unredacted.

Non-functional requirements
- Output goes to stderr by default so stdout stays reserved for command results.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any, Final, TextIO

import structlog

LOG_FORMATS: Final[tuple[str, ...]] = ("text", "json")

_REDACTED_VALUE: Final[str] = "***REDACTED***"

_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "passphrase",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "cookie",
    "private_key",
)

_SENSITIVE_ASSIGNMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(api[_-]?key|token|password|secret|authorization)\b\s*([:=])\s*([^\s,;]+)"
)
_BEARER_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/-]+=*")
_SECRET_KEY_PATTERN: Final[re.Pattern[str]] = re.compile(r"\bsk-[A-Za-z0-9_-]{12,}\b")

# Keys structlog itself adds; never treated as user payload.
_RESERVED_KEYS: Final[frozenset[str]] = frozenset({"event", "level", "timestamp", "logger"})


def configure_logging(
    level: int | str = "INFO",
    log_format: str = "text",
    stream: TextIO | None = None,
    *,
    colors: bool | None = None,
) -> None:
    """Install the process-wide structlog pipeline.

    Parameters
    ----------
    level:
        Minimum level name or number; lower events are dropped before rendering.
    log_format:
        ``"json"`` for sorted-key JSON lines, ``"text"`` for the console renderer.
    stream:
        Destination text stream. Defaults to ``sys.stderr``.
    colors:
        Force console colors on or off; by default colors follow the stream's
        tty status and the ``NO_COLOR`` convention.
    """

    numeric_level = parse_log_level(level)
    if log_format not in LOG_FORMATS:
        raise ValueError(f"unsupported log format {log_format!r}; expected one of {LOG_FORMATS}")

    sink = stream if stream is not None else sys.stderr
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_event_dict,
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        if colors is None:
            colors = _stream_supports_color(sink)
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sink),
        cache_logger_on_first_use=False,
    )


def parse_log_level(value: int | str) -> int:
    """Resolve a level name or number to the stdlib numeric level."""

    if isinstance(value, bool):
        raise ValueError("level must be int or str, got bool")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


@contextmanager
def diagnostic_scope(**fields: object) -> Iterator[None]:
    """Bind non-empty ``fields`` to every event logged inside the block."""

    bound = {key: value for key, value in fields.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


def redact_event_dict(
    logger: object,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """structlog processor masking secret-looking keys and values."""

    for key in list(event_dict):
        value = event_dict[key]
        if key in _RESERVED_KEYS:
            if isinstance(value, str):
                event_dict[key] = redact_text(value)
            continue
        event_dict[key] = _redact_value(value, key_context=key)
    return event_dict


def redact_text(text: str) -> str:
    redacted = _SENSITIVE_ASSIGNMENT_PATTERN.sub(
        lambda match: f"{match.group(1)}{match.group(2)}{_REDACTED_VALUE}", text
    )
    redacted = _BEARER_TOKEN_PATTERN.sub(f"Bearer {_REDACTED_VALUE}", redacted)
    return _SECRET_KEY_PATTERN.sub(_REDACTED_VALUE, redacted)


def _redact_value(value: Any, *, key_context: str | None) -> Any:
    if key_context is not None and _requires_redaction_for_key(key_context):
        return _REDACTED_VALUE

    if isinstance(value, str):
        return redact_text(value)

    if isinstance(value, (list, tuple)):
        return [_redact_value(item, key_context=None) for item in value]

    if isinstance(value, dict):
        return {key: _redact_value(item, key_context=str(key)) for key, item in value.items()}

    return value


def _requires_redaction_for_key(key: str) -> bool:
    key_lower = key.lower()
    return any(term in key_lower for term in _SENSITIVE_KEY_TERMS)


def _stream_supports_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


__all__ = [
    "LOG_FORMATS",
    "configure_logging",
    "diagnostic_scope",
    "parse_log_level",
    "redact_event_dict",
    "redact_text",
]
