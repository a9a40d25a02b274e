"""Logging configuration and diagnostic context helpers."""

from confmend.observability.logging import (
    LOG_FORMATS,
    configure_logging,
    diagnostic_scope,
    parse_log_level,
    redact_event_dict,
    redact_text,
)

__all__ = [
    "LOG_FORMATS",
    "configure_logging",
    "diagnostic_scope",
    "parse_log_level",
    "redact_event_dict",
    "redact_text",
]
