"""
confmend - unit tests for structured logging setup

File: tests/unit/observability/test_structlog_setup.py

Purpose
- Validate JSON-lines rendering, level filtering, correlation binding, and
  secret redaction of the structlog pipeline.
"""

from __future__ import annotations

import io
import json
import logging

import pytest
import structlog

from confmend.observability import (
    configure_logging,
    diagnostic_scope,
    parse_log_level,
    redact_text,
)


def _json_lines(buffer: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]


def test_json_output_is_one_object_per_event() -> None:
    buffer = io.StringIO()
    configure_logging("DEBUG", "json", buffer)
    logger = structlog.get_logger("confmend.tests")

    logger.info("config_written", path="/tmp/confmend.jsonc")
    logger.debug("config_documents_read", found=3, valid=2)

    records = _json_lines(buffer)
    assert [record["event"] for record in records] == ["config_written", "config_documents_read"]
    assert records[0]["level"] == "info"
    assert records[0]["path"] == "/tmp/confmend.jsonc"
    assert records[1]["valid"] == 2
    assert all("timestamp" in record for record in records)


def test_events_below_level_are_dropped() -> None:
    buffer = io.StringIO()
    configure_logging("WARNING", "json", buffer)
    logger = structlog.get_logger("confmend.tests")

    logger.info("config_written")
    logger.warning("config_repaired", changed_keys=["projectFramework"])

    assert [record["event"] for record in _json_lines(buffer)] == ["config_repaired"]


def test_secret_keys_and_values_are_redacted() -> None:
    buffer = io.StringIO()
    configure_logging("INFO", "json", buffer)
    logger = structlog.get_logger("confmend.tests")

    logger.info(
        "remote_call token=abc123",
        api_token="tok-FAKE",
        headers={"Authorization": "Bearer abc.def", "accept": "json"},
        note="key sk-FAKE1234567890abcd in text",
    )

    output = buffer.getvalue()
    assert "tok-FAKE" not in output
    assert "abc.def" not in output
    assert "sk-FAKE1234567890abcd" not in output
    assert "abc123" not in output
    record = _json_lines(buffer)[0]
    assert record["api_token"] == "***REDACTED***"
    assert record["headers"] == {"Authorization": "***REDACTED***", "accept": "json"}


def test_diagnostic_scope_binds_fields_for_the_block() -> None:
    buffer = io.StringIO()
    configure_logging("INFO", "json", buffer)
    logger = structlog.get_logger("confmend.tests")

    with diagnostic_scope(config_path="/srv/confmend.jsonc", attempt=None):
        logger.info("inside")
    logger.info("outside")

    inside, outside = _json_lines(buffer)
    assert inside["config_path"] == "/srv/confmend.jsonc"
    assert "attempt" not in inside
    assert "config_path" not in outside


def test_text_format_renders_event_name() -> None:
    buffer = io.StringIO()
    configure_logging("INFO", "text", buffer, colors=False)

    structlog.get_logger("confmend.tests").warning("config_fallback_to_defaults", reason="x")

    text = buffer.getvalue()
    assert "config_fallback_to_defaults" in text
    assert "reason=x" in text


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError, match="unsupported log format"):
        configure_logging("INFO", "xml", io.StringIO())


@pytest.mark.parametrize(
    ("value", "expected"),
    [("debug", logging.DEBUG), (" Warning ", logging.WARNING), (logging.ERROR, logging.ERROR)],
)
def test_parse_log_level_accepts_names_and_numbers(value: int | str, expected: int) -> None:
    assert parse_log_level(value) == expected


@pytest.mark.parametrize("value", ["loud", True])
def test_parse_log_level_rejects_garbage(value: object) -> None:
    with pytest.raises(ValueError):
        parse_log_level(value)  # type: ignore[arg-type]


def test_redact_text_masks_assignments_and_bearer_tokens() -> None:
    redacted = redact_text("password: hunter2 Authorization=xyz bearer QWERTY.123")

    assert "hunter2" not in redacted
    assert "xyz" not in redacted
    assert "QWERTY.123" not in redacted
    assert redacted.startswith("password:***REDACTED***")
