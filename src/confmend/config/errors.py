"""Typed failures raised by the reconciliation engine."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from confmend.schema.validator import ValidationIssue


class ConfigError(Exception):
    """Base class for every engine failure."""


class ParseError(ConfigError, ValueError):
    """Document text is not valid JSON-with-comments."""

    def __init__(self, reason: str, *, path: Path | None = None) -> None:
        self.path = path
        self.reason = reason
        where = f" in {path}" if path is not None else ""
        super().__init__(f"unable to parse config{where}: {reason}")


class SchemaViolation(ConfigError, ValueError):
    """Document fails structural validation; carries every issue found."""

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.dotted}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class IOFailure(ConfigError):
    """Filesystem failure while reading, staging, committing, or restoring a document."""

    def __init__(self, path: Path, operation: str, reason: str) -> None:
        self.path = path
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed for {path}: {reason}")


class UnrecoverableConfig(ConfigError):
    """No recovery layer produced a valid document."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"no valid config could be recovered from {path}")


__all__ = [
    "ConfigError",
    "IOFailure",
    "ParseError",
    "SchemaViolation",
    "UnrecoverableConfig",
]
