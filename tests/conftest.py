"""Shared fixtures for the confmend test suite."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog

from confmend.schema import default_config


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def valid_document() -> dict[str, Any]:
    document = default_config()
    document["projectName"] = "acme-site"
    document["projectAuthor"] = "acme"
    document["projectFramework"] = "astro"
    document["features"]["i18n"] = True
    return document


@pytest.fixture
def write_json() -> Any:
    def _write(path: Path, payload: object) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    return _write
