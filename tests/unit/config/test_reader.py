"""
confmend - unit tests for the layered-recovery reader

File: tests/unit/config/test_reader.py

Purpose
- Validate accept -> merge defaults -> field repair -> restore backup -> give up.

What this test file should cover
- Missing, blank, and ``{}`` documents read as ``None``.
- Valid documents are returned without rewriting the file.
- Missing fields are filled from defaults and persisted.
- Invalid fields are repaired field by field, persisted, and logged.
- Unparsable or non-object documents fall back to a valid backup.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

import pytest
from structlog.testing import capture_logs

from confmend.config import UnrecoverableConfig, parse_jsonc, read_config, require_config, write_config
from confmend.schema import PROJECT_SCHEMA, default_config, is_valid


async def test_missing_file_reads_as_none(tmp_path: Path) -> None:
    assert await read_config(tmp_path / "confmend.jsonc") is None


@pytest.mark.parametrize("content", ["", "   \n", "{}", "// only a comment\n{ }"])
async def test_empty_documents_read_as_none(tmp_path: Path, content: str) -> None:
    path = tmp_path / "confmend.jsonc"
    path.write_text(content, encoding="utf-8")

    assert await read_config(path) is None
    assert path.read_text(encoding="utf-8") == content


async def test_valid_document_is_returned_without_rewrite(
    tmp_path: Path,
    valid_document: dict[str, Any],
    write_json: Any,
) -> None:
    path = write_json(tmp_path / "confmend.jsonc", valid_document)
    before = path.read_text(encoding="utf-8")

    assert await read_config(path) == valid_document
    assert path.read_text(encoding="utf-8") == before


async def test_missing_fields_are_filled_from_defaults_and_persisted(
    tmp_path: Path,
    write_json: Any,
) -> None:
    partial = {"projectName": "acme", "features": {"docker": True}}
    path = write_json(tmp_path / "confmend.jsonc", partial)

    document = await read_config(path)

    assert document is not None
    assert document["projectName"] == "acme"
    assert document["features"]["docker"] is True
    assert document["features"]["themeMode"] == "dark-light"
    assert is_valid(PROJECT_SCHEMA, document)
    assert parse_jsonc(path.read_text(encoding="utf-8")) == document


async def test_invalid_fields_are_repaired_and_logged(
    tmp_path: Path,
    valid_document: dict[str, Any],
    write_json: Any,
) -> None:
    broken = dict(valid_document)
    broken["projectFramework"] = "cobol"
    broken["codeStyle"] = dict(valid_document["codeStyle"], lineWidth=-3)
    broken["legacyField"] = "drop me"
    path = write_json(tmp_path / "confmend.jsonc", broken)

    with capture_logs() as logs:
        document = await read_config(path)

    assert document is not None
    assert document["projectFramework"] == "nextjs"
    assert document["codeStyle"]["lineWidth"] == 80
    assert document["projectName"] == "acme-site"
    assert document["features"]["i18n"] is True
    assert "legacyField" not in document
    assert parse_jsonc(path.read_text(encoding="utf-8")) == document

    repaired = [entry for entry in logs if entry["event"] == "config_repaired"]
    assert len(repaired) == 1
    assert repaired[0]["changed_keys"] == ["projectFramework", "codeStyle.lineWidth"]
    assert repaired[0]["invalid_paths"] == ["projectFramework", "codeStyle.lineWidth", "legacyField"]


async def test_unparsable_document_is_restored_from_valid_backup(
    tmp_path: Path,
    valid_document: dict[str, Any],
    write_json: Any,
) -> None:
    path = tmp_path / "confmend.jsonc"
    backup = write_json(tmp_path / "confmend.jsonc.backup", valid_document)
    path.write_text('{"projectName": "acme", oops', encoding="utf-8")

    document = await read_config(path)

    assert document == valid_document
    assert path.read_bytes() == backup.read_bytes()


async def test_non_object_root_uses_backup_or_gives_up(
    tmp_path: Path,
    valid_document: dict[str, Any],
    write_json: Any,
) -> None:
    path = write_json(tmp_path / "confmend.jsonc", ["not", "an", "object"])

    assert await read_config(path) is None

    write_json(tmp_path / "confmend.jsonc.backup", valid_document)
    assert await read_config(path) == valid_document


async def test_unparsable_document_without_usable_backup_is_none(tmp_path: Path) -> None:
    path = tmp_path / "confmend.jsonc"
    path.write_text("<<<garbage>>>", encoding="utf-8")
    (tmp_path / "confmend.jsonc.backup").write_text("{also garbage", encoding="utf-8")

    with capture_logs() as logs:
        assert await read_config(path) is None

    assert path.read_text(encoding="utf-8") == "<<<garbage>>>"
    assert {entry["event"] for entry in logs} >= {"config_parse_failed", "config_backup_unusable"}


async def test_interrupted_write_leaves_temp_file_ignored(
    tmp_path: Path,
    valid_document: dict[str, Any],
) -> None:
    path = tmp_path / "confmend.jsonc"
    await write_config(path, valid_document)
    shutil.copy2(path, tmp_path / "confmend.jsonc.backup")
    (tmp_path / "confmend.jsonc.tmp").write_text('{"projectName": "half-writ', encoding="utf-8")

    assert await read_config(path) == valid_document


async def test_require_config_raises_when_unrecoverable(tmp_path: Path) -> None:
    path = tmp_path / "confmend.jsonc"
    path.write_text("nope", encoding="utf-8")

    with pytest.raises(UnrecoverableConfig):
        await require_config(path)


async def test_default_based_repair_uses_fresh_copies(tmp_path: Path, write_json: Any) -> None:
    path = write_json(tmp_path / "confmend.jsonc", {"projectFramework": 7})

    document = await read_config(path)

    assert document is not None
    document["features"]["commands"].append("mutated")
    assert default_config()["features"]["commands"] == []


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
async def test_non_finite_number_without_backup_reads_as_none(
    tmp_path: Path,
    valid_document: dict[str, Any],
    literal: str,
) -> None:
    path = tmp_path / "confmend.jsonc"
    text = json.dumps(dict(valid_document, projectFramework="cobol", customRules={"x": 0}))
    path.write_text(text.replace('{"x": 0}', f'{{"x": {literal}}}'), encoding="utf-8")

    with capture_logs() as logs:
        assert await read_config(path) is None

    assert "config_parse_failed" in {entry["event"] for entry in logs}
    assert literal in path.read_text(encoding="utf-8")


async def test_non_finite_number_falls_back_to_backup(
    tmp_path: Path,
    valid_document: dict[str, Any],
    write_json: Any,
) -> None:
    path = write_json(tmp_path / "confmend.jsonc", dict(valid_document, customRules={"x": float("inf")}))
    write_json(tmp_path / "confmend.jsonc.backup", valid_document)

    assert await read_config(path) == valid_document
    assert "Infinity" not in path.read_text(encoding="utf-8")


async def test_document_with_byte_order_mark_is_accepted(
    tmp_path: Path,
    valid_document: dict[str, Any],
) -> None:
    path = tmp_path / "confmend.jsonc"
    path.write_bytes(b"\xef\xbb\xbf" + json.dumps(valid_document, indent=2).encode("utf-8"))
    before = path.read_bytes()

    assert await read_config(path) == valid_document
    assert path.read_bytes() == before
