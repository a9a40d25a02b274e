"""Unit tests for the project schema, default document, and reconciliation context."""

from __future__ import annotations

import pytest

from confmend.schema import (
    DEFAULT_CONFIG,
    MIGRATABLE_KEYS,
    PROJECT_CONTEXT,
    PROJECT_SCHEMA,
    ConfigContext,
    array_of,
    clean_repository_url,
    default_config,
    integer,
    obj,
    string,
    validate,
)


def test_default_config_satisfies_project_schema() -> None:
    assert validate(PROJECT_SCHEMA, default_config()) == ()


def test_migratable_keys_are_declared_top_level_fields() -> None:
    assert set(MIGRATABLE_KEYS) <= set(PROJECT_SCHEMA.properties)
    assert "projectLicense" in MIGRATABLE_KEYS
    assert "projectName" not in MIGRATABLE_KEYS


def test_default_config_returns_independent_copies() -> None:
    first = default_config()
    first["features"]["i18n"] = True

    assert default_config()["features"]["i18n"] is False


def test_context_default_is_frozen_and_copied() -> None:
    with pytest.raises(TypeError):
        PROJECT_CONTEXT.default["projectName"] = "x"  # type: ignore[index]

    document = PROJECT_CONTEXT.default_document()
    document["codeStyle"]["lineWidth"] = 120

    assert PROJECT_CONTEXT.default["codeStyle"]["lineWidth"] == 80


def test_exported_default_is_read_only_at_every_depth() -> None:
    assert DEFAULT_CONFIG is PROJECT_CONTEXT.default

    with pytest.raises(TypeError):
        DEFAULT_CONFIG["features"]["i18n"] = True  # type: ignore[index]
    with pytest.raises(TypeError):
        DEFAULT_CONFIG["codeStyle"]["lineWidth"] = 1  # type: ignore[index]

    assert default_config()["features"]["i18n"] is False


def test_context_freezes_nested_lists_and_thaws_copies() -> None:
    context = ConfigContext(
        schema=obj({"tags": array_of(string()), "inner": obj({"n": integer()})}),
        default={"tags": ["a", "b"], "inner": {"n": 1}},
    )

    assert context.default["tags"] == ("a", "b")
    with pytest.raises(TypeError):
        context.default["inner"]["n"] = 2  # type: ignore[index]

    document = context.default_document()
    document["tags"].append("c")
    document["inner"]["n"] = 2

    assert document == {"tags": ["a", "b", "c"], "inner": {"n": 2}}
    assert context.default_document() == {"tags": ["a", "b"], "inner": {"n": 1}}


def test_context_rejects_invalid_default() -> None:
    with pytest.raises(ValueError, match="default document does not satisfy its schema"):
        ConfigContext(schema=obj({"a": integer()}), default={"a": "one"})


def test_context_rejects_undeclared_migratable_key() -> None:
    with pytest.raises(ValueError, match="migratable keys are not declared"):
        ConfigContext(schema=obj({"a": integer()}), default={"a": 1}, migratable_keys=("b",))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("git+https://github.com/acme/site.git", "acme/site"),
        ("https://www.gitlab.com/acme/site", "acme/site"),
        ("bitbucket.com/acme/site.GIT", "acme/site"),
        ("  acme/site  ", "acme/site"),
        ("github.com/github.com/acme/site.git.git", "acme/site"),
    ],
)
def test_clean_repository_url(raw: str, expected: str) -> None:
    assert clean_repository_url(raw) == expected
    assert clean_repository_url(expected) == expected
