"""
confmend - unit tests for line-by-line repair

File: tests/unit/config/test_repair.py

Purpose
- Validate that repair replaces only the invalid or missing fields, keeps
  valid siblings verbatim, and is stable under a second pass.

What this test file should cover
- Changed vs missing bookkeeping with dotted nested paths.
- Whole-node replacement for non-object candidates.
- Arrays of objects drop invalid elements.
- Undeclared keys dropped unless the node allows extras.
- Idempotence on arbitrary damage to the project document.
"""

from __future__ import annotations

from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st
from structlog.testing import capture_logs

from confmend.config import repair
from confmend.schema import (
    PROJECT_CONTEXT,
    PROJECT_SCHEMA,
    array_of,
    boolean,
    default_config,
    enum,
    integer,
    is_valid,
    obj,
    string,
)

_SMALL_SCHEMA = obj(
    {
        "name": string(),
        "mode": enum("fast", "slow"),
        "nested": obj({"size": integer(minimum=1), "on": boolean()}),
        "note": string(),
    },
    optional=("note",),
)
_SMALL_DEFAULT: dict[str, Any] = {
    "name": "default",
    "mode": "fast",
    "nested": {"size": 1, "on": False},
}


def test_invalid_leaf_is_replaced_and_valid_siblings_are_kept() -> None:
    candidate = {"name": "mine", "mode": "turbo", "nested": {"size": 4, "on": True}}

    result = repair(candidate, _SMALL_DEFAULT, _SMALL_SCHEMA)

    assert result.fixed_config == {
        "name": "mine",
        "mode": "fast",
        "nested": {"size": 4, "on": True},
    }
    assert result.changed_keys == ("mode",)
    assert result.missing_keys == ()


def test_nested_changes_and_missing_keys_are_prefixed() -> None:
    candidate = {"name": "mine", "mode": "slow", "nested": {"size": 0}}

    result = repair(candidate, _SMALL_DEFAULT, _SMALL_SCHEMA)

    assert result.fixed_config["nested"] == {"size": 1, "on": False}
    assert result.changed_keys == ("nested.size",)
    assert result.missing_keys == ("nested.on",)
    assert result.modified


def test_non_object_nested_value_is_replaced_wholesale() -> None:
    candidate = {"name": "mine", "mode": "slow", "nested": "oops"}

    result = repair(candidate, _SMALL_DEFAULT, _SMALL_SCHEMA)

    assert result.fixed_config["nested"] == {"size": 1, "on": False}
    assert result.changed_keys == ("nested",)


def test_non_object_root_falls_back_to_default() -> None:
    result = repair(["not", "an", "object"], _SMALL_DEFAULT, _SMALL_SCHEMA)

    assert result.fixed_config == _SMALL_DEFAULT
    assert result.changed_keys == ("<entire_object>",)


def test_valid_leaf_candidate_is_returned_unchanged() -> None:
    result = repair([1, 2], [], array_of(integer()))

    assert result.fixed_config == [1, 2]
    assert not result.modified


def test_optional_field_without_default_stays_absent_or_is_dropped() -> None:
    absent = repair(
        {"name": "a", "mode": "fast", "nested": {"size": 2, "on": True}},
        _SMALL_DEFAULT,
        _SMALL_SCHEMA,
    )
    wrong = repair(
        {"name": "a", "mode": "fast", "nested": {"size": 2, "on": True}, "note": 5},
        _SMALL_DEFAULT,
        _SMALL_SCHEMA,
    )

    assert "note" not in absent.fixed_config
    assert absent.missing_keys == ()
    assert "note" not in wrong.fixed_config
    assert wrong.changed_keys == ("note",)


def test_undeclared_keys_are_dropped() -> None:
    candidate = {"name": "a", "mode": "fast", "nested": {"size": 2, "on": True, "x": 1}, "legacy": 1}

    result = repair(candidate, _SMALL_DEFAULT, _SMALL_SCHEMA)

    assert "legacy" not in result.fixed_config
    assert "x" not in result.fixed_config["nested"]
    assert is_valid(_SMALL_SCHEMA, result.fixed_config)


def test_additional_properties_node_keeps_extras() -> None:
    schema = obj({"a": integer()}, additional_properties=True)

    result = repair({"a": "bad", "extra": [1]}, {"a": 0}, schema)

    assert result.fixed_config == {"a": 0, "extra": [1]}
    assert result.changed_keys == ("a",)


def test_array_of_objects_drops_invalid_elements() -> None:
    schema = obj({"hooks": array_of(obj({"cmd": string()}))})
    candidate = {"hooks": [{"cmd": "lint"}, {"cmd": 3}, "junk", {"cmd": "test"}]}

    result = repair(candidate, {"hooks": []}, schema)

    assert result.fixed_config == {"hooks": [{"cmd": "lint"}, {"cmd": "test"}]}
    assert result.changed_keys == ("hooks[1]", "hooks[2]")


def test_array_of_objects_non_list_uses_default() -> None:
    schema = obj({"hooks": array_of(obj({"cmd": string()}))})

    result = repair({"hooks": {"cmd": "lint"}}, {"hooks": [{"cmd": "x"}]}, schema)

    assert result.fixed_config == {"hooks": [{"cmd": "x"}]}
    assert result.changed_keys == ("hooks",)


def test_normalizer_cleans_repository_lists() -> None:
    candidate = default_config()
    candidate["customUserFocusedRepos"] = ["git+https://github.com/acme/site.git", "acme/tool"]

    result = repair(
        candidate,
        PROJECT_CONTEXT.default_document(),
        PROJECT_SCHEMA,
        normalizers=PROJECT_CONTEXT.normalizers,
    )

    assert result.fixed_config["customUserFocusedRepos"] == ["acme/site", "acme/tool"]
    assert result.changed_keys == ("customUserFocusedRepos",)


def test_repair_logs_missing_and_changed_separately() -> None:
    candidate = {"name": "a", "mode": "nope", "nested": {"size": 2}}

    with capture_logs() as logs:
        repair(candidate, _SMALL_DEFAULT, _SMALL_SCHEMA)

    events = {entry["event"]: entry for entry in logs}
    assert events["config_missing_fields_filled"]["fields"] == ["nested.on"]
    assert events["config_invalid_fields_replaced"]["fields"] == ["mode"]


def test_repair_does_not_mutate_inputs() -> None:
    candidate = {"name": "a", "mode": "nope", "nested": {"size": 2}}
    default = default_config()

    repair(candidate, default, PROJECT_SCHEMA)

    assert candidate == {"name": "a", "mode": "nope", "nested": {"size": 2}}
    assert default == default_config()


_JSON_LEAVES = st.none() | st.booleans() | st.integers(-5, 500) | st.text(max_size=12)
_JSON_VALUES = st.recursive(
    _JSON_LEAVES,
    lambda children: st.lists(children, max_size=3)
    | st.dictionaries(st.text(max_size=8), children, max_size=3),
    max_leaves=8,
)
_DAMAGE = st.dictionaries(
    st.sampled_from([*PROJECT_SCHEMA.properties, "legacyField"]),
    _JSON_VALUES,
    max_size=8,
)


@given(damage=_DAMAGE, removed=st.sets(st.sampled_from(list(PROJECT_SCHEMA.properties)), max_size=5))
@settings(max_examples=75, derandomize=True, deadline=None)
def test_property_repair_is_valid_and_idempotent(damage: dict[str, Any], removed: set[str]) -> None:
    candidate = default_config()
    candidate.update(damage)
    for key in removed:
        candidate.pop(key, None)

    first = repair(candidate, default_config(), PROJECT_SCHEMA, normalizers=PROJECT_CONTEXT.normalizers)
    second = repair(
        first.fixed_config,
        default_config(),
        PROJECT_SCHEMA,
        normalizers=PROJECT_CONTEXT.normalizers,
    )

    assert is_valid(PROJECT_SCHEMA, first.fixed_config)
    assert second.changed_keys == ()
    assert second.missing_keys == ()
    assert second.fixed_config == first.fixed_config
