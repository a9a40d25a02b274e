"""Unit tests for schema node construction and description."""

from __future__ import annotations

import pytest

from confmend.schema import LeafKind, LeafNode, ValueType, array_of, describe, enum, integer, obj, string


def test_obj_marks_everything_required_except_optional() -> None:
    node = obj({"a": string(), "b": string()}, optional=("b",))

    assert node.required == frozenset({"a"})
    assert list(node.properties) == ["a", "b"]


def test_obj_rejects_undeclared_optional() -> None:
    with pytest.raises(ValueError, match="optional properties are not declared"):
        obj({"a": string()}, optional=("z",))


def test_properties_are_read_only() -> None:
    node = obj({"a": string()})

    with pytest.raises(TypeError):
        node.properties["b"] = string()  # type: ignore[index]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"kind": LeafKind.TYPE},
        {"kind": LeafKind.ENUM},
        {"kind": LeafKind.LITERAL, "choices": (1, 2)},
        {"kind": LeafKind.ARRAY},
    ],
)
def test_leaf_node_requires_kind_specific_fields(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        LeafNode(**kwargs)  # type: ignore[arg-type]


def test_describe_renders_json_schema_like_shape() -> None:
    node = obj(
        {
            "size": integer(minimum=1),
            "mode": enum("a", "b"),
            "tags": array_of(string()),
        },
        optional=("tags",),
    )

    assert describe(node) == {
        "type": "object",
        "properties": {
            "size": {"type": ValueType.INTEGER.value, "minimum": 1},
            "mode": {"enum": ["a", "b"]},
            "tags": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["mode", "size"],
        "additionalProperties": False,
    }


def test_kind_specific_accessors_reject_other_kinds() -> None:
    choice = enum("a", "b")

    with pytest.raises(TypeError, match="enum leaf has no items schema"):
        choice.element_schema()
    with pytest.raises(TypeError, match="enum leaf has no value type"):
        choice.checked_type()

    assert array_of(string()).element_schema() == string()
    assert integer().checked_type() is ValueType.INTEGER
