"""
modelgraph: unit tests for model construction

Purpose
- Defaults (concrete and lazy), deep-merged caller data, input normalization,
  and the field store's item/attribute access.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

import pytest

from modelgraph import Model, attribute, lazy
from modelgraph.types import AnyType, DateType, IntegerType, ObjectType, StringType

_COUNTER = {"calls": 0}


def _next_token() -> str:
    _COUNTER["calls"] += 1
    return f"token-{_COUNTER['calls']}"


class Settings(Model):
    __attributes__ = {
        "title": attribute(StringType()),
        "retries": attribute(IntegerType(), default=3),
        "tags": attribute(AnyType(), default=["a"]),
        "options": attribute(ObjectType(), default={"color": "red", "size": {"w": 1, "h": 2}}),
        "token": attribute(StringType(), default=lazy(_next_token)),
        "created_at": attribute(DateType(), default=lazy(lambda: datetime(2026, 1, 1, tzinfo=UTC))),
    }


@dataclass
class _Payload:
    title: str
    retries: int


class _Plain:
    def __init__(self) -> None:
        self.title = "plain"
        self._hidden = "x"


def test_defaults_are_applied() -> None:
    item = Settings()

    assert item.retries == 3
    assert item.tags == ["a"]
    assert item.options == {"color": "red", "size": {"w": 1, "h": 2}}
    assert item.created_at == datetime(2026, 1, 1, tzinfo=UTC)
    assert "title" not in item
    assert item.title is None


def test_concrete_defaults_are_not_shared_between_instances() -> None:
    first = Settings()
    second = Settings()

    first.tags.append("b")
    first.options["size"]["w"] = 10

    assert second.tags == ["a"]
    assert second.options["size"]["w"] == 1
    assert Settings.describe().attributes["tags"].default == ["a"]


def test_lazy_defaults_run_once_per_construction() -> None:
    before = _COUNTER["calls"]

    first = Settings()
    second = Settings()

    assert _COUNTER["calls"] == before + 2
    assert first.token != second.token


def test_defaults_can_be_skipped() -> None:
    item = Settings({"title": "bare"}, defaults=False)

    assert item.field_values() == {"title": "bare"}


def test_caller_data_wins_and_nested_mappings_merge() -> None:
    item = Settings({"retries": 9, "options": {"size": {"w": 5}}, "tags": ["z"]})

    assert item.retries == 9
    assert item.options == {"color": "red", "size": {"w": 5, "h": 2}}
    assert item.tags == ["z"]


def test_caller_list_elements_merge_onto_default_elements() -> None:
    class Layout(Model):
        __attributes__ = {
            "panes": attribute(AnyType(), default=[{"w": 1, "h": 2}, {"w": 3, "h": 4}]),
        }

    layout = Layout({"panes": [{"w": 9}]})

    assert layout.panes == [{"w": 9, "h": 2}, {"w": 3, "h": 4}]
    assert Layout().panes == [{"w": 1, "h": 2}, {"w": 3, "h": 4}]


def test_construction_copies_caller_containers() -> None:
    payload = {"title": "t", "options": {"nested": [1, 2]}}
    item = Settings(payload)

    payload["options"]["nested"].append(3)

    assert item.options["nested"] == [1, 2]


def test_construction_accepts_dataclass_objects_and_models() -> None:
    from_dataclass = Settings(_Payload(title="dc", retries=1), defaults=False)
    from_object = Settings(_Plain(), defaults=False)
    from_model = Settings(from_dataclass, defaults=False)

    assert from_dataclass.field_values() == {"title": "dc", "retries": 1}
    assert from_object.field_values() == {"title": "plain"}
    assert from_model == from_dataclass


@pytest.mark.parametrize("bad", ["text", 12, [("title", "x")]])
def test_construction_rejects_non_object_input(bad: object) -> None:
    with pytest.raises(TypeError, match=r"Settings: cannot coerce"):
        Settings(bad)


def test_construction_rejects_non_string_keys() -> None:
    with pytest.raises(TypeError, match="object keys must be strings"):
        Settings({1: "x"})


def test_field_store_access() -> None:
    item = Settings({"title": "a"}, defaults=False)

    item.title = "b"
    item["retries"] = 2
    assert item["title"] == "b"
    assert item.get("retries") == 2
    assert sorted(item) == ["retries", "title"]

    del item.retries
    del item["title"]
    assert item.field_values() == {}
    with pytest.raises(AttributeError):
        del item.title
    with pytest.raises(AttributeError, match="has no field 'nope'"):
        _ = item.nope


def test_equality_requires_same_type_and_fields() -> None:
    class Other(Model):
        __attributes__ = {"title": attribute(StringType())}

    assert Settings({"title": "a"}, defaults=False) == Settings({"title": "a"}, defaults=False)
    assert Settings({"title": "a"}, defaults=False) != Settings({"title": "b"}, defaults=False)
    assert Settings({"title": "a"}, defaults=False) != Other({"title": "a"})
    assert "title='a'" in repr(Other({"title": "a"}))
