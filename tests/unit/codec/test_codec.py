"""Unit tests for plain-object normalization and canonical JSON helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta, timezone
from enum import Enum

import pytest

from modelgraph.codec import (
    canonical_json,
    datetime_to_iso8601,
    load_json_object,
    parse_datetime,
    to_json_value,
    to_plain_object,
)


class Color(Enum):
    RED = "red"


@dataclass
class _Point:
    x: int
    y: list[int]


def test_to_plain_object_variants() -> None:
    nested = {"a": {"b": [1]}}
    copied = to_plain_object(nested)
    copied["a"]["b"].append(2)

    assert nested == {"a": {"b": [1]}}
    assert to_plain_object(None) == {}
    assert to_plain_object(_Point(x=1, y=[2])) == {"x": 1, "y": [2]}


def test_to_plain_object_rejects_types_by_path() -> None:
    with pytest.raises(TypeError, match=r"^payload: cannot coerce tuple"):
        to_plain_object((1, 2), "payload")
    with pytest.raises(TypeError, match="object keys must be strings"):
        to_plain_object({("a",): 1})


def test_parse_datetime_accepts_zulu_and_offsets() -> None:
    assert parse_datetime("2026-02-03T04:05:06Z") == datetime(2026, 2, 3, 4, 5, 6, tzinfo=UTC)
    assert parse_datetime(" 2026-02-03T04:05:06+01:00 ").utcoffset() == timedelta(hours=1)
    with pytest.raises(ValueError):
        parse_datetime("not a date")


def test_datetime_to_iso8601_normalizes_to_utc() -> None:
    aware = datetime(2026, 2, 3, 5, 0, tzinfo=timezone(timedelta(hours=1)))

    assert datetime_to_iso8601(aware) == "2026-02-03T04:00:00.000000Z"
    assert datetime_to_iso8601(datetime(2026, 2, 3)) == "2026-02-03T00:00:00.000000"


def test_to_json_value_converts_known_types() -> None:
    value = {
        "color": Color.RED,
        "day": date(2026, 1, 2),
        "items": (1, 2.5, None),
        "nested": {"ok": True},
    }

    assert to_json_value(value) == {
        "color": "red",
        "day": "2026-01-02",
        "items": [1, 2.5, None],
        "nested": {"ok": True},
    }


def test_to_json_value_rejects_bad_values_with_paths() -> None:
    with pytest.raises(ValueError, match=r"payload\.score: float values must be finite"):
        to_json_value({"score": float("inf")}, "payload")
    with pytest.raises(ValueError, match=r"payload\[0\]: cannot serialize value of type object"):
        to_json_value([object()], "payload")


def test_canonical_json_and_loading() -> None:
    raw = canonical_json({"b": 1, "a": ["é"]})

    assert raw == '{"a":["é"],"b":1}'
    assert load_json_object(raw, "doc") == json.loads(raw)
    with pytest.raises(ValueError, match="doc: expected JSON string"):
        load_json_object(42, "doc")  # type: ignore[arg-type]
