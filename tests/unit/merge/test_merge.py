"""Unit and property tests for recursive merge/copy helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from modelgraph import Model, attribute
from modelgraph.merge import copy_value, deep_merge
from modelgraph.types import StringType


class Tag(Model):
    __attributes__ = {"label": attribute(StringType())}


_KEY = st.text(alphabet="abcdef", min_size=1, max_size=3)
_SCALAR = st.one_of(st.none(), st.booleans(), st.integers(-50, 50), st.text(max_size=5))
_TREE: st.SearchStrategy[Any] = st.recursive(
    _SCALAR,
    lambda child: st.one_of(
        st.lists(child, max_size=3),
        st.dictionaries(_KEY, child, max_size=3),
    ),
    max_leaves=12,
)
_MAPPING = st.dictionaries(_KEY, _TREE, max_size=4)


def _expected_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    out = dict(target)
    for key, value in source.items():
        out[key] = _expected_value(out.get(key), value)
    return out


def _expected_value(existing: Any, value: Any) -> Any:
    if isinstance(existing, dict) and isinstance(value, dict):
        return _expected_merge(existing, value)
    if isinstance(existing, list) and isinstance(value, list):
        merged = [_expected_value(old, new) for old, new in zip(existing, value)]
        return merged + existing[len(value) :] + value[len(existing) :]
    return value


def test_nested_mappings_merge_and_scalars_replace() -> None:
    target = {"a": 1, "nested": {"x": 1, "y": {"deep": True}}, "items": [1, 2]}
    source = {"nested": {"y": {"other": 1}, "z": 3}, "items": [9], "b": None}

    result = deep_merge(target, source)

    assert result is target
    assert target == {
        "a": 1,
        "nested": {"x": 1, "y": {"deep": True, "other": 1}, "z": 3},
        "items": [9, 2],
        "b": None,
    }


def test_lists_merge_index_by_index() -> None:
    target = {"items": [{"a": 1, "b": 2}, {"c": 3}], "tail": [1]}

    deep_merge(target, {"items": [{"a": 9}], "tail": [7, 8]})

    assert target == {"items": [{"a": 9, "b": 2}, {"c": 3}], "tail": [7, 8]}


def test_list_replaces_non_list_and_vice_versa() -> None:
    target = {"a": {"x": 1}, "b": [1, 2]}

    deep_merge(target, {"a": [1], "b": {"x": 2}})

    assert target == {"a": [1], "b": {"x": 2}}


def test_mapping_replaces_non_mapping_and_vice_versa() -> None:
    target = {"a": 1, "b": {"x": 1}}

    deep_merge(target, {"a": {"x": 2}, "b": "flat"})

    assert target == {"a": {"x": 2}, "b": "flat"}


def test_incoming_containers_are_copied() -> None:
    source = {"items": [[1]], "nested": {"list": [1]}}
    target: dict[str, Any] = {}

    deep_merge(target, source)
    source["items"][0].append(2)
    source["nested"]["list"].append(2)

    assert target == {"items": [[1]], "nested": {"list": [1]}}


def test_models_and_datetimes_are_kept_by_reference() -> None:
    tag = Tag({"label": "x"})
    stamp = datetime(2026, 3, 1, tzinfo=UTC)

    target = deep_merge({}, {"tag": tag, "when": stamp, "tags": [tag]})

    assert target["tag"] is tag
    assert target["when"] is stamp
    assert target["tags"][0] is tag
    assert copy_value((1, [2])) == (1, [2])
    assert copy_value({1, 2}) == {1, 2}


@given(target=_MAPPING, source=_MAPPING)
@settings(max_examples=75, deadline=None)
def test_deep_merge_matches_reference_policy(
    target: dict[str, Any], source: dict[str, Any]
) -> None:
    expected = _expected_merge(target, source)
    snapshot = copy_value(source)

    assert deep_merge(copy_value(target), source) == expected
    assert source == snapshot


@given(source=_MAPPING)
@settings(max_examples=50, deadline=None)
def test_merging_into_empty_is_a_deep_copy(source: dict[str, Any]) -> None:
    result = deep_merge({}, source)

    assert result == source
    for key, value in source.items():
        if isinstance(value, (dict, list)):
            assert result[key] is not value
