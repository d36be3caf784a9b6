"""Recursive merge and copy helpers for model field stores.

Merge policy: when a key holds a mapping on both sides the two mappings
merge recursively, and when it holds a list on both sides the lists merge
index by index (elements past the end of the incoming list are kept).
Otherwise the incoming value replaces the existing one. Plain containers
(mappings, lists, tuples, sets) are copied on the way in so a field store
never aliases caller data. Any other object, including model instances and
datetimes, is kept by reference.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def deep_merge(target: dict[str, Any], source: Mapping[str, object]) -> dict[str, Any]:
    """Merge ``source`` into ``target`` in place and return ``target``."""

    for key, value in source.items():
        target[key] = _merge_value(target.get(key), value)
    return target


def copy_mapping(value: Mapping[Any, object]) -> dict[Any, Any]:
    return {key: copy_value(item) for key, item in value.items()}


def copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        return copy_mapping(value)
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(copy_value(item) for item in value)
    if isinstance(value, set):
        return {copy_value(item) for item in value}
    return value


def _merge_value(existing: object, value: object) -> Any:
    if isinstance(value, Mapping) and isinstance(existing, Mapping):
        merged = existing if isinstance(existing, dict) else copy_mapping(existing)
        return deep_merge(merged, value)
    if isinstance(value, list) and isinstance(existing, list):
        return _merge_list(existing, value)
    return copy_value(value)


def _merge_list(target: list[Any], source: list[object]) -> list[Any]:
    for index, item in enumerate(source):
        if index < len(target):
            target[index] = _merge_value(target[index], item)
        else:
            target.append(copy_value(item))
    return target


__all__ = ["copy_mapping", "copy_value", "deep_merge"]
