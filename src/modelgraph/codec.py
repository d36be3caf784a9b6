"""Plain-object normalization, datetime parsing and canonical JSON encoding."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, NoReturn

from modelgraph.merge import copy_mapping, copy_value

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def to_plain_object(value: object, path: str = "data") -> dict[str, Any]:
    """Coerce ``value`` into a fresh ``dict`` without aliasing caller containers.

    ``None`` becomes an empty mapping. Mappings are copied, dataclasses and
    ordinary objects contribute their public attributes. Anything else
    (strings, numbers, sequences) cannot describe a model and is rejected.
    """

    if value is None:
        return {}
    if isinstance(value, Mapping):
        return _copy_string_keyed(value, path)
    if is_dataclass(value) and not isinstance(value, type):
        return {item.name: copy_value(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, (str, bytes, bytearray, int, float, bool, list, tuple, set)):
        raise TypeError(f"{path}: cannot coerce {type(value).__name__} into a plain object")
    public = getattr(value, "__dict__", None)
    if isinstance(public, Mapping):
        return {
            key: copy_value(item)
            for key, item in public.items()
            if isinstance(key, str) and not key.startswith("_")
        }
    raise TypeError(f"{path}: cannot coerce {type(value).__name__} into a plain object")


def _copy_string_keyed(value: Mapping[Any, object], path: str) -> dict[str, Any]:
    for key in value:
        if not isinstance(key, str):
            raise TypeError(f"{path}: object keys must be strings, got {type(key).__name__}")
    return copy_mapping(value)


def parse_datetime(text: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC."""

    candidate = text.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    return datetime.fromisoformat(candidate)


def datetime_to_iso8601(value: datetime) -> str:
    if value.tzinfo is None or value.utcoffset() is None:
        return value.isoformat(timespec="microseconds")
    normalized = value.astimezone(UTC)
    return normalized.isoformat(timespec="microseconds").replace("+00:00", "Z")


def to_json_value(value: object, path: str = "value") -> JSONValue:
    """Convert a serialized model payload into JSON-compatible primitives."""

    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            _fail(path, "float values must be finite")
        return value
    if isinstance(value, Enum):
        return to_json_value(value.value, path)
    if isinstance(value, datetime):
        return datetime_to_iso8601(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_json_value(item, f"{path}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, Mapping):
        out: dict[str, JSONValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                _fail(path, "object keys must be strings")
            out[key] = to_json_value(item, f"{path}.{key}")
        return out

    _fail(path, f"cannot serialize value of type {type(value).__name__}")


def canonical_json(value: JSONValue) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def load_json_object(raw: str, path: str) -> dict[str, Any]:
    if not isinstance(raw, (str, bytes, bytearray)):
        _fail(path, f"expected JSON string, got {type(raw).__name__}")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        _fail(path, f"invalid JSON: {exc}")
    if not isinstance(parsed, dict):
        _fail(path, "JSON root must be an object")
    return parsed


__all__ = [
    "JSONScalar",
    "JSONValue",
    "canonical_json",
    "datetime_to_iso8601",
    "load_json_object",
    "parse_datetime",
    "to_json_value",
    "to_plain_object",
]
