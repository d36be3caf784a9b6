"""
modelgraph: attribute type descriptors.

Each type exposes ``validate(key, value)``, which raises
``PropertyValidationError("attribute.type", ...)`` on a mismatch. ``None``
always passes: whether a value must be present is the validation engine's
decision, not the type's. ``AnyType`` has no ``validate``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, ClassVar

from modelgraph.constants import TYPE_ERROR_KIND
from modelgraph.errors import PropertyValidationError
from modelgraph.utils.concurrency import resolve_awaitable


def _type_error(expected: str, value: object) -> PropertyValidationError:
    return PropertyValidationError(
        TYPE_ERROR_KIND, f"expected {expected}, got {type(value).__name__}"
    )


class AttributeType:
    """Base class for attribute types; subclasses add ``validate``."""

    name: ClassVar[str] = "any"

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and vars(self) == vars(other)

    def __hash__(self) -> int:
        return hash(type(self))


class AnyType(AttributeType):
    name = "any"


class StringType(AttributeType):
    name = "string"

    def validate(self, key: str, value: object) -> None:
        if value is not None and not isinstance(value, str):
            raise _type_error("string", value)


class IntegerType(AttributeType):
    name = "integer"

    def validate(self, key: str, value: object) -> None:
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise _type_error("integer", value)


class NumberType(AttributeType):
    name = "number"

    def validate(self, key: str, value: object) -> None:
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _type_error("number", value)
        if isinstance(value, float) and not math.isfinite(value):
            raise PropertyValidationError(TYPE_ERROR_KIND, "must be finite")


class BooleanType(AttributeType):
    name = "boolean"

    def validate(self, key: str, value: object) -> None:
        if value is not None and not isinstance(value, bool):
            raise _type_error("boolean", value)


class DateType(AttributeType):
    """Timestamp attribute. Deserialization parses ISO-8601 strings into ``datetime``."""

    name = "date"

    def validate(self, key: str, value: object) -> None:
        if value is not None and not isinstance(value, datetime):
            raise _type_error("datetime", value)


class ObjectType(AttributeType):
    name = "object"

    def validate(self, key: str, value: object) -> None:
        if value is not None and not isinstance(value, Mapping):
            raise _type_error("object", value)


class ArrayType(AttributeType):
    """List attribute, optionally checking every item against ``items``."""

    name = "array"

    def __init__(self, items: AttributeType | None = None) -> None:
        self.items = items

    def __repr__(self) -> str:
        return f"ArrayType(items={self.items!r})"

    async def validate(self, key: str, value: object) -> None:
        if value is None:
            return
        if not isinstance(value, (list, tuple)):
            raise _type_error("array", value)
        item_validate = getattr(self.items, "validate", None)
        if not callable(item_validate):
            return
        for index, item in enumerate(value):
            try:
                await resolve_awaitable(item_validate(f"{key}[{index}]", item))
            except PropertyValidationError as exc:
                raise PropertyValidationError(exc.kind, f"[{index}]: {exc.message}") from exc


class EnumType(AttributeType):
    name = "enum"

    def __init__(self, choices: Iterable[Any]) -> None:
        self.choices = tuple(choices)
        if not self.choices:
            raise ValueError("EnumType requires at least one choice")

    def __repr__(self) -> str:
        return f"EnumType(choices={self.choices!r})"

    def validate(self, key: str, value: object) -> None:
        if value is None or value in self.choices:
            return
        allowed = ", ".join(repr(choice) for choice in self.choices)
        raise PropertyValidationError(
            TYPE_ERROR_KIND, f"invalid value {value!r}; expected one of: {allowed}"
        )


__all__ = [
    "AnyType",
    "ArrayType",
    "AttributeType",
    "BooleanType",
    "DateType",
    "EnumType",
    "IntegerType",
    "NumberType",
    "ObjectType",
    "StringType",
]
