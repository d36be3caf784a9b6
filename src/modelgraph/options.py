"""Option records for construct/serialize/deserialize/validate calls."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from modelgraph.constants import DEFAULT_DEPTH

TOptions = TypeVar("TOptions", "SerializeOptions", "DeserializeOptions", "ValidateOptions")


def _as_bool(value: object, path: str) -> bool:
    if isinstance(value, bool):
        return value
    raise TypeError(f"{path}: expected boolean, got {type(value).__name__}")


def _as_int(value: object, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{path}: expected integer, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class SerializeOptions:
    associations: bool = True
    depth: int = DEFAULT_DEPTH

    def __post_init__(self) -> None:
        _as_bool(self.associations, "SerializeOptions.associations")
        _as_int(self.depth, "SerializeOptions.depth")

    @property
    def expands(self) -> bool:
        return self.associations and self.depth >= 0

    def descend(self) -> SerializeOptions:
        return replace(self, depth=self.depth - 1)


@dataclass(frozen=True, slots=True)
class DeserializeOptions:
    associations: bool = True
    depth: int = DEFAULT_DEPTH
    validate: bool = True

    def __post_init__(self) -> None:
        _as_bool(self.associations, "DeserializeOptions.associations")
        _as_int(self.depth, "DeserializeOptions.depth")
        _as_bool(self.validate, "DeserializeOptions.validate")

    def descend(self) -> DeserializeOptions:
        return replace(self, depth=self.depth - 1)


@dataclass(frozen=True, slots=True)
class ValidateOptions:
    required: bool = True

    def __post_init__(self) -> None:
        _as_bool(self.required, "ValidateOptions.required")


def resolve_options(
    options_type: type[TOptions],
    options: TOptions | None,
    overrides: Mapping[str, Any],
) -> TOptions:
    """Combine an optional options record with keyword overrides."""

    if options is not None and not isinstance(options, options_type):
        raise TypeError(
            f"expected {options_type.__name__} or None, got {type(options).__name__}"
        )
    if options is None:
        return options_type(**overrides)
    if not overrides:
        return options
    return replace(options, **overrides)


__all__ = [
    "DeserializeOptions",
    "SerializeOptions",
    "ValidateOptions",
    "resolve_options",
]
