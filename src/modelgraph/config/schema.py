"""
modelgraph: settings schema.

Purpose
- Describe the engine-wide defaults that callers may load from a TOML file
  or the environment, and validate raw payloads into ``ModelgraphSettings``.

Validation reports every problem at once with a dotted path, in the same
``- path: message`` form used by model validation errors.

Settings are not global state: the engines and ``Model`` facades never read
them. Callers pass ``settings.serialize_options()`` (and the deserialize and
validate counterparts) to the facades they invoke.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from typing import Any, Final, Literal

from modelgraph.constants import CONFIG_TABLE, DEFAULT_DEPTH
from modelgraph.errors import ConfigLoadError
from modelgraph.options import DeserializeOptions, SerializeOptions, ValidateOptions

ValueKind = Literal["int", "bool", "level"]

_LOG_LEVELS: Final[tuple[str, ...]] = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")


@dataclass(frozen=True, slots=True)
class ModelgraphSettings:
    """Effective engine defaults."""

    serialize_depth: int = DEFAULT_DEPTH
    serialize_associations: bool = True
    deserialize_depth: int = DEFAULT_DEPTH
    deserialize_associations: bool = True
    deserialize_validate: bool = True
    validate_required: bool = True
    log_level: str = "INFO"

    def serialize_options(self) -> SerializeOptions:
        return SerializeOptions(
            associations=self.serialize_associations, depth=self.serialize_depth
        )

    def deserialize_options(self) -> DeserializeOptions:
        return DeserializeOptions(
            associations=self.deserialize_associations,
            depth=self.deserialize_depth,
            validate=self.deserialize_validate,
        )

    def validate_options(self) -> ValidateOptions:
        return ValidateOptions(required=self.validate_required)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


SETTING_KINDS: Final[Mapping[str, ValueKind]] = {
    "serialize_depth": "int",
    "serialize_associations": "bool",
    "deserialize_depth": "int",
    "deserialize_associations": "bool",
    "deserialize_validate": "bool",
    "validate_required": "bool",
    "log_level": "level",
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


class ConfigValidationError(ConfigLoadError):
    """Raised when a settings payload fails validation."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid settings:\n{rendered}")


def default_settings() -> ModelgraphSettings:
    return ModelgraphSettings()


def validate_settings(
    payload: Mapping[str, object], *, base: ModelgraphSettings | None = None
) -> ModelgraphSettings:
    """Validate ``payload`` over ``base`` (built-in defaults when omitted).

    Keys missing from ``payload`` keep their ``base`` value.
    """

    issues: list[ConfigValidationIssue] = []
    values = asdict(base or default_settings())

    for key in sorted(payload, key=str):
        path = f"{CONFIG_TABLE}.{key}"
        kind = SETTING_KINDS.get(key) if isinstance(key, str) else None
        if kind is None:
            issues.append(ConfigValidationIssue(path, "unknown field"))
            continue
        parsed, message = _check_value(payload[key], kind)
        if message is not None:
            issues.append(ConfigValidationIssue(path, message))
            continue
        values[key] = parsed

    if issues:
        raise ConfigValidationError(issues)
    return ModelgraphSettings(**values)


def _check_value(value: object, kind: ValueKind) -> tuple[object, str | None]:
    if kind == "bool":
        if isinstance(value, bool):
            return value, None
        return None, f"expected boolean, got {type(value).__name__}"

    if kind == "int":
        if isinstance(value, bool) or not isinstance(value, int):
            return None, f"expected integer, got {type(value).__name__}"
        return value, None

    if not isinstance(value, str):
        return None, f"expected string, got {type(value).__name__}"
    normalized = value.strip().upper()
    if normalized not in _LOG_LEVELS:
        expected = ", ".join(_LOG_LEVELS)
        return None, f"invalid value {value!r}; expected one of: {expected}"
    return normalized, None


__all__ = [
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ModelgraphSettings",
    "SETTING_KINDS",
    "ValueKind",
    "default_settings",
    "validate_settings",
]
