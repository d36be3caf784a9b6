"""Exception taxonomy for model definition and validation failures."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from modelgraph.constants import UNKNOWN_ERROR_KIND, VALIDATION_ERROR_MESSAGE


class ModelgraphError(Exception):
    """Base class for every error raised by this package."""


class ModelDefinitionError(ModelgraphError, TypeError):
    """Raised when a model's descriptor tables are misconfigured.

    These are programming errors (for example an association target that
    does not resolve to a model class). They are never folded into a
    validation report.
    """


class ConfigLoadError(ModelgraphError, ValueError):
    """Raised when settings cannot be loaded or coerced."""


class PropertyValidationError(ModelgraphError):
    """Single-field validation failure with a machine-readable ``kind``."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @classmethod
    def coerce(cls, error: BaseException) -> PropertyValidationError:
        """Return ``error`` unchanged if typed, otherwise wrap it as ``unknown``."""

        if isinstance(error, PropertyValidationError):
            return error
        return cls(UNKNOWN_ERROR_KIND, str(error))

    def __repr__(self) -> str:
        return f"PropertyValidationError(kind={self.kind!r}, message={self.message!r})"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One entry of a validation report."""

    kind: str
    message: str

    @classmethod
    def from_error(cls, error: BaseException) -> ValidationIssue:
        coerced = PropertyValidationError.coerce(error)
        return cls(kind=coerced.kind, message=coerced.message)

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


ModelErrors = dict[str, list[ValidationIssue]]


class ValidationError(ModelgraphError, ValueError):
    """Raised when a model instance fails one or more attribute validations."""

    def __init__(
        self,
        model_type: type[Any],
        message: str = VALIDATION_ERROR_MESSAGE,
        errors: Mapping[str, Sequence[ValidationIssue]] | None = None,
    ) -> None:
        self.model_type = model_type
        self.message = message
        self.errors: ModelErrors = {key: list(items) for key, items in (errors or {}).items()}

        owner = getattr(model_type, "__name__", str(model_type))
        lines = [
            f"- {owner}.{key}: {issue.kind}: {issue.message}"
            for key, items in self.errors.items()
            for issue in items
        ]
        rendered = message if not lines else f"{message}:\n" + "\n".join(lines)
        super().__init__(rendered)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.errors)

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        return {key: [issue.to_dict() for issue in items] for key, items in self.errors.items()}


__all__ = [
    "ConfigLoadError",
    "ModelDefinitionError",
    "ModelErrors",
    "ModelgraphError",
    "PropertyValidationError",
    "ValidationError",
    "ValidationIssue",
]
