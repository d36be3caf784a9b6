"""
modelgraph: validation engine.

Purpose
- Check every declared attribute of a model instance and build a complete
  error report: required-ness, type validation, then custom rules.
- Raise ``ValidationError`` only after every attribute has been checked.

Per attribute
- A nil value on an optional attribute skips the attribute entirely.
- A nil value on a non-optional attribute records ``attribute.required``
  (unless ``required`` is off) and still flows into type and rule checks.
  If the attribute has a default, the default's concrete value is checked
  in place of the nil.
- Errors raised by type validators and rules are caught one by one and
  coerced into ``ValidationIssue`` entries; foreign errors become
  ``unknown``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from modelgraph.constants import REQUIRED_ERROR_KIND, REQUIRED_ERROR_MESSAGE
from modelgraph.errors import ModelErrors, ValidationError, ValidationIssue
from modelgraph.options import ValidateOptions
from modelgraph.registry import describe
from modelgraph.utils.concurrency import resolve_awaitable

if TYPE_CHECKING:
    from modelgraph.model import Model
    from modelgraph.registry import AttributeDescriptor, ValidationRule

_LOGGER = structlog.get_logger(__name__)


async def collect_errors(instance: Model, options: ValidateOptions | None = None) -> ModelErrors:
    """Build the validation report for ``instance`` without raising."""

    opts = options or ValidateOptions()
    description = describe(type(instance))
    errors: ModelErrors = {}

    for key, attr in description.attributes.items():
        issues = await _validate_attribute(
            key,
            attr,
            instance.get(key),
            description.validations.get(key, ()),
            required=opts.required,
        )
        if issues:
            errors.setdefault(key, []).extend(issues)

    return errors


async def validate(instance: Model, options: ValidateOptions | None = None) -> None:
    """Raise ``ValidationError`` carrying the full report if ``instance`` is invalid."""

    model_type = type(instance)
    errors = await collect_errors(instance, options)
    if not errors:
        return

    _LOGGER.info(
        "model_validation_failed",
        model=describe(model_type).name,
        fields=sorted(errors),
        issue_count=sum(len(items) for items in errors.values()),
    )
    raise ValidationError(model_type, errors=errors)


async def _validate_attribute(
    key: str,
    attr: AttributeDescriptor,
    value: Any,
    rules: tuple[ValidationRule, ...],
    *,
    required: bool,
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    if value is None:
        if attr.optional:
            return issues
        if required:
            issues.append(ValidationIssue(REQUIRED_ERROR_KIND, REQUIRED_ERROR_MESSAGE))
        if attr.has_default:
            value = attr.default_value()

    type_validate = getattr(attr.type, "validate", None)
    if callable(type_validate):
        try:
            await resolve_awaitable(type_validate(key, value))
        except Exception as exc:
            issues.append(ValidationIssue.from_error(exc))

    # Each rule is isolated so one failure never hides another.
    for item in rules:
        try:
            await resolve_awaitable(item.callback(key, value, item.options))
        except Exception as exc:
            issues.append(ValidationIssue.from_error(exc))

    return issues


__all__ = ["collect_errors", "validate"]
