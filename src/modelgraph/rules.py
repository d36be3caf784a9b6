"""Stock validation rule callbacks for use with ``registry.rule``.

Every callback has the ``(key, value, options)`` signature and lets
``None`` through; required-ness is reported separately.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sized
from typing import Any, Final

from modelgraph.errors import PropertyValidationError
from modelgraph.registry import ValidationRule, rule

LENGTH_ERROR_KIND: Final[str] = "attribute.length"
PATTERN_ERROR_KIND: Final[str] = "attribute.pattern"
RANGE_ERROR_KIND: Final[str] = "attribute.range"
CHOICE_ERROR_KIND: Final[str] = "attribute.choice"


def check_length(key: str, value: object, options: Mapping[str, Any]) -> None:
    if value is None:
        return
    if not isinstance(value, Sized):
        raise PropertyValidationError(
            LENGTH_ERROR_KIND, f"length check needs a sized value, got {type(value).__name__}"
        )
    minimum = options.get("min")
    maximum = options.get("max")
    size = len(value)
    if minimum is not None and size < minimum:
        raise PropertyValidationError(LENGTH_ERROR_KIND, f"must have length >= {minimum}")
    if maximum is not None and size > maximum:
        raise PropertyValidationError(LENGTH_ERROR_KIND, f"must have length <= {maximum}")


def check_pattern(key: str, value: object, options: Mapping[str, Any]) -> None:
    if value is None:
        return
    compiled = options["regex"]
    if not isinstance(value, str) or compiled.fullmatch(value) is None:
        raise PropertyValidationError(
            PATTERN_ERROR_KIND, f"must match pattern {compiled.pattern!r}"
        )


def check_between(key: str, value: object, options: Mapping[str, Any]) -> None:
    if value is None:
        return
    minimum = options.get("minimum")
    maximum = options.get("maximum")
    try:
        if minimum is not None and value < minimum:  # type: ignore[operator]
            raise PropertyValidationError(RANGE_ERROR_KIND, f"must be >= {minimum}")
        if maximum is not None and value > maximum:  # type: ignore[operator]
            raise PropertyValidationError(RANGE_ERROR_KIND, f"must be <= {maximum}")
    except TypeError as exc:
        raise PropertyValidationError(
            RANGE_ERROR_KIND, f"cannot compare {type(value).__name__} with bounds"
        ) from exc


def check_choices(key: str, value: object, options: Mapping[str, Any]) -> None:
    if value is None:
        return
    allowed = options["values"]
    if value not in allowed:
        rendered = ", ".join(repr(item) for item in allowed)
        raise PropertyValidationError(CHOICE_ERROR_KIND, f"must be one of: {rendered}")


def length(*, min: int | None = None, max: int | None = None) -> ValidationRule:  # noqa: A002
    if min is None and max is None:
        raise ValueError("length() needs at least one of min/max")
    return rule(check_length, min=min, max=max)


def pattern(regex: str | re.Pattern[str]) -> ValidationRule:
    compiled = re.compile(regex) if isinstance(regex, str) else regex
    return rule(check_pattern, regex=compiled)


def between(*, minimum: object = None, maximum: object = None) -> ValidationRule:
    if minimum is None and maximum is None:
        raise ValueError("between() needs at least one of minimum/maximum")
    return rule(check_between, minimum=minimum, maximum=maximum)


def choices(values: Iterable[Any]) -> ValidationRule:
    allowed = tuple(values)
    if not allowed:
        raise ValueError("choices() needs at least one value")
    return rule(check_choices, values=allowed)


__all__ = [
    "CHOICE_ERROR_KIND",
    "LENGTH_ERROR_KIND",
    "PATTERN_ERROR_KIND",
    "RANGE_ERROR_KIND",
    "between",
    "check_between",
    "check_choices",
    "check_length",
    "check_pattern",
    "choices",
    "length",
    "pattern",
]
