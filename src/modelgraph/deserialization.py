"""
modelgraph: deserialization engine.

Purpose
- Build a model instance from untyped input: keep declared attribute keys,
  construct without defaults, parse date strings, rebuild associations up
  to the depth bound, then optionally validate.

Failure model
- A ``ValidationError`` anywhere in the graph (nested records are validated
  by their own recursive call) fails the whole call; no partial instance is
  returned.
- A nested association value that cannot describe a record (a scalar
  where a mapping is expected) is rebuilt from an empty record, so the
  problem surfaces as a ``ValidationError`` rather than a ``TypeError``.
- An association target that does not resolve is a ``ModelDefinitionError``
  and is raised whether or not the depth bound allows expansion.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from modelgraph.associations import element_type, is_collection, resolve_target
from modelgraph.codec import parse_datetime
from modelgraph.model import Model, as_plain_data
from modelgraph.options import DeserializeOptions
from modelgraph.registry import describe
from modelgraph.types import DateType
from modelgraph.utils.concurrency import gather_ordered
from modelgraph.validation import validate

if TYPE_CHECKING:
    from modelgraph.registry import AssociationDescriptor

TModel = TypeVar("TModel", bound=Model)

_LOGGER = structlog.get_logger(__name__)


async def deserialize(
    model_type: type[TModel], data: object, options: DeserializeOptions | None = None
) -> TModel:
    """Deserialize ``data`` into a ``model_type`` instance."""

    opts = options or DeserializeOptions()
    description = describe(model_type)
    source = as_plain_data(data, description.name)

    picked = {key: source[key] for key in description.attributes if key in source}
    instance = model_type(picked, defaults=False)
    coerce_dates(instance)

    if opts.associations:
        plan = [
            (key, descriptor, resolve_target(descriptor, owner=model_type, key=key), source[key])
            for key, descriptor in description.associations.items()
            if source.get(key) is not None
        ]
        if opts.depth >= 0:
            results = await gather_ordered(
                _deserialize_association(model_type, key, descriptor, target, current, opts)
                for key, descriptor, target, current in plan
            )
            for (key, *_), result in zip(plan, results, strict=True):
                instance[key] = result
        elif plan:
            _LOGGER.debug(
                "association_depth_exhausted",
                model=description.name,
                depth=opts.depth,
                skipped=[key for key, *_ in plan],
            )

    if opts.validate:
        await validate(instance)

    _LOGGER.debug(
        "model_deserialized", model=description.name, depth=opts.depth, validated=opts.validate
    )
    return instance


def coerce_dates(instance: Model) -> None:
    """Replace string values of ``DateType`` attributes with parsed datetimes.

    Unparseable strings are left in place for validation to report.
    """

    for key, attr in describe(type(instance)).attributes.items():
        if not isinstance(attr.type, DateType):
            continue
        value = instance.get(key)
        if not isinstance(value, str):
            continue
        try:
            instance[key] = parse_datetime(value)
        except ValueError:
            continue


async def _deserialize_association(
    owner: type[Model],
    key: str,
    descriptor: AssociationDescriptor,
    target: type[Model],
    value: object,
    options: DeserializeOptions,
) -> Any:
    child = options.descend()

    if descriptor.is_many:
        if not is_collection(value):
            _LOGGER.debug(
                "association_fallback_empty",
                model=describe(owner).name,
                association=key,
                got=type(value).__name__,
            )
            return []
        records = [_as_record(owner, key, item) for item in value]
        return await gather_ordered(
            deserialize(element_type(target, record), record, child) for record in records
        )

    record = _as_record(owner, key, value)
    return await deserialize(element_type(target, record), record, child)


def _as_record(owner: type[Model], key: str, value: object) -> object:
    """Map a nested value that cannot describe a record onto an empty one.

    The nested call then reports the missing fields as a ``ValidationError``.
    """

    if isinstance(value, Model):
        return value
    try:
        return as_plain_data(value, describe(owner).name)
    except TypeError:
        _LOGGER.debug(
            "association_record_coerced_empty",
            model=describe(owner).name,
            association=key,
            got=type(value).__name__,
        )
        return {}


__all__ = ["coerce_dates", "deserialize"]
