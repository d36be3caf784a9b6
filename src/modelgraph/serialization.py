"""
modelgraph: serialization engine.

Purpose
- Project a model instance onto a plain ``dict`` that holds exactly its
  declared attribute keys, then expand associations recursively.

Depth bound
- Associations are expanded only while ``depth >= 0``; every nested level is
  serialized with ``depth - 1``. ``depth=0`` therefore yields the instance's
  attributes plus one level of associated records, each without their own
  associations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from modelgraph.associations import element_type, is_collection, resolve_target
from modelgraph.merge import copy_value
from modelgraph.model import Model, as_plain_data
from modelgraph.options import SerializeOptions
from modelgraph.registry import describe
from modelgraph.utils.concurrency import gather_ordered

if TYPE_CHECKING:
    from collections.abc import Mapping

    from modelgraph.registry import AssociationDescriptor

_LOGGER = structlog.get_logger(__name__)


async def serialize(instance: Model, options: SerializeOptions | None = None) -> dict[str, Any]:
    """Serialize ``instance`` using its runtime type's descriptor tables."""

    return await serialize_as(type(instance), instance, options or SerializeOptions())


async def serialize_as(
    model_type: type[Model], value: object, options: SerializeOptions
) -> dict[str, Any]:
    """Serialize ``value`` (a model or plain object) through ``model_type``'s tables."""

    description = describe(model_type)
    source = value.field_values() if isinstance(value, Model) else as_plain_data(value)
    output = project_attributes(model_type, source)

    if not options.expands:
        if options.associations and description.associations:
            _LOGGER.debug(
                "association_depth_exhausted", model=description.name, depth=options.depth
            )
        return output

    # Targets are resolved up front so a definition error never strands
    # half-scheduled sibling coroutines.
    plan = [
        (key, descriptor, resolve_target(descriptor, owner=model_type, key=key), source[key])
        for key, descriptor in description.associations.items()
        if source.get(key) is not None
    ]
    results = await gather_ordered(
        _serialize_association(model_type, key, descriptor, target, current, options)
        for key, descriptor, target, current in plan
    )
    for (key, *_), result in zip(plan, results, strict=True):
        output[key] = result

    _LOGGER.debug(
        "model_serialized",
        model=description.name,
        depth=options.depth,
        associations=[key for key, *_ in plan],
    )
    return output


def project_attributes(model_type: type[Model], source: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only declared attribute keys that are present on ``source``."""

    attributes = describe(model_type).attributes
    return {key: copy_value(source[key]) for key in attributes if key in source}


async def _serialize_association(
    owner: type[Model],
    key: str,
    descriptor: AssociationDescriptor,
    target: type[Model],
    value: object,
    options: SerializeOptions,
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
        return await gather_ordered(
            serialize_as(element_type(target, item), item, child)
            for item in value
        )

    return await serialize_as(element_type(target, value), value, child)


__all__ = ["project_attributes", "serialize", "serialize_as"]
