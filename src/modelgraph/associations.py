"""Association target resolution shared by the serializer and deserializer."""

from __future__ import annotations

from typing import Any, TypeGuard

from modelgraph.errors import ModelDefinitionError
from modelgraph.model import Model
from modelgraph.registry import AssociationDescriptor, resolve_lazy


def resolve_target(
    descriptor: AssociationDescriptor, *, owner: type[Any], key: str
) -> type[Model]:
    """Resolve a direct or deferred association target to a model class.

    Safe to call repeatedly. Anything other than a ``Model`` subclass is a
    definition error and is raised immediately.
    """

    try:
        target = resolve_lazy(descriptor.target)
    except Exception as exc:
        raise ModelDefinitionError(
            f"{owner.__name__}.{key}: association target could not be resolved ({exc})"
        ) from exc

    if not isinstance(target, type) or not issubclass(target, Model):
        raise ModelDefinitionError(
            f"{owner.__name__}.{key}: association target must resolve to a Model subclass, "
            f"got {target!r}"
        )
    return target


def is_collection(value: object) -> TypeGuard[list[Any] | tuple[Any, ...]]:
    return isinstance(value, (list, tuple))


def element_type(target: type[Model], value: object) -> type[Model]:
    """Pick the registry to use for one association element.

    An instance of a subclass of ``target`` is handled by its own runtime type.
    """

    if isinstance(value, target):
        return type(value)
    return target


__all__ = ["element_type", "is_collection", "resolve_target"]
