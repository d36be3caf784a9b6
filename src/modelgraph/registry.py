"""
modelgraph: attribute, association and validation descriptor tables.

Purpose
- Describe the shape of a model type through explicit class-level tables
  (``__attributes__``, ``__associations__``, ``__validations__``).
- Provide the read-only lookup API the engines query:
  ``get_attributes``, ``get_associations``, ``get_attribute_validations``.
- Represent deferred values (lazy defaults and lazy association targets)
  with a tagged wrapper so circular model references can be declared
  before both classes exist.

Tables are merged along the MRO, base classes first, so a subclass
inherits its parents' declarations and may override them key by key.
Validation rules are additive: a subclass appends to its parents' rules.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from modelgraph.errors import ModelDefinitionError
from modelgraph.merge import copy_value

T = TypeVar("T")

RuleCallback = Callable[[str, Any, Mapping[str, Any]], Awaitable[None] | None]


class AssociationKind(StrEnum):
    HAS_ONE = "has_one"
    BELONGS_TO_ONE = "belongs_to_one"
    HAS_MANY = "has_many"
    MANY_TO_MANY = "many_to_many"

    @property
    def is_many(self) -> bool:
        return self in (AssociationKind.HAS_MANY, AssociationKind.MANY_TO_MANY)


@dataclass(frozen=True, slots=True)
class Deferred(Generic[T]):
    """Zero-argument resolver evaluated at first use rather than at declaration."""

    resolver: Callable[[], T]

    def resolve(self) -> T:
        return self.resolver()


def lazy(resolver: Callable[[], T]) -> Deferred[T]:
    """Tag ``resolver`` as a lazily-computed default value or association target."""

    if not callable(resolver):
        raise TypeError(f"lazy() expects a zero-argument callable, got {type(resolver).__name__}")
    return Deferred(resolver)


def is_lazy_load(value: object) -> bool:
    return isinstance(value, Deferred)


def resolve_lazy(value: Deferred[T] | T) -> T:
    if isinstance(value, Deferred):
        return value.resolve()
    return value


@dataclass(frozen=True, slots=True)
class AttributeDescriptor:
    """Declared attribute: semantic type, optional default, optionality flag.

    ``default=None`` means "no default". A concrete default is copied for
    every instance; a ``lazy`` default is invoked for every instance.
    """

    type: Any
    default: object = None
    optional: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def default_value(self) -> Any:
        if isinstance(self.default, Deferred):
            return self.default.resolve()
        return copy_value(self.default)


@dataclass(frozen=True, slots=True)
class AssociationDescriptor:
    """Declared association: relationship kind plus a direct or deferred target."""

    kind: AssociationKind
    target: type[Any] | Deferred[type[Any]]

    @property
    def is_many(self) -> bool:
        return self.kind.is_many


@dataclass(frozen=True, slots=True)
class ValidationRule:
    """Custom validation callback invoked as ``callback(key, value, options)``."""

    callback: RuleCallback
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ModelDescription:
    """Effective (MRO-merged) descriptor tables for one model type."""

    name: str
    attributes: Mapping[str, AttributeDescriptor]
    associations: Mapping[str, AssociationDescriptor]
    validations: Mapping[str, tuple[ValidationRule, ...]]


def attribute(
    type_: Any, *, default: object = None, optional: bool = False
) -> AttributeDescriptor:
    return AttributeDescriptor(type=type_, default=default, optional=optional)


def has_one(target: type[Any] | Deferred[type[Any]]) -> AssociationDescriptor:
    return AssociationDescriptor(kind=AssociationKind.HAS_ONE, target=target)


def belongs_to_one(target: type[Any] | Deferred[type[Any]]) -> AssociationDescriptor:
    return AssociationDescriptor(kind=AssociationKind.BELONGS_TO_ONE, target=target)


def has_many(target: type[Any] | Deferred[type[Any]]) -> AssociationDescriptor:
    return AssociationDescriptor(kind=AssociationKind.HAS_MANY, target=target)


def many_to_many(target: type[Any] | Deferred[type[Any]]) -> AssociationDescriptor:
    return AssociationDescriptor(kind=AssociationKind.MANY_TO_MANY, target=target)


def rule(callback: RuleCallback, **options: Any) -> ValidationRule:
    if not callable(callback):
        raise TypeError(f"rule() expects a callable, got {type(callback).__name__}")
    return ValidationRule(callback=callback, options=MappingProxyType(dict(options)))


@lru_cache(maxsize=None)
def describe(model_type: type[Any]) -> ModelDescription:
    """Return the effective descriptor tables for ``model_type``."""

    attributes: dict[str, AttributeDescriptor] = {}
    associations: dict[str, AssociationDescriptor] = {}
    validations: dict[str, list[ValidationRule]] = {}

    for klass in reversed(model_type.__mro__):
        own = vars(klass)
        attributes.update(own.get("__attributes__", None) or {})
        associations.update(own.get("__associations__", None) or {})
        for key, rules in (own.get("__validations__", None) or {}).items():
            validations.setdefault(key, []).extend(_as_rule_sequence(rules))

    name = getattr(model_type, "__model_name__", None) or model_type.__name__
    return ModelDescription(
        name=name,
        attributes=MappingProxyType(attributes),
        associations=MappingProxyType(associations),
        validations=MappingProxyType({key: tuple(items) for key, items in validations.items()}),
    )


def get_attributes(model_type: type[Any]) -> Mapping[str, AttributeDescriptor]:
    return describe(model_type).attributes


def get_associations(model_type: type[Any]) -> Mapping[str, AssociationDescriptor]:
    return describe(model_type).associations


def get_attribute_validations(model_type: type[Any], name: str) -> tuple[ValidationRule, ...]:
    return describe(model_type).validations.get(name, ())


def model_name(model_type: type[Any]) -> str:
    return describe(model_type).name


def check_tables(model_type: type[Any]) -> None:
    """Reject malformed descriptor tables declared directly on ``model_type``."""

    owner = model_type.__name__
    own = vars(model_type)

    attributes = _own_table(own, "__attributes__", owner)
    for key, descriptor in attributes.items():
        _check_key(key, owner, "__attributes__")
        if not isinstance(descriptor, AttributeDescriptor):
            raise ModelDefinitionError(
                f"{owner}.{key}: expected AttributeDescriptor, got {type(descriptor).__name__}"
            )
        if descriptor.type is None:
            raise ModelDefinitionError(f"{owner}.{key}: attribute type is required")

    associations = _own_table(own, "__associations__", owner)
    for key, descriptor in associations.items():
        _check_key(key, owner, "__associations__")
        if not isinstance(descriptor, AssociationDescriptor):
            raise ModelDefinitionError(
                f"{owner}.{key}: expected AssociationDescriptor, got {type(descriptor).__name__}"
            )
        if not isinstance(descriptor.target, (type, Deferred)):
            raise ModelDefinitionError(
                f"{owner}.{key}: association target must be a model class or lazy(...) resolver"
            )

    validations = _own_table(own, "__validations__", owner)
    for key, rules in validations.items():
        _check_key(key, owner, "__validations__")
        try:
            _as_rule_sequence(rules)
        except TypeError as exc:
            raise ModelDefinitionError(f"{owner}.{key}: {exc}") from exc

    description = describe(model_type)
    overlap = sorted(set(description.attributes) & set(description.associations))
    if overlap:
        raise ModelDefinitionError(
            f"{owner}: names declared as both attribute and association: {overlap}"
        )
    # Field access falls back to the store only for names the class lacks.
    shadowed = sorted(
        key
        for key in (*description.attributes, *description.associations)
        if hasattr(model_type, key)
    )
    if shadowed:
        raise ModelDefinitionError(f"{owner}: field names collide with class members: {shadowed}")
    unknown = sorted(set(description.validations) - set(description.attributes))
    if unknown:
        raise ModelDefinitionError(f"{owner}: validations for undeclared attributes: {unknown}")


def _own_table(own: Mapping[str, object], name: str, owner: str) -> Mapping[str, Any]:
    table = own.get(name)
    if table is None:
        return {}
    if not isinstance(table, Mapping):
        raise ModelDefinitionError(f"{owner}.{name} must be a mapping, got {type(table).__name__}")
    return table


def _check_key(key: object, owner: str, table: str) -> None:
    if not isinstance(key, str) or not key:
        raise ModelDefinitionError(f"{owner}.{table}: keys must be non-empty strings")
    if key.startswith("_"):
        raise ModelDefinitionError(f"{owner}.{table}: key {key!r} must not start with '_'")


def _as_rule_sequence(rules: object) -> tuple[ValidationRule, ...]:
    if isinstance(rules, ValidationRule):
        return (rules,)
    if not isinstance(rules, Sequence) or isinstance(rules, str):
        raise TypeError(
            f"expected ValidationRule or a sequence of them, got {type(rules).__name__}"
        )
    for item in rules:
        if not isinstance(item, ValidationRule):
            raise TypeError(f"expected ValidationRule, got {type(item).__name__}")
    return tuple(rules)


__all__ = [
    "AssociationDescriptor",
    "AssociationKind",
    "AttributeDescriptor",
    "Deferred",
    "ModelDescription",
    "RuleCallback",
    "ValidationRule",
    "attribute",
    "belongs_to_one",
    "check_tables",
    "describe",
    "get_associations",
    "get_attribute_validations",
    "get_attributes",
    "has_many",
    "has_one",
    "is_lazy_load",
    "lazy",
    "many_to_many",
    "model_name",
    "resolve_lazy",
    "rule",
]
