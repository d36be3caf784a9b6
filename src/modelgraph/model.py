"""
modelgraph: the ``Model`` base class.

Purpose
- Construct instances from defaults plus caller data (deep-merged).
- Hold field values in an explicit per-instance mapping, reachable through
  item access and attribute access.
- Offer instance and class facades over the serialize, deserialize and
  validate engines, always keyed by the runtime (most-derived) type.

Models carry no identity and know nothing about storage.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from modelgraph.codec import canonical_json, load_json_object, to_json_value, to_plain_object
from modelgraph.merge import deep_merge
from modelgraph.options import (
    DeserializeOptions,
    SerializeOptions,
    ValidateOptions,
    resolve_options,
)
from modelgraph.registry import (
    AssociationDescriptor,
    AttributeDescriptor,
    ModelDescription,
    ValidationRule,
    check_tables,
    describe,
    get_attributes,
)

if TYPE_CHECKING:
    from modelgraph.errors import ModelErrors

TModel = TypeVar("TModel", bound="Model")


class Model:
    """Base class for every model.

    Subclasses declare their shape with class-level tables::

        class Post(Model):
            __attributes__ = {"title": attribute(StringType())}
            __associations__ = {"author": belongs_to_one(lazy(lambda: User))}
            __validations__ = {"title": (length(min=1),)}
    """

    __model_name__: ClassVar[str | None] = None
    __attributes__: ClassVar[Mapping[str, AttributeDescriptor]] = {}
    __associations__: ClassVar[Mapping[str, AssociationDescriptor]] = {}
    __validations__: ClassVar[Mapping[str, Sequence[ValidationRule]]] = {}

    _fields: dict[str, Any]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        check_tables(cls)

    def __init__(self, data: object = None, *, defaults: bool = True) -> None:
        object.__setattr__(self, "_fields", {})

        if defaults:
            for key, attr in get_attributes(type(self)).items():
                if attr.has_default:
                    self._fields[key] = attr.default_value()

        if data is not None:
            deep_merge(self._fields, as_plain_data(data, describe(type(self)).name))

    # -- field store -------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        store = self.__dict__.get("_fields")
        if store is None:
            raise AttributeError(name)
        if name in store:
            return store[name]
        description = describe(type(self))
        if name in description.attributes or name in description.associations:
            return None
        raise AttributeError(f"{type(self).__name__!r} has no field {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            object.__setattr__(self, name, value)
            return
        self._fields[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            object.__delattr__(self, name)
            return
        try:
            del self._fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._fields[key] = value

    def __delitem__(self, key: str) -> None:
        del self._fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def get(self, key: str, default: Any = None) -> Any:
        return self._fields.get(key, default)

    def field_values(self) -> dict[str, Any]:
        """Shallow copy of the field store."""

        return dict(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model) or type(self) is not type(other):
            return NotImplemented
        return self._fields == other._fields

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        rendered = ", ".join(f"{key}={value!r}" for key, value in self._fields.items())
        return f"{type(self).__name__}({rendered})"

    # -- engine facades ----------------------------------------------------

    @classmethod
    def describe(cls) -> ModelDescription:
        return describe(cls)

    async def serialize(
        self, options: SerializeOptions | None = None, **overrides: Any
    ) -> dict[str, Any]:
        from modelgraph.serialization import serialize

        return await serialize(self, resolve_options(SerializeOptions, options, overrides))

    async def validate(self, options: ValidateOptions | None = None, **overrides: Any) -> None:
        from modelgraph.validation import validate

        await validate(self, resolve_options(ValidateOptions, options, overrides))

    async def validation_errors(
        self, options: ValidateOptions | None = None, **overrides: Any
    ) -> ModelErrors:
        """Return the validation report without raising."""

        from modelgraph.validation import collect_errors

        return await collect_errors(self, resolve_options(ValidateOptions, options, overrides))

    @classmethod
    async def deserialize(
        cls: type[TModel],
        data: object,
        options: DeserializeOptions | None = None,
        **overrides: Any,
    ) -> TModel:
        from modelgraph.deserialization import deserialize

        return await deserialize(cls, data, resolve_options(DeserializeOptions, options, overrides))

    async def to_json(self, options: SerializeOptions | None = None, **overrides: Any) -> str:
        payload = await self.serialize(options, **overrides)
        return canonical_json(to_json_value(payload, describe(type(self)).name))

    @classmethod
    async def from_json(
        cls: type[TModel],
        raw: str,
        options: DeserializeOptions | None = None,
        **overrides: Any,
    ) -> TModel:
        parsed = load_json_object(raw, describe(cls).name)
        return await cls.deserialize(parsed, options, **overrides)


def as_plain_data(value: object, path: str = "data") -> dict[str, Any]:
    """Normalize constructor/deserializer input, unwrapping model instances."""

    if isinstance(value, Model):
        return to_plain_object(value.field_values(), path)
    return to_plain_object(value, path)


__all__ = ["Model", "TModel", "as_plain_data"]
