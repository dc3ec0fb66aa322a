"""Declarations that mark dataclass fields and enum accessors for mapping."""

import dataclasses
from typing import Any, Callable, Optional

from .types import UNSET

PROPERTY_METADATA_KEY = "json_mapper.property"
VALUE_ACCESSOR_ATTRIBUTE = "__json_value__"


@dataclasses.dataclass(frozen=True)
class JsonProperty:
    """Per-field mapping declaration stored in the dataclass field metadata."""
    name: Optional[str] = None
    required: bool = False


def json_property(name: Optional[str] = None, required: bool = False,
                  default: Any = UNSET, default_factory: Any = dataclasses.MISSING,
                  **field_kwargs) -> Any:
    """
    Declare a dataclass field as a mapped JSON property.

    Fields that are not declared this way are ignored by the mapper.
    ``None`` is written as null only for ``Optional`` or dynamic fields; on
    any other field it is omitted, so it reads back as the default.

    Args:
        name: Serialized key, defaults to the attribute name
        required: Fail deserialization when the key is absent
        default: Value used when the key is absent (``UNSET`` if omitted)
        default_factory: Factory for mutable defaults
        **field_kwargs: Passed through to ``dataclasses.field``

    Returns:
        A ``dataclasses.field`` carrying the mapping metadata
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[PROPERTY_METADATA_KEY] = JsonProperty(name=name, required=required)

    if default_factory is not dataclasses.MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata, **field_kwargs)
    return dataclasses.field(default=default, metadata=metadata, **field_kwargs)


def json_value(method: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Mark an Enum method as the accessor for its external JSON value."""
    setattr(method, VALUE_ACCESSOR_ATTRIBUTE, True)
    return method


def get_property(field: dataclasses.Field) -> Optional[JsonProperty]:
    """Return the mapping declaration of a dataclass field, if any."""
    return field.metadata.get(PROPERTY_METADATA_KEY)


def find_value_accessor(enum_cls: type) -> Optional[Callable[[Any], Any]]:
    """Return the ``@json_value`` method declared on an enum class, if any."""
    for klass in enum_cls.__mro__:
        for attribute in vars(klass).values():
            target = attribute.fget if isinstance(attribute, property) else attribute
            if callable(target) and getattr(target, VALUE_ACCESSOR_ATTRIBUTE, False):
                return target
    return None
