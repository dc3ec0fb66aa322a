"""Field descriptor discovery and caching for mapped dataclasses."""

import dataclasses
import enum
import logging
import typing
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .annotations import find_value_accessor, get_property
from .shapes import Shape, classify
from .types import UnknownEnumValueError, UnsupportedShapeError


@dataclass(frozen=True)
class FieldDescriptor:
    """Mapping metadata for one declared field of a dataclass."""
    name: str
    attribute: str
    required: bool
    owner: type
    annotation: Any
    shape: Shape = field(compare=False)
    init: bool = True

    @property
    def emits_null(self) -> bool:
        """Whether a ``None`` value is written as JSON null instead of omitted."""
        return self.shape.nullable


class FieldDescriptorCache:
    """
    Process-wide cache of field descriptors and enum value tables.

    Entries are computed completely before being published with a single
    dict assignment, so a concurrent reader sees either nothing or the
    whole tuple. Two threads describing the same class at once both
    compute it; the last write wins.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the descriptor cache.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self._descriptors: Dict[type, Tuple[FieldDescriptor, ...]] = {}
        self._enum_tables: Dict[type, Tuple[Tuple[enum.Enum, Any], ...]] = {}
        self._enum_indexes: Dict[type, Dict[Tuple[type, Any], enum.Enum]] = {}

    def describe(self, cls: type) -> Tuple[FieldDescriptor, ...]:
        """
        Get the ordered field descriptors of a dataclass.

        Args:
            cls: Dataclass to describe

        Returns:
            Tuple of FieldDescriptor in declaration order

        Raises:
            UnsupportedShapeError: If cls is not a dataclass or two fields
                share a serialized name
        """
        cached = self._descriptors.get(cls)
        if cached is not None:
            return cached

        descriptors = self._build_descriptors(cls)
        self._descriptors[cls] = descriptors
        return descriptors

    def enum_table(self, enum_cls: type) -> Tuple[Tuple[enum.Enum, Any], ...]:
        """Get ``(member, external value)`` pairs in declaration order."""
        cached = self._enum_tables.get(enum_cls)
        if cached is not None:
            return cached

        accessor = find_value_accessor(enum_cls)
        if accessor is None:
            table = tuple((member, member.value) for member in enum_cls)
        else:
            table = tuple((member, accessor(member)) for member in enum_cls)

        index = {}
        for member, value in table:
            try:
                index.setdefault((type(value), value), member)
            except TypeError:
                # unhashable, reachable by scanning only
                continue

        self._enum_indexes[enum_cls] = index
        self._enum_tables[enum_cls] = table
        self.logger.debug(f"Built value table for enum {enum_cls.__name__} with {len(table)} members")
        return table

    def external_value(self, member: enum.Enum) -> Any:
        """Get the external JSON value of an enum member."""
        for candidate, value in self.enum_table(type(member)):
            if candidate is member:
                return value
        raise UnknownEnumValueError(f"{member!r} is not a member of {type(member).__name__}")

    def lookup_enum(self, enum_cls: type, value: Any) -> enum.Enum:
        """
        Find the enum member whose external value equals ``value``.

        Values only match when their types match too, so ``True`` never
        selects a member whose value is ``1``.

        Raises:
            UnknownEnumValueError: If no member matches
        """
        table = self.enum_table(enum_cls)
        try:
            member = self._enum_indexes.get(enum_cls, {}).get((type(value), value))
        except TypeError:
            member = None
        if member is not None:
            return member

        for candidate, external in table:
            if type(external) is type(value) and external == value:
                return candidate

        raise UnknownEnumValueError(
            f"{value!r} is not a known value of {enum_cls.__name__}",
            context={"allowed": [external for _, external in table]}
        )

    def clear(self) -> None:
        """Drop every cached entry."""
        self._descriptors = {}
        self._enum_tables = {}
        self._enum_indexes = {}

    def __contains__(self, cls: type) -> bool:
        return cls in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def _build_descriptors(self, cls: type) -> Tuple[FieldDescriptor, ...]:
        if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
            raise UnsupportedShapeError(f"Only dataclasses can be described, got {cls!r}", context=cls)

        try:
            hints = typing.get_type_hints(cls)
        except (NameError, TypeError) as e:
            raise UnsupportedShapeError(f"Cannot resolve type hints of {cls.__name__}: {e}",
                                        context=cls) from e

        descriptors = []
        seen_names = {}

        for dataclass_field in dataclasses.fields(cls):
            declaration = get_property(dataclass_field)
            if declaration is None:
                continue

            name = declaration.name or dataclass_field.name
            if name in seen_names:
                raise UnsupportedShapeError(
                    f"{cls.__name__}.{dataclass_field.name} and {cls.__name__}.{seen_names[name]} "
                    f"both map to JSON key '{name}'",
                    context=cls
                )
            seen_names[name] = dataclass_field.name

            annotation = hints.get(dataclass_field.name, Any)
            try:
                shape = classify(annotation)
            except UnsupportedShapeError as e:
                raise UnsupportedShapeError(
                    f"{cls.__name__}.{dataclass_field.name}: {e}",
                    path=(name,),
                    context=annotation
                ) from e

            descriptors.append(FieldDescriptor(
                name=name,
                attribute=dataclass_field.name,
                required=declaration.required,
                owner=cls,
                annotation=annotation,
                shape=shape,
                init=dataclass_field.init
            ))

        self.logger.debug(f"Described {cls.__name__}: {[d.name for d in descriptors]}")
        return tuple(descriptors)


_default_cache = FieldDescriptorCache()


def get_descriptor_cache() -> FieldDescriptorCache:
    """Get the process-wide descriptor cache."""
    return _default_cache
