"""Recursive conversion between typed values and JSON trees."""

import dataclasses
import enum
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from .descriptors import FieldDescriptorCache, get_descriptor_cache
from .shapes import DYNAMIC, Shape, classify
from .types import (
    UNSET,
    CircularReferenceError,
    JSONValue,
    MaxDepthExceededError,
    MissingRequiredFieldError,
    ShapeKind,
    TypeMismatchError,
    UnknownEnumValueError,
    UnsupportedShapeError,
    ValueConverterInterface,
)

DEFAULT_MAX_DEPTH = 128


def json_type_name(value: Any) -> str:
    """Get the JSON tag name of a JSON tree value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _index_segment(index: int) -> str:
    return f"[{index}]"


class ValueConverter(ValueConverterInterface):
    """
    Converter between typed Python values and JSON trees.

    Dispatches on the Shape of the target: primitives and strings convert
    directly, enums go through their external value table, dataclasses
    through their field descriptors, and collections element by element.
    Dynamic shapes are resolved from each runtime value on the way out
    and returned untouched on the way in.
    """

    def __init__(self, descriptor_cache: Optional[FieldDescriptorCache] = None,
                 logger: Optional[logging.Logger] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the value converter.

        Args:
            descriptor_cache: Optional FieldDescriptorCache instance
            logger: Optional logger instance
            max_depth: Maximum nesting depth before conversion is aborted
        """
        self.descriptor_cache = descriptor_cache if descriptor_cache is not None else get_descriptor_cache()
        self.logger = logger or logging.getLogger(__name__)
        self.max_depth = max_depth

    def to_json(self, value: Any, shape: Any, path: Tuple[str, ...] = ()) -> JSONValue:
        """
        Convert a typed value into a JSON tree.

        Args:
            value: Value to convert
            shape: Shape or type annotation describing the value
            path: Path of the value inside the enclosing document

        Returns:
            JSON tree built from dicts, lists and scalars

        Raises:
            MappingError: If any part of the value cannot be converted
        """
        shape = self._as_shape(shape)
        try:
            return self._serialize(value, shape, tuple(path), set())
        except RecursionError:
            raise self._recursion_limit_error(path) from None

    def from_json(self, json_value: JSONValue, shape: Any, path: Tuple[str, ...] = ()) -> Any:
        """
        Convert a JSON tree into a typed value.

        Args:
            json_value: Parsed JSON tree
            shape: Shape or type annotation of the result
            path: Path of the value inside the enclosing document

        Returns:
            Value of the requested shape

        Raises:
            MappingError: If the tree does not fit the shape
        """
        shape = self._as_shape(shape)
        try:
            return self._deserialize(json_value, shape, tuple(path))
        except RecursionError:
            raise self._recursion_limit_error(path) from None

    def _as_shape(self, shape: Any) -> Shape:
        return shape if isinstance(shape, Shape) else classify(shape)

    def _recursion_limit_error(self, path: Tuple[str, ...]) -> MaxDepthExceededError:
        # Reached when the caller's own stack leaves less room than max_depth needs
        return MaxDepthExceededError(
            f"Nesting exceeds the interpreter recursion limit (max_depth is {self.max_depth})",
            path=tuple(path)
        )

    def _check_depth(self, path: Tuple[str, ...]) -> None:
        if len(path) > self.max_depth:
            raise MaxDepthExceededError(
                f"Nesting exceeds the maximum depth of {self.max_depth}",
                path=path
            )

    # Serialization

    def _serialize(self, value: Any, shape: Shape, path: Tuple[str, ...],
                   active: Set[int]) -> JSONValue:
        self._check_depth(path)

        if value is None:
            if shape.nullable:
                return None
            raise TypeMismatchError(f"Expected {shape.describe()}, found None", path=path)

        if value is UNSET:
            raise TypeMismatchError(f"Expected {shape.describe()}, found an unset value", path=path)

        if shape.kind == ShapeKind.PRIMITIVE:
            return self._serialize_primitive(value, shape.python_type, path)
        elif shape.kind == ShapeKind.ENUM:
            if not isinstance(value, shape.python_type):
                raise TypeMismatchError(
                    f"Expected {shape.python_type.__name__} member, found {type(value).__name__}",
                    path=path
                )
            return self._serialize_enum(value, path, active)
        elif shape.kind == ShapeKind.OBJECT:
            if not isinstance(value, shape.python_type):
                raise TypeMismatchError(
                    f"Expected {shape.python_type.__name__}, found {type(value).__name__}",
                    path=path
                )
            return self._serialize_object(value, path, active)
        elif shape.kind == ShapeKind.COLLECTION:
            if not isinstance(value, (list, tuple)):
                raise TypeMismatchError(
                    f"Expected a sequence for {shape.describe()}, found {type(value).__name__}",
                    path=path
                )
            return self._serialize_sequence(value, shape.element, path, active)
        elif shape.kind == ShapeKind.DYNAMIC:
            return self._serialize_dynamic(value, path, active)

        raise UnsupportedShapeError(f"No conversion rule for shape {shape!r}", path=path)

    def _serialize_primitive(self, value: Any, python_type: type, path: Tuple[str, ...]) -> JSONValue:
        if python_type is bool:
            matches = isinstance(value, bool)
        elif python_type is int:
            matches = isinstance(value, int) and not isinstance(value, bool)
        elif python_type is float:
            matches = isinstance(value, (int, float)) and not isinstance(value, bool)
        else:
            matches = isinstance(value, str)

        if not matches:
            raise TypeMismatchError(
                f"Expected {python_type.__name__}, found {type(value).__name__}",
                path=path
            )
        if isinstance(value, enum.Enum):
            # str(member) of a mixin enum is "Cls.NAME", not its value
            value = value.value
        return python_type(value)

    def _serialize_enum(self, member: enum.Enum, path: Tuple[str, ...], active: Set[int]) -> JSONValue:
        external = self.descriptor_cache.external_value(member)
        return self._serialize_dynamic(external, path, active)

    def _serialize_object(self, value: Any, path: Tuple[str, ...], active: Set[int]) -> Dict[str, Any]:
        self._enter(value, path, active)
        try:
            result = {}
            for descriptor in self.descriptor_cache.describe(type(value)):
                current = getattr(value, descriptor.attribute, UNSET)
                if current is UNSET:
                    continue
                if current is None:
                    if descriptor.emits_null:
                        result[descriptor.name] = None
                    continue
                result[descriptor.name] = self._serialize(
                    current, descriptor.shape, path + (descriptor.name,), active
                )
            return result
        finally:
            active.discard(id(value))

    def _serialize_sequence(self, values: Any, element: Shape, path: Tuple[str, ...],
                            active: Set[int]) -> List[Any]:
        self._enter(values, path, active)
        try:
            return [
                self._serialize(item, element, path + (_index_segment(i),), active)
                for i, item in enumerate(values)
            ]
        finally:
            active.discard(id(values))

    def _serialize_dynamic(self, value: Any, path: Tuple[str, ...], active: Set[int]) -> JSONValue:
        self._check_depth(path)

        if value is None or isinstance(value, (bool, str)):
            return value
        if isinstance(value, enum.Enum):
            return self._serialize_enum(value, path, active)
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, (list, tuple)):
            return self._serialize_sequence(value, DYNAMIC, path, active)
        if isinstance(value, dict):
            return self._serialize_mapping(value, path, active)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self._serialize_object(value, path, active)

        raise UnsupportedShapeError(
            f"Cannot convert value of type {type(value).__name__} to JSON",
            path=path,
            context=type(value)
        )

    def _serialize_mapping(self, value: Dict[Any, Any], path: Tuple[str, ...],
                           active: Set[int]) -> Dict[str, Any]:
        self._enter(value, path, active)
        try:
            result = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise TypeMismatchError(
                        f"JSON object keys must be strings, found {type(key).__name__}",
                        path=path
                    )
                result[key] = self._serialize_dynamic(item, path + (key,), active)
            return result
        finally:
            active.discard(id(value))

    def _enter(self, value: Any, path: Tuple[str, ...], active: Set[int]) -> None:
        if id(value) in active:
            raise CircularReferenceError(
                f"Circular reference to {type(value).__name__} detected",
                path=path
            )
        active.add(id(value))

    # Deserialization

    def _deserialize(self, json_value: JSONValue, shape: Shape, path: Tuple[str, ...]) -> Any:
        self._check_depth(path)

        if json_value is None:
            if shape.nullable:
                return None
            raise TypeMismatchError(f"Expected {shape.describe()}, found null", path=path)

        if shape.kind == ShapeKind.PRIMITIVE:
            return self._deserialize_primitive(json_value, shape.python_type, path)
        elif shape.kind == ShapeKind.ENUM:
            try:
                return self.descriptor_cache.lookup_enum(shape.python_type, json_value)
            except UnknownEnumValueError as e:
                raise UnknownEnumValueError(e.args[0], path=path, context=e.context) from None
        elif shape.kind == ShapeKind.OBJECT:
            return self._deserialize_object(json_value, shape.python_type, path)
        elif shape.kind == ShapeKind.COLLECTION:
            if not isinstance(json_value, list):
                raise TypeMismatchError(f"Expected array, found {json_type_name(json_value)}", path=path)
            items = [
                self._deserialize(item, shape.element, path + (_index_segment(i),))
                for i, item in enumerate(json_value)
            ]
            return tuple(items) if shape.python_type is tuple else items
        elif shape.kind == ShapeKind.DYNAMIC:
            return self._copy_tree(json_value, path)

        raise UnsupportedShapeError(f"No conversion rule for shape {shape!r}", path=path)

    def _copy_tree(self, json_value: JSONValue, path: Tuple[str, ...]) -> JSONValue:
        self._check_depth(path)

        if isinstance(json_value, list):
            return [self._copy_tree(item, path + (_index_segment(i),)) for i, item in enumerate(json_value)]
        if isinstance(json_value, dict):
            return {key: self._copy_tree(item, path + (key,)) for key, item in json_value.items()}
        return json_value

    def _deserialize_primitive(self, json_value: JSONValue, python_type: type,
                               path: Tuple[str, ...]) -> Any:
        if python_type is bool:
            matches = isinstance(json_value, bool)
        elif python_type is int:
            matches = isinstance(json_value, int) and not isinstance(json_value, bool)
        elif python_type is float:
            matches = isinstance(json_value, (int, float)) and not isinstance(json_value, bool)
        else:
            matches = isinstance(json_value, str)

        if not matches:
            raise TypeMismatchError(
                f"Expected {python_type.__name__}, found {json_type_name(json_value)}",
                path=path
            )
        return float(json_value) if python_type is float else json_value

    def _deserialize_object(self, json_value: JSONValue, cls: type, path: Tuple[str, ...]) -> Any:
        if not isinstance(json_value, dict):
            raise TypeMismatchError(
                f"Expected object for {cls.__name__}, found {json_type_name(json_value)}",
                path=path
            )

        init_values = {}
        late_values = {}
        for descriptor in self.descriptor_cache.describe(cls):
            field_path = path + (descriptor.name,)
            if descriptor.name not in json_value:
                if descriptor.required:
                    raise MissingRequiredFieldError(
                        f"Missing required field '{descriptor.name}' for {cls.__name__}",
                        path=field_path
                    )
                continue

            converted = self._deserialize(json_value[descriptor.name], descriptor.shape, field_path)
            if descriptor.init:
                init_values[descriptor.attribute] = converted
            else:
                late_values[descriptor.attribute] = converted

        try:
            instance = cls(**init_values)
        except TypeError as e:
            raise UnsupportedShapeError(
                f"Cannot instantiate {cls.__name__} from its mapped fields: {e}",
                path=path,
                context=cls
            ) from e

        for attribute, converted in late_values.items():
            object.__setattr__(instance, attribute, converted)

        self.logger.debug(f"Built {cls.__name__} at {'.'.join(path) or 'root'}")
        return instance
