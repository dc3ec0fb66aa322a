"""Classification of Python type annotations into conversion shapes."""

import collections.abc
import dataclasses
import enum
import types
import typing
from dataclasses import dataclass
from typing import Any, Optional

from .types import JSONValue, ShapeKind, UnsupportedShapeError

PRIMITIVE_TYPES = (bool, int, float, str)

_SEQUENCE_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_DYNAMIC_TYPES = (object, dict)
_DYNAMIC_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


@dataclass(frozen=True)
class Shape:
    """
    Structural description of a conversion target.

    ``python_type`` is the concrete class for primitive, enum and object
    shapes, and the container class (``list`` or ``tuple``) for collections.
    """
    kind: ShapeKind
    python_type: Optional[type] = None
    element: Optional["Shape"] = None
    nullable: bool = False

    def as_nullable(self) -> "Shape":
        return dataclasses.replace(self, nullable=True)

    def describe(self) -> str:
        """Get a short human-readable rendering of the shape."""
        if self.kind == ShapeKind.COLLECTION:
            text = f"{self.python_type.__name__}[{self.element.describe()}]"
        elif self.kind == ShapeKind.DYNAMIC:
            text = "any"
        else:
            text = self.python_type.__name__
        return f"Optional[{text}]" if self.nullable else text


DYNAMIC = Shape(ShapeKind.DYNAMIC, nullable=True)


def shape_of(value: Any) -> Shape:
    """Get the shape of a runtime value's own class."""
    if isinstance(value, enum.Enum):
        return Shape(ShapeKind.ENUM, type(value))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return Shape(ShapeKind.OBJECT, type(value))
    return DYNAMIC


def is_json_tree(value: Any) -> bool:
    """Check whether a value is a node of the JSON tree (shallow)."""
    return value is None or type(value) in (dict, list, str, int, float, bool)


def is_json_document(value: Any) -> bool:
    """Check whether a value is a JSON tree all the way down."""
    pending = [value]
    seen = set()
    while pending:
        node = pending.pop()
        if not is_json_tree(node):
            return False
        if isinstance(node, (dict, list)):
            if id(node) in seen:
                continue
            seen.add(id(node))
            if isinstance(node, dict):
                if not all(type(key) is str for key in node):
                    return False
                pending.extend(node.values())
            else:
                pending.extend(node)
    return True


def is_json_type(annotation: Any) -> bool:
    """Check whether an annotation names the JSON tree itself."""
    if annotation in (Any, dict, list, object) or annotation == JSONValue:
        return True
    return typing.get_origin(annotation) in _DYNAMIC_ORIGINS


def classify(annotation: Any) -> Shape:
    """
    Classify a type annotation into a Shape.

    Args:
        annotation: Type annotation, e.g. ``int``, ``List[Person]``

    Returns:
        Shape describing how values of the annotation convert

    Raises:
        UnsupportedShapeError: If no conversion rule applies
    """
    if annotation is Any or annotation in _DYNAMIC_TYPES or annotation == JSONValue:
        return DYNAMIC

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin in (typing.Union, types.UnionType):
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == 1:
            return classify(members[0]).as_nullable()
        raise UnsupportedShapeError(f"Union of several types is not supported: {annotation!r}",
                                    context=annotation)

    if origin in _DYNAMIC_ORIGINS:
        return DYNAMIC

    if annotation in (list, tuple):
        return Shape(ShapeKind.COLLECTION, annotation, DYNAMIC)

    if origin in _SEQUENCE_ORIGINS:
        element = classify(args[0]) if args else DYNAMIC
        return Shape(ShapeKind.COLLECTION, list, element)

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return Shape(ShapeKind.COLLECTION, tuple, classify(args[0]))
        raise UnsupportedShapeError(f"Only variable-length tuples are supported: {annotation!r}",
                                    context=annotation)

    if isinstance(annotation, type):
        if issubclass(annotation, enum.Enum):
            return Shape(ShapeKind.ENUM, annotation)
        if annotation in PRIMITIVE_TYPES:
            return Shape(ShapeKind.PRIMITIVE, annotation)
        if dataclasses.is_dataclass(annotation):
            return Shape(ShapeKind.OBJECT, annotation)

    raise UnsupportedShapeError(f"No conversion rule for type {annotation!r}", context=annotation)
