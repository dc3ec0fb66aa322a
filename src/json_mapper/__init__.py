"""
JSON Mapper - Bidirectional mapping between dataclasses and JSON.

Declare the fields that take part in mapping with ``json_property`` and
convert in either direction with ``ObjectMapper.convert_value``.
"""

__version__ = "1.0.0"

from .annotations import json_property, json_value
from .descriptors import FieldDescriptor, FieldDescriptorCache
from .object_mapper import ObjectMapper, convert_value
from .shapes import Shape
from .types import (
    UNSET,
    JSONValue,
    ShapeKind,
    ErrorType,
    MappingError,
    MissingRequiredFieldError,
    TypeMismatchError,
    UnknownEnumValueError,
    UnsupportedShapeError,
    CircularReferenceError,
    MaxDepthExceededError,
    JSONSyntaxError,
)

__all__ = [
    "ObjectMapper",
    "convert_value",
    "json_property",
    "json_value",
    "FieldDescriptor",
    "FieldDescriptorCache",
    "Shape",
    "ShapeKind",
    "UNSET",
    "JSONValue",
    "ErrorType",
    "MappingError",
    "MissingRequiredFieldError",
    "TypeMismatchError",
    "UnknownEnumValueError",
    "UnsupportedShapeError",
    "CircularReferenceError",
    "MaxDepthExceededError",
    "JSONSyntaxError",
]
