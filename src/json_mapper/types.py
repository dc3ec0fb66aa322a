"""Core type definitions for the JSON Mapper."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


JSONValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]
"""A JSON tree as produced by the ``json`` module."""


class ShapeKind(Enum):
    """Enumeration of conversion shape kinds."""
    PRIMITIVE = "primitive"
    ENUM = "enum"
    OBJECT = "object"
    COLLECTION = "collection"
    DYNAMIC = "dynamic"


class ErrorType(Enum):
    """Enumeration of error types."""
    MISSING_REQUIRED_FIELD = "missing_required_field"
    TYPE_MISMATCH = "type_mismatch"
    UNKNOWN_ENUM_VALUE = "unknown_enum_value"
    UNSUPPORTED_SHAPE = "unsupported_shape"
    CIRCULAR = "circular"
    DEPTH = "depth"
    SYNTAX = "syntax"


class _Unset:
    """Marker type for a mapped field that was never assigned."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Unset, ())


UNSET = _Unset()


@dataclass
class ValidationError:
    """Validation error details."""
    type: ErrorType
    message: str
    location: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[str]


@dataclass
class ErrorResponse:
    """Response for error handling."""
    can_recover: bool
    suggested_action: str
    path: Optional[str] = None


class MappingError(Exception):
    """Base exception for every conversion failure."""

    error_type = ErrorType.UNSUPPORTED_SHAPE

    def __init__(self, message: str, error_type: Optional[ErrorType] = None,
                 path: Tuple[str, ...] = (), context: Optional[Any] = None):
        super().__init__(message)
        if error_type is not None:
            self.error_type = error_type
        self.path = tuple(path)
        self.context = context

    @property
    def path_string(self) -> str:
        """Get the failing path as a dot-separated string."""
        return ".".join(self.path) if self.path else "root"

    def __str__(self) -> str:
        message = super().__str__()
        if self.path:
            return f"{message} (at {self.path_string})"
        return message


class MissingRequiredFieldError(MappingError):
    """A required field is absent from the input JSON object."""
    error_type = ErrorType.MISSING_REQUIRED_FIELD


class TypeMismatchError(MappingError):
    """A JSON value or Python value does not fit the expected shape."""
    error_type = ErrorType.TYPE_MISMATCH


class UnknownEnumValueError(MappingError):
    """No enum member maps to the given external value."""
    error_type = ErrorType.UNKNOWN_ENUM_VALUE


class UnsupportedShapeError(MappingError):
    """No conversion rule applies to the type."""
    error_type = ErrorType.UNSUPPORTED_SHAPE


class CircularReferenceError(MappingError):
    """An object graph refers back to a value currently being serialized."""
    error_type = ErrorType.CIRCULAR


class MaxDepthExceededError(MappingError):
    """Nesting went deeper than the configured limit."""
    error_type = ErrorType.DEPTH


class JSONSyntaxError(MappingError):
    """JSON text could not be parsed."""
    error_type = ErrorType.SYNTAX


# Abstract base classes for interfaces

class ObjectMapperInterface(ABC):
    """Abstract interface for the object mapper."""

    @abstractmethod
    def convert_value(self, source: Any, target: Any) -> Any:
        """Convert ``source`` to ``target`` in either direction."""
        pass


class ValueConverterInterface(ABC):
    """Abstract interface for the recursive value converter."""

    @abstractmethod
    def to_json(self, value: Any, shape: Any, path: Tuple[str, ...] = ()) -> JSONValue:
        """Convert a typed value into a JSON tree."""
        pass

    @abstractmethod
    def from_json(self, json_value: JSONValue, shape: Any, path: Tuple[str, ...] = ()) -> Any:
        """Convert a JSON tree into a typed value."""
        pass


class ErrorHandlerInterface(ABC):
    """Abstract interface for error handling."""

    @abstractmethod
    def validate_input(self, input_data: str) -> ValidationResult:
        """Validate input data."""
        pass

    @abstractmethod
    def handle_mapping_error(self, error: MappingError) -> ErrorResponse:
        """Handle conversion errors."""
        pass
