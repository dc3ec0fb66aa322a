"""Object mapper facade: the single conversion entry point."""

import logging
import typing
from contextlib import nullcontext
from typing import Any, Optional, Tuple

from .converter import DEFAULT_MAX_DEPTH, ValueConverter, json_type_name
from .descriptors import FieldDescriptor, FieldDescriptorCache, get_descriptor_cache
from .error_handler import ErrorHandler
from .parser import JSONParser
from .profiler import PerformanceProfiler
from .shapes import classify, is_json_document, is_json_type, shape_of
from .types import JSONValue, ObjectMapperInterface, TypeMismatchError

_OBJECT_TARGETS = (dict, typing.Dict)
_ARRAY_TARGETS = (list, typing.List)


class ObjectMapper(ObjectMapperInterface):
    """
    Bidirectional mapper between dataclasses and JSON trees.

    ``convert_value`` serializes when the target is a JSON type (``dict``,
    ``list``, ``JSONValue``, ``Any``) and deserializes when the source is a
    JSON tree and the target is a typed shape. A typed source aimed at a
    generic target such as ``List[Person]`` comes back as a fresh copy.
    Usage::

        mapper = ObjectMapper()
        tree = mapper.convert_value(person, dict)
        person = mapper.convert_value(tree, Person)
    """

    def __init__(self, logger: Optional[logging.Logger] = None,
                 descriptor_cache: Optional[FieldDescriptorCache] = None,
                 enable_profiling: bool = False,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the object mapper.

        Args:
            logger: Optional logger instance
            descriptor_cache: Descriptor cache (defaults to the process-wide cache)
            enable_profiling: Record performance metrics for every conversion
            max_depth: Maximum nesting depth accepted in either direction
        """
        self.logger = logger or logging.getLogger(__name__)
        self.descriptor_cache = descriptor_cache if descriptor_cache is not None else get_descriptor_cache()
        self.converter = ValueConverter(self.descriptor_cache, self.logger, max_depth=max_depth)
        self.error_handler = ErrorHandler(self.logger)
        self.parser = JSONParser(self.error_handler, self.logger)
        self.profiler = PerformanceProfiler(self.logger) if enable_profiling else None

    def convert_value(self, source: Any, target: Any) -> Any:
        """
        Convert ``source`` into ``target`` in either direction.

        Args:
            source: A typed value or a JSON tree
            target: A JSON type to serialize into, or a type annotation to
                deserialize into

        Returns:
            The converted value; ``None`` when ``source`` is ``None``

        Raises:
            MappingError: If the conversion fails anywhere in the tree
        """
        if source is None:
            return None

        with self._profile("convert_value"):
            return self._convert(source, target)

    def write_value_as_string(self, value: Any) -> str:
        """
        Serialize a value to compact JSON text.

        Args:
            value: Dataclass instance, enum member, collection or JSON tree

        Returns:
            JSON text with keys in declaration order and no whitespace
        """
        with self._profile("write_value_as_string") as profiler:
            text = self.parser.dumps(self._convert(value, Any))
            if profiler is not None:
                profiler.record_output(len(text.encode("utf-8")))
            return text

    def read_value(self, json_string: str, target: Any) -> Any:
        """
        Parse JSON text and convert it into ``target``.

        Raises:
            JSONSyntaxError: If the text is not valid JSON
            MappingError: If the parsed tree does not fit ``target``
        """
        input_size = len(json_string.encode("utf-8")) if isinstance(json_string, str) else 0
        with self._profile("read_value", input_size):
            tree = self.parser.parse(json_string)
            if tree is None:
                return None
            return self._convert(tree, target)

    def describe(self, cls: type) -> Tuple[FieldDescriptor, ...]:
        """Get the ordered field descriptors of a mapped dataclass."""
        return self.descriptor_cache.describe(cls)

    def _convert(self, source: Any, target: Any) -> Any:
        if is_json_type(target):
            self.logger.debug(f"Serializing {type(source).__name__} to JSON")
            result = self.converter.to_json(source, shape_of(source))
            self._check_json_target(result, target)
            return result

        if isinstance(target, type) and isinstance(source, target):
            return source

        shape = classify(target)
        if is_json_document(source):
            self.logger.debug(f"Deserializing JSON {json_type_name(source)} into {shape.describe()}")
            return self.converter.from_json(source, shape)

        # Typed source: to_json rejects anything that does not fit the shape
        self.logger.debug(f"Copying {type(source).__name__} as {shape.describe()}")
        return self.converter.from_json(self.converter.to_json(source, shape), shape)

    def _check_json_target(self, result: JSONValue, target: Any) -> None:
        origin = typing.get_origin(target) or target
        if origin in _OBJECT_TARGETS and not isinstance(result, dict):
            raise TypeMismatchError(f"Expected JSON object, found {json_type_name(result)}")
        if origin in _ARRAY_TARGETS and not isinstance(result, list):
            raise TypeMismatchError(f"Expected JSON array, found {json_type_name(result)}")

    def _profile(self, operation_name: str, input_size: int = 0):
        if self.profiler is None:
            return nullcontext()
        return self.profiler.profile_operation(operation_name, input_size)


_default_mapper = ObjectMapper()


def convert_value(source: Any, target: Any) -> Any:
    """Convert with the process-wide default mapper."""
    return _default_mapper.convert_value(source, target)
