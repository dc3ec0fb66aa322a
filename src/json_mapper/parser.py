"""JSON text parsing and compact serialization."""

import json
import logging
from typing import Any, Optional

from .error_handler import ErrorHandler
from .types import JSONSyntaxError, JSONValue, TypeMismatchError


class JSONParser:
    """
    JSON text codec for the mapper.

    Parses text into the native JSON tree (dicts keep document key order)
    and prints trees in compact form, keys in insertion order and no
    whitespace between tokens.
    """

    def __init__(self, error_handler: Optional[ErrorHandler] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the JSON parser.

        Args:
            error_handler: Optional ErrorHandler instance
            logger: Optional logger instance
        """
        self.error_handler = error_handler or ErrorHandler()
        self.logger = logger or logging.getLogger(__name__)

    def parse(self, json_string: str) -> JSONValue:
        """
        Parse JSON text into a JSON tree.

        Args:
            json_string: JSON text to parse

        Returns:
            Parsed JSON tree

        Raises:
            JSONSyntaxError: If the text is empty or not valid JSON
        """
        validation_result = self.error_handler.validate_input(json_string)
        if not validation_result.is_valid:
            error_messages = [error.message for error in validation_result.errors]
            locations = [error.location for error in validation_result.errors if error.location]
            raise JSONSyntaxError(
                f"Invalid JSON input: {'; '.join(error_messages)}",
                context={"locations": locations}
            )

        for warning in validation_result.warnings:
            self.logger.warning(warning)

        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise JSONSyntaxError(
                f"JSON parsing failed: {e.msg} at line {e.lineno}, column {e.colno}"
            ) from e

        self.logger.debug(f"Parsed JSON {type(data).__name__} from {len(json_string)} characters")
        return data

    def dumps(self, value: JSONValue) -> str:
        """
        Print a JSON tree in compact form.

        Raises:
            TypeMismatchError: If the value is not a JSON tree
        """
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise TypeMismatchError(f"Value is not a JSON tree: {e}") from e

    def dumps_pretty(self, value: Any, indent: int = 2) -> str:
        """Print a JSON tree with indentation, for human reading."""
        try:
            return json.dumps(value, ensure_ascii=False, indent=indent, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise TypeMismatchError(f"Value is not a JSON tree: {e}") from e
