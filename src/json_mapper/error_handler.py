"""Error handling implementation for the JSON Mapper."""

import logging
from typing import Optional

from .types import (
    ErrorHandlerInterface,
    ValidationResult,
    ValidationError,
    ErrorResponse,
    MappingError,
    ErrorType
)
from .utils.validation import ValidationUtils


class ErrorHandler(ErrorHandlerInterface):
    """
    Error handler for JSON Mapper operations.

    Validates JSON text before it is parsed and turns conversion failures
    into a suggested action for the caller.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_input(self, input_data: str) -> ValidationResult:
        """
        Validate input JSON string.

        Args:
            input_data: JSON string to validate

        Returns:
            ValidationResult with validation details
        """
        try:
            return ValidationUtils.validate_json_string(input_data)
        except Exception as e:
            self.logger.error(f"Unexpected error during input validation: {e}")
            return ValidationResult(
                is_valid=False,
                errors=[ValidationError(
                    type=ErrorType.SYNTAX,
                    message=f"Validation failed with unexpected error: {str(e)}",
                    location="input"
                )],
                warnings=[]
            )

    def handle_mapping_error(self, error: MappingError) -> ErrorResponse:
        """
        Log a conversion failure and describe how to fix it.

        Args:
            error: MappingError to handle

        Returns:
            ErrorResponse with a suggested action
        """
        self.logger.error(f"Mapping error: {error.error_type.value} at {error.path_string} - {error}")

        if error.error_type == ErrorType.MISSING_REQUIRED_FIELD:
            return self._respond(error, True,
                                 f"Add the '{error.path[-1] if error.path else '?'}' key to the input "
                                 "or declare the field with required=False.")
        elif error.error_type == ErrorType.TYPE_MISMATCH:
            return self._respond(error, True,
                                 "Make the JSON value match the declared field type. "
                                 "Values are never coerced between JSON types.")
        elif error.error_type == ErrorType.UNKNOWN_ENUM_VALUE:
            allowed = error.context.get("allowed") if isinstance(error.context, dict) else None
            suffix = f" Allowed values: {allowed}." if allowed else ""
            return self._respond(error, True, "Use one of the enum's external values." + suffix)
        elif error.error_type == ErrorType.UNSUPPORTED_SHAPE:
            return self._respond(error, False,
                                 "Declare the field with a supported type: bool, int, float, str, "
                                 "an Enum, a dataclass, a list of those, or Any.")
        elif error.error_type == ErrorType.CIRCULAR:
            return self._respond(error, False,
                                 "Remove circular references from the object graph. "
                                 "Check for objects that contain themselves directly or indirectly.")
        elif error.error_type == ErrorType.DEPTH:
            return self._respond(error, False,
                                 "Reduce nesting or raise the mapper's max_depth setting.")
        elif error.error_type == ErrorType.SYNTAX:
            return self._respond(error, True, "Fix the JSON syntax and retry.")
        else:
            return self._respond(error, False, "Unknown error type. Please check logs and retry.")

    def _respond(self, error: MappingError, can_recover: bool, suggested_action: str) -> ErrorResponse:
        return ErrorResponse(
            can_recover=can_recover,
            suggested_action=suggested_action,
            path=error.path_string
        )
