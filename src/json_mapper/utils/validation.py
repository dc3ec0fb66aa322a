"""Validation utilities for JSON input."""

import json
from typing import Any, List, Set, Tuple

from ..types import ValidationResult, ValidationError, ErrorType

DEEP_NESTING_WARNING_DEPTH = 20


class ValidationUtils:
    """Utility class for validating JSON text and trees."""

    @staticmethod
    def validate_json_string(json_string: str) -> ValidationResult:
        """
        Validate JSON string syntax and structure.

        Args:
            json_string: JSON string to validate

        Returns:
            ValidationResult with validation details
        """
        errors = []
        warnings = []

        if not isinstance(json_string, str):
            errors.append(ValidationError(
                type=ErrorType.SYNTAX,
                message=f"JSON input must be text, got {type(json_string).__name__}",
                location="input"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        if not json_string.strip():
            errors.append(ValidationError(
                type=ErrorType.SYNTAX,
                message="JSON string is empty",
                location="input"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        duplicates: Set[str] = set()
        try:
            data = json.loads(json_string, object_pairs_hook=ValidationUtils._pairs_collector(duplicates))
        except json.JSONDecodeError as e:
            errors.append(ValidationError(
                type=ErrorType.SYNTAX,
                message=f"Invalid JSON syntax: {e.msg}",
                location=f"line {e.lineno}, column {e.colno}"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)
        except RecursionError:
            errors.append(ValidationError(
                type=ErrorType.SYNTAX,
                message="JSON nesting is too deep to parse",
                location="input"
            ))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        max_depth = ValidationUtils.calculate_max_depth(data)
        if max_depth > DEEP_NESTING_WARNING_DEPTH:
            warnings.append(f"Deep nesting detected (depth: {max_depth}). This may impact performance.")

        if duplicates:
            warnings.append(
                f"Duplicate object keys keep their last value: {', '.join(sorted(duplicates))}"
            )

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    @staticmethod
    def _pairs_collector(duplicates: Set[str]):
        def collect(pairs: List[Tuple[str, Any]]) -> dict:
            seen = set()
            for key, _ in pairs:
                if key in seen:
                    duplicates.add(key)
                seen.add(key)
            return dict(pairs)
        return collect

    @staticmethod
    def calculate_max_depth(data: Any, current_depth: int = 0) -> int:
        """Calculate maximum nesting depth of a JSON tree without recursing."""
        max_depth = current_depth
        pending = [(data, current_depth)]
        while pending:
            node, depth = pending.pop()
            max_depth = max(max_depth, depth)
            if isinstance(node, dict):
                pending.extend((child, depth + 1) for child in node.values())
            elif isinstance(node, list):
                pending.extend((child, depth + 1) for child in node)
        return max_depth
