"""Utility functions for the JSON Mapper."""

from .validation import ValidationUtils

__all__ = ["ValidationUtils"]
