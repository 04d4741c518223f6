"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_progress,
    validate_requirement_set,
    ValidationError,
    PROGRESS_SCHEMA_VERSION,
    REQUIREMENT_SET_SCHEMA_VERSION,
)

__all__ = [
    "validate_progress",
    "validate_requirement_set",
    "ValidationError",
    "PROGRESS_SCHEMA_VERSION",
    "REQUIREMENT_SET_SCHEMA_VERSION",
]
