"""
Utils Package

Serialization and utility functions.
"""

from .serialization import (
    SerializationError,
    forest_to_dict,
    load_progress,
    load_requirement_set,
    mappings_to_json,
    progress_from_dict,
    progress_to_dict,
    requirement_set_from_dict,
    requirement_set_to_dict,
    save_progress,
    save_requirement_set,
)

__all__ = [
    "SerializationError",
    "forest_to_dict",
    "load_progress",
    "load_requirement_set",
    "mappings_to_json",
    "progress_from_dict",
    "progress_to_dict",
    "requirement_set_from_dict",
    "requirement_set_to_dict",
    "save_progress",
    "save_requirement_set",
]
