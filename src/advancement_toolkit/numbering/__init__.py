"""
Requirement-number grammar.

Canonicalises the irregular numbering schemes used across rank and merit
badge requirement versions.
"""

from .grammar import (
    compare_requirement_numbers,
    option_letter,
    parent_number,
    parse_requirement_number,
    requirement_sort_key,
    to_display_format,
)

__all__ = [
    "compare_requirement_numbers",
    "option_letter",
    "parent_number",
    "parse_requirement_number",
    "requirement_sort_key",
    "to_display_format",
]
