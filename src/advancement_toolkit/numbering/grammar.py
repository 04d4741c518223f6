"""
Module: numbering.grammar

Purpose:
    Parse raw requirement-number strings into canonical RequirementNumber
    values. Three notations coexist in published requirement sets:

        Standard        "1", "1a", "7b8"        letter lowercased
        Parenthetical   "6A", "6A(a)(1)", "9(2)" contents kept verbatim
        Fallback        anything else           best-effort, never a parent

    Branches are tried in that order and the first match wins. The two
    grammars are distinct namespaces: "6A" is matched by the standard
    branch as ("a",) while "6A(a)" is ("A", "a").

Key Functions:
    - parse_requirement_number(): Total, memoised parse
    - compare_requirement_numbers(): Three-way comparison
    - requirement_sort_key(): Sort key for raw strings
    - parent_number(): Number of the enclosing requirement
    - option_letter(): Uppercase option letter ("A" in "6A(a)")
    - to_display_format(): "6A(a)(1)" -> "6Aa1"

Dependencies:
    - re (std)
    - functools (std)
    - advancement_toolkit.core.models.numbers

Used By:
    - core.models.requirements.Requirement.number
    - structuring.tree_builder
    - structuring.validation
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Optional, Tuple

from advancement_toolkit.core.models.numbers import NumberNotation, RequirementNumber

logger = logging.getLogger(__name__)


STANDARD_PATTERN = re.compile(r"^(\d+)([a-zA-Z])?(\d+)?$")
PARENTHETICAL_PATTERN = re.compile(r"^(\d+)([A-Z])?((?:\([^()]+\))*)$")
GROUP_CONTENT_PATTERN = re.compile(r"\(([^()]+)\)")
LEADING_DIGITS_PATTERN = re.compile(r"^(\d+)")


@lru_cache(maxsize=4096)
def parse_requirement_number(raw: str) -> RequirementNumber:
    """
    Parse a raw requirement number into its canonical form.

    Never raises: input no branch recognises is parsed by the fallback
    branch, which callers needing strict validation can detect through
    ``RequirementNumber.is_best_effort``.

    Args:
        raw: Number as published, e.g. "7b8" or "6A(a)(1)"

    Returns:
        RequirementNumber with group, sub_parts and notation

    Example:
        >>> parse_requirement_number("7b8").sub_parts
        ('b', '8')
        >>> parse_requirement_number("6A(a)(1)").sub_parts
        ('A', 'a', '1')
    """
    text = (raw or "").strip()

    match = STANDARD_PATTERN.match(text)
    if match:
        group, letter, digits = match.groups()
        sub_parts = []
        if letter:
            sub_parts.append(letter.lower())
        if digits:
            sub_parts.append(digits)
        return RequirementNumber(text, int(group), tuple(sub_parts), NumberNotation.STANDARD)

    match = PARENTHETICAL_PATTERN.match(text)
    if match:
        group, option, groups_text = match.groups()
        sub_parts = [option] if option else []
        sub_parts.extend(_group_contents(groups_text))
        return RequirementNumber(text, int(group), tuple(sub_parts), NumberNotation.PARENTHETICAL)

    return _parse_fallback(text)


def _group_contents(groups_text: str) -> list[str]:
    """Contents of each "(x)" group, stripped, empty groups dropped."""
    contents = []
    for content in GROUP_CONTENT_PATTERN.findall(groups_text):
        content = content.strip()
        if content:
            contents.append(content)
    return contents


def _parse_fallback(text: str) -> RequirementNumber:
    """
    Leading digits as the group, one sub-part per remaining character.

    Separators are kept as sub-parts, so "7." is group 7 with (".",) and never
    a bare group number.
    """
    match = LEADING_DIGITS_PATTERN.match(text)
    if match:
        group = int(match.group(1))
        rest = text[match.end():]
    else:
        group = 0
        rest = text

    sub_parts = tuple(rest)
    logger.debug(f"Requirement number {text!r} parsed best-effort as group={group} sub_parts={sub_parts}")
    return RequirementNumber(text, group, sub_parts, NumberNotation.FALLBACK)


# ─────────────────────────────────────────────────────────────────────────────
# Ordering
# ─────────────────────────────────────────────────────────────────────────────

def requirement_sort_key(raw: str) -> Tuple[int, str]:
    """Sort key for raw number strings: group, then case-folded sub-parts."""
    return parse_requirement_number(raw).sort_key


def compare_requirement_numbers(a: str, b: str) -> int:
    """
    Compare two raw requirement numbers.

    Returns:
        Negative if a sorts first, positive if b sorts first, 0 if equal
    """
    key_a = requirement_sort_key(a)
    key_b = requirement_sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


# ─────────────────────────────────────────────────────────────────────────────
# Structure helpers
# ─────────────────────────────────────────────────────────────────────────────

def parent_number(raw: str) -> Optional[str]:
    """
    Number of the requirement that encloses ``raw``, None for a bare group.

    Examples:
        "6A(a)(1)" -> "6A(a)", "6A" -> "6", "7b8" -> "7b", "1" -> None
    """
    number = parse_requirement_number(raw)
    if number.is_parent:
        return None

    text = number.raw
    if number.notation is NumberNotation.PARENTHETICAL:
        last_group = text.rfind("(")
        if last_group > 0:
            return text[:last_group]
        return str(number.group)

    if number.notation is NumberNotation.STANDARD:
        match = STANDARD_PATTERN.match(text)
        group, letter, digits = match.groups()
        if letter and digits:
            return f"{group}{letter}"
        return group

    return str(number.group)


def option_letter(raw: str) -> Optional[str]:
    """Uppercase option letter of Option-A/B style numbers ("6B(a)" -> "B")."""
    match = re.match(r"^\d+([A-Z])", (raw or "").strip())
    return match.group(1) if match else None


def to_display_format(raw: str) -> str:
    """
    Collapse parenthetical groups for display.

    Examples:
        "6A(a)(1)" -> "6Aa1", "9b(2)" -> "9b2", "1a" -> "1a"
    """
    text = (raw or "").strip()
    match = re.match(r"^(\d+[A-Za-z]?)(.*)$", text)
    if not match:
        return text
    base, rest = match.groups()
    if not rest:
        return base
    groups = GROUP_CONTENT_PATTERN.findall(rest)
    if not groups:
        return text
    return base + "".join(g.strip() for g in groups)
