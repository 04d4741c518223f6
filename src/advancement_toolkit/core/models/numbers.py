"""
Module: numbers

Purpose:
    Provides the RequirementNumber dataclass - the canonical, hierarchical
    identity of a raw requirement-number string such as "1", "7b8" or
    "6A(a)(1)". Instances are produced by the numbering grammar and are
    never built by hand outside of tests.

Key Functions:
    - RequirementNumber.depth: 1 + number of sub-parts
    - RequirementNumber.is_parent: True for bare group numbers
    - RequirementNumber.sort_key: (group, case-folded joined sub-parts)

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - numbering.grammar
    - core.models.requirements.Requirement
    - structuring.tree_builder
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class NumberNotation(str, Enum):
    """Grammar branch that produced a RequirementNumber."""
    STANDARD = "standard"            # "1", "1a", "7b8"
    PARENTHETICAL = "parenthetical"  # "6A(a)(1)", "9(2)"
    FALLBACK = "fallback"            # best-effort parse of anything else

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class RequirementNumber:
    """
    Canonical form of a requirement number (immutable).

    Attributes:
        raw: The original string, stripped of surrounding whitespace
        group: Leading integer ("6" in "6A(a)(1)"), 0 when absent
        sub_parts: Ordered sub-part tokens below the group
        notation: Grammar branch that matched

    Invariants:
        - group >= 0
        - sub_parts contains no empty tokens

    Example:
        >>> n = RequirementNumber("7b8", 7, ("b", "8"), NumberNotation.STANDARD)
        >>> n.depth
        3
        >>> n.is_parent
        False
    """

    raw: str
    group: int
    sub_parts: Tuple[str, ...] = ()
    notation: NumberNotation = NumberNotation.STANDARD

    def __post_init__(self) -> None:
        if self.group < 0:
            raise ValueError(f"Requirement group cannot be negative: {self.group}")
        if any(not part for part in self.sub_parts):
            raise ValueError(f"Empty sub-part in requirement number {self.raw!r}")

    @property
    def depth(self) -> int:
        """Nesting depth: 1 for "1", 2 for "1a", 3 for "6A(a)"."""
        return 1 + len(self.sub_parts)

    @property
    def is_parent(self) -> bool:
        """True for a bare group number; a best-effort parse never is one."""
        return not self.sub_parts and self.notation is not NumberNotation.FALLBACK

    @property
    def joined_sub_parts(self) -> str:
        return "".join(self.sub_parts)

    @property
    def sort_key(self) -> Tuple[int, str]:
        """Ordering key: group ascending, then case-insensitive sub-parts."""
        return (self.group, self.joined_sub_parts.casefold())

    @property
    def is_best_effort(self) -> bool:
        """True when only the fallback branch could make sense of the input."""
        return self.notation is NumberNotation.FALLBACK

    def to_dict(self) -> dict:
        return {
            "raw": self.raw,
            "group": self.group,
            "sub_parts": list(self.sub_parts),
            "depth": self.depth,
            "notation": str(self.notation),
        }

    def __repr__(self) -> str:
        return f"RequirementNumber({self.raw!r}, group={self.group}, sub_parts={self.sub_parts})"
