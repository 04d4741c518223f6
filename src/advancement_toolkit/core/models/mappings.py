"""
Module: mappings

Purpose:
    RequirementMapping - one recommended link from a completed requirement
    of the source version to a requirement of the target version, with a
    confidence label a human reviews before any progress is rewritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MatchConfidence(str, Enum):
    """How certain a cross-version requirement match is."""
    EXACT = "exact"      # Same number or same external key
    LIKELY = "likely"    # Description similarity above threshold
    MANUAL = "manual"    # Chosen by an operator
    NONE = "none"        # No target found

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class RequirementMapping:
    """
    Mapping of one source requirement onto the target version.

    Invariants:
        - confidence is NONE iff target_requirement_id is None
        - score is only set for LIKELY matches
    """

    source_number: str
    source_description: str
    confidence: MatchConfidence
    target_requirement_id: Optional[str] = None
    target_number: Optional[str] = None
    target_description: Optional[str] = None
    score: Optional[float] = None

    def __post_init__(self) -> None:
        has_target = self.target_requirement_id is not None
        if has_target == (self.confidence is MatchConfidence.NONE):
            raise ValueError(
                f"Mapping for {self.source_number!r}: confidence {self.confidence.value!r} "
                f"inconsistent with target {self.target_requirement_id!r}"
            )

    @property
    def has_target(self) -> bool:
        return self.target_requirement_id is not None

    @property
    def needs_review(self) -> bool:
        """True for mappings an operator must look at before migrating."""
        return self.confidence in (MatchConfidence.LIKELY, MatchConfidence.NONE)

    def to_dict(self) -> dict:
        return {
            "source_number": self.source_number,
            "target_requirement_id": self.target_requirement_id,
            "target_number": self.target_number,
            "confidence": str(self.confidence),
            "source_description": self.source_description,
            "target_description": self.target_description,
            "score": round(self.score, 4) if self.score is not None else None,
        }
