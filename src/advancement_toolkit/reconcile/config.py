"""
Module: reconcile.config

Purpose:
    Configuration dataclass for the version reconciler.
    Immutable configuration with validation on construction.

Key Classes:
    - ReconcileConfig: Matching behaviour for reconcile_requirements()

Used By:
    - reconcile.reconciler
    - reconcile.workflow
    - cli: reconcile command
"""

from __future__ import annotations

from dataclasses import dataclass

from advancement_toolkit.common.thresholds import MATCHING_THRESHOLDS


@dataclass(frozen=True)
class ReconcileConfig:
    """
    Configuration for cross-version matching (immutable).

    Attributes:
        likely_similarity: Jaccard score a fuzzy match must strictly exceed
        match_external_numbers: Try the external key when numbers differ

    Invariants:
        - 0 <= likely_similarity < 1

    Example:
        >>> config = ReconcileConfig(likely_similarity=0.6)
        >>> config.accepts(0.6)
        False
    """

    likely_similarity: float = MATCHING_THRESHOLDS.likely_similarity
    match_external_numbers: bool = True

    def __post_init__(self) -> None:
        if not 0.0 <= self.likely_similarity < 1.0:
            raise ValueError(
                f"likely_similarity must be in [0, 1), got {self.likely_similarity}"
            )

    def accepts(self, score: float) -> bool:
        """True if a similarity score is high enough for a likely match."""
        return score > self.likely_similarity
