"""Centralized threshold and magic number configuration.

This module contains the tunable thresholds used by the reconciler and the
history parser. Having these in one place makes tuning easier and documents
why each value was chosen.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class MatchingThresholds:
    """Thresholds for cross-version requirement matching."""

    # Jaccard word overlap a description pair must strictly exceed for a
    # "likely" match; a score exactly at the threshold is rejected
    likely_similarity: float = 0.5


@dataclass
class HistoryThresholds:
    """Thresholds for the history export parser."""

    placeholder_min_underscores: int = 2  # "__" or longer means "not completed"
    error_excerpt_chars: int = 80  # Line excerpt length quoted in diagnostics


# Global instances for easy import
MATCHING_THRESHOLDS = MatchingThresholds()
HISTORY_THRESHOLDS = HistoryThresholds()
