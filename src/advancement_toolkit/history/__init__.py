"""
History Import Package

Parses ScoutBook history exports and converts the result into the
requirement and progress collections used by the tree builder and the
reconciler.
"""

from .badges import BADGE_NAME_MAP, normalize_badge_name
from .conversion import find_partial_badge, partial_badge_completed_numbers, rank_records
from .models import (
    HistorySummary,
    ParsedActivities,
    ParsedHistory,
    ParsedLeadershipPosition,
    ParsedMeritBadge,
    ParsedRankProgress,
    ParsedRankRequirement,
    ScoutInfo,
)
from .parser import (
    HistorySection,
    parse_date,
    parse_history,
    summarize_history,
    validate_history,
)

__all__ = [
    "BADGE_NAME_MAP",
    "normalize_badge_name",
    "find_partial_badge",
    "partial_badge_completed_numbers",
    "rank_records",
    "HistorySummary",
    "ParsedActivities",
    "ParsedHistory",
    "ParsedLeadershipPosition",
    "ParsedMeritBadge",
    "ParsedRankProgress",
    "ParsedRankRequirement",
    "ScoutInfo",
    "HistorySection",
    "parse_date",
    "parse_history",
    "summarize_history",
    "validate_history",
]
