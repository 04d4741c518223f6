"""
Module: history.models

Purpose:
    Parsed shapes of a ScoutBook "Scouts BSA History Report" export.
    Unlike the core models these are mutable: the parser fills them in
    line by line. Dates are ISO "YYYY-MM-DD" strings, None when absent.

Key Classes:
    - ScoutInfo: Header block (name, unit, ids, current rank)
    - ParsedRankProgress / ParsedRankRequirement: One rank section
    - ParsedMeritBadge: Completed or partial merit badge
    - ParsedLeadershipPosition: One leadership row
    - ParsedActivities: Service hours, hiking miles, camping nights
    - ParsedHistory: Everything above plus the diagnostics list
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ScoutInfo:
    full_name: str = ""
    first_name: str = ""
    last_name: str = ""
    unit: str = ""
    birthdate: Optional[str] = None
    date_joined: Optional[str] = None
    current_rank: Optional[str] = None
    current_rank_date: Optional[str] = None
    bsa_id: Optional[str] = None
    positions: List[str] = field(default_factory=list)


@dataclass
class ParsedRankRequirement:
    requirement_number: str
    description: str
    completed_date: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.completed_date is not None


@dataclass
class ParsedRankProgress:
    rank_code: str
    rank_name: str
    completed_date: Optional[str] = None
    requirements: List[ParsedRankRequirement] = field(default_factory=list)


@dataclass
class ParsedMeritBadge:
    name: str
    normalized_name: str
    start_date: Optional[str] = None
    completed_date: Optional[str] = None
    is_complete: bool = False
    completed_requirements: List[str] = field(default_factory=list)
    version: Optional[str] = None
    eagle_required: bool = False


@dataclass
class ParsedLeadershipPosition:
    name: str
    patrol: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@dataclass
class ParsedActivities:
    service_hours: float = 0.0
    hiking_miles: float = 0.0
    camping_nights: float = 0.0


@dataclass
class ParsedHistory:
    """
    Complete parse result.

    ``errors`` is the only soft-error channel: one human-readable string per
    line that could not be (fully) understood. It only ever grows; nothing
    in it stops the rest of the document from being parsed.
    """
    scout: ScoutInfo = field(default_factory=ScoutInfo)
    rank_progress: List[ParsedRankProgress] = field(default_factory=list)
    completed_merit_badges: List[ParsedMeritBadge] = field(default_factory=list)
    partial_merit_badges: List[ParsedMeritBadge] = field(default_factory=list)
    leadership_history: List[ParsedLeadershipPosition] = field(default_factory=list)
    activities: ParsedActivities = field(default_factory=ParsedActivities)
    errors: List[str] = field(default_factory=list)

    def rank(self, rank_code: str) -> Optional[ParsedRankProgress]:
        for progress in self.rank_progress:
            if progress.rank_code == rank_code:
                return progress
        return None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HistorySummary:
    """Counts shown when previewing an import."""
    scout_name: str
    current_rank: Optional[str]
    completed_ranks: int
    in_progress_ranks: int
    completed_badges: int
    in_progress_badges: int
    leadership_positions: int
    camping_nights: float
    service_hours: float
    hiking_miles: float
