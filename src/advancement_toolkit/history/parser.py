"""
Module: history.parser

Purpose:
    Parse the ScoutBook "Scouts BSA History Report" export. The export is
    not a single CSV table: it is a sequence of titled sections, each with
    its own line format. The parser is a line-at-a-time state machine that
    never aborts. A line it cannot understand is recorded in
    ``ParsedHistory.errors`` and the next line is parsed as usual.

Document layout:
    Header block          title lines, "Name Troop 123 BOYS",
                          "Birthdate:","01/02/2010","Rank:","Star(03/04/2025)",
                          "BSA ID:","123456","Position:","Patrol Leader09/08/2025"
    Rank sections         "Tenderfoot",,"12/01/2025"
                          "1a","Present yourself ...","03/18/2025"
    Completed Merit Badges "Camping #","07/04/2025"
    Leadership            "Patrol Leader (Hawks)","03/17/2025","09/07/2025"
    Activities            "Total Service Hours","2.50"  or  Hiking Miles: 12
    Partial Merit Badges  "Cooking","10/11/2025"
                          Completed Requirements: 1, 2a, 9b(2)(2024 Version)

Key Functions:
    - parse_history(): Document text -> ParsedHistory
    - parse_date(): "MM/DD/YYYY" -> "YYYY-MM-DD"
    - validate_history(): Import-blocking checks on a parse result
    - summarize_history(): Counts for an import preview

Used By:
    - history.conversion
    - cli: import-history command
"""

from __future__ import annotations

import csv
import logging
import re
from datetime import date
from enum import Enum
from typing import List, Optional

from advancement_toolkit.common.thresholds import HISTORY_THRESHOLDS

from .badges import is_eagle_required_label, normalize_badge_name
from .models import (
    HistorySummary,
    ParsedHistory,
    ParsedLeadershipPosition,
    ParsedMeritBadge,
    ParsedRankProgress,
    ParsedRankRequirement,
    ScoutInfo,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────────────────────

RANK_NAME_TO_CODE = {
    "scout": "scout",
    "tenderfoot": "tenderfoot",
    "second class": "second_class",
    "first class": "first_class",
    "star": "star",
    "life": "life",
    "eagle": "eagle",
}

# Ranks whose sections list merit badge slots with an empty number
MERIT_BADGE_SLOT_RANKS = frozenset({"star", "life", "eagle"})
MERIT_BADGE_SLOT_NUMBER = "MB"

DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
UNIT_PATTERN = re.compile(r"\b(Troop|Pack|Crew|Ship)\s+(\d+[A-Z]?)\s*(BOYS|GIRLS)?", re.IGNORECASE)
RANK_VALUE_PATTERN = re.compile(r"^([^(]+)(?:\(([^)]*)\))?")
POSITION_PATTERN = re.compile(r"([A-Za-z][A-Za-z .'/-]*?)\s*\d{1,2}/\d{1,2}/\d{4}")
REQUIREMENTS_LINE_PATTERN = re.compile(r"completed requirements:\s*(.*)$", re.IGNORECASE)
VERSION_PATTERN = re.compile(r"\((\d{4})\s+Version\)", re.IGNORECASE)
REQUIREMENT_SPLIT_PATTERN = re.compile(r"[,\s]+")


class HistorySection(str, Enum):
    """Parser states, one per section kind."""

    HEADER = "header"
    RANK = "rank"
    COMPLETED_BADGES = "completed_badges"
    PARTIAL_BADGES = "partial_badges"
    LEADERSHIP = "leadership"
    ACTIVITIES = "activities"
    SKIPPED = "skipped"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


# First-cell titles of non-rank sections
SECTION_TITLES = {
    "completed merit badges": HistorySection.COMPLETED_BADGES,
    "partial merit badges": HistorySection.PARTIAL_BADGES,
    "leadership": HistorySection.LEADERSHIP,
    "activities": HistorySection.ACTIVITIES,
    "order of the arrow": HistorySection.SKIPPED,
    "training courses": HistorySection.SKIPPED,
    "training courses completed": HistorySection.SKIPPED,
    "awards": HistorySection.SKIPPED,
}

# Sections whose data lines always carry at least two cells
_MULTI_CELL_SECTIONS = frozenset({
    HistorySection.RANK,
    HistorySection.COMPLETED_BADGES,
    HistorySection.LEADERSHIP,
    HistorySection.ACTIVITIES,
})


# ─────────────────────────────────────────────────────────────────────────────
# Cell helpers
# ─────────────────────────────────────────────────────────────────────────────

def is_placeholder(text: str) -> bool:
    """True for the "not completed" placeholder, a run of underscores."""
    text = (text or "").strip()
    return len(text) >= HISTORY_THRESHOLDS.placeholder_min_underscores and set(text) == {"_"}


def parse_date(text: str) -> Optional[str]:
    """
    Convert an export date to ISO format.

    Returns None for an empty cell or the underscore placeholder.

    Raises:
        ValueError: If the cell is neither a date nor a placeholder

    Example:
        >>> parse_date("3/7/2025")
        '2025-03-07'
    """
    text = (text or "").strip()
    if not text or is_placeholder(text):
        return None
    match = DATE_PATTERN.match(text)
    if not match:
        raise ValueError(f"malformed date {text!r}")
    month, day, year = (int(group) for group in match.groups())
    # Rejects 02/30/2025 and friends
    return date(year, month, day).isoformat()


def split_cells(line: str) -> List[str]:
    """Split one export line into stripped cells, honouring CSV quoting."""
    row = next(csv.reader([line], skipinitialspace=True), [])
    return [cell.strip() for cell in row]


def _excerpt(line: str) -> str:
    limit = HISTORY_THRESHOLDS.error_excerpt_chars
    return line if len(line) <= limit else line[: limit - 3] + "..."


# ─────────────────────────────────────────────────────────────────────────────
# State machine
# ─────────────────────────────────────────────────────────────────────────────

class _HistoryParser:
    """Holds the mutable state of one parse_history() call."""

    def __init__(self) -> None:
        self.result = ParsedHistory()
        self.section = HistorySection.HEADER
        self.rank: Optional[ParsedRankProgress] = None
        self.badge: Optional[ParsedMeritBadge] = None
        self.line_no = 0
        self.line = ""

    # -- diagnostics ---------------------------------------------------------

    def error(self, message: str) -> None:
        text = f"Line {self.line_no}: {message}: {_excerpt(self.line)!r}"
        logger.warning(text)
        self.result.errors.append(text)

    def date_cell(self, cells: List[str], index: int, what: str) -> Optional[str]:
        """Parse ``cells[index]`` as a date, recording a diagnostic if malformed."""
        if index >= len(cells):
            return None
        try:
            return parse_date(cells[index])
        except ValueError as exc:
            self.error(f"{what}: {exc}")
            return None

    # -- section handling ----------------------------------------------------

    def close_open_items(self) -> None:
        if self.rank is not None:
            self.result.rank_progress.append(self.rank)
            self.rank = None
        if self.badge is not None:
            self.result.partial_merit_badges.append(self.badge)
            self.badge = None

    def switch_section(self, cells: List[str]) -> bool:
        """Enter a new section if the line is a known section title."""
        title = cells[0].casefold()

        rank_code = RANK_NAME_TO_CODE.get(title)
        if rank_code is not None:
            self.close_open_items()
            self.section = HistorySection.RANK
            self.rank = ParsedRankProgress(
                rank_code=rank_code,
                rank_name=cells[0],
                completed_date=self.date_cell(cells, 2, f"{cells[0]} rank date"),
            )
            return True

        section = SECTION_TITLES.get(title)
        if section is not None:
            self.close_open_items()
            self.section = section
            return True

        return False

    def is_unknown_title(self, cells: List[str]) -> bool:
        """
        A lone non-numeric cell where the current section expects a row.

        Activities also accept a single "label: value" cell, and partial
        badge lines may be a bare badge name.
        """
        if self.section not in _MULTI_CELL_SECTIONS:
            return False
        values = [cell for cell in cells if cell]
        if len(values) != 1 or values[0][0].isdigit():
            return False
        if self.section == HistorySection.ACTIVITIES and ":" in values[0]:
            return False
        return True

    def feed(self, line_no: int, line: str) -> None:
        self.line_no = line_no
        self.line = line

        # Requirement lists are free text with commas, so match the raw line
        if REQUIREMENTS_LINE_PATTERN.search(line):
            if self.section == HistorySection.PARTIAL_BADGES:
                self.partial_requirements_line(line)
            elif self.section not in (HistorySection.SKIPPED, HistorySection.UNKNOWN):
                self.error("completed requirements outside Partial Merit Badges")
            return

        cells = split_cells(line)
        if not any(cells):
            return

        if self.switch_section(cells):
            return

        if self.is_unknown_title(cells):
            self.close_open_items()
            self.section = HistorySection.UNKNOWN
            self.error("unrecognized section header")
            return

        handler = {
            HistorySection.HEADER: self.header_line,
            HistorySection.RANK: self.rank_line,
            HistorySection.COMPLETED_BADGES: self.completed_badge_line,
            HistorySection.PARTIAL_BADGES: self.partial_badge_line,
            HistorySection.LEADERSHIP: self.leadership_line,
            HistorySection.ACTIVITIES: self.activity_line,
        }.get(self.section)
        if handler is not None:
            handler(cells)

    # -- line grammars -------------------------------------------------------

    def header_line(self, cells: List[str]) -> None:
        scout: ScoutInfo = self.result.scout
        labelled = False
        for index, cell in enumerate(cells[:-1]):
            label = cell.casefold()
            value = cells[index + 1]
            if not value:
                continue
            if label == "birthdate:":
                scout.birthdate = self.date_cell(cells, index + 1, "birthdate")
            elif label == "date joined scouts bsa:":
                scout.date_joined = self.date_cell(cells, index + 1, "date joined")
            elif label == "rank:":
                self.current_rank(scout, value)
            elif label == "bsa id:":
                scout.bsa_id = value
            elif label == "position:":
                scout.positions = [p.strip() for p in POSITION_PATTERN.findall(value)]
            else:
                continue
            labelled = True

        if not labelled and not scout.full_name:
            self.name_line(scout, " ".join(cell for cell in cells if cell))

    def name_line(self, scout: ScoutInfo, text: str) -> None:
        match = UNIT_PATTERN.search(text)
        if not match:
            return
        name = text[: match.start()].strip()
        if not name:
            return
        unit_type, unit_number, unit_kind = match.groups()
        scout.unit = f"{unit_type} {unit_number}" + (f" {unit_kind}" if unit_kind else "")
        scout.full_name = name
        first, _, last = name.partition(" ")
        scout.first_name = first
        scout.last_name = last.strip()

    def current_rank(self, scout: ScoutInfo, value: str) -> None:
        match = RANK_VALUE_PATTERN.match(value)
        if not match:
            return
        scout.current_rank = match.group(1).strip()
        if match.group(2):
            try:
                scout.current_rank_date = parse_date(match.group(2))
            except ValueError as exc:
                self.error(f"current rank date: {exc}")

    def rank_line(self, cells: List[str]) -> None:
        if len(cells) < 2:
            self.error("requirement line missing description")
            return

        number, description = cells[0], cells[1]
        if is_placeholder(description):
            # Unused merit badge slot
            return
        if not number:
            if self.rank.rank_code not in MERIT_BADGE_SLOT_RANKS:
                self.error("requirement line missing requirement number")
                return
            number = MERIT_BADGE_SLOT_NUMBER
        if len(cells) < 3:
            self.error("requirement line missing completion date")

        self.rank.requirements.append(ParsedRankRequirement(
            requirement_number=number,
            description=description,
            completed_date=self.date_cell(cells, 2, f"requirement {number}"),
        ))

    def completed_badge_line(self, cells: List[str]) -> None:
        name = cells[0]
        if is_placeholder(name):
            return
        if not name:
            self.error("merit badge line missing badge name")
            return
        self.result.completed_merit_badges.append(ParsedMeritBadge(
            name=name,
            normalized_name=normalize_badge_name(name),
            completed_date=self.date_cell(cells, 1, f"{name} completion date"),
            is_complete=True,
            eagle_required=is_eagle_required_label(name),
        ))

    def partial_badge_line(self, cells: List[str]) -> None:
        name = cells[0]
        if is_placeholder(name):
            return
        if not name:
            self.error("partial merit badge line missing badge name")
            return
        if self.badge is not None:
            self.result.partial_merit_badges.append(self.badge)
        self.badge = ParsedMeritBadge(
            name=name,
            normalized_name=normalize_badge_name(name),
            start_date=self.date_cell(cells, 1, f"{name} start date"),
            eagle_required=is_eagle_required_label(name),
        )

    def partial_requirements_line(self, line: str) -> None:
        if self.badge is None:
            self.error("completed requirements with no open merit badge")
            return
        text = REQUIREMENTS_LINE_PATTERN.search(line.replace('"', "")).group(1)
        version = VERSION_PATTERN.search(text)
        if version:
            self.badge.version = version.group(1)
        text = VERSION_PATTERN.sub(" ", text)
        self.badge.completed_requirements.extend(
            token for token in REQUIREMENT_SPLIT_PATTERN.split(text) if token
        )

    def leadership_line(self, cells: List[str]) -> None:
        full_name = cells[0]
        if not full_name or len(cells) < 2:
            self.error("leadership line missing fields")
            return
        patrol = re.search(r"\(([^)]+)\)\s*$", full_name)
        self.result.leadership_history.append(ParsedLeadershipPosition(
            name=re.sub(r"\s*\([^)]+\)\s*$", "", full_name).strip(),
            patrol=patrol.group(1) if patrol else None,
            start_date=self.date_cell(cells, 1, "leadership start date"),
            end_date=self.date_cell(cells, 2, "leadership end date"),
        ))

    def activity_line(self, cells: List[str]) -> None:
        values = [cell for cell in cells if cell]
        if len(values) == 1:
            label, _, raw = values[0].partition(":")
        else:
            label, raw = cells[0], cells[1]
        label = label.casefold()

        if "service hours" in label:
            field_name = "service_hours"
        elif "hiking miles" in label:
            field_name = "hiking_miles"
        elif "camping nights" in label:
            field_name = "camping_nights"
        else:
            logger.debug(f"Ignoring activity line {self.line_no}: {label!r}")
            return

        try:
            value = float(raw.strip().replace(",", ""))
        except ValueError:
            self.error(f"non-numeric activity value {raw.strip()!r}")
            return
        setattr(self.result.activities, field_name, value)


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def parse_history(document: str) -> ParsedHistory:
    """
    Parse a ScoutBook history export.

    Never raises for malformed content: every line that cannot be fully
    understood adds one entry to ``errors`` and parsing resumes on the
    next line.

    Args:
        document: Full text of the export

    Returns:
        ParsedHistory with everything that could be recovered

    Example:
        >>> history = parse_history(text)
        >>> [r.rank_code for r in history.rank_progress]
        ['scout', 'tenderfoot']
    """
    parser = _HistoryParser()
    for line_no, raw_line in enumerate((document or "").splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            parser.feed(line_no, line)
        except (ValueError, IndexError, csv.Error) as exc:
            parser.error(f"could not parse line ({exc})")
    parser.close_open_items()

    result = parser.result
    logger.info(
        f"Parsed history for {result.scout.full_name or 'unknown scout'}: "
        f"{len(result.rank_progress)} rank(s), "
        f"{len(result.completed_merit_badges)} completed badge(s), "
        f"{len(result.partial_merit_badges)} partial badge(s), "
        f"{len(result.errors)} error(s)"
    )
    return result


def validate_history(history: ParsedHistory) -> List[str]:
    """
    Problems that should stop an import, plus the parse diagnostics.

    Returns:
        Parse errors followed by import-level problems (empty if clean)
    """
    problems = list(history.errors)
    if not history.scout.full_name:
        problems.append("Scout name not found")

    has_rank_progress = any(rank.requirements for rank in history.rank_progress)
    has_badges = bool(history.completed_merit_badges or history.partial_merit_badges)
    if not (has_rank_progress or has_badges or history.leadership_history):
        problems.append("No advancement data found in file")
    return problems


def summarize_history(history: ParsedHistory) -> HistorySummary:
    completed_ranks = sum(1 for rank in history.rank_progress if rank.completed_date)
    in_progress_ranks = sum(
        1 for rank in history.rank_progress
        if not rank.completed_date and any(req.is_complete for req in rank.requirements)
    )
    return HistorySummary(
        scout_name=history.scout.full_name,
        current_rank=history.scout.current_rank,
        completed_ranks=completed_ranks,
        in_progress_ranks=in_progress_ranks,
        completed_badges=len(history.completed_merit_badges),
        in_progress_badges=len(history.partial_merit_badges),
        leadership_positions=len(history.leadership_history),
        camping_nights=history.activities.camping_nights,
        service_hours=history.activities.service_hours,
        hiking_miles=history.activities.hiking_miles,
    )
