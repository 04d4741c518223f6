"""
Turn parsed history into the flat collections the rest of the toolkit uses.

Rank sections carry no parent links, so the requirements produced here are
meant for the legacy grouping strategy (``Legacy(...)``).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import FrozenSet, List, Optional, Sequence, Tuple

from advancement_toolkit.core.models import ProgressRecord, ProgressStatus, Requirement

from .models import ParsedMeritBadge, ParsedRankProgress

logger = logging.getLogger(__name__)

IMPORT_COMPLETED_BY = "scoutbook-import"


def rank_records(
    rank: ParsedRankProgress,
    id_prefix: Optional[str] = None,
) -> Tuple[List[Requirement], List[ProgressRecord]]:
    """
    Build Requirement and ProgressRecord collections for one rank section.

    Ids are ``"<prefix>:<number>"``. Numbers that repeat within the section
    (merit badge slots are all "MB") get a ``#<n>`` suffix in order of
    appearance. A progress record is produced only for requirements with a
    completion date.

    Args:
        rank: One parsed rank section
        id_prefix: Id namespace (defaults to the rank code)

    Returns:
        (requirements, progress) in section order
    """
    prefix = id_prefix or rank.rank_code
    totals = Counter(req.requirement_number for req in rank.requirements)
    seen: Counter = Counter()

    requirements: List[Requirement] = []
    progress: List[ProgressRecord] = []
    for order, parsed in enumerate(rank.requirements):
        number = parsed.requirement_number
        seen[number] += 1
        req_id = f"{prefix}:{number}"
        if totals[number] > 1:
            req_id = f"{req_id}#{seen[number]}"

        requirements.append(Requirement(
            id=req_id,
            requirement_number=number,
            description=parsed.description,
            display_order=order,
        ))
        if parsed.completed_date is not None:
            progress.append(ProgressRecord(
                requirement_id=req_id,
                status=ProgressStatus.COMPLETED,
                completed_at=parsed.completed_date,
                completed_by=IMPORT_COMPLETED_BY,
            ))

    logger.debug(
        f"Converted {rank.rank_code}: {len(requirements)} requirement(s), "
        f"{len(progress)} completed"
    )
    return requirements, progress


def partial_badge_completed_numbers(badge: ParsedMeritBadge) -> FrozenSet[str]:
    """Completed requirement numbers of a partial badge, for reconciliation."""
    return frozenset(badge.completed_requirements)


def find_partial_badge(
    badges: Sequence[ParsedMeritBadge],
    normalized_name: str,
) -> Optional[ParsedMeritBadge]:
    for badge in badges:
        if badge.normalized_name == normalized_name:
            return badge
    return None
