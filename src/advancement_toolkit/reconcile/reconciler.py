"""
Module: reconcile.reconciler

Purpose:
    Map a scout's completed requirements from one requirement version onto
    another version of the same rank or badge. The result is a
    recommendation for a human reviewer: nothing here touches progress.

    Matching order for each completed source requirement:
        1. Identical requirement number             -> exact
        2. Identical external number (if enabled)   -> exact
        3. Best description Jaccard score > threshold -> likely
        4. Otherwise                                -> none

    Fuzzy ties go to the first target in input order, so results are
    deterministic for a fixed input order (and may change if the target
    order changes).

Key Functions:
    - reconcile_requirements(): Produce the mapping list
    - apply_manual_mapping(): Record an operator's choice
    - summarize_mappings(): Count mappings per confidence
    - accepted_targets(): source number -> target id for mapped requirements

Used By:
    - reconcile.workflow
    - cli: reconcile command
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import AbstractSet, Dict, List, Optional, Sequence, Tuple

from advancement_toolkit.core.models import MatchConfidence, Requirement, RequirementMapping

from .config import ReconcileConfig
from .similarity import jaccard_of_sets, word_set

logger = logging.getLogger(__name__)


def reconcile_requirements(
    source: Sequence[Requirement],
    target: Sequence[Requirement],
    completed_numbers: AbstractSet[str],
    config: Optional[ReconcileConfig] = None,
) -> List[RequirementMapping]:
    """
    Map completed source requirements onto the target version.

    Only source requirements whose number is in ``completed_numbers`` are
    mapped, in source order. An empty source yields an empty list; an empty
    target yields a ``none`` mapping for every completed source requirement.

    Args:
        source: Requirements of the version the scout worked under
        target: Requirements of the version being switched to
        completed_numbers: Raw numbers the scout completed under ``source``
        config: Matching configuration (defaults if None)

    Returns:
        One RequirementMapping per completed source requirement

    Example:
        >>> mappings = reconcile_requirements(v2022, v2024, {"1", "3"})
        >>> [m.confidence.value for m in mappings]
        ['exact', 'likely']
    """
    config = config or ReconcileConfig()
    if not source:
        return []

    by_number: Dict[str, Requirement] = {}
    by_external: Dict[str, Requirement] = {}
    for req in target:
        by_number.setdefault(req.requirement_number, req)
        if req.external_number:
            by_external.setdefault(req.external_number, req)

    # Word sets computed once per target, in target order
    target_words: List[Tuple[Requirement, frozenset]] = [
        (req, word_set(req.description)) for req in target
    ]

    mappings: List[RequirementMapping] = []
    for req in source:
        if req.requirement_number not in completed_numbers:
            continue
        mappings.append(_map_one(req, by_number, by_external, target_words, config))

    counts = summarize_mappings(mappings)
    logger.info(
        f"Reconciled {len(mappings)} completed requirement(s): "
        f"{counts.exact} exact, {counts.likely} likely, {counts.none} unmatched"
    )
    return mappings


def _map_one(
    req: Requirement,
    by_number: Dict[str, Requirement],
    by_external: Dict[str, Requirement],
    target_words: List[Tuple[Requirement, frozenset]],
    config: ReconcileConfig,
) -> RequirementMapping:
    match = by_number.get(req.requirement_number)
    if match is not None:
        return _mapping(req, match, MatchConfidence.EXACT)

    if config.match_external_numbers and req.external_number:
        match = by_external.get(req.external_number)
        if match is not None:
            return _mapping(req, match, MatchConfidence.EXACT)

    source_words = word_set(req.description)
    best: Optional[Requirement] = None
    best_score = 0.0
    for candidate, words in target_words:
        score = jaccard_of_sets(source_words, words)
        # Strictly greater: the first of equally good candidates wins
        if score > best_score and config.accepts(score):
            best, best_score = candidate, score

    if best is not None:
        logger.debug(f"Likely match {req.requirement_number} -> {best.requirement_number} (score={best_score:.3f})")
        return _mapping(req, best, MatchConfidence.LIKELY, score=best_score)

    logger.debug(f"No match for completed requirement {req.requirement_number}")
    return RequirementMapping(
        source_number=req.requirement_number,
        source_description=req.description,
        confidence=MatchConfidence.NONE,
    )


def _mapping(
    source: Requirement,
    target: Requirement,
    confidence: MatchConfidence,
    score: Optional[float] = None,
) -> RequirementMapping:
    return RequirementMapping(
        source_number=source.requirement_number,
        source_description=source.description,
        confidence=confidence,
        target_requirement_id=target.id,
        target_number=target.requirement_number,
        target_description=target.description,
        score=score,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Review helpers
# ─────────────────────────────────────────────────────────────────────────────

def apply_manual_mapping(
    mappings: Sequence[RequirementMapping],
    source_number: str,
    target: Optional[Requirement],
) -> List[RequirementMapping]:
    """
    Return a new mapping list with an operator's choice for one requirement.

    Choosing a target gives it ``manual`` confidence; choosing None clears
    the mapping to ``none`` (the operator accepts losing that history).

    Raises:
        KeyError: If no mapping exists for ``source_number``
    """
    if not any(m.source_number == source_number for m in mappings):
        raise KeyError(f"No mapping for source requirement {source_number!r}")

    result = []
    for mapping in mappings:
        if mapping.source_number != source_number:
            result.append(mapping)
        elif target is None:
            result.append(replace(
                mapping,
                confidence=MatchConfidence.NONE,
                target_requirement_id=None,
                target_number=None,
                target_description=None,
                score=None,
            ))
        else:
            result.append(replace(
                mapping,
                confidence=MatchConfidence.MANUAL,
                target_requirement_id=target.id,
                target_number=target.requirement_number,
                target_description=target.description,
                score=None,
            ))
    return result


@dataclass(frozen=True)
class MappingSummary:
    exact: int = 0
    likely: int = 0
    manual: int = 0
    none: int = 0

    @property
    def total(self) -> int:
        return self.exact + self.likely + self.manual + self.none

    @property
    def needs_review(self) -> int:
        return self.likely + self.none


def summarize_mappings(mappings: Sequence[RequirementMapping]) -> MappingSummary:
    counts = {confidence: 0 for confidence in MatchConfidence}
    for mapping in mappings:
        counts[mapping.confidence] += 1
    return MappingSummary(
        exact=counts[MatchConfidence.EXACT],
        likely=counts[MatchConfidence.LIKELY],
        manual=counts[MatchConfidence.MANUAL],
        none=counts[MatchConfidence.NONE],
    )


def accepted_targets(mappings: Sequence[RequirementMapping]) -> Dict[str, str]:
    """Source number -> target requirement id for every mapping with a target."""
    return {
        m.source_number: m.target_requirement_id
        for m in mappings
        if m.target_requirement_id is not None
    }
