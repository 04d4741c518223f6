"""
Module: structuring.validation

Purpose:
    Consistency checks for a requirement version before it is trusted:
    duplicate ids, missing descriptions, dangling or cyclic parent links,
    colliding display orders, unparseable numbers, stale nesting depths and
    alternatives groups that can never be satisfied.

    Checks only report; nothing is repaired here. The tree builder applies
    the same graceful degradation regardless of what is reported.

Key Functions:
    - validate_requirements(): Run every check, return the issues found
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from advancement_toolkit.core.models import ParentLinked, Requirement
from advancement_toolkit.diagnostics import (
    ALTERNATIVES_SHORTFALL,
    DEPTH_MISMATCH,
    DUPLICATE_DISPLAY_ORDER,
    MISSING_DESCRIPTION,
    DiagnosticsCollector,
    HierarchyIssue,
)

from .tree_builder import arrange_requirements

logger = logging.getLogger(__name__)


def validate_requirements(
    requirements: Sequence[Requirement],
    collector: Optional[DiagnosticsCollector] = None,
) -> List[HierarchyIssue]:
    """
    Validate a requirement version.

    Args:
        requirements: Requirements of one version, in published order
        collector: Collector to record into (a fresh one if None)

    Returns:
        Issues found by this call, in check order
    """
    collector = collector if collector is not None else DiagnosticsCollector()
    before = collector.issue_count

    # Duplicate ids, dangling parents, cycles and fallback numbers are
    # recorded by the arena build itself.
    arrange_requirements(ParentLinked(tuple(requirements)), collector)

    _check_descriptions(requirements, collector)
    _check_display_orders(requirements, collector)
    _check_depths(requirements, collector)
    _check_alternatives(requirements, collector)

    issues = collector.issues[before:]
    if issues:
        logger.info(f"Validation found {len(issues)} issue(s) in {len(requirements)} requirement(s)")
    return issues


def _check_descriptions(requirements: Sequence[Requirement], collector: DiagnosticsCollector) -> None:
    for req in requirements:
        if not req.description.strip():
            collector.add(
                MISSING_DESCRIPTION,
                req.id,
                req.requirement_number,
                f"Requirement {req.requirement_number} has no description",
            )


def _check_display_orders(requirements: Sequence[Requirement], collector: DiagnosticsCollector) -> None:
    """Siblings (same parent id) must not share a display order."""
    seen: Dict[Tuple[Optional[str], int], Requirement] = {}
    for req in requirements:
        key = (req.parent_requirement_id, req.display_order)
        first = seen.get(key)
        if first is None:
            seen[key] = req
            continue
        collector.add(
            DUPLICATE_DISPLAY_ORDER,
            req.id,
            req.requirement_number,
            f"Requirement {req.requirement_number} shares display_order {req.display_order} "
            f"with {first.requirement_number}",
            other_id=first.id,
        )


def _check_depths(requirements: Sequence[Requirement], collector: DiagnosticsCollector) -> None:
    for req in requirements:
        if req.nesting_depth is None:
            continue
        parsed_depth = req.number.depth
        if req.nesting_depth != parsed_depth:
            collector.add(
                DEPTH_MISMATCH,
                req.id,
                req.requirement_number,
                f"Requirement {req.requirement_number} stores nesting_depth {req.nesting_depth}, "
                f"number implies {parsed_depth}",
                stored=req.nesting_depth,
                parsed=parsed_depth,
            )


def _check_alternatives(requirements: Sequence[Requirement], collector: DiagnosticsCollector) -> None:
    """A parent's required_count cannot exceed the size of its alternatives groups."""
    group_sizes: Dict[Tuple[Optional[str], str], int] = {}
    for req in requirements:
        if req.alternatives_group is not None:
            key = (req.parent_requirement_id, req.alternatives_group)
            group_sizes[key] = group_sizes.get(key, 0) + 1

    by_id = {req.id: req for req in reversed(requirements)}
    for (parent_id, group), size in group_sizes.items():
        parent = by_id.get(parent_id) if parent_id is not None else None
        if parent is None or parent.required_count is None:
            continue
        if parent.required_count > size:
            collector.add(
                ALTERNATIVES_SHORTFALL,
                parent.id,
                parent.requirement_number,
                f"Requirement {parent.requirement_number} requires {parent.required_count} of "
                f"alternatives group {group!r}, which has only {size}",
                group=group,
                group_size=size,
            )
