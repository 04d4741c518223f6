"""
Requirement hierarchy construction and completion roll-ups.
"""

from .tree_builder import (
    RequirementArena,
    arrange_requirements,
    build_requirement_tree,
    index_progress,
    iter_forest,
)
from .progress import (
    CompletionStats,
    alternatives_satisfied,
    completion_stats,
    default_collapsed,
    find_node,
    forest_stats,
    stats_by_node,
)
from .validation import validate_requirements

__all__ = [
    "RequirementArena",
    "arrange_requirements",
    "build_requirement_tree",
    "index_progress",
    "iter_forest",
    "CompletionStats",
    "alternatives_satisfied",
    "completion_stats",
    "default_collapsed",
    "find_node",
    "forest_stats",
    "stats_by_node",
    "validate_requirements",
]
