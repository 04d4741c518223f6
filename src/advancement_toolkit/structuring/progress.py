"""
Module: structuring.progress

Purpose:
    Completion roll-ups over RequirementNode trees. Pure functions of the
    tree: nothing here is cached or stored, statistics are always
    recalculated from ProgressRecord.is_complete.

Key Functions:
    - completion_stats(): {completed, total} for a subtree
    - forest_stats(): Sum of completion_stats over roots
    - default_collapsed(): Ids of nodes a checklist view starts collapsed
    - alternatives_satisfied(): Whether a node's alternatives groups are met

Used By:
    - cli: tree command
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence

from advancement_toolkit.core.models import RequirementNode


@dataclass(frozen=True, slots=True)
class CompletionStats:
    """
    Completion counts for a subtree.

    Invariants:
        - 0 <= completed <= total
    """

    completed: int
    total: int

    def __post_init__(self) -> None:
        if not 0 <= self.completed <= self.total:
            raise ValueError(f"Invalid completion stats: {self.completed}/{self.total}")

    @property
    def is_fully_complete(self) -> bool:
        return self.completed == self.total

    @property
    def percent(self) -> int:
        """Whole-number percentage, 0 for an empty total."""
        if self.total == 0:
            return 0
        return (self.completed * 100) // self.total

    def __add__(self, other: CompletionStats) -> CompletionStats:
        if not isinstance(other, CompletionStats):
            return NotImplemented
        return CompletionStats(self.completed + other.completed, self.total + other.total)

    def to_dict(self) -> dict:
        return {"completed": self.completed, "total": self.total, "percent": self.percent}

    def __str__(self) -> str:
        return f"{self.completed}/{self.total}"


EMPTY_STATS = CompletionStats(0, 0)


def completion_stats(node: RequirementNode) -> CompletionStats:
    """
    Count completed and total requirements in a subtree.

    total = 1 for the node itself + children's totals;
    completed = 1 if the node's own progress is complete + children's completed.

    Example:
        >>> completion_stats(tree)
        CompletionStats(completed=2, total=3)
    """
    return _stats(node)


def _stats(node: RequirementNode) -> CompletionStats:
    completed = 1 if node.is_complete else 0
    total = 1
    for child in node.children:
        child_stats = _stats(child)
        completed += child_stats.completed
        total += child_stats.total
    return CompletionStats(completed, total)


def forest_stats(forest: Sequence[RequirementNode]) -> CompletionStats:
    """Completion counts summed over every root of a forest."""
    total = EMPTY_STATS
    for root in forest:
        total = total + completion_stats(root)
    return total


def stats_by_node(forest: Sequence[RequirementNode]) -> Dict[str, CompletionStats]:
    """
    Completion stats for every node, keyed by requirement id.

    Every node counts toward its ancestors' totals, duplicate ids included.
    When two nodes share an id, the first one finished in a post-order walk
    keeps the key.
    """
    result: Dict[str, CompletionStats] = {}

    def visit(node: RequirementNode) -> CompletionStats:
        completed = 1 if node.is_complete else 0
        total = 1
        for child in node.children:
            child_stats = visit(child)
            completed += child_stats.completed
            total += child_stats.total
        stats = CompletionStats(completed, total)
        result.setdefault(node.requirement.id, stats)
        return stats

    for root in forest:
        visit(root)
    return result


def default_collapsed(forest: Sequence[RequirementNode], collapse_completed: bool) -> FrozenSet[str]:
    """
    Ids of nodes a checklist view should start collapsed.

    A node is collapsed iff collapsing is enabled, it is fully complete and
    it has at least one child. Leaves are never collapsed: they have no
    nested content to hide.
    """
    if not collapse_completed:
        return frozenset()

    stats = stats_by_node(forest)
    collapsed: List[str] = []
    for root in forest:
        for node in root.iter_all():
            node_stats = stats.get(node.requirement.id)
            if node.children and node_stats is not None and node_stats.is_fully_complete:
                collapsed.append(node.requirement.id)
    return frozenset(collapsed)


def alternatives_satisfied(node: RequirementNode) -> bool:
    """
    Check the alternatives groups among a node's direct children.

    Children sharing an ``alternatives_group`` are alternatives: at least
    ``required_count`` of them (taken from the parent, default 1) must be
    complete. Children outside any group are ignored here.
    """
    required_count = node.requirement.required_count
    required: int = 1 if required_count is None else required_count
    groups: Dict[str, int] = {}
    for child in node.children:
        group = child.requirement.alternatives_group
        if group is None:
            continue
        groups.setdefault(group, 0)
        if completion_stats(child).is_fully_complete:
            groups[group] += 1
    return all(done >= required for done in groups.values())


def find_node(forest: Sequence[RequirementNode], requirement_id: str) -> Optional[RequirementNode]:
    for root in forest:
        found = root.find(requirement_id)
        if found is not None:
            return found
    return None
