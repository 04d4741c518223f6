"""
Module: structuring.tree_builder

Purpose:
    Builds immutable RequirementNode forests from flat Requirement and
    ProgressRecord collections. Requirements are first arranged in an arena
    (nodes addressed by integer index, parent/child edges as index lists),
    then materialised into frozen nodes.

    Two strategies, selected by the explicit input shape:
    - ParentLinked: hierarchy from parent_requirement_id
    - Legacy: hierarchy from the requirement number's group

Key Functions:
    - build_requirement_tree(): Build the RequirementNode forest
    - arrange_requirements(): Build the index-addressed arena only
    - index_progress(): Pick one ProgressRecord per requirement
    - iter_forest(): Pre-order iteration over a forest

Dependencies:
    - advancement_toolkit.core.models: Requirement, ProgressRecord, RequirementNode
    - advancement_toolkit.diagnostics: DiagnosticsCollector

Used By:
    - structuring.progress: Completion roll-ups
    - cli: tree command
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from advancement_toolkit.core.models import (
    InputShape,
    Legacy,
    ParentLinked,
    ProgressRecord,
    Requirement,
    RequirementNode,
)
from advancement_toolkit.diagnostics import DiagnosticsCollector

logger = logging.getLogger(__name__)


@dataclass
class NodeBuilder:
    """
    Mutable arena slot for one requirement.

    Used internally during tree construction. Converted to an immutable
    RequirementNode once the structure is final.
    """
    index: int
    requirement: Requirement
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)


@dataclass
class RequirementArena:
    """
    Index-addressed requirement hierarchy.

    Attributes:
        nodes: One NodeBuilder per input requirement, in input order
        roots: Indices of top-level nodes, in display order
    """
    nodes: List[NodeBuilder]
    roots: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def parent_of(self, index: int) -> Optional[int]:
        return self.nodes[index].parent

    def children_of(self, index: int) -> Tuple[int, ...]:
        return tuple(self.nodes[index].children)

    def materialize(self, progress_by_id: Dict[str, ProgressRecord]) -> List[RequirementNode]:
        """Convert the arena into frozen RequirementNode trees."""
        visited: set[int] = set()
        return [self._materialize(root, progress_by_id, visited) for root in self.roots]

    def _materialize(
        self,
        index: int,
        progress_by_id: Dict[str, ProgressRecord],
        visited: set[int],
    ) -> RequirementNode:
        visited.add(index)
        node = self.nodes[index]
        children = []
        for child in node.children:
            if child in visited:
                # Re-visit means a broken invariant upstream; stop descending
                logger.warning(
                    f"Requirement {self.nodes[child].requirement.requirement_number} "
                    f"reached twice while building tree; skipped"
                )
                continue
            children.append(self._materialize(child, progress_by_id, visited))
        return RequirementNode(
            requirement=node.requirement,
            progress=progress_by_id.get(node.requirement.id),
            children=tuple(children),
        )


def build_requirement_tree(
    shape: InputShape,
    progress: Iterable[ProgressRecord] = (),
    diagnostics_collector: Optional[DiagnosticsCollector] = None,
) -> List[RequirementNode]:
    """
    Build a RequirementNode forest from flat records.

    Every input requirement appears exactly once in the output, either as a
    root or inside exactly one node's children. Dangling parent references
    promote the orphan to a root; parent cycles are cut.

    Args:
        shape: ParentLinked(...) or Legacy(...) wrapping the requirements
        progress: Progress records, matched by requirement_id
        diagnostics_collector: Optional sink for hierarchy issues

    Returns:
        Root nodes in display order

    Example:
        >>> reqs = [Requirement("a", "1"), Requirement("b", "1a"), Requirement("c", "2")]
        >>> forest = build_requirement_tree(Legacy(tuple(reqs)))
        >>> [n.requirement.requirement_number for n in forest]
        ['1', '2']
    """
    arena = arrange_requirements(shape, diagnostics_collector)
    progress_by_id = index_progress(progress)

    known_ids = {node.requirement.id for node in arena.nodes}
    unknown = [rid for rid in progress_by_id if rid not in known_ids]
    if unknown:
        logger.debug(f"Ignoring {len(unknown)} progress record(s) for unknown requirements: {unknown[:5]}")

    return arena.materialize(progress_by_id)


def arrange_requirements(
    shape: InputShape,
    diagnostics_collector: Optional[DiagnosticsCollector] = None,
) -> RequirementArena:
    """Arrange requirements into an index-addressed arena."""
    if not isinstance(shape, (ParentLinked, Legacy)):
        raise TypeError(f"Unsupported input shape: {type(shape).__name__}")

    requirements = tuple(shape.requirements)
    if diagnostics_collector is not None:
        for req in requirements:
            if req.number.is_best_effort:
                diagnostics_collector.add_fallback_number(req.id, req.requirement_number)

    if isinstance(shape, ParentLinked):
        return _arrange_parent_linked(requirements, diagnostics_collector)
    return _arrange_legacy(requirements)


def index_progress(progress: Iterable[ProgressRecord]) -> Dict[str, ProgressRecord]:
    """One record per requirement id; the most mature status wins, first on ties."""
    best: Dict[str, ProgressRecord] = {}
    for record in progress:
        current = best.get(record.requirement_id)
        if current is None or record.status.maturity > current.status.maturity:
            best[record.requirement_id] = record
    return best


def iter_forest(forest: Sequence[RequirementNode]) -> Iterator[RequirementNode]:
    """Yield every node of a forest in pre-order."""
    for root in forest:
        yield from root.iter_all()


# ─────────────────────────────────────────────────────────────────────────────
# Parent-linked strategy
# ─────────────────────────────────────────────────────────────────────────────

def _arrange_parent_linked(
    requirements: Tuple[Requirement, ...],
    collector: Optional[DiagnosticsCollector],
) -> RequirementArena:
    nodes = [NodeBuilder(i, req) for i, req in enumerate(requirements)]

    index_by_id: Dict[str, int] = {}
    for node in nodes:
        req = node.requirement
        if req.id in index_by_id:
            logger.warning(f"Duplicate requirement id {req.id!r} ({req.requirement_number}); parent links use the first")
            if collector is not None:
                collector.add_duplicate_id(req.id, req.requirement_number)
            continue
        index_by_id[req.id] = node.index

    for node in nodes:
        parent_id = node.requirement.parent_requirement_id
        if parent_id is None:
            continue
        parent_index = index_by_id.get(parent_id)
        if parent_index is None:
            logger.warning(
                f"Requirement {node.requirement.requirement_number} references missing parent "
                f"{parent_id!r}; promoted to root"
            )
            if collector is not None:
                collector.add_dangling_parent(node.requirement.id, node.requirement.requirement_number, parent_id)
            continue
        node.parent = parent_index

    _break_cycles(nodes, collector)

    for node in nodes:
        if node.parent is not None:
            nodes[node.parent].children.append(node.index)

    for node in nodes:
        node.children.sort(key=lambda i: _child_sort_key(nodes[i]))

    roots = [node.index for node in nodes if node.parent is None]
    roots.sort(key=lambda i: _root_sort_key(nodes[i]))
    return RequirementArena(nodes=nodes, roots=roots)


def _break_cycles(nodes: List[NodeBuilder], collector: Optional[DiagnosticsCollector]) -> None:
    """
    Cut parent cycles so every chain ends at a root.

    Chains are walked in input order; the first node of a cycle reached
    twice on the current walk loses its parent link.
    """
    resolved = [False] * len(nodes)
    for start in range(len(nodes)):
        path: List[int] = []
        position: Dict[int, int] = {}
        current = start
        while current is not None and not resolved[current] and current not in position:
            position[current] = len(path)
            path.append(current)
            current = nodes[current].parent

        if current is not None and current in position:
            cycle = path[position[current]:]
            members = [nodes[i].requirement.requirement_number for i in cycle]
            members.append(nodes[current].requirement.requirement_number)
            cut = nodes[current]
            logger.warning(f"Parent cycle {' -> '.join(members)}; {cut.requirement.requirement_number} promoted to root")
            if collector is not None:
                collector.add_parent_cycle(cut.requirement.id, cut.requirement.requirement_number, members)
            cut.parent = None

        for index in path:
            resolved[index] = True


def _root_sort_key(node: NodeBuilder) -> Tuple[int, int, int]:
    return (node.requirement.number.group, node.requirement.display_order, node.index)


def _child_sort_key(node: NodeBuilder) -> Tuple[int, str, int, int]:
    number = node.requirement.number
    return (number.group, number.joined_sub_parts.casefold(), node.requirement.display_order, node.index)


# ─────────────────────────────────────────────────────────────────────────────
# Legacy grouping strategy
# ─────────────────────────────────────────────────────────────────────────────

def _arrange_legacy(requirements: Tuple[Requirement, ...]) -> RequirementArena:
    """
    Group by requirement-number group; one node per group, two levels deep.

    The group's bare number ("1") heads the group and every other member
    ("1a", "1b(2)") becomes its child. A group without a bare number is
    headed by its first member in sort order, best-effort numbers last.
    """
    nodes = [NodeBuilder(i, req) for i, req in enumerate(requirements)]

    groups: Dict[int, List[int]] = {}
    for node in nodes:
        groups.setdefault(node.requirement.number.group, []).append(node.index)

    roots = []
    for group in sorted(groups):
        members = sorted(groups[group], key=lambda i: _legacy_sort_key(nodes[i]))
        head, rest = members[0], members[1:]
        if not nodes[head].requirement.number.is_parent:
            logger.debug(
                f"Group {group} has no bare requirement; "
                f"{nodes[head].requirement.requirement_number} promoted to parent"
            )
        for index in rest:
            nodes[index].parent = head
            nodes[head].children.append(index)
        roots.append(head)

    return RequirementArena(nodes=nodes, roots=roots)


def _legacy_sort_key(node: NodeBuilder) -> Tuple[int, int, str, int]:
    number = node.requirement.number
    return (
        0 if number.is_parent else 1,
        1 if number.is_best_effort else 0,
        number.joined_sub_parts.casefold(),
        node.index,
    )
