"""
Module: nodes

Purpose:
    Provides the RequirementNode dataclass - an immutable tree node pairing
    a Requirement with its (optional) ProgressRecord. Trees are rebuilt from
    the flat records on every read and never mutated in place.

Key Functions:
    - RequirementNode.iter_all(): Pre-order iteration
    - RequirementNode.find(requirement_id): Lookup by id
    - RequirementNode.to_dict(): Serialization

Dependencies:
    - .requirements.Requirement, ProgressRecord

Used By:
    - structuring.tree_builder (producer)
    - structuring.progress (consumer)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .requirements import ProgressRecord, Requirement


@dataclass(frozen=True, slots=True)
class RequirementNode:
    """
    Requirement tree node (immutable tree structure).

    The tree structure is:
        Requirement "6"
        ├── Requirement "6A"
        │   ├── Requirement "6A(a)" [leaf]
        │   └── Requirement "6A(b)" [leaf]
        └── Requirement "6B" [leaf]

    Attributes:
        requirement: The requirement at this position
        progress: The scout's progress on it, None if never started
        children: Child nodes, already in display order
    """

    requirement: Requirement
    progress: Optional[ProgressRecord] = None
    children: Tuple[RequirementNode, ...] = ()

    @property
    def id(self) -> str:
        return self.requirement.id

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    @property
    def is_complete(self) -> bool:
        """Own completion only; see structuring.progress for roll-ups."""
        return self.progress is not None and self.progress.is_complete

    def iter_all(self) -> Iterator[RequirementNode]:
        """Yield this node, then all descendants (pre-order)."""
        yield self
        for child in self.children:
            yield from child.iter_all()

    def find(self, requirement_id: str) -> Optional[RequirementNode]:
        if self.requirement.id == requirement_id:
            return self
        for child in self.children:
            found = child.find(requirement_id)
            if found is not None:
                return found
        return None

    def to_dict(self) -> dict:
        d = {"requirement": self.requirement.to_dict()}
        if self.progress is not None:
            d["progress"] = self.progress.to_dict()
        if self.children:
            d["children"] = [child.to_dict() for child in self.children]
        return d

    def __repr__(self) -> str:
        child_str = f", children={len(self.children)}" if self.children else ""
        return f"RequirementNode({self.requirement.requirement_number!r}{child_str})"
