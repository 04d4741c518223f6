"""
Module: requirements

Purpose:
    Requirement and progress models - the flat, source-of-truth records that
    every tree, statistic and mapping is derived from.

Key Classes:
    - ProgressStatus / ApprovalStatus: Closed status vocabularies
    - Requirement: One checklist item of a requirement version
    - ProgressRecord: A scout's progress on one Requirement
    - ParentLinked / Legacy: Explicit input shapes for the hierarchy builder
    - RequirementSet: A named, versioned collection of requirements

Dependencies:
    - dataclasses (std)
    - .numbers.RequirementNumber

Used By:
    - structuring.tree_builder
    - reconcile.reconciler
    - history.conversion
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .numbers import RequirementNumber


class ProgressStatus(str, Enum):
    """Maturity of a requirement's progress."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    APPROVED = "approved"
    AWARDED = "awarded"

    @property
    def is_complete(self) -> bool:
        return self in COMPLETE_STATUSES

    @property
    def maturity(self) -> int:
        """Rank used to pick between competing records (higher wins)."""
        return _MATURITY[self]

    def __str__(self) -> str:
        return self.value


COMPLETE_STATUSES = frozenset({
    ProgressStatus.COMPLETED,
    ProgressStatus.APPROVED,
    ProgressStatus.AWARDED,
})

_MATURITY = {
    ProgressStatus.NOT_STARTED: 0,
    ProgressStatus.IN_PROGRESS: 1,
    ProgressStatus.COMPLETED: 2,
    ProgressStatus.APPROVED: 3,
    ProgressStatus.AWARDED: 4,
}


class ApprovalStatus(str, Enum):
    """Approval workflow state, only meaningful before completion."""
    NONE = "none"
    PENDING_APPROVAL = "pending_approval"
    DENIED = "denied"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Requirement:
    """
    One requirement of a specific requirement version (immutable).

    Attributes:
        id: Opaque identifier, stable within a version
        requirement_number: Raw number string as published ("6A(a)(1)")
        description: Requirement text
        parent_requirement_id: Owning requirement, None for top level
        is_alternative: Member of an alternatives group
        alternatives_group: Group key shared by mutually exclusive siblings
        required_count: Siblings that must be completed (set on the parent)
        nesting_depth: Cached grammar depth (filled from the number if None)
        display_order: Publisher's ordering within a level
        external_number: Externally assigned stable key (e.g. ScoutBook number)

    Example:
        >>> r = Requirement("r1", "1a", "Repeat the Scout Oath")
        >>> r.number.group
        1
        >>> r.depth
        2
    """

    id: str
    requirement_number: str
    description: str = ""
    parent_requirement_id: Optional[str] = None
    is_alternative: bool = False
    alternatives_group: Optional[str] = None
    required_count: Optional[int] = None
    nesting_depth: Optional[int] = None
    display_order: int = 0
    external_number: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Requirement id cannot be empty")
        if self.required_count is not None and self.required_count < 0:
            raise ValueError(
                f"required_count cannot be negative for {self.requirement_number}: "
                f"{self.required_count}"
            )

    @property
    def number(self) -> RequirementNumber:
        """Parsed requirement number (memoised by the grammar)."""
        from advancement_toolkit.numbering.grammar import parse_requirement_number
        return parse_requirement_number(self.requirement_number)

    @property
    def depth(self) -> int:
        """Stored nesting depth, or the grammar depth when none was stored."""
        if self.nesting_depth is not None:
            return self.nesting_depth
        return self.number.depth

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "requirement_number": self.requirement_number,
            "description": self.description,
            "parent_requirement_id": self.parent_requirement_id,
            "display_order": self.display_order,
        }
        if self.is_alternative:
            d["is_alternative"] = True
        if self.alternatives_group is not None:
            d["alternatives_group"] = self.alternatives_group
        if self.required_count is not None:
            d["required_count"] = self.required_count
        if self.nesting_depth is not None:
            d["nesting_depth"] = self.nesting_depth
        if self.external_number is not None:
            d["external_number"] = self.external_number
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Requirement:
        required_count = data.get("required_count")
        nesting_depth = data.get("nesting_depth")
        parent_id = data.get("parent_requirement_id")
        return cls(
            id=str(data["id"]),
            requirement_number=str(data["requirement_number"]),
            description=data.get("description") or "",
            parent_requirement_id=str(parent_id) if parent_id is not None else None,
            is_alternative=bool(data.get("is_alternative", False)),
            alternatives_group=data.get("alternatives_group"),
            required_count=int(required_count) if required_count is not None else None,
            nesting_depth=int(nesting_depth) if nesting_depth is not None else None,
            display_order=int(data.get("display_order", 0)),
            external_number=data.get("external_number"),
        )

    def __repr__(self) -> str:
        return f"Requirement({self.id!r}, {self.requirement_number!r})"


@dataclass(frozen=True, slots=True)
class ProgressRecord:
    """
    A scout's progress on exactly one Requirement (immutable).

    ``is_complete`` is the only completion predicate used by statistics;
    no other field may be used to infer completion.
    """

    requirement_id: str
    status: ProgressStatus = ProgressStatus.NOT_STARTED
    completed_at: Optional[str] = None
    completed_by: Optional[str] = None
    notes: str = ""
    approval_status: ApprovalStatus = ApprovalStatus.NONE

    def __post_init__(self) -> None:
        if not isinstance(self.status, ProgressStatus):
            raise ValueError(f"Invalid progress status: {self.status!r}")
        if not isinstance(self.approval_status, ApprovalStatus):
            raise ValueError(f"Invalid approval status: {self.approval_status!r}")

    @property
    def is_complete(self) -> bool:
        return self.status.is_complete

    @property
    def effective_approval_status(self) -> ApprovalStatus:
        """Approval state, which no longer applies once the status is terminal."""
        if self.is_complete:
            return ApprovalStatus.NONE
        return self.approval_status

    def to_dict(self) -> dict:
        d = {
            "requirement_id": self.requirement_id,
            "status": str(self.status),
        }
        if self.completed_at:
            d["completed_at"] = self.completed_at
        if self.completed_by:
            d["completed_by"] = self.completed_by
        if self.notes:
            d["notes"] = self.notes
        if self.approval_status is not ApprovalStatus.NONE:
            d["approval_status"] = str(self.approval_status)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> ProgressRecord:
        return cls(
            requirement_id=str(data["requirement_id"]),
            status=ProgressStatus(data.get("status", "not_started")),
            completed_at=data.get("completed_at"),
            completed_by=data.get("completed_by"),
            notes=data.get("notes") or "",
            approval_status=ApprovalStatus(data.get("approval_status") or "none"),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Builder input shapes
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ParentLinked:
    """Requirements whose hierarchy is given by parent_requirement_id."""
    requirements: Tuple[Requirement, ...]


@dataclass(frozen=True)
class Legacy:
    """Requirements without parent links, grouped by requirement number."""
    requirements: Tuple[Requirement, ...]


InputShape = Union[ParentLinked, Legacy]


@dataclass(frozen=True)
class RequirementSet:
    """
    A named requirement version (e.g. "Camping", "2024").

    Attributes:
        name: Rank or merit badge name
        version: Requirement version label, usually a year
        requirements: Requirements in published order
        parent_linked: True when the source records carried parent links
    """
    name: str
    version: str
    requirements: Tuple[Requirement, ...] = field(default_factory=tuple)
    parent_linked: bool = False

    def input_shape(self) -> InputShape:
        if self.parent_linked:
            return ParentLinked(self.requirements)
        return Legacy(self.requirements)

    def by_number(self) -> dict[str, Requirement]:
        """First requirement for each raw number, in published order."""
        result: dict[str, Requirement] = {}
        for req in self.requirements:
            result.setdefault(req.requirement_number, req)
        return result

    def __len__(self) -> int:
        return len(self.requirements)
