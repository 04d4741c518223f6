"""
Module: diagnostics

Captures requirement-hierarchy issues found while building trees or
validating requirement sets, and generates diagnostic reports for review.

None of these issues abort processing: the builder degrades gracefully
(orphans become roots, cycles are cut) and records what it did here.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


# Issue types
DANGLING_PARENT = "dangling_parent"
PARENT_CYCLE = "parent_cycle"
DUPLICATE_ID = "duplicate_id"
FALLBACK_NUMBER = "fallback_number"
MISSING_DESCRIPTION = "missing_description"
DUPLICATE_DISPLAY_ORDER = "duplicate_display_order"
DEPTH_MISMATCH = "depth_mismatch"
ALTERNATIVES_SHORTFALL = "alternatives_shortfall"


@dataclass
class HierarchyIssue:
    """
    A single hierarchy issue with diagnostic context.

    Fields:
    - requirement_id / requirement_number: the requirement the issue is about
    - details: extra key/value context (parent id, cycle members, ...)
    """
    issue_type: str
    requirement_id: str
    requirement_number: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "issue_type": self.issue_type,
            "requirement_id": self.requirement_id,
            "requirement_number": self.requirement_number,
            "message": self.message,
        }
        if self.details:
            d["details"] = self.details
        return d


class DiagnosticsCollector:
    """
    Thread-safe collector for hierarchy issues.

    One collector may be shared by several builders running concurrently.
    """

    def __init__(self, source: str = ""):
        self.source = source
        self._issues: List[HierarchyIssue] = []
        self._lock = threading.Lock()

    def add(
        self,
        issue_type: str,
        requirement_id: str,
        requirement_number: str,
        message: str,
        **details: Any,
    ) -> HierarchyIssue:
        """Record an issue and return it."""
        issue = HierarchyIssue(
            issue_type=issue_type,
            requirement_id=requirement_id,
            requirement_number=requirement_number,
            message=message,
            details=dict(details),
        )
        with self._lock:
            self._issues.append(issue)
        return issue

    def add_dangling_parent(self, requirement_id: str, requirement_number: str, parent_id: str) -> None:
        """Record a parent reference that is not in the same input set."""
        self.add(
            DANGLING_PARENT,
            requirement_id,
            requirement_number,
            f"Requirement {requirement_number} references missing parent {parent_id!r}; promoted to root",
            parent_id=parent_id,
        )

    def add_parent_cycle(self, requirement_id: str, requirement_number: str, members: List[str]) -> None:
        """Record a parent cycle that was cut at ``requirement_id``."""
        self.add(
            PARENT_CYCLE,
            requirement_id,
            requirement_number,
            f"Parent cycle through {' -> '.join(members)}; cut at {requirement_number}",
            members=list(members),
        )

    def add_duplicate_id(self, requirement_id: str, requirement_number: str) -> None:
        self.add(
            DUPLICATE_ID,
            requirement_id,
            requirement_number,
            f"Requirement id {requirement_id!r} appears more than once",
        )

    def add_fallback_number(self, requirement_id: str, requirement_number: str) -> None:
        self.add(
            FALLBACK_NUMBER,
            requirement_id,
            requirement_number,
            f"Requirement number {requirement_number!r} matched no known notation",
        )

    @property
    def issues(self) -> List[HierarchyIssue]:
        with self._lock:
            return list(self._issues)

    @property
    def issue_count(self) -> int:
        with self._lock:
            return len(self._issues)

    def generate_report(self) -> "HierarchyDiagnosticsReport":
        with self._lock:
            return HierarchyDiagnosticsReport.from_issues(list(self._issues), self.source)


@dataclass
class HierarchyDiagnosticsReport:
    """Complete diagnostics report."""
    generated_at: str
    source: str
    total_issues: int
    summary_by_type: Dict[str, int]
    issues: List[HierarchyIssue]

    @classmethod
    def from_issues(cls, issues: List[HierarchyIssue], source: str = "") -> "HierarchyDiagnosticsReport":
        summary_by_type: Dict[str, int] = {}
        for issue in issues:
            summary_by_type[issue.issue_type] = summary_by_type.get(issue.issue_type, 0) + 1

        return cls(
            generated_at=datetime.now(timezone.utc).isoformat(),
            source=source,
            total_issues=len(issues),
            summary_by_type=summary_by_type,
            issues=issues,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "source": self.source,
            "total_issues": self.total_issues,
            "summary_by_type": self.summary_by_type,
            "issues": [issue.to_dict() for issue in self.issues],
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")
        logger.info(f"Hierarchy diagnostics saved: {path}")
