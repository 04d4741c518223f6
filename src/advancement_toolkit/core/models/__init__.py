"""
Core Models Package

Immutable, validated data models that serve as the single source of truth.

All models in this package are frozen dataclasses. Derived structures
(trees, statistics, mappings) are rebuilt from the flat Requirement and
ProgressRecord collections on every read instead of being mutated.
"""

from .numbers import NumberNotation, RequirementNumber
from .requirements import (
    ApprovalStatus,
    InputShape,
    Legacy,
    ParentLinked,
    ProgressRecord,
    ProgressStatus,
    Requirement,
    RequirementSet,
)
from .nodes import RequirementNode
from .mappings import MatchConfidence, RequirementMapping

__all__ = [
    "NumberNotation",
    "RequirementNumber",
    "ApprovalStatus",
    "InputShape",
    "Legacy",
    "ParentLinked",
    "ProgressRecord",
    "ProgressStatus",
    "Requirement",
    "RequirementSet",
    "RequirementNode",
    "MatchConfidence",
    "RequirementMapping",
]
