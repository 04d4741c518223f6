"""
Advancement Toolkit Core Package

Shared data models, schema validation and serialization used by every
other subpackage.
"""

from .models import (
    ProgressRecord,
    ProgressStatus,
    Requirement,
    RequirementMapping,
    RequirementNode,
    RequirementNumber,
    RequirementSet,
)

__all__ = [
    "ProgressRecord",
    "ProgressStatus",
    "Requirement",
    "RequirementMapping",
    "RequirementNode",
    "RequirementNumber",
    "RequirementSet",
]
