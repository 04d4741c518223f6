"""
Cross-version requirement reconciliation.

Recommends how a scout's completed requirements carry over when their
rank or merit badge switches to a different requirement version.
"""

from .config import ReconcileConfig
from .reconciler import (
    MappingSummary,
    accepted_targets,
    apply_manual_mapping,
    reconcile_requirements,
    summarize_mappings,
)
from .similarity import jaccard_similarity, word_set
from .workflow import fetch_and_reconcile, fetch_version_pair

__all__ = [
    "ReconcileConfig",
    "MappingSummary",
    "accepted_targets",
    "apply_manual_mapping",
    "reconcile_requirements",
    "summarize_mappings",
    "jaccard_similarity",
    "word_set",
    "fetch_and_reconcile",
    "fetch_version_pair",
]
