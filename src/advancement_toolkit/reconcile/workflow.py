"""
Module: reconcile.workflow

Purpose:
    Fan-out/fan-in wrapper around reconcile_requirements() for callers that
    fetch requirement versions from slow storage. The two version reads
    have no data dependency, so they run concurrently; reconciliation waits
    for both.

Key Functions:
    - fetch_version_pair(): Fetch two versions concurrently
    - fetch_and_reconcile(): Fetch both versions then reconcile

Dependencies:
    - concurrent.futures: Thread pool execution
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import AbstractSet, Callable, List, Optional, Sequence, Tuple

from advancement_toolkit.core.models import Requirement, RequirementMapping

from .config import ReconcileConfig
from .reconciler import reconcile_requirements

logger = logging.getLogger(__name__)

# Type alias for a requirement-version read: version key -> requirements
RequirementFetcher = Callable[[str], Sequence[Requirement]]


def fetch_version_pair(
    fetch: RequirementFetcher,
    source_version: str,
    target_version: str,
) -> Tuple[Sequence[Requirement], Sequence[Requirement]]:
    """
    Fetch the source and target versions concurrently.

    Exceptions raised by ``fetch`` propagate to the caller once both
    reads have finished.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        source_future = pool.submit(fetch, source_version)
        target_future = pool.submit(fetch, target_version)
        source = source_future.result()
        target = target_future.result()

    logger.debug(
        f"Fetched {len(source)} requirement(s) for {source_version!r} and "
        f"{len(target)} for {target_version!r}"
    )
    return source, target


def fetch_and_reconcile(
    fetch: RequirementFetcher,
    source_version: str,
    target_version: str,
    completed_numbers: AbstractSet[str],
    config: Optional[ReconcileConfig] = None,
) -> List[RequirementMapping]:
    """Fetch both requirement versions concurrently, then reconcile them."""
    source, target = fetch_version_pair(fetch, source_version, target_version)
    return reconcile_requirements(source, target, completed_numbers, config)
