import json
import sys
from pathlib import Path

import pytest

# Add src to sys.path so we can import advancement_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from advancement_toolkit.core.models import (  # noqa: E402
    ProgressRecord,
    ProgressStatus,
    Requirement,
)


# Common test fixtures
@pytest.fixture
def legacy_requirements():
    """Requirements without parent links: 1, 1a, 1b, 2."""
    return [
        Requirement("r1", "1", "Explain the Outdoor Code"),
        Requirement("r1a", "1a", "Repeat the Outdoor Code"),
        Requirement("r1b", "1b", "Explain what it means to you"),
        Requirement("r2", "2", "Plan a campout"),
    ]


@pytest.fixture
def linked_requirements():
    """Parent-linked requirements with option groups under 6."""
    return [
        Requirement("r5", "5", "Do the following", display_order=0),
        Requirement("r6", "6", "Do ONE of the following options", required_count=1, display_order=1),
        Requirement("r6b", "6B", "Option B", parent_requirement_id="r6", alternatives_group="opt", display_order=1),
        Requirement("r6a", "6A", "Option A", parent_requirement_id="r6", alternatives_group="opt"),
        Requirement("r6a1", "6A(a)", "Hike five miles", parent_requirement_id="r6a"),
        Requirement("r6a2", "6A(b)", "Cook a meal", parent_requirement_id="r6a", display_order=1),
    ]


@pytest.fixture
def completed():
    """Factory for completed progress records."""
    def make(*requirement_ids, status=ProgressStatus.COMPLETED):
        return [ProgressRecord(rid, status) for rid in requirement_ids]
    return make


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a JSON document into tmp_path and return its path."""
    def write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return write
