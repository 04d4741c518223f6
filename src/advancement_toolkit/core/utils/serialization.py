"""
Serialization Utilities

JSON readers and writers for requirement sets, progress records, mapping
lists and built forests.

Requirement-set documents decide the builder strategy: a document in which
any requirement record carries a ``parent_requirement_id`` key (even with a
null value) is parent-linked, otherwise it is grouped by number.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from ..models.mappings import RequirementMapping
from ..models.nodes import RequirementNode
from ..models.requirements import ProgressRecord, Requirement, RequirementSet
from ..schemas.validator import (
    PROGRESS_SCHEMA_VERSION,
    REQUIREMENT_SET_SCHEMA_VERSION,
    validate_progress,
    validate_requirement_set,
)


class SerializationError(Exception):
    """Raised when a file cannot be read or decoded."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON in {path}: {e}", path=str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise SerializationError(f"Cannot read {path}: {e}", path=str(path)) from e


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


# ─────────────────────────────────────────────────────────────────────────────
# Requirement sets
# ─────────────────────────────────────────────────────────────────────────────

def requirement_set_from_dict(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> RequirementSet:
    """
    Build a RequirementSet from a parsed JSON document.

    Raises:
        ValidationError: If validate=True and data is invalid
    """
    if validate:
        validate_requirement_set(data, strict=strict)

    records = data["requirements"]
    return RequirementSet(
        name=str(data["name"]),
        version=str(data["version"]),
        requirements=tuple(Requirement.from_dict(record) for record in records),
        parent_linked=any("parent_requirement_id" in record for record in records),
    )


def requirement_set_to_dict(requirement_set: RequirementSet) -> dict[str, Any]:
    """Inverse of requirement_set_from_dict(); keeps the builder strategy."""
    records = []
    for req in requirement_set.requirements:
        record = req.to_dict()
        if not requirement_set.parent_linked:
            record.pop("parent_requirement_id", None)
        records.append(record)
    return {
        "schema_version": REQUIREMENT_SET_SCHEMA_VERSION,
        "name": requirement_set.name,
        "version": requirement_set.version,
        "requirements": records,
    }


def load_requirement_set(path: Path, *, strict: bool = False) -> RequirementSet:
    """
    Load a requirement set from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        SerializationError: If the file is not valid JSON
        ValidationError: If the document is invalid
    """
    return requirement_set_from_dict(_read_json(Path(path)), strict=strict)


def save_requirement_set(requirement_set: RequirementSet, path: Path) -> None:
    _write_json(Path(path), requirement_set_to_dict(requirement_set))


# ─────────────────────────────────────────────────────────────────────────────
# Progress
# ─────────────────────────────────────────────────────────────────────────────

def progress_from_dict(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> list[ProgressRecord]:
    if validate:
        validate_progress(data, strict=strict)
    return [ProgressRecord.from_dict(record) for record in data["progress"]]


def progress_to_dict(progress: Sequence[ProgressRecord]) -> dict[str, Any]:
    return {
        "schema_version": PROGRESS_SCHEMA_VERSION,
        "progress": [record.to_dict() for record in progress],
    }


def load_progress(path: Path, *, strict: bool = False) -> list[ProgressRecord]:
    """
    Load progress records from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        SerializationError: If the file is not valid JSON
        ValidationError: If the document is invalid
    """
    return progress_from_dict(_read_json(Path(path)), strict=strict)


def save_progress(progress: Sequence[ProgressRecord], path: Path) -> None:
    _write_json(Path(path), progress_to_dict(progress))


# ─────────────────────────────────────────────────────────────────────────────
# Derived output
# ─────────────────────────────────────────────────────────────────────────────

def mappings_to_json(mappings: Sequence[RequirementMapping], *, indent: Optional[int] = 2) -> str:
    """
    Serialize a mapping list.

    Output is byte-identical for equal mapping lists (no timestamps, fixed
    key order).
    """
    return json.dumps([m.to_dict() for m in mappings], indent=indent, ensure_ascii=False)


def forest_to_dict(
    forest: Sequence[RequirementNode],
    stats: Optional[Mapping[str, Any]] = None,
    collapsed: frozenset = frozenset(),
) -> list[dict[str, Any]]:
    """
    Serialize a forest, optionally annotating each node.

    Args:
        forest: Root nodes
        stats: Requirement id -> CompletionStats (from stats_by_node())
        collapsed: Requirement ids to mark as collapsed
    """
    def convert(node: RequirementNode) -> dict[str, Any]:
        d = {"requirement": node.requirement.to_dict()}
        if node.progress is not None:
            d["progress"] = node.progress.to_dict()
        if stats is not None and node.id in stats:
            d["stats"] = stats[node.id].to_dict()
        if node.id in collapsed:
            d["collapsed"] = True
        d["children"] = [convert(child) for child in node.children]
        return d

    return [convert(root) for root in forest]
