"""
Schema Validation Utilities

Validates requirement-set and progress JSON documents.

Two levels:
- Basic checks (always): required fields, field types and enum values,
  enough to guarantee the model constructors will not fail
- Strict mode: full JSON Schema validation with jsonschema against the
  ``*.schema.json`` files shipped next to this module
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from ..models.requirements import ApprovalStatus, ProgressStatus


# Schema version constants
REQUIREMENT_SET_SCHEMA_VERSION = 1
PROGRESS_SCHEMA_VERSION = 1


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _check_schema_version(data: dict[str, Any], expected: int) -> None:
    version = data.get("schema_version", expected)
    if version != expected:
        raise ValidationError(
            f"Unsupported schema version: {version} (expected {expected})",
            path="schema_version"
        )


def _strict_validate(data: dict[str, Any], schema_name: str) -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message]
        ) from e


def validate_requirement_set(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a requirement-set document.

    Args:
        data: Parsed JSON document
        strict: If True, also validate against the JSON schema

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Requirement set must be a JSON object")

    required = ["name", "version", "requirements"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing]
        )
    _check_schema_version(data, REQUIREMENT_SET_SCHEMA_VERSION)

    requirements = data["requirements"]
    if not isinstance(requirements, list):
        raise ValidationError("requirements must be a list", path="requirements")
    for i, req in enumerate(requirements):
        _validate_requirement(req, f"requirements[{i}]")

    if strict:
        _strict_validate(data, "requirement_set")


def _validate_requirement(data: Any, path: str) -> None:
    """Validate one requirement record."""
    if not isinstance(data, dict):
        raise ValidationError("Requirement must be an object", path=path)

    missing = [f for f in ("id", "requirement_number") if not data.get(f)]
    if missing:
        raise ValidationError(
            f"Requirement missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing]
        )

    for name in ("id", "requirement_number"):
        if not isinstance(data[name], str):
            raise ValidationError(
                f"{name} must be a string, got {data[name]!r}",
                path=f"{path}.{name}"
            )

    required_count = data.get("required_count")
    if required_count is not None and (
        not isinstance(required_count, int) or isinstance(required_count, bool) or required_count < 0
    ):
        raise ValidationError(
            f"Invalid required_count: {required_count!r} (must be non-negative integer)",
            path=f"{path}.required_count"
        )

    display_order = data.get("display_order", 0)
    if not isinstance(display_order, int) or isinstance(display_order, bool):
        raise ValidationError(
            f"Invalid display_order: {display_order!r} (must be integer)",
            path=f"{path}.display_order"
        )


def validate_progress(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a progress document.

    Args:
        data: Parsed JSON document
        strict: If True, also validate against the JSON schema

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict) or "progress" not in data:
        raise ValidationError(
            "Missing required fields: ['progress']",
            errors=["Missing field: progress"]
        )
    _check_schema_version(data, PROGRESS_SCHEMA_VERSION)

    records = data["progress"]
    if not isinstance(records, list):
        raise ValidationError("progress must be a list", path="progress")

    statuses = {status.value for status in ProgressStatus}
    approvals = {status.value for status in ApprovalStatus}
    for i, record in enumerate(records):
        path = f"progress[{i}]"
        if not isinstance(record, dict) or not record.get("requirement_id"):
            raise ValidationError(
                "Progress record must have a requirement_id",
                path=path
            )
        status = record.get("status", ProgressStatus.NOT_STARTED.value)
        if status not in statuses:
            raise ValidationError(
                f"Invalid status: {status!r} (expected one of {sorted(statuses)})",
                path=f"{path}.status"
            )
        approval = record.get("approval_status")
        if approval is not None and approval not in approvals:
            raise ValidationError(
                f"Invalid approval_status: {approval!r}",
                path=f"{path}.approval_status"
            )

    if strict:
        _strict_validate(data, "progress")
