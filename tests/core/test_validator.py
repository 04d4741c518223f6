"""
Unit Tests for Schema Validation

Tests the basic checks and the strict jsonschema pass for requirement-set
and progress documents.
"""

import pytest

from advancement_toolkit.core.schemas.validator import (
    REQUIREMENT_SET_SCHEMA_VERSION,
    ValidationError,
    validate_progress,
    validate_requirement_set,
)


@pytest.fixture
def requirement_set_data() -> dict:
    return {
        "schema_version": REQUIREMENT_SET_SCHEMA_VERSION,
        "name": "Camping",
        "version": "2024",
        "requirements": [
            {"id": "r1", "requirement_number": "1", "description": "Explain", "display_order": 0},
            {"id": "r1a", "requirement_number": "1a", "parent_requirement_id": "r1"},
        ],
    }


@pytest.fixture
def progress_data() -> dict:
    return {
        "progress": [
            {"requirement_id": "r1", "status": "completed", "completed_at": "2025-01-01"},
            {"requirement_id": "r1a", "status": "in_progress", "approval_status": "pending_approval"},
        ],
    }


class TestValidateRequirementSet:
    """Tests for validate_requirement_set function."""

    def test_validate_when_valid_data_then_no_error(self, requirement_set_data):
        # Should not raise
        validate_requirement_set(requirement_set_data, strict=True)

    def test_validate_when_not_object_then_raises_error(self):
        with pytest.raises(ValidationError, match="JSON object"):
            validate_requirement_set([])

    def test_validate_when_missing_name_then_raises_error(self, requirement_set_data):
        del requirement_set_data["name"]

        with pytest.raises(ValidationError, match="Missing required fields") as exc_info:
            validate_requirement_set(requirement_set_data)

        assert exc_info.value.errors == ["Missing field: name"]

    def test_validate_when_wrong_schema_version_then_raises_error(self, requirement_set_data):
        requirement_set_data["schema_version"] = 99

        with pytest.raises(ValidationError, match="Unsupported schema version"):
            validate_requirement_set(requirement_set_data)

    def test_validate_when_requirement_without_number_then_path_reported(self, requirement_set_data):
        requirement_set_data["requirements"][1]["requirement_number"] = ""

        with pytest.raises(ValidationError) as exc_info:
            validate_requirement_set(requirement_set_data)

        assert exc_info.value.path == "requirements[1]"

    @pytest.mark.parametrize("value", [-1, "2", True])
    def test_validate_when_bad_required_count_then_raises_error(self, requirement_set_data, value):
        requirement_set_data["requirements"][0]["required_count"] = value

        with pytest.raises(ValidationError, match="required_count"):
            validate_requirement_set(requirement_set_data)

    def test_validate_when_display_order_not_int_then_raises_error(self, requirement_set_data):
        requirement_set_data["requirements"][0]["display_order"] = 1.5

        with pytest.raises(ValidationError, match="display_order"):
            validate_requirement_set(requirement_set_data)

    def test_validate_when_extra_property_then_only_strict_rejects(self, requirement_set_data):
        requirement_set_data["requirements"][0]["colour"] = "green"

        validate_requirement_set(requirement_set_data, strict=False)
        with pytest.raises(ValidationError, match="Schema validation failed"):
            validate_requirement_set(requirement_set_data, strict=True)


class TestValidateProgress:
    """Tests for validate_progress function."""

    def test_validate_when_valid_data_then_no_error(self, progress_data):
        validate_progress(progress_data, strict=True)

    def test_validate_when_progress_missing_then_raises_error(self):
        with pytest.raises(ValidationError, match="progress"):
            validate_progress({})

    def test_validate_when_unknown_status_then_raises_error(self, progress_data):
        progress_data["progress"][0]["status"] = "done"

        with pytest.raises(ValidationError, match="Invalid status") as exc_info:
            validate_progress(progress_data)

        assert exc_info.value.path == "progress[0].status"

    def test_validate_when_unknown_approval_then_raises_error(self, progress_data):
        progress_data["progress"][1]["approval_status"] = "maybe"

        with pytest.raises(ValidationError, match="approval_status"):
            validate_progress(progress_data)

    def test_validate_when_status_missing_then_only_strict_rejects(self, progress_data):
        del progress_data["progress"][1]["status"]

        validate_progress(progress_data, strict=False)
        with pytest.raises(ValidationError):
            validate_progress(progress_data, strict=True)
