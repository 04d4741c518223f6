"""
Unit Tests for Serialization Utilities

Tests for loading and saving requirement sets and progress, and for the
derived forest and mapping output.
"""

import json

import pytest

from advancement_toolkit.core.models import (
    Legacy,
    MatchConfidence,
    ProgressRecord,
    ProgressStatus,
    RequirementMapping,
    RequirementSet,
)
from advancement_toolkit.core.schemas.validator import ValidationError
from advancement_toolkit.core.utils.serialization import (
    SerializationError,
    forest_to_dict,
    load_progress,
    load_requirement_set,
    mappings_to_json,
    requirement_set_from_dict,
    requirement_set_to_dict,
    save_progress,
    save_requirement_set,
)
from advancement_toolkit.structuring import build_requirement_tree, default_collapsed, stats_by_node


LEGACY_DOCUMENT = {
    "name": "Camping",
    "version": "2024",
    "requirements": [
        {"id": "r1", "requirement_number": "1", "description": "Explain"},
        {"id": "r1a", "requirement_number": "1a", "description": "Repeat"},
    ],
}


class TestRequirementSetSerialization:
    """Tests for requirement-set documents."""

    def test_from_dict_when_no_parent_keys_then_legacy(self):
        requirement_set = requirement_set_from_dict(LEGACY_DOCUMENT)

        assert requirement_set.parent_linked is False
        assert isinstance(requirement_set.input_shape(), Legacy)
        assert [r.id for r in requirement_set.requirements] == ["r1", "r1a"]

    def test_from_dict_when_any_parent_key_then_parent_linked(self):
        data = json.loads(json.dumps(LEGACY_DOCUMENT))
        data["requirements"][0]["parent_requirement_id"] = None

        assert requirement_set_from_dict(data).parent_linked is True

    def test_from_dict_when_invalid_then_raises_validation_error(self):
        with pytest.raises(ValidationError):
            requirement_set_from_dict({"name": "Camping"})

    def test_to_dict_when_legacy_then_parent_keys_omitted(self):
        data = requirement_set_to_dict(requirement_set_from_dict(LEGACY_DOCUMENT))

        assert data["schema_version"] == 1
        assert all("parent_requirement_id" not in record for record in data["requirements"])

    def test_save_then_load_keeps_strategy(self, tmp_path, linked_requirements):
        original = RequirementSet("Hiking", "2024", tuple(linked_requirements), parent_linked=True)
        path = tmp_path / "sets" / "hiking.json"

        save_requirement_set(original, path)
        loaded = load_requirement_set(path, strict=True)

        assert loaded == original

    def test_load_when_file_missing_then_raises_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_requirement_set(tmp_path / "missing.json")

    def test_load_when_invalid_json_then_raises_serialization_error(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SerializationError) as exc_info:
            load_requirement_set(path)

        assert exc_info.value.path == str(path)


class TestProgressSerialization:
    """Tests for progress documents."""

    def test_save_then_load_round_trip(self, tmp_path):
        records = [
            ProgressRecord("r1", ProgressStatus.COMPLETED, completed_at="2025-03-18", completed_by="leader"),
            ProgressRecord("r2", ProgressStatus.IN_PROGRESS, notes="halfway"),
        ]
        path = tmp_path / "progress.json"

        save_progress(records, path)

        assert load_progress(path, strict=True) == records

    def test_load_when_unknown_status_then_raises_validation_error(self, write_json):
        path = write_json("progress.json", {"progress": [{"requirement_id": "r1", "status": "done"}]})

        with pytest.raises(ValidationError):
            load_progress(path)


class TestDerivedOutput:
    """Tests for forest and mapping serialization."""

    def test_forest_to_dict_then_nested_with_stats(self, legacy_requirements, completed):
        forest = build_requirement_tree(Legacy(tuple(legacy_requirements)), completed("r1a", "r1b"))
        stats = stats_by_node(forest)

        data = forest_to_dict(forest, stats, default_collapsed(forest, True))

        first = data[0]
        assert first["requirement"]["id"] == "r1"
        assert first["stats"] == {"completed": 2, "total": 3, "percent": 66}
        assert "collapsed" not in first
        assert [child["requirement"]["id"] for child in first["children"]] == ["r1a", "r1b"]
        assert first["children"][0]["progress"]["status"] == "completed"
        assert data[1]["children"] == []

    def test_mappings_to_json_then_fixed_key_order(self):
        mapping = RequirementMapping("3", "Tie a bowline", MatchConfidence.NONE)

        text = mappings_to_json([mapping], indent=None)

        assert text.startswith('[{"source_number": "3", "target_requirement_id": null')
