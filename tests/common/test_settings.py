"""
Unit Tests for Engine Settings Persistence

A bad settings file must never stop the engine: every failure falls back
to defaults.
"""

import pytest

from advancement_toolkit.common.settings import EngineSettings, load_settings, save_settings
from advancement_toolkit.common.thresholds import MATCHING_THRESHOLDS


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_load_when_no_path_then_defaults(self):
        assert load_settings(None) == EngineSettings()

    def test_load_when_file_missing_then_defaults(self, tmp_path):
        assert load_settings(tmp_path / "missing.json") == EngineSettings()

    def test_load_when_corrupt_json_then_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{oops", encoding="utf-8")

        assert load_settings(path) == EngineSettings()

    def test_load_when_not_object_then_defaults(self, write_json):
        assert load_settings(write_json("settings.json", [1, 2])) == EngineSettings()

    def test_load_when_valid_then_fields_applied(self, write_json):
        path = write_json("settings.json", {
            "collapse_completed": True,
            "likely_similarity": 0.6,
            "match_external_numbers": False,
            "log_level": "debug",
        })

        settings = load_settings(path)

        assert settings.collapse_completed is True
        assert settings.likely_similarity == 0.6
        assert settings.match_external_numbers is False
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("raw", [
        {"likely_similarity": 1.5},
        {"likely_similarity": True},
        {"likely_similarity": "0.7"},
        {"log_level": "chatty"},
        {"collapse_completed": "yes"},
        {"unrelated": 1},
    ])
    def test_load_when_field_invalid_then_only_that_field_defaults(self, write_json, raw):
        settings = load_settings(write_json("settings.json", raw))

        assert settings == EngineSettings()
        assert settings.likely_similarity == MATCHING_THRESHOLDS.likely_similarity

    @pytest.mark.parametrize("version", [2, 0, "1", True, None])
    def test_load_when_schema_version_unsupported_then_whole_file_ignored(self, write_json, version, caplog):
        """Valid fields from another schema version are not applied."""
        path = write_json("settings.json", {
            "schema_version": version,
            "collapse_completed": True,
            "log_level": "DEBUG",
        })

        with caplog.at_level("WARNING", logger="advancement_toolkit.common.settings"):
            settings = load_settings(path)

        assert settings == EngineSettings()
        assert "schema_version" in caplog.text

    def test_load_when_schema_version_current_then_fields_applied(self, write_json):
        path = write_json("settings.json", {"schema_version": 1, "collapse_completed": True})

        assert load_settings(path).collapse_completed is True


def test_save_then_load_round_trip(tmp_path):
    # Arrange
    settings = EngineSettings(collapse_completed=True, likely_similarity=0.75, log_level="INFO")
    path = tmp_path / "config" / "settings.json"

    # Act
    save_settings(settings, path)

    # Assert
    assert load_settings(path) == settings
