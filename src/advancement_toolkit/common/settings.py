"""
Settings persistence for the engine and its CLI.

Any malformed data results in a graceful fallback to defaults, never a
crash: a bad settings file must not stop an import or a reconciliation.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .thresholds import MATCHING_THRESHOLDS

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
SETTINGS_SCHEMA_VERSION = 1


@dataclass
class EngineSettings:
    collapse_completed: bool = False
    likely_similarity: float = MATCHING_THRESHOLDS.likely_similarity
    match_external_numbers: bool = True
    log_level: str = "WARNING"
    schema_version: int = SETTINGS_SCHEMA_VERSION

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> EngineSettings:
        """
        Build settings from a dict, dropping any field that does not validate.

        A dict written for another schema_version is ignored as a whole; a
        missing schema_version is read as the current one.
        """
        settings = cls()

        version = raw.get("schema_version", SETTINGS_SCHEMA_VERSION)
        if version != SETTINGS_SCHEMA_VERSION or isinstance(version, bool):
            logger.warning(
                f"Settings schema_version {version!r} is not supported "
                f"(expected {SETTINGS_SCHEMA_VERSION}), using defaults"
            )
            return settings

        collapse = raw.get("collapse_completed")
        if isinstance(collapse, bool):
            settings.collapse_completed = collapse

        similarity = raw.get("likely_similarity")
        if isinstance(similarity, (int, float)) and not isinstance(similarity, bool) and 0.0 <= similarity < 1.0:
            settings.likely_similarity = float(similarity)
        elif similarity is not None:
            logger.warning(f"Ignoring invalid likely_similarity setting: {similarity!r}")

        match_external = raw.get("match_external_numbers")
        if isinstance(match_external, bool):
            settings.match_external_numbers = match_external

        level = str(raw.get("log_level") or "").upper()
        if level in LOG_LEVELS:
            settings.log_level = level
        elif level:
            logger.warning(f"Ignoring unknown log_level setting: {level!r}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.debug(f"Ignoring unknown settings keys: {unknown}")
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(path: Optional[Path]) -> EngineSettings:
    """
    Load settings from a JSON file.

    Returns defaults when path is None, the file is missing, unreadable,
    not valid JSON, or not a JSON object.
    """
    if path is None or not path.exists():
        return EngineSettings()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning(f"Settings file {path} is corrupted, using defaults: {e}")
        return EngineSettings()
    except OSError as e:
        logger.warning(f"Failed to read settings {path}, using defaults: {e}")
        return EngineSettings()

    if not isinstance(raw, dict):
        logger.warning(f"Settings file {path} must contain a JSON object, using defaults")
        return EngineSettings()

    return EngineSettings.from_dict(raw)


def save_settings(settings: EngineSettings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
