"""Shared configuration: thresholds and persisted engine settings."""

from .thresholds import HISTORY_THRESHOLDS, MATCHING_THRESHOLDS
from .settings import EngineSettings, load_settings

__all__ = [
    "HISTORY_THRESHOLDS",
    "MATCHING_THRESHOLDS",
    "EngineSettings",
    "load_settings",
]
