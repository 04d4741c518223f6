"""
Merit badge name normalization.

ScoutBook abbreviates long badge names and marks Eagle-required badges
with a trailing "#". Names are mapped to stable snake_case keys.
"""

from __future__ import annotations

import re

# Abbreviations that do not slugify to the canonical key
BADGE_NAME_MAP = {
    "enviro. science": "environmental_science",
    "cit. in comm.": "citizenship_in_community",
    "cit. in nation": "citizenship_in_nation",
    "cit. in world": "citizenship_in_world",
    "cit. in society": "citizenship_in_society",
    "pers. fitness": "personal_fitness",
    "personal mgmt.": "personal_management",
    "emerg. prep.": "emergency_preparedness",
}

_EAGLE_MARKER = re.compile(r"\s*#\s*$")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def is_eagle_required_label(name: str) -> bool:
    """True if the export marked the badge as Eagle-required ("Camping #")."""
    return bool(_EAGLE_MARKER.search(name or ""))


def normalize_badge_name(name: str) -> str:
    """
    Normalize a ScoutBook badge name to a snake_case key.

    Examples:
        "Enviro. Science #" -> "environmental_science"
        "First Aid"         -> "first_aid"
    """
    cleaned = _EAGLE_MARKER.sub("", (name or "").strip().lower())
    if cleaned in BADGE_NAME_MAP:
        return BADGE_NAME_MAP[cleaned]
    return _NON_ALNUM.sub("_", cleaned).strip("_")
