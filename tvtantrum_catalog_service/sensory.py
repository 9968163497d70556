"""Sensory level vocabulary shared by filtering, validation and normalization."""

from tvtantrum_catalog_service.errors import ValidationError

SENSORY_LEVELS = ("Low", "Low-Moderate", "Moderate", "Moderate-High", "High")

DEFAULT_SENSORY_LEVEL = "Moderate"

# Legacy spellings found in older rows and admin imports
LEVEL_SYNONYMS = {
    "medium": "Moderate",
    "low-medium": "Low-Moderate",
    "moderate-low": "Low-Moderate",
    "medium-high": "Moderate-High",
}

LEVEL_ORDINALS = {level: rank for rank, level in enumerate(SENSORY_LEVELS, start=1)}

# camelCase record field -> snake_case column
SENSORY_FIELDS = {
    "interactivityLevel": "interactivity_level",
    "dialogueIntensity": "dialogue_intensity",
    "soundEffectsLevel": "sound_effects_level",
    "musicTempo": "music_tempo",
    "totalMusicLevel": "total_music_level",
    "totalSoundEffectTimeLevel": "total_sound_effect_time_level",
    "sceneFrequency": "scene_frequency",
}


def canonical_level(value: str | None) -> str | None:
    """
    Map a level string onto the canonical vocabulary.

    Returns None for None/blank input and for values outside the vocabulary,
    so read paths never fail on unexpected legacy data.
    """
    if value is None:
        return None
    cleaned = str(value).strip()
    if not cleaned:
        return None
    lowered = cleaned.lower()
    if lowered in LEVEL_SYNONYMS:
        return LEVEL_SYNONYMS[lowered]
    for level in SENSORY_LEVELS:
        if level.lower() == lowered:
            return level
    return None


def require_level(value, field: str) -> str | None:
    """Canonicalize a level on the write path, rejecting unknown values."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    level = canonical_level(value)
    if level is None:
        raise ValidationError(
            f"{field} must be one of {', '.join(SENSORY_LEVELS)}", field=field
        )
    return level
