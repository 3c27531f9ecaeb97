"""Centralized tuning constants for path tagging, DNA analysis and search.

All batch sizes, analysis parameters, arbiter thresholds and search
weights are defined here and referenced by the other modules at call
time (single source of truth), so :func:`apply_overrides` takes effect
without re-importing anything.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

# ---------------------------------------------------------------------------
# Scanning
TREE_BATCH_SIZE = 8
FLAT_BATCH_SIZE = 6

STEM_MIN_SECONDS = 15.0
LOOP_MIN_SECONDS = 2.0

ALLOWED_EXTENSIONS: Tuple[str, ...] = (
    ".WAV",
    ".MP3",
    ".FLAC",
    ".AIF",
    ".AIFF",
    ".OGG",
    ".MID",
    ".MIDI",
)
MIDI_EXTENSIONS: Tuple[str, ...] = (".MID", ".MIDI")

BLACKLIST_SEGMENTS: Tuple[str, ...] = (
    "/BACKUP/",
    "/SETTINGS/",
    "/DATA/",
    "/SYSTEM/",
    "/__MACOSX/",
    "/.GIT/",
)

# ---------------------------------------------------------------------------
# Confidence levels
CONFIDENCE_LOCKED = 100
CONFIDENCE_PITCHED = 80
CONFIDENCE_UNRESOLVED = 10

# ---------------------------------------------------------------------------
# Acoustic analysis (time domain only)
ANALYSIS_PARAMS: Dict[str, float] = {
    "onset_threshold": 0.05,
    "pitch_window_seconds": 0.10,
    "pitch_min_window": 512,
    "lag_max_hz": 500.0,
    "lag_min_hz": 25.0,
    "corr_max_samples": 2048,
    "sub_bias_min_hz": 30.0,
    "sub_bias_max_hz": 90.0,
    "sub_bias_gain": 2.0,
    "freq_min_hz": 20.0,
    "freq_max_hz": 1100.0,
    "attack_window_seconds": 0.10,
    "zcr_window_seconds": 0.05,
    "brightness_scale": 6.0,
}

ARBITER_THRESHOLDS: Dict[str, float] = {
    "silent_brightness_max": 0.05,
    "sub_range_max_hz": 160.0,
    "grit_zcr_min": 0.35,
    "hat_brightness_min": 0.75,
    "tight_attack_max_ms": 12.0,
}

# ---------------------------------------------------------------------------
# Local search
DEFAULT_SEARCH_LIMIT = 50
TAG_MARKER = "#"

SEARCH_WEIGHTS: Dict[str, float] = {
    "tag_match": 100,
    "sub": 150,
    "high": 100,
    "short": 150,
    "tight": 200,
    "long": 150,
    "crunch": 150,
    "clean": 100,
    "name": 50,
    "note": 300,
}

SEARCH_THRESHOLDS: Dict[str, float] = {
    "sub_min_hz": 20.0,
    "sub_max_hz": 65.0,
    "high_min_hz": 200.0,
    "short_attack_max_ms": 12.0,
    "tight_attack_max_ms": 8.0,
    "long_decay_min_ms": 600.0,
    "crunch_zcr_min": 0.35,
    "clean_zcr_max": 0.1,
    "note_tolerance_hz": 2.0,
}

NOTE_OCTAVE_MULTIPLIERS: Tuple[int, ...] = (1, 2, 4)


def apply_overrides(data: Dict[str, Any]) -> None:
    """Merge numeric/dict tuning overrides into module globals (best-effort)."""
    if not isinstance(data, dict):
        return

    module_globals = globals()
    for key, value in data.items():
        if key not in module_globals:
            continue
        current = module_globals[key]
        if isinstance(current, dict) and isinstance(value, dict):
            current.update(value)
        elif isinstance(current, bool) or isinstance(value, bool):
            continue
        elif isinstance(current, (int, float)) and isinstance(value, (int, float)):
            module_globals[key] = value
