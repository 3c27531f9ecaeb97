"""Deterministic path-based semantic tagging.

A sample's folder and file names are usually the most reliable evidence
of what it is: ``Kicks/BD_808.wav`` is a kick no matter what its
waveform looks like.  :func:`normalize_tags` turns a path into an
ordered list of ``#Tag`` strings and, when a canonical category is
found, *locks* the sample to it.  Acoustic analysis may corroborate a
locked category but never override it.

Matching is first-match-wins over explicitly ordered ``(token,
category)`` tuples, so the result does not depend on any container's
iteration order:

1. Exact token match, walking tokens in path order.
2. Only if (1) found nothing: substring match of each key, in table
   order, against the uppercased full path (catches ``KICK01``).

Brand and genre tokens add informational tags and never lock.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from . import tuning
from .models import ClassificationResult

_TOKEN_SPLIT_RE = re.compile(r"[/\\_\-\s.]")

CATEGORY_TOKENS: Tuple[Tuple[str, str], ...] = (
    ("BD", "Kick"),
    ("KICK", "Kick"),
    ("BASS", "Bass"),
    ("BS", "Bass"),
    ("SUB", "Bass"),
    ("HAT", "Hat"),
    ("OH", "Hat"),
    ("CH", "Hat"),
    ("CYM", "Hat"),
    ("HH", "Hat"),
    ("HIHAT", "Hat"),
    ("SNRE", "Snare"),
    ("SNARE", "Snare"),
    ("SNR", "Snare"),
    ("PERC", "Percussion"),
    ("PRC", "Percussion"),
    ("SEQ", "Sequence"),
    ("SEQUENCE", "Sequence"),
    ("LOOP", "Loop"),
    ("VOCAL", "Vocal"),
    ("VOX", "Vocal"),
    ("VOC", "Vocal"),
    ("VOICE", "Vocal"),
)

BRAND_TOKENS: Tuple[Tuple[str, str], ...] = (
    ("RK", "Riemann Kollektion"),
    ("ISR", "Industrial Strength"),
    ("CYM", "Cymatics"),
    ("VEC", "Vengeance"),
    ("KSHMR", "KSHMR Samples"),
    ("GHOST", "Ghosthack"),
)

GENRE_TOKENS: Tuple[Tuple[str, str], ...] = (
    ("IT", "Industrial Techno"),
    ("INDUS", "Industrial Techno"),
    ("INDUSTRIAL", "Industrial Techno"),
    ("TECH", "Techno"),
    ("MIN", "Minimal"),
    ("HARD", "Hard Techno"),
    ("DARK", "Dark Techno"),
)

_CATEGORY_LOOKUP = dict(CATEGORY_TOKENS)
_BRAND_LOOKUP = dict(BRAND_TOKENS)
_GENRE_LOOKUP = dict(GENRE_TOKENS)


def _as_tag(value: str) -> str:
    return "#" + re.sub(r"\s", "_", value)


def tokenize(full_path: str) -> List[str]:
    """Split an uppercased path on separators, underscores, dashes, dots and spaces."""
    return _TOKEN_SPLIT_RE.split(full_path.upper())


def _find_master_category(full_path_upper: str, tokens: List[str]) -> Optional[str]:
    for token in tokens:
        category = _CATEGORY_LOOKUP.get(token)
        if category is not None:
            return category
    for key, category in CATEGORY_TOKENS:
        if key in full_path_upper:
            return category
    return None


def normalize_tags(path: str, file_name: str) -> ClassificationResult:
    """Return semantic tags and lock state for ``path/file_name``."""
    full_path = f"{path}/{file_name}".upper()
    tokens = tokenize(full_path)
    tags: List[str] = []

    def add(tag: str) -> None:
        if tag not in tags:
            tags.append(tag)

    master_category = _find_master_category(full_path, tokens)
    if master_category is not None:
        add(_as_tag(master_category))

    for token in tokens:
        brand = _BRAND_LOOKUP.get(token)
        if brand is not None:
            add(_as_tag(brand))
        genre = _GENRE_LOOKUP.get(token)
        if genre is not None:
            add(_as_tag(genre))

    is_locked = master_category is not None
    return ClassificationResult(
        tags=tuple(tags),
        confidence=tuning.CONFIDENCE_LOCKED if is_locked else tuning.CONFIDENCE_UNRESOLVED,
        is_locked=is_locked,
        master_category=master_category,
    )
