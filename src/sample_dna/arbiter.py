"""Reconcile acoustic evidence with the semantic (path) classification.

Rules are evaluated in a fixed order and all matching rules contribute a
tag, except the silence rule which replaces everything else:

1. unresolved confidence          -> ``#Unclassified``
2. no pitch and no brightness     -> exactly ``["#Silent"]``
3. pitched below 160 Hz           -> ``#SubRange`` (unlocked only), ``#Grit`` if noisy
4. otherwise very bright          -> ``#Hat`` unless locked to Kick or Bass
5. fast attack                    -> ``#Tight``

Acoustic evidence only ever corroborates a locked category: a path that
says "Bass" is never re-labelled a hat because its transient is bright.
"""

from __future__ import annotations

from typing import List, Optional

from . import tuning
from .models import DNAProfile

SILENT_TAG = "#Silent"
UNCLASSIFIED_TAG = "#Unclassified"

_HAT_SUPPRESSING_CATEGORIES = ("Kick", "Bass")


def acoustic_validation(
    dna: DNAProfile,
    master_category: Optional[str] = None,
    confidence: Optional[int] = None,
) -> List[str]:
    """Return the acoustic tags corroborating ``dna``."""
    thr = tuning.ARBITER_THRESHOLDS
    dna = dna.sanitized()
    freq = dna.peak_frequency
    tags: List[str] = []

    if freq == 0 and dna.brightness < float(thr["silent_brightness_max"]):
        return [SILENT_TAG]

    if confidence == tuning.CONFIDENCE_UNRESOLVED:
        tags.append(UNCLASSIFIED_TAG)

    if 0 < freq < float(thr["sub_range_max_hz"]):
        if not master_category:
            tags.append("#SubRange")
        if dna.zero_crossing_rate > float(thr["grit_zcr_min"]):
            tags.append("#Grit")
    elif dna.brightness > float(thr["hat_brightness_min"]):
        if master_category not in _HAT_SUPPRESSING_CATEGORIES:
            tags.append("#Hat")

    if dna.attack_ms < float(thr["tight_attack_max_ms"]):
        tags.append("#Tight")

    return tags
