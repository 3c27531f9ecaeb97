"""Local ranked search over a classified sample collection.

Queries mix three kinds of tokens:

- ``#tag`` filters: a sample must carry at least one matching tag (equal
  to, or containing, the filter) or it is excluded; each matched filter
  scores 100.
- DNA keywords (``sub``, ``high``, ``short``, ``tight``, ``long``,
  ``crunch``, ``clean``) add fixed weights when the matching numeric
  predicate holds.  Any keyword found in the sample name adds 50.
- Note names (``c``, ``f#`` ...) add 300 when the detected frequency sits
  within 2 Hz of that note at the base octave or one/two octaves up.

Silent samples are hidden unless the query mentions "silent".  Results
are stably sorted by descending score, so equally scored samples keep
their collection order.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from . import tuning
from .arbiter import SILENT_TAG
from .models import AudioSample, DNAProfile

NOTE_FREQUENCIES: Dict[str, float] = {
    "C": 32.70,
    "C#": 34.65,
    "D": 36.71,
    "D#": 38.89,
    "E": 41.20,
    "F": 43.65,
    "F#": 46.25,
    "G": 49.00,
    "G#": 51.91,
    "A": 55.00,
    "A#": 58.27,
    "B": 61.74,
}


def split_query(query: str) -> Tuple[List[str], List[str]]:
    """Return ``(tag_tokens, keyword_tokens)`` of a lowercased query."""
    tokens = [t for t in (query or "").lower().split() if t]
    marker = tuning.TAG_MARKER
    tag_tokens = [t for t in tokens if t.startswith(marker)]
    keyword_tokens = [t for t in tokens if not t.startswith(marker)]
    return tag_tokens, keyword_tokens


def _keyword_score(token: str, dna: DNAProfile) -> float:
    w = tuning.SEARCH_WEIGHTS
    thr = tuning.SEARCH_THRESHOLDS
    freq = dna.peak_frequency
    score = 0.0
    if token == "sub" and float(thr["sub_min_hz"]) < freq < float(thr["sub_max_hz"]):
        score += w["sub"]
    if token == "high" and freq > float(thr["high_min_hz"]):
        score += w["high"]
    if token == "short" and dna.attack_ms < float(thr["short_attack_max_ms"]):
        score += w["short"]
    if token == "tight" and dna.attack_ms < float(thr["tight_attack_max_ms"]):
        score += w["tight"]
    if token == "long" and dna.decay_ms > float(thr["long_decay_min_ms"]):
        score += w["long"]
    if token == "crunch" and dna.zero_crossing_rate > float(thr["crunch_zcr_min"]):
        score += w["crunch"]
    if token == "clean" and dna.zero_crossing_rate < float(thr["clean_zcr_max"]):
        score += w["clean"]
    return score


def note_matches(freq: float, note: str) -> bool:
    """True when ``freq`` is within tolerance of ``note`` at any searched octave."""
    target = NOTE_FREQUENCIES.get(note.upper())
    if target is None:
        return False
    tolerance = float(tuning.SEARCH_THRESHOLDS["note_tolerance_hz"])
    return any(abs(freq - target * octave) <= tolerance for octave in tuning.NOTE_OCTAVE_MULTIPLIERS)


def score_sample(
    sample: AudioSample,
    clean_query: str,
    tag_tokens: List[str],
    keyword_tokens: List[str],
) -> float:
    """Score one sample; ``-1`` means excluded."""
    if SILENT_TAG in sample.acoustic_tags and "silent" not in clean_query:
        return -1

    score = 0.0
    if tag_tokens:
        tags = [t.lower() for t in sample.all_tags]
        match_count = sum(1 for tt in tag_tokens if any(t == tt or tt in t for t in tags))
        if match_count == 0:
            return -1
        score += match_count * tuning.SEARCH_WEIGHTS["tag_match"]

    dna = sample.dna.sanitized()
    name = sample.name.lower()
    for token in keyword_tokens:
        score += _keyword_score(token, dna)
        if token in name:
            score += tuning.SEARCH_WEIGHTS["name"]

    note_token = next((t for t in keyword_tokens if t.upper() in NOTE_FREQUENCIES), None)
    if note_token is not None and note_matches(dna.peak_frequency, note_token):
        score += tuning.SEARCH_WEIGHTS["note"]

    return score


def local_search(
    samples: Optional[Iterable[AudioSample]],
    query: str,
    limit: int = tuning.DEFAULT_SEARCH_LIMIT,
) -> List[AudioSample]:
    """Return up to ``limit`` samples ranked for ``query``."""
    collection = list(samples or [])
    if not collection or limit <= 0:
        return []

    clean_query = (query or "").lower().strip()
    if not clean_query:
        return [s for s in collection if SILENT_TAG not in s.acoustic_tags][:limit]

    tag_tokens, keyword_tokens = split_query(clean_query)
    scored = [(score_sample(s, clean_query, tag_tokens, keyword_tokens), s) for s in collection]
    ranked = sorted((item for item in scored if item[0] >= 0), key=lambda item: -item[0])
    return [sample for _, sample in ranked[:limit]]
