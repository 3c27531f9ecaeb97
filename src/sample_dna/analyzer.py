"""Time-domain acoustic analysis producing a sample's DNA profile.

The analyzer works on a mono amplitude buffer and extracts:

- the onset (first sample above a small threshold after peak
  normalization),
- a fundamental frequency estimate from a lag-domain autocorrelation
  over the first 100 ms after the onset, biased towards the 30–90 Hz
  sub range where kicks and basses live,
- the attack time (position of the loudest sample in the first 100 ms),
- a zero-crossing rate and the derived 0..1 brightness proxy.

No spectral transform is involved: every feature is a single pass over
a short window.  All constants come from :mod:`sample_dna.tuning`.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple, Union

import numpy as np

from . import tuning
from .models import AnalysisResult, DNAProfile

ArrayLike = Union[np.ndarray, Sequence[float]]


def _normalize(data: np.ndarray) -> Tuple[np.ndarray, float]:
    peak = float(np.max(np.abs(data))) if data.size else 0.0
    if peak == 0.0:
        return data, 0.0
    return data / peak, peak


def find_onset(data: np.ndarray, threshold: Optional[float] = None) -> int:
    """Index of the first sample whose magnitude exceeds ``threshold`` (0 if none)."""
    if threshold is None:
        threshold = float(tuning.ANALYSIS_PARAMS["onset_threshold"])
    above = np.flatnonzero(np.abs(data) > threshold)
    return int(above[0]) if above.size else 0


def estimate_fundamental(data: np.ndarray, onset: int, sample_rate: int) -> Tuple[float, float]:
    """Return ``(frequency_hz, clarity)`` for the window starting at ``onset``.

    Frequency is 0 when the window is too short or the best lag falls
    outside the accepted range.  Clarity is the best/second-best
    correlation ratio.
    """
    params = tuning.ANALYSIS_PARAMS
    window = int(sample_rate * float(params["pitch_window_seconds"]))
    segment = data[onset : onset + min(window, len(data) - onset)]
    if len(segment) < int(params["pitch_min_window"]):
        return 0.0, 0.0

    lag_min = int(sample_rate / float(params["lag_max_hz"]))
    lag_max = int(sample_rate / float(params["lag_min_hz"]))
    bias_min = int(sample_rate / float(params["sub_bias_max_hz"]))
    bias_max = int(sample_rate / float(params["sub_bias_min_hz"]))
    bias_gain = float(params["sub_bias_gain"])
    max_terms = int(params["corr_max_samples"])

    best_lag = 0
    best = -np.inf
    second = -np.inf
    for lag in range(lag_min, lag_max):
        n = min(max_terms, len(segment) - lag)
        corr = float(np.dot(segment[:n], segment[lag : lag + n])) if n > 0 else 0.0
        if bias_min <= lag <= bias_max:
            corr *= bias_gain
        if corr > best:
            second = best
            best = corr
            best_lag = lag
        elif corr > second:
            second = corr

    freq = sample_rate / best_lag if best_lag > 0 else 0.0
    if freq < float(params["freq_min_hz"]) or freq > float(params["freq_max_hz"]):
        freq = 0.0
    if not np.isfinite(best):
        return float(freq), 0.0
    clarity = best / (second if np.isfinite(second) and second else 1.0)
    return float(freq), float(clarity)


def measure_attack_ms(trimmed: np.ndarray, sample_rate: int) -> float:
    limit = min(len(trimmed), int(sample_rate * float(tuning.ANALYSIS_PARAMS["attack_window_seconds"])))
    if limit <= 0:
        return 0.0
    peak_idx = int(np.argmax(np.abs(trimmed[:limit])))
    return peak_idx / sample_rate * 1000.0


def measure_zero_crossings(trimmed: np.ndarray, sample_rate: int) -> Tuple[float, float]:
    """Return ``(zero_crossing_rate, brightness)`` over the first 50 ms."""
    size = min(len(trimmed), int(sample_rate * float(tuning.ANALYSIS_PARAMS["zcr_window_seconds"])))
    if size <= 0:
        return 0.0, 0.0
    window = trimmed[:size]
    prev, cur = window[:-1], window[1:]
    crossings = int(np.count_nonzero(((cur > 0) & (prev <= 0)) | ((cur < 0) & (prev >= 0))))
    rate = crossings / size
    brightness = min(max(rate * float(tuning.ANALYSIS_PARAMS["brightness_scale"]), 0.0), 1.0)
    return float(rate), float(brightness)


def analyze_buffer(
    samples: ArrayLike,
    sample_rate: int,
    is_locked: bool = False,
    master_category: Optional[str] = None,
) -> AnalysisResult:
    """Extract the DNA profile and confidence of a mono buffer.

    ``master_category`` is accepted for symmetry with the arbiter; only
    the lock state influences the confidence.
    """
    data = np.asarray(samples, dtype=np.float64).ravel()
    data, peak = _normalize(data)
    if peak == 0.0 or sample_rate <= 0:
        return AnalysisResult(dna=DNAProfile.silent(), confidence=tuning.CONFIDENCE_UNRESOLVED)

    onset = find_onset(data)
    trimmed = data[onset:]

    freq, clarity = estimate_fundamental(data, onset, sample_rate)
    attack_ms = measure_attack_ms(trimmed, sample_rate)
    zcr, brightness = measure_zero_crossings(trimmed, sample_rate)

    if is_locked:
        confidence = tuning.CONFIDENCE_LOCKED
    elif freq > 0:
        confidence = tuning.CONFIDENCE_PITCHED
    else:
        confidence = tuning.CONFIDENCE_UNRESOLVED

    dna = DNAProfile(
        peak_frequency=freq,
        spectral_centroid=0.0,
        attack_ms=attack_ms,
        decay_ms=0.0,
        zero_crossing_rate=zcr,
        brightness=brightness,
    )
    return AnalysisResult(dna=dna, confidence=confidence, pitch_clarity=clarity)
