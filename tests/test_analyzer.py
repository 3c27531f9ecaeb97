"""Time-domain DNA extraction: silence, pitch, attack and brightness."""

import sys
from pathlib import Path

import numpy as np
import pytest

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from sample_dna.analyzer import analyze_buffer, find_onset
from sample_dna.models import DNAProfile

SR = 44100


def generate_decaying_sine(duration: float = 0.5, sr: int = SR, freq: float = 60.0, decay: float = 8.0) -> np.ndarray:
    """Kick/bass-like tone: sine with an exponential envelope."""
    t = np.arange(int(sr * duration)) / sr
    return np.exp(-t * decay) * np.sin(2 * np.pi * freq * t)


def test_silence_yields_zero_profile():
    result = analyze_buffer(np.zeros(SR), SR, is_locked=True, master_category="Kick")
    assert result.dna == DNAProfile.silent()
    assert result.dna.peak_frequency == 0
    assert result.confidence == 10


def test_empty_and_list_buffers_are_silent():
    assert analyze_buffer([], SR).dna == DNAProfile.silent()
    assert analyze_buffer([0.0] * 1000, SR).confidence == 10


def test_sub_tone_pitch_is_detected():
    result = analyze_buffer(generate_decaying_sine(freq=60.0), SR)
    assert 58.0 < result.dna.peak_frequency < 62.0
    assert result.confidence == 80
    assert result.pitch_clarity >= 1.0


def test_locked_confidence_wins_over_pitch():
    result = analyze_buffer(generate_decaying_sine(freq=60.0), SR, is_locked=True, master_category="Bass")
    assert result.confidence == 100


def test_attack_and_brightness_of_tonal_hit():
    dna = analyze_buffer(generate_decaying_sine(freq=60.0), SR).dna
    # First crest of a 60 Hz sine is ~4 ms in
    assert 2.0 < dna.attack_ms < 12.0
    assert dna.brightness < 0.05
    assert dna.zero_crossing_rate < 0.01
    assert dna.spectral_centroid == 0
    assert dna.decay_ms == 0


def test_short_window_has_no_pitch():
    x = np.sin(2 * np.pi * 60.0 * np.arange(300) / SR)
    result = analyze_buffer(x, SR)
    assert result.dna.peak_frequency == 0
    assert result.confidence == 10


def test_noise_is_bright():
    rng = np.random.default_rng(1234)
    dna = analyze_buffer(rng.standard_normal(SR // 2), SR).dna
    assert dna.brightness == pytest.approx(1.0)
    assert 0.3 < dna.zero_crossing_rate < 0.7


def test_onset_threshold():
    assert find_onset(np.array([0.0, 0.01, 0.2, 0.5])) == 2
    assert find_onset(np.array([0.0, 0.01, 0.02])) == 0
