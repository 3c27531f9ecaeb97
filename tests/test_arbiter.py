"""Tag arbitration: rule order, silence short-circuit, semantic lock suppression."""

import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from sample_dna.arbiter import acoustic_validation
from sample_dna.models import DNAProfile


@pytest.mark.parametrize("master", [None, "Kick", "Bass", "Hat"])
def test_silence_is_exclusive(master):
    assert acoustic_validation(DNAProfile.silent(), master, 10) == ["#Silent"]
    assert acoustic_validation(DNAProfile.silent(), master, 100) == ["#Silent"]


def test_all_rules_apply_in_order():
    dna = DNAProfile(peak_frequency=100.0, zero_crossing_rate=0.5, attack_ms=5.0, brightness=1.0)
    assert acoustic_validation(dna, None, 10) == ["#Unclassified", "#SubRange", "#Grit", "#Tight"]


def test_locked_sub_skips_sub_range():
    dna = DNAProfile(peak_frequency=50.0, zero_crossing_rate=0.1, attack_ms=20.0, brightness=0.1)
    assert acoustic_validation(dna, "Kick", 100) == []


@pytest.mark.parametrize("master", ["Kick", "Bass"])
def test_bright_kick_or_bass_is_never_a_hat(master):
    dna = DNAProfile(peak_frequency=0.0, brightness=0.9, attack_ms=30.0)
    assert "#Hat" not in acoustic_validation(dna, master, 100)


@pytest.mark.parametrize("master", [None, "Snare"])
def test_bright_unlocked_or_other_category_is_a_hat(master):
    dna = DNAProfile(peak_frequency=0.0, brightness=0.9, attack_ms=30.0)
    assert acoustic_validation(dna, master, 80) == ["#Hat"]


def test_hat_rule_only_applies_above_sub_range():
    low = DNAProfile(peak_frequency=100.0, brightness=0.9, attack_ms=30.0)
    high = DNAProfile(peak_frequency=300.0, brightness=0.9, attack_ms=30.0)
    assert "#Hat" not in acoustic_validation(low, "Snare", 100)
    assert acoustic_validation(high, "Snare", 100) == ["#Hat"]


def test_tight_is_independent_of_zone():
    dna = DNAProfile(peak_frequency=300.0, brightness=0.2, attack_ms=3.0)
    assert acoustic_validation(dna, "Snare", 100) == ["#Tight"]


def test_non_finite_values_are_treated_as_zero():
    dna = DNAProfile(peak_frequency=float("nan"), brightness=float("nan"), attack_ms=float("inf"))
    assert acoustic_validation(dna, None, 10) == ["#Silent"]


def test_out_of_range_brightness_is_clamped():
    dna = DNAProfile(peak_frequency=400.0, brightness=7.0, attack_ms=50.0)
    assert acoustic_validation(dna) == ["#Hat"]
