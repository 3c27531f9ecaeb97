"""Export/import of the index document and schema error reporting."""

import json
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from sample_dna import index_io
from sample_dna.index_io import (
    CORRUPTED_DNA_DATA,
    INDEX_SCHEMA_VERSION,
    INVALID_METADATA,
    MALFORMED_JSON,
    MISSING_SAMPLES,
    InvalidSchemaError,
    export_index,
    import_index,
    read_index,
    write_index,
)
from sample_dna.models import AudioSample, DNAProfile, SoundType


def make_sample(sample_id: str = "s1") -> AudioSample:
    return AudioSample(
        id=sample_id,
        name="BD_01.wav",
        path="Pack/Kicks",
        full_path="Pack/Kicks/BD_01.wav",
        type=SoundType.ONE_SHOT,
        source_tags=("#Kick", "#ONE-SHOT"),
        acoustic_tags=("#Tight",),
        dna=DNAProfile(peak_frequency=55.0, attack_ms=4.0, zero_crossing_rate=0.02, brightness=0.1),
        confidence_score=100,
        musical_key="A",
    )


def test_export_document_shape():
    doc = export_index([make_sample()])
    assert doc["schema_version"] == INDEX_SCHEMA_VERSION
    assert doc["plugins"] == []
    assert doc["export_date"]
    sample = doc["samples"][0]
    assert sample["fullPath"] == "Pack/Kicks/BD_01.wav"
    assert sample["sourceTags"] == ["#Kick", "#ONE-SHOT"]
    assert sample["dna"]["peakFrequency"] == 55.0
    assert sample["confidenceScore"] == 100
    assert sample["musicalKey"] == "A"


def test_import_restores_samples_and_plugins():
    plugins = [{"name": "Reverb", "state": {"mix": 0.3}}]
    text = json.dumps(export_index([make_sample("a"), make_sample("b")], plugins=plugins))

    document = import_index(text)

    assert [s.id for s in document.samples] == ["a", "b"]
    assert document.samples[0] == make_sample("a")
    assert document.plugins == plugins
    assert document.schema_version == INDEX_SCHEMA_VERSION


def test_empty_samples_array_is_valid():
    assert import_index('{"samples": []}').samples == []


def test_numeric_ids_are_accepted():
    document = import_index(json.dumps({"samples": [{"id": 7, "dna": {}}]}))
    assert document.samples[0].id == "7"
    assert document.samples[0].dna == DNAProfile()


@pytest.mark.parametrize(
    "text,reason",
    [
        ("{not json", MALFORMED_JSON),
        ("{}", MISSING_SAMPLES),
        ("[]", MISSING_SAMPLES),
        ('{"samples": "nope"}', MISSING_SAMPLES),
        ('{"samples": [{"dna": {}}]}', CORRUPTED_DNA_DATA),
        ('{"samples": [{"id": "a"}]}', CORRUPTED_DNA_DATA),
        ('{"samples": [{"id": "a", "dna": "flat"}]}', CORRUPTED_DNA_DATA),
        ('{"samples": [{"id": "", "dna": {}}]}', CORRUPTED_DNA_DATA),
        ('{"samples": [{"id": 0, "dna": {}}]}', CORRUPTED_DNA_DATA),
        ('{"samples": [], "schema_version": 3}', INVALID_METADATA),
    ],
)
def test_invalid_documents(text, reason):
    with pytest.raises(InvalidSchemaError) as excinfo:
        import_index(text)
    assert excinfo.value.reason == reason
    assert str(excinfo.value).startswith(f"INVALID_SCHEMA: {reason}")


def test_non_finite_dna_loads_as_zero():
    text = '{"samples": [{"id": "a", "dna": {"peakFrequency": "NaN", "attackMs": null}}]}'
    dna = import_index(text).samples[0].dna
    assert dna.peak_frequency == 0.0
    assert dna.attack_ms == 0.0


def test_write_and_read(tmp_path: Path):
    out = write_index(tmp_path / "nested" / "index.json", [make_sample()])
    assert out.exists()
    assert read_index(out).samples == [make_sample()]


@pytest.mark.parametrize(
    "later_sample",
    [
        '"garbage"',
        "42",
        "null",
        '{"id": "b", "dna": {}, "sourceTags": 5}',
        '{"id": "b", "dna": {}, "acousticTags": "#Tight"}',
        '{"id": "b", "dna": {}, "sourceTags": ["#Kick", 3]}',
        '{"id": "b", "dna": "flat"}',
    ],
)
def test_any_corrupted_sample_fails_the_whole_import(later_sample):
    text = '{"samples": [{"id": "a", "dna": {}}, ' + later_sample + "]}"
    with pytest.raises(InvalidSchemaError) as excinfo:
        import_index(text)
    assert excinfo.value.reason == CORRUPTED_DNA_DATA


def test_record_conversion_errors_are_reported_as_corrupted(monkeypatch):
    monkeypatch.setattr(index_io, "validate_document", lambda data: None)
    with pytest.raises(InvalidSchemaError) as excinfo:
        index_io.load_document({"samples": [{"id": "a", "dna": {}}, {"id": "b", "sourceTags": 5}]})
    assert excinfo.value.reason == CORRUPTED_DNA_DATA
    assert "samples[1]" in excinfo.value.detail
