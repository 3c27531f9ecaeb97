"""Value types shared by the classification kernel.

Every record produced by a scan is immutable: tags are stored as tuples
so their order (which is part of the observable result) survives
copying, and samples are never mutated after the orchestrator hands
them to a consumer.

The JSON form used by the import/export document keeps the camelCase
field names of the exchange format (``peakFrequency``, ``sourceTags``
...), so indexes written by other tools load unchanged.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class ByteSource(Protocol):
    """Anything that can hand out the raw bytes of one file."""

    def read_bytes(self) -> bytes:  # pragma: no cover - protocol
        ...


class SoundType(str, Enum):
    ONE_SHOT = "one-shot"
    LOOP = "loop"
    STEM = "stem"
    MIDI = "midi"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "SoundType":
        try:
            return cls(str(value))
        except ValueError:
            return cls.UNKNOWN


def _finite(value: Any) -> float:
    """Return value as a float, mapping missing, NaN and infinite values to 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


@dataclass(frozen=True)
class DNAProfile:
    """Acoustic fingerprint of one sample."""

    peak_frequency: float = 0.0
    spectral_centroid: float = 0.0  # reserved
    attack_ms: float = 0.0
    decay_ms: float = 0.0  # reserved
    zero_crossing_rate: float = 0.0
    brightness: float = 0.0

    @classmethod
    def silent(cls) -> "DNAProfile":
        return cls()

    def sanitized(self) -> "DNAProfile":
        """Return a copy with non-finite values zeroed and ratios clamped to [0, 1]."""
        return DNAProfile(
            peak_frequency=max(0.0, _finite(self.peak_frequency)),
            spectral_centroid=_finite(self.spectral_centroid),
            attack_ms=_finite(self.attack_ms),
            decay_ms=_finite(self.decay_ms),
            zero_crossing_rate=min(1.0, max(0.0, _finite(self.zero_crossing_rate))),
            brightness=min(1.0, max(0.0, _finite(self.brightness))),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "peakFrequency": float(self.peak_frequency),
            "spectralCentroid": float(self.spectral_centroid),
            "attackMs": float(self.attack_ms),
            "decayMs": float(self.decay_ms),
            "zeroCrossingRate": float(self.zero_crossing_rate),
            "brightness": float(self.brightness),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DNAProfile":
        data = data if isinstance(data, dict) else {}
        return cls(
            peak_frequency=_finite(data.get("peakFrequency")),
            spectral_centroid=_finite(data.get("spectralCentroid")),
            attack_ms=_finite(data.get("attackMs")),
            decay_ms=_finite(data.get("decayMs")),
            zero_crossing_rate=_finite(data.get("zeroCrossingRate")),
            brightness=_finite(data.get("brightness")),
        )


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of path-based tagging.

    ``is_locked`` is true exactly when ``master_category`` is set, and the
    confidence is 100 for locked results and 10 otherwise.
    """

    tags: Tuple[str, ...]
    confidence: int
    is_locked: bool
    master_category: Optional[str] = None


@dataclass(frozen=True)
class AnalysisResult:
    dna: DNAProfile
    confidence: int
    # Best/second-best autocorrelation ratio; telemetry only.
    pitch_clarity: float = 0.0


@dataclass(frozen=True)
class AudioSample:
    """One classified file."""

    id: str
    name: str
    path: str
    full_path: str
    type: SoundType
    source_tags: Tuple[str, ...]
    acoustic_tags: Tuple[str, ...]
    dna: DNAProfile
    confidence_score: int
    musical_key: Optional[str] = None
    # Non-owning handle to the file bytes; the source collaborator owns them.
    source: Optional[ByteSource] = field(default=None, compare=False, repr=False)

    @property
    def all_tags(self) -> Tuple[str, ...]:
        return self.source_tags + self.acoustic_tags

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "fullPath": self.full_path,
            "type": self.type.value,
            "sourceTags": list(self.source_tags),
            "acousticTags": list(self.acoustic_tags),
            "dna": self.dna.to_dict(),
            "confidenceScore": int(self.confidence_score),
        }
        if self.musical_key is not None:
            data["musicalKey"] = self.musical_key
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[ByteSource] = None) -> "AudioSample":
        name = str(data.get("name") or "")
        path = str(data.get("path") or "")
        musical_key = data.get("musicalKey")
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            name=name,
            path=path,
            full_path=str(data.get("fullPath") or f"{path}/{name}"),
            type=SoundType.parse(data.get("type")),
            source_tags=tuple(str(t) for t in data.get("sourceTags") or ()),
            acoustic_tags=tuple(str(t) for t in data.get("acousticTags") or ()),
            dna=DNAProfile.from_dict(data.get("dna") or {}),
            confidence_score=int(_finite(data.get("confidenceScore"))),
            musical_key=str(musical_key) if musical_key is not None else None,
            source=source,
        )


@dataclass(frozen=True)
class ScanProgress:
    total_files: int
    processed_files: int
    current_file: str
    is_scanning: bool
    filtered_count: int = 0
