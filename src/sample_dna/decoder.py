"""Decode raw file bytes into a mono amplitude buffer.

The scanner only depends on the :data:`Decoder` call signature; the
default implementation reads any format libsndfile understands (WAV,
FLAC, AIFF, OGG and, with libsndfile >= 1.1, MP3) from memory.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable

import numpy as np
import soundfile as sf


@dataclass(frozen=True)
class DecodedAudio:
    sample_rate: int
    samples: np.ndarray
    duration: float


Decoder = Callable[[bytes], DecodedAudio]


def to_mono(data: np.ndarray) -> np.ndarray:
    """Mono conversion: ``0.5 * (L + R)`` for stereo and wider, channel 0 otherwise."""
    arr = np.asarray(data, dtype=np.float64)
    if arr.ndim == 1:
        return arr
    if arr.ndim == 2:
        if arr.shape[1] >= 2:
            return 0.5 * (arr[:, 0] + arr[:, 1])
        if arr.shape[1] == 1:
            return arr[:, 0]
    return np.empty((0,), dtype=np.float64)


def decode_audio_bytes(data: bytes) -> DecodedAudio:
    """Decode ``data`` with soundfile; raises ``soundfile.LibsndfileError`` on bad input."""
    frames, sr = sf.read(io.BytesIO(data), always_2d=True, dtype="float32")
    y = np.ascontiguousarray(to_mono(frames))
    duration = (float(len(y)) / float(sr)) if sr else 0.0
    return DecodedAudio(sample_rate=int(sr), samples=y, duration=duration)
