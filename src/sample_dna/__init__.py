"""sample-dna package

This package contains the classification kernel for audio sample
libraries: path-based semantic tagging, time-domain DNA analysis, the
tag arbiter, the batch scan orchestrator and local ranked search.  Public
entry points are re-exported here for convenience.
"""

from .analyzer import analyze_buffer  # noqa: F401
from .arbiter import acoustic_validation  # noqa: F401
from .index_io import InvalidSchemaError, export_index, import_index  # noqa: F401
from .models import AudioSample, ClassificationResult, DNAProfile, ScanProgress, SoundType  # noqa: F401
from .normalizer import normalize_tags  # noqa: F401
from .scanner import ScanOrchestrator  # noqa: F401
from .search import local_search  # noqa: F401

__all__ = [
    "analyze_buffer",
    "acoustic_validation",
    "InvalidSchemaError",
    "export_index",
    "import_index",
    "AudioSample",
    "ClassificationResult",
    "DNAProfile",
    "ScanProgress",
    "SoundType",
    "normalize_tags",
    "ScanOrchestrator",
    "local_search",
]
