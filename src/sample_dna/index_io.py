"""Import/export of the sample index document.

The exchange document is a JSON object::

    {
      "samples": [ {...AudioSample...}, ... ],
      "plugins": <anything, passed through untouched>,
      "schema_version": "3.3.1",
      "export_date": "2026-01-01T12:00:00+00:00"
    }

Imports are validated against ``schemas/index.schema.json``.  A document
without a ``samples`` array, or whose first sample lacks an ``id`` or a
``dna`` object, or any of whose samples is not an object with string tag
lists, raises :class:`InvalidSchemaError`.  The error is never
swallowed here: a corrupted restore must reach the caller rather than
load partially.
"""

from __future__ import annotations

import datetime
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from .models import AudioSample

INDEX_SCHEMA_VERSION = "3.3.1"
INDEX_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "index.schema.json"

MALFORMED_JSON = "MALFORMED_JSON"
MISSING_SAMPLES = "MISSING_SAMPLES"
CORRUPTED_DNA_DATA = "CORRUPTED_DNA_DATA"
INVALID_METADATA = "INVALID_METADATA"


class InvalidSchemaError(ValueError):
    """Raised when an index document does not match the exchange schema."""

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        message = f"INVALID_SCHEMA: {reason}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


@dataclass
class IndexDocument:
    samples: List[AudioSample] = field(default_factory=list)
    plugins: Any = None
    schema_version: str = INDEX_SCHEMA_VERSION
    export_date: str = ""


_validator: Optional[Draft202012Validator] = None


def _get_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        schema = json.loads(INDEX_SCHEMA_PATH.read_text(encoding="utf-8"))
        Draft202012Validator.check_schema(schema)
        _validator = Draft202012Validator(schema)
    return _validator


def validate_document(data: Any) -> None:
    """Raise :class:`InvalidSchemaError` if ``data`` is not a valid index document."""
    error = best_match(_get_validator().iter_errors(data))
    if error is None:
        return
    path = list(error.absolute_path)
    if len(path) >= 2 and path[0] == "samples":
        reason = CORRUPTED_DNA_DATA
    elif not path or path[0] == "samples":
        reason = MISSING_SAMPLES
    else:
        reason = INVALID_METADATA
    raise InvalidSchemaError(reason, error.message)


def export_index(samples: Iterable[AudioSample], plugins: Any = None) -> Dict[str, Any]:
    """Build the export document for ``samples``."""
    return {
        "samples": [s.to_dict() for s in samples],
        "plugins": plugins if plugins is not None else [],
        "schema_version": INDEX_SCHEMA_VERSION,
        "export_date": datetime.datetime.now(datetime.timezone.utc).isoformat(),
    }


def dumps_index(samples: Iterable[AudioSample], plugins: Any = None) -> str:
    return json.dumps(export_index(samples, plugins), indent=2)


def write_index(path: Path, samples: Iterable[AudioSample], plugins: Any = None) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(dumps_index(samples, plugins), encoding="utf-8")
    return out


def load_document(data: Any) -> IndexDocument:
    """Validate an already-parsed document and build an :class:`IndexDocument`."""
    validate_document(data)
    samples: List[AudioSample] = []
    for index, item in enumerate(data["samples"]):
        try:
            samples.append(AudioSample.from_dict(item))
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidSchemaError(CORRUPTED_DNA_DATA, f"samples[{index}]: {exc}") from exc
    return IndexDocument(
        samples=samples,
        plugins=data.get("plugins"),
        schema_version=str(data.get("schema_version") or ""),
        export_date=str(data.get("export_date") or ""),
    )


def import_index(json_string: str) -> IndexDocument:
    """Parse and validate an export document."""
    try:
        data = json.loads(json_string)
    except ValueError as exc:
        raise InvalidSchemaError(MALFORMED_JSON, str(exc)) from exc
    return load_document(data)


def read_index(path: Path) -> IndexDocument:
    return import_index(Path(path).read_text(encoding="utf-8"))
