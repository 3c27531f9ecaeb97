"""Batch scan orchestrator.

The :class:`ScanOrchestrator` pulls entries from a file source, runs the
per-file pipeline (path tagging, decoding, DNA analysis, arbitration)
and streams finished :class:`~sample_dna.models.AudioSample` records to
its consumers.

Design notes:
- Files are processed in fixed-size batches (8 for tree sources, 6 for
  flat lists).  Files inside a batch run concurrently on a thread pool;
  a batch is fully collected and handed to ``on_batch`` before the next
  one starts.
- A progress snapshot is emitted after every file.  The processed count
  is updated under a lock and snapshots are emitted in count order.
  A failing progress callback is logged and ignored, like the log callback.
- A failing file (unreadable, undecodable, anything) is dropped from the
  result set; the batch and the scan carry on.  Nothing is retried.
- :meth:`ScanOrchestrator.cancel` stops the scan at the next batch
  boundary; the in-flight batch is drained and flushed first.

This orchestrator is UI-agnostic and storage-agnostic: it depends only on
the pure classification functions, a source and a decoder.
"""

from __future__ import annotations

import datetime
import json
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from . import tuning
from .analyzer import analyze_buffer
from .arbiter import SILENT_TAG, UNCLASSIFIED_TAG, acoustic_validation
from .decoder import Decoder, decode_audio_bytes
from .models import AudioSample, DNAProfile, ScanProgress, SoundType
from .normalizer import normalize_tags
from .sources import SourceEntry, TreeNode, collect_flat, collect_tree, has_allowed_extension, is_blacklisted, is_midi

ProgressCallback = Callable[[ScanProgress], None]
BatchCallback = Callable[[List[AudioSample]], None]


def sound_type_for_duration(duration: float) -> SoundType:
    """Stems run longer than 15 s, loops 2–15 s, anything shorter is a one-shot."""
    if duration > float(tuning.STEM_MIN_SECONDS):
        return SoundType.STEM
    if duration >= float(tuning.LOOP_MIN_SECONDS):
        return SoundType.LOOP
    return SoundType.ONE_SHOT


@dataclass
class ScanOrchestrator:
    """Drive classification over a file source in concurrent batches.

    A ``tuning.json`` found through ``config`` is merged into
    :mod:`sample_dna.tuning` when the orchestrator is created.  The merge is
    process-wide: the analyzer, arbiter and search read the same module, so
    later callers see the overridden values until the process exits.
    """

    config: Dict[str, Any] = field(default_factory=dict)
    decoder: Decoder = decode_audio_bytes
    log_callback: Optional[Callable[[str], None]] = None
    log_to_console: bool = False

    # Internal state
    _cancel_event: threading.Event = field(init=False, default_factory=threading.Event, repr=False)
    _progress_lock: Any = field(init=False, default_factory=threading.Lock, repr=False)
    _processed: int = field(init=False, default=0)
    _tuning_loaded: bool = field(init=False, default=False)
    last_progress: Optional[ScanProgress] = field(init=False, default=None)

    def __post_init__(self) -> None:
        if not isinstance(self.config, dict):
            self.config = {}
        self._load_tuning_overrides()

    # ------------------------------------------------------------------
    # Configuration
    def _load_tuning_overrides(self) -> None:
        """Load overrides from tuning.json (explicit path first, then config dir)."""
        if self._tuning_loaded:
            return

        tuning_paths: List[Path] = []
        tuning_path = self.config.get("tuning_path")
        if tuning_path:
            tuning_path_obj = Path(tuning_path)
            tuning_paths.append(
                tuning_path_obj if tuning_path_obj.suffix.lower() == ".json" else (tuning_path_obj / "tuning.json")
            )
        config_dir = self.config.get("config_dir")
        if config_dir:
            tuning_paths.append(Path(config_dir) / "tuning.json")

        for path in tuning_paths:
            if not path.exists():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                self._emit_log(f"Ignoring unreadable tuning file {path}: {exc}")
                continue
            if isinstance(data, dict):
                tuning.apply_overrides(data)
            self._tuning_loaded = True
            return

    def _batch_size(self, key: str, default: int) -> int:
        try:
            value = int(self.config.get(key, default) or default)
        except (TypeError, ValueError):
            value = int(default)
        return max(1, value)

    @property
    def tree_batch_size(self) -> int:
        return self._batch_size("tree_batch_size", tuning.TREE_BATCH_SIZE)

    @property
    def flat_batch_size(self) -> int:
        return self._batch_size("flat_batch_size", tuning.FLAT_BATCH_SIZE)

    # ------------------------------------------------------------------
    # Logging / cancellation
    def _emit_log(self, msg: str) -> None:
        if self.log_to_console:
            print(msg)
        if self.log_callback is not None:
            try:
                self.log_callback(msg)
            except Exception:
                pass

    def cancel(self) -> None:
        """Request that the scan stop after the batch currently in flight."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    # ------------------------------------------------------------------
    # Per-file pipeline
    def process_entry(self, entry: SourceEntry) -> Optional[AudioSample]:
        """Classify one entry; returns ``None`` when the file is rejected or fails."""
        if not has_allowed_extension(entry.file_name) or is_blacklisted(entry.relative_path):
            return None
        try:
            return self._classify_entry(entry)
        except Exception as exc:
            self._emit_log(f"Dropped {entry.full_path}: {type(exc).__name__}: {exc}")
            return None

    def _classify_entry(self, entry: SourceEntry) -> AudioSample:
        semantic = normalize_tags(entry.relative_path, entry.file_name)

        if is_midi(entry.file_name):
            return AudioSample(
                id=str(uuid.uuid4()),
                name=entry.file_name,
                path=entry.relative_path,
                full_path=entry.full_path,
                type=SoundType.MIDI,
                source_tags=("#MIDI",) + semantic.tags,
                acoustic_tags=(),
                dna=DNAProfile.silent(),
                confidence_score=tuning.CONFIDENCE_LOCKED,
                source=entry.source,
            )

        decoded = self.decoder(entry.source.read_bytes())
        sound_type = sound_type_for_duration(decoded.duration)
        source_tags = semantic.tags + (f"#{sound_type.value.upper()}",)

        analysis = analyze_buffer(
            decoded.samples,
            decoded.sample_rate,
            is_locked=semantic.is_locked,
            master_category=semantic.master_category,
        )
        acoustic_tags = acoustic_validation(analysis.dna, semantic.master_category, analysis.confidence)

        return AudioSample(
            id=str(uuid.uuid4()),
            name=entry.file_name,
            path=entry.relative_path,
            full_path=entry.full_path,
            type=sound_type,
            source_tags=source_tags,
            acoustic_tags=tuple(acoustic_tags),
            dna=analysis.dna,
            confidence_score=analysis.confidence,
            source=entry.source,
        )

    # ------------------------------------------------------------------
    # Batch driver
    def _run_queue(
        self,
        queue: List[SourceEntry],
        batch_size: int,
        filtered_count: int,
        on_progress: Optional[ProgressCallback],
        on_batch: Optional[BatchCallback],
    ) -> List[AudioSample]:
        total = len(queue)
        all_samples: List[AudioSample] = []
        with self._progress_lock:
            self._processed = 0

        def _process(entry: SourceEntry) -> Optional[AudioSample]:
            sample = self.process_entry(entry)
            with self._progress_lock:
                self._processed += 1
                snapshot = ScanProgress(
                    total_files=total,
                    processed_files=self._processed,
                    current_file=entry.file_name,
                    is_scanning=True,
                    filtered_count=filtered_count,
                )
                self.last_progress = snapshot
                if on_progress is not None:
                    try:
                        on_progress(snapshot)
                    except Exception as exc:
                        self._emit_log(f"Progress callback failed: {type(exc).__name__}: {exc}")
            return sample

        self._emit_log(f"Files queued: {total} (filtered {filtered_count}, batch size {batch_size})")
        if not queue:
            return all_samples

        with ThreadPoolExecutor(max_workers=min(batch_size, total)) as executor:
            for start in range(0, total, batch_size):
                if self.cancelled:
                    self._emit_log(f"Scan cancelled after {start} of {total} files")
                    break
                batch = queue[start : start + batch_size]
                # map() yields in submission order once every file of the batch is done
                results = list(executor.map(_process, batch))
                valid = [s for s in results if s is not None]
                all_samples.extend(valid)
                self._emit_log(
                    f"Batch {start // batch_size + 1}: classified={len(valid)} dropped={len(batch) - len(valid)}"
                )
                if on_batch is not None:
                    on_batch(valid)

        if self.last_progress is not None:
            self.last_progress = ScanProgress(
                total_files=total,
                processed_files=self.last_progress.processed_files,
                current_file=self.last_progress.current_file,
                is_scanning=False,
                filtered_count=filtered_count,
            )
        self._emit_log(f"Done. classified={len(all_samples)} of {total}")
        return all_samples

    def scan_tree(
        self,
        root: TreeNode,
        on_progress: Optional[ProgressCallback] = None,
        on_batch: Optional[BatchCallback] = None,
    ) -> List[AudioSample]:
        """Scan a directory tree, pruning blacklisted folders."""
        self._cancel_event.clear()
        self._emit_log(f"Scanning tree: {root.name}")
        queue, filtered = collect_tree(root)
        return self._run_queue(queue, self.tree_batch_size, filtered, on_progress, on_batch)

    def scan_files(
        self,
        entries: Iterable[SourceEntry],
        on_progress: Optional[ProgressCallback] = None,
        on_batch: Optional[BatchCallback] = None,
    ) -> List[AudioSample]:
        """Scan a flat list of entries."""
        self._cancel_event.clear()
        queue, filtered = collect_flat(entries)
        return self._run_queue(queue, self.flat_batch_size, filtered, on_progress, on_batch)

    # ------------------------------------------------------------------
    # Reporting
    def build_report(
        self,
        samples: List[AudioSample],
        *,
        runtime_seconds: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Summarise a finished scan."""
        type_counts: Dict[str, int] = {t.value: 0 for t in SoundType}
        confidence_counts: Dict[str, int] = {}
        silent = 0
        unclassified = 0
        for sample in samples:
            type_counts[sample.type.value] = type_counts.get(sample.type.value, 0) + 1
            key = str(int(sample.confidence_score))
            confidence_counts[key] = confidence_counts.get(key, 0) + 1
            if SILENT_TAG in sample.acoustic_tags:
                silent += 1
            if UNCLASSIFIED_TAG in sample.acoustic_tags:
                unclassified += 1

        progress = self.last_progress
        queued = int(progress.total_files) if progress else len(samples)
        return {
            "run_id": datetime.datetime.now().strftime("%Y%m%d_%H%M%S_") + uuid.uuid4().hex[:8],
            "timestamp": datetime.datetime.now().isoformat(),
            "files_queued": queued,
            "files_processed": int(progress.processed_files) if progress else len(samples),
            "files_classified": len(samples),
            "files_dropped": max(0, (int(progress.processed_files) if progress else len(samples)) - len(samples)),
            "files_filtered": int(progress.filtered_count) if progress else 0,
            "cancelled": self.cancelled,
            "types": type_counts,
            "confidence": dict(sorted(confidence_counts.items(), key=lambda kv: -int(kv[0]))),
            "silent": silent,
            "unclassified": unclassified,
            "runtime_seconds": round(float(runtime_seconds or 0.0), 6),
        }

