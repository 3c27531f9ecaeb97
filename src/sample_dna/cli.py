"""Command-line interface for sample-dna.

Subcommands:

- ``scan``: classify every supported file under a folder and print a run
  report; with ``--output`` the export document is rewritten after every
  batch so an interrupted scan still leaves a usable index.
- ``search``: rank the samples of an exported index for a query.
- ``tags``: show the path-based classification of a single path.
- ``validate``: check an exported index against the exchange schema.

Run ``python -m sample_dna --help`` for usage.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import List, Optional

from . import tuning
from .config_service import ConfigService
from .index_io import InvalidSchemaError, read_index, write_index
from .models import AudioSample, ScanProgress
from .normalizer import normalize_tags
from .scanner import ScanOrchestrator
from .search import local_search
from .sources import entries_from_paths


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sample-dna",
        description="sample-dna – path + acoustic sample classifier and local search",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sp = subparsers.add_parser("scan", help="Classify a sample folder and print a run report")
    sp.add_argument("root", help="Folder to scan")
    sp.add_argument("--output", "-o", help="Write the export document to this path (updated per batch)")
    sp.add_argument("--flat", action="store_true", help="Treat the folder as a flat file list")
    sp.add_argument("--batch-size", type=int, default=None, help="Override the batch size")
    sp.add_argument(
        "--portable", "-p", action="store_true", help="Force portable mode (ignored if portable.flag is present)"
    )
    sp.add_argument("--verbose", action="store_true", help="Print per-batch and per-file log lines")

    sp = subparsers.add_parser("search", help="Search an exported index")
    sp.add_argument("index", help="Path to an exported index document")
    sp.add_argument("query", nargs="*", help="Query tokens, e.g. '#kick sub c'")
    sp.add_argument("--limit", type=int, default=None, help="Maximum number of results")
    sp.add_argument(
        "--portable", "-p", action="store_true", help="Force portable mode (ignored if portable.flag is present)"
    )

    sp = subparsers.add_parser("tags", help="Show the path-based classification of a file path")
    sp.add_argument("path", help="Relative path including the file name")

    sp = subparsers.add_parser("validate", help="Validate an exported index document")
    sp.add_argument("index", help="Path to an exported index document")
    return parser


def _summary(sample: AudioSample) -> dict:
    return {
        "id": sample.id,
        "name": sample.name,
        "fullPath": sample.full_path,
        "type": sample.type.value,
        "tags": list(sample.all_tags),
        "confidence": int(sample.confidence_score),
        "peakFrequency": round(float(sample.dna.peak_frequency), 2),
        "attackMs": round(float(sample.dna.attack_ms), 2),
        "brightness": round(float(sample.dna.brightness), 3),
    }


def _cmd_scan(args: argparse.Namespace) -> int:
    root = Path(args.root).expanduser().resolve()
    if not root.is_dir():
        print(f"Error: {root} is not a directory")
        return 1

    config = ConfigService(app_dir=Path.cwd()).load_config(cli_portable=args.portable)
    if args.batch_size:
        config["tree_batch_size"] = args.batch_size
        config["flat_batch_size"] = args.batch_size
    orchestrator = ScanOrchestrator(config=config, log_to_console=bool(args.verbose))

    output = Path(args.output).expanduser() if args.output else None
    collected: List[AudioSample] = []

    def on_batch(batch: List[AudioSample]) -> None:
        collected.extend(batch)
        if output is not None:
            write_index(output, collected)

    def on_progress(progress: ScanProgress) -> None:
        if args.verbose:
            print(f"[{progress.processed_files}/{progress.total_files}] {progress.current_file}")

    started = time.perf_counter()
    if args.flat:
        entries = entries_from_paths(sorted(p for p in root.rglob("*") if p.is_file()), root)
        samples = orchestrator.scan_files(entries, on_progress=on_progress, on_batch=on_batch)
    else:
        samples = orchestrator.scan_tree(root, on_progress=on_progress, on_batch=on_batch)
    report = orchestrator.build_report(samples, runtime_seconds=time.perf_counter() - started)
    if output is not None:
        if not collected:
            write_index(output, collected)
        report["index"] = str(output)
    print(json.dumps(report, indent=2))
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    try:
        document = read_index(Path(args.index))
    except InvalidSchemaError as exc:
        print(f"Error: {exc}")
        return 1
    limit = args.limit
    if limit is None:
        config = ConfigService(app_dir=Path.cwd()).load_config(cli_portable=args.portable)
        limit = int(config.get("search_limit", tuning.DEFAULT_SEARCH_LIMIT))
    results = local_search(document.samples, " ".join(args.query), limit=limit)
    print(json.dumps([_summary(s) for s in results], indent=2))
    return 0


def _cmd_tags(args: argparse.Namespace) -> int:
    raw = str(args.path).replace("\\", "/")
    path, _, file_name = raw.rpartition("/")
    result = normalize_tags(path, file_name)
    print(
        json.dumps(
            {
                "tags": list(result.tags),
                "confidence": result.confidence,
                "isLocked": result.is_locked,
                "masterCategory": result.master_category,
            },
            indent=2,
        )
    )
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        document = read_index(Path(args.index))
    except InvalidSchemaError as exc:
        print(f"Error: {exc}")
        return 1
    print(
        json.dumps(
            {
                "valid": True,
                "samples": len(document.samples),
                "schema_version": document.schema_version,
                "export_date": document.export_date,
            },
            indent=2,
        )
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "scan":
        return _cmd_scan(args)
    if args.command == "search":
        return _cmd_search(args)
    if args.command == "tags":
        return _cmd_tags(args)
    if args.command == "validate":
        return _cmd_validate(args)
    print(f"Error: unrecognized command {args.command}")
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
