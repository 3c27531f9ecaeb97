"""File source collaborators and admission filtering.

Two source shapes feed the scanner:

- **Tree sources**: any node exposing ``name``, ``is_dir()``,
  ``iterdir()`` and ``read_bytes()``.  :class:`pathlib.Path` satisfies
  this directly.  Blacklisted directories are pruned before they are
  descended, so nothing inside a ``Backup`` or ``__MACOSX`` folder is
  ever enumerated.
- **Flat sources**: an iterable of :class:`SourceEntry` (for example a
  list of dropped files).  Entries are filtered one by one.

Sources never hand over file contents up front; each entry carries a
byte reader that the scanner calls only while analysing that file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Protocol, Tuple

from . import tuning
from .models import ByteSource


class TreeNode(Protocol):
    """Directory/file node of a tree-shaped source."""

    @property
    def name(self) -> str:  # pragma: no cover - protocol
        ...

    def is_dir(self) -> bool:  # pragma: no cover - protocol
        ...

    def iterdir(self) -> Iterable["TreeNode"]:  # pragma: no cover - protocol
        ...

    def read_bytes(self) -> bytes:  # pragma: no cover - protocol
        ...


@dataclass(frozen=True)
class SourceEntry:
    relative_path: str
    file_name: str
    source: ByteSource

    @property
    def full_path(self) -> str:
        return f"{self.relative_path}/{self.file_name}"


def file_extension(file_name: str) -> str:
    """Return the uppercased extension including the dot ('' when absent)."""
    idx = file_name.rfind(".")
    return file_name[idx:].upper() if idx >= 0 else ""


def has_allowed_extension(file_name: str) -> bool:
    return file_extension(file_name) in tuning.ALLOWED_EXTENSIONS


def is_midi(file_name: str) -> bool:
    return file_extension(file_name) in tuning.MIDI_EXTENSIONS


def is_blacklisted(path: str) -> bool:
    """True when any segment of ``path`` is a blacklisted folder (case-insensitive)."""
    wrapped = "/" + path.replace("\\", "/").strip("/").upper() + "/"
    return any(segment in wrapped for segment in tuning.BLACKLIST_SEGMENTS)


def collect_tree(root: TreeNode) -> Tuple[List[SourceEntry], int]:
    """Walk ``root`` depth-first and return ``(admitted_entries, filtered_count)``.

    Children are visited in name order so the queue is reproducible.
    ``filtered_count`` counts files rejected by the extension allow-list.
    """
    queue: List[SourceEntry] = []
    filtered = 0

    def _collect(node: TreeNode, current_path: str) -> None:
        nonlocal filtered
        for child in sorted(node.iterdir(), key=lambda c: c.name):
            if child.is_dir():
                next_path = f"{current_path}/{child.name}"
                if not is_blacklisted(next_path):
                    _collect(child, next_path)
            elif has_allowed_extension(child.name):
                queue.append(SourceEntry(current_path, child.name, child))
            else:
                filtered += 1

    if not is_blacklisted(root.name):
        _collect(root, root.name)
    return queue, filtered


def collect_flat(entries: Iterable[SourceEntry]) -> Tuple[List[SourceEntry], int]:
    """Filter a flat entry list; returns ``(admitted_entries, filtered_count)``."""
    queue: List[SourceEntry] = []
    filtered = 0
    for entry in entries:
        if not has_allowed_extension(entry.file_name):
            filtered += 1
            continue
        if is_blacklisted(entry.relative_path):
            continue
        queue.append(entry)
    return queue, filtered


def entries_from_paths(paths: Iterable[Path], root: Path) -> List[SourceEntry]:
    """Build flat entries for files below ``root``.

    The relative path starts with the root folder's name, matching what a
    tree scan of ``root`` would report for the same file.
    """
    root = Path(root)
    entries: List[SourceEntry] = []
    for p in paths:
        p = Path(p)
        try:
            parent_parts = p.parent.relative_to(root).parts
        except ValueError:
            parent_parts = p.parent.parts[-1:]
            relative_path = "/".join(parent_parts)
        else:
            relative_path = "/".join((root.name,) + parent_parts)
        entries.append(SourceEntry(relative_path, p.name, p))
    return entries
