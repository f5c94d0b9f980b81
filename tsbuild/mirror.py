"""
mirror.py

Responsibility: replace the publish clone's working tree with the build output.

Rules:
- Version-control metadata (`.git`) is never removed from the destination nor copied
  from the source.
- Entries are walked in sorted order so copies are deterministic.
- Files are copied byte-for-byte with their metadata; symlinks are copied as links.
- Same-named destination entries are overwritten.

This module intentionally does NOT know about GitHub, git commands, or CLI parsing.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Collection
from dataclasses import dataclass
from pathlib import Path

from tsbuild.errors import ActionError

LOG = logging.getLogger(__name__)

METADATA_NAMES = frozenset({".git"})


class MirrorError(ActionError):
    pass


@dataclass(frozen=True)
class MirrorResult:
    removed_entries: int
    copied_files: int


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _sorted_entries(directory: Path, exclude: Collection[str]) -> list[Path]:
    return sorted((p for p in directory.iterdir() if p.name not in exclude), key=lambda p: p.name)


def clear_tree(root: str | Path, *, keep: Collection[str] = METADATA_NAMES) -> int:
    """
    Delete every top-level entry of `root` except the names in `keep`.
    """
    root_path = Path(root)
    removed = 0
    for entry in _sorted_entries(root_path, keep):
        _remove(entry)
        removed += 1
    return removed


def _copy_file(src: Path, dst: Path) -> None:
    if dst.is_dir() and not dst.is_symlink():
        shutil.rmtree(dst)
    elif dst.exists() or dst.is_symlink():
        dst.unlink()
    if src.is_symlink():
        os.symlink(os.readlink(src), dst)
    else:
        shutil.copy2(src, dst)


def copy_tree(src: str | Path, dst: str | Path, *, exclude: Collection[str] = METADATA_NAMES) -> int:
    """
    Copy every entry of `src` (except top-level names in `exclude`) into `dst`,
    recursively. Returns the number of files copied.
    """
    src_dir = Path(src).resolve()
    dst_dir = Path(dst).resolve()
    if not src_dir.is_dir():
        raise MirrorError(f"Publish source directory not found: {src_dir}")
    if dst_dir == src_dir or src_dir in dst_dir.parents:
        raise MirrorError(f"Publish clone {dst_dir} must not live inside {src_dir}")

    copied = 0
    pending = [(entry, dst_dir / entry.name) for entry in _sorted_entries(src_dir, exclude)]
    while pending:
        src_path, dst_path = pending.pop(0)
        if src_path.is_dir() and not src_path.is_symlink():
            if dst_path.exists() and not dst_path.is_dir():
                dst_path.unlink()
            dst_path.mkdir(parents=True, exist_ok=True)
            shutil.copystat(src_path, dst_path)
            children = [(child, dst_path / child.name) for child in _sorted_entries(src_path, ())]
            pending[:0] = children
            continue
        _copy_file(src_path, dst_path)
        copied += 1
    return copied


def mirror_tree(src: str | Path, dst: str | Path) -> MirrorResult:
    """
    Make `dst` (minus `.git`) an exact copy of `src` (minus `.git`).
    """
    LOG.info("Removing original files")
    removed = clear_tree(dst)
    LOG.info("Copying new files")
    copied = copy_tree(src, dst)
    LOG.debug("Removed %d entries, copied %d files", removed, copied)
    return MirrorResult(removed_entries=removed, copied_files=copied)
