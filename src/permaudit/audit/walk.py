# SPDX-License-Identifier: MIT
"""Depth-first filesystem walker shared by the permission and ownership engines.

Uses an explicit stack instead of recursion and a visited set of
``(st_dev, st_ino)`` pairs, so bind mounts, hardlinked directories and
symlink loops are each walked once. Symlinks are reported, never followed.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

log = logging.getLogger(__name__)

DirIdentity = tuple[int, int]


class EntryKind(StrEnum):
    SYMLINK = "symlink"
    FILE = "file"
    DIRECTORY = "directory"
    ERROR = "error"


@dataclass(frozen=True)
class WalkEntry:
    """One thing the walker ran into."""

    path: Path
    kind: EntryKind
    error: str | None = None


def walk(root: Path, visited: set[DirIdentity], *, descend: bool = True) -> Iterator[WalkEntry]:
    """Yield entries under *root* in depth-first, sorted-name order.

    Args:
        root: Starting path. A symlink here is yielded as-is.
        visited: Directory identities already walked. Updated in place, so a
            caller can share one set across several walks.
        descend: When false and *root* is a directory, yield it without
            listing it or touching *visited*. Children are always descended.

    Entries that vanish or cannot be lstat'ed, and special files (sockets,
    FIFOs, devices), are skipped silently.
    """
    stack: list[Path] = [root]
    while stack:
        path = stack.pop()
        try:
            st = os.lstat(path)
        except (OSError, ValueError):
            continue

        if stat.S_ISLNK(st.st_mode):
            yield WalkEntry(path, EntryKind.SYMLINK)
            continue
        if stat.S_ISREG(st.st_mode):
            yield WalkEntry(path, EntryKind.FILE)
            continue
        if not stat.S_ISDIR(st.st_mode):
            continue

        if not descend and path is root:
            yield WalkEntry(path, EntryKind.DIRECTORY)
            continue

        try:
            dir_st = os.stat(path)
        except OSError as exc:
            log.warning("Cannot stat directory %s: %s", path, exc)
            yield WalkEntry(path, EntryKind.ERROR, f"Failed to read directory metadata: {exc}")
            continue

        identity = (dir_st.st_dev, dir_st.st_ino)
        if identity in visited:
            log.debug("Skipping already visited directory %s", path)
            continue
        visited.add(identity)
        yield WalkEntry(path, EntryKind.DIRECTORY)

        try:
            names = sorted(os.listdir(path))
        except OSError as exc:
            log.warning("Cannot list directory %s: %s", path, exc)
            yield WalkEntry(path, EntryKind.ERROR, f"Failed to read directory: {exc}")
            continue

        # Reversed so the smallest name is popped first.
        stack.extend(path / name for name in reversed(names))
