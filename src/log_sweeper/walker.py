"""Recursive directory traversal."""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator
from pathlib import Path


def walk_files(root: Path) -> Iterator[Path]:
    """Yield every non-directory entry below ``root``.

    Entries are visited in lexical order and symlinks are never followed.
    A ``root`` that is not a directory is yielded on its own.

    Args:
        root: Directory (or single file) to walk.

    Yields:
        Paths of files, symlinks and other non-directory entries.

    Raises:
        OSError: If ``root`` or any directory below it cannot be read.

    """
    info = root.lstat()
    if not stat.S_ISDIR(info.st_mode):
        yield root
        return

    yield from _walk_directory(root)


def _walk_directory(directory: Path) -> Iterator[Path]:
    # Read the whole listing first so callers may delete while iterating
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    for entry in entries:
        path = directory / entry.name
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_directory(path)
        else:
            yield path
