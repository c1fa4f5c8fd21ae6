"""
Filesystem helpers for gridstore.io.

Responsibilities
- Path checks used before opening a database (file exists, parent directory writable).
- The atomic replace path used by the parquet backend: tmp write -> fsync -> rename.

Notes
- Atomicity via os.replace is guaranteed only when src and dst reside on the same
  filesystem; callers place the tmp file next to its destination.
- All helpers are synchronous; callers decide on concurrency/locking.
"""

from __future__ import annotations

import os


def exists(path: str) -> bool:
    return os.path.exists(path)


def makedirs(path: str, exist_ok: bool = True) -> None:
    """Create directories recursively (thin wrapper over os.makedirs)."""
    os.makedirs(path, exist_ok=exist_ok)


def is_writable_dir(path: str) -> bool:
    """True if ``path`` is an existing directory the process can write to."""
    return os.path.isdir(path) and os.access(path, os.W_OK)


def fsync_path(path: str) -> None:
    """
    Open a path read-only and fsync its file descriptor.

    Notes:
        Useful when a library wrote to a path directly (e.g., pyarrow.parquet.write_table)
        and the data must reach the disk before an atomic rename.
    """
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def rename_atomic(src: str, dst: str) -> None:
    """Atomically rename src -> dst on the same filesystem (os.replace)."""
    os.replace(src, dst)


def remove_if_exists(path: str) -> None:
    """Delete ``path`` if present; a missing file is not an error."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
