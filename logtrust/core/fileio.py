"""
Locked read-modify-write for the small JSON documents the CLI maintains
(key registry files, log response documents).

- locked(path): exclusive flock on a "<path>.lock" sidecar, held across the
  read and the write so concurrent writers serialize
- write_json_atomic(path, payload): write "<path>.tmp", fsync, os.replace

The lock lives on a sidecar because os.replace swaps the data file's inode.
"""

import json
import os
from contextlib import contextmanager
from typing import Any, Iterator

try:
    import fcntl
except ImportError:  # Windows or unsupported platform
    fcntl = None


def _ensure_parent(path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)


@contextmanager
def locked(path: str) -> Iterator[None]:
    """Hold an exclusive lock for path until the block exits."""
    _ensure_parent(path)
    with open(path + ".lock", "a+b") as lock_file:
        if fcntl:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            if fcntl:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


def write_json_atomic(path: str, payload: Any) -> None:
    """
    Replace path with payload as indented JSON.

    Readers see either the old or the new document, never a partial one.
    Callers that read-modify-write must hold locked(path).
    """
    _ensure_parent(path)
    tmp_path = path + ".tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
        f.write("\n")
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp_path, path)
