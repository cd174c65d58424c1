"""Shared plumbing for the JSON-file-backed repositories.

Every repository touching the same file shares one lock, so a
read-modify-write on that file is a single atomic step for all threads
in this process.  Running several processes against one data directory
is not supported; use the SQL backend for that.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

_registry_lock = threading.Lock()
_file_locks: dict[Path, threading.RLock] = {}


def _lock_for(path: Path) -> threading.RLock:
    key = path.resolve()
    with _registry_lock:
        return _file_locks.setdefault(key, threading.RLock())


class JsonFile:
    """A JSON array of records on disk."""

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()
        self._lock = _lock_for(file_path)

    def load(self) -> list[dict]:
        with self._lock:
            return json.loads(self._file_path.read_text(encoding="utf-8"))

    @contextmanager
    def update(self) -> Iterator[list[dict]]:
        """Yield the records under the file lock; write them back on success."""
        with self._lock:
            records = json.loads(self._file_path.read_text(encoding="utf-8"))
            yield records
            self._persist(records)

    # --- File helpers ---------------------------------------------------------

    def _persist(self, records: list[dict]) -> None:
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
        tmp_path.replace(self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


def next_id(records: list[dict]) -> int:
    return max((r["id"] for r in records), default=0) + 1
