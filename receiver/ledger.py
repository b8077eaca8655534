"""Append-only JSON ledger of completed transfers."""

import json
import os
import threading
from pathlib import Path
from typing import Dict, List

from common.logging_config import get_logger
from common.types import CompletionRecord

logger = get_logger(__name__)

_path_locks: Dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    """One lock per resolved ledger path, shared by every ledger instance on it."""
    key = str(path.resolve())
    with _path_locks_guard:
        lock = _path_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _path_locks[key] = lock
        return lock


class CompletionLedger:
    """
    Durable record of every upload that reassembled and verified.

    The file holds a JSON array of CompletionRecord wire dictionaries.
    A missing file is an empty ledger.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def _read_unlocked(self) -> List[dict]:
        if not self.path.exists():
            return []

        with open(self.path, 'r') as f:
            content = f.read()
        if not content.strip():
            return []

        data = json.loads(content)
        if not isinstance(data, list):
            raise ValueError(f"Ledger {self.path} does not contain a JSON array")
        return data

    def append(self, record: CompletionRecord) -> int:
        """
        Append one record (read-modify-write under the ledger lock).

        Args:
            record: CompletionRecord to append

        Returns:
            Number of records in the ledger after the append

        Raises:
            OSError: If the ledger cannot be written
            json.JSONDecodeError: If the existing ledger is corrupted
        """
        with self._lock:
            entries = self._read_unlocked()
            entries.append(record.to_wire())

            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + '.tmp')
            with open(tmp_path, 'w') as f:
                json.dump(entries, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)

        logger.info(f"Ledger updated [upload_id={record.id}] entries={len(entries)}")
        return len(entries)

    def records(self) -> List[CompletionRecord]:
        with self._lock:
            return [CompletionRecord.from_wire(entry) for entry in self._read_unlocked()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._read_unlocked())
