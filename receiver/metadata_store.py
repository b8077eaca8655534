"""Thread-safe in-memory table: upload id -> UploadMetadata."""

import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from common.logging_config import get_logger
from common.types import UploadMetadata, utc_now
from receiver.exceptions import DuplicateUploadError, UploadNotFoundError

logger = get_logger(__name__)


class UploadMetadataStore:
    """
    In-memory mapping of upload id to its metadata.

    Every read-modify-write of the table happens under one lock. The lock is
    never held across a chunk upload or a reassembly; completions of the same
    upload are serialised with a separate per-id lock from completion_lock().
    """

    def __init__(self):
        self._uploads: Dict[str, UploadMetadata] = {}
        self._lock = threading.Lock()
        self._completion_locks: Dict[str, threading.Lock] = {}

    def insert(self, metadata: UploadMetadata) -> None:
        """
        Add metadata for a new upload.

        Args:
            metadata: UploadMetadata with a fresh id

        Raises:
            DuplicateUploadError: If the id is already registered
        """
        with self._lock:
            if metadata.id in self._uploads:
                raise DuplicateUploadError(f"Upload {metadata.id} is already registered")
            self._uploads[metadata.id] = metadata
        logger.debug(f"Stored metadata [upload_id={metadata.id}]")

    def get(self, upload_id: str) -> Optional[UploadMetadata]:
        with self._lock:
            return self._uploads.get(upload_id)

    def require(self, upload_id: str) -> UploadMetadata:
        """
        Retrieve metadata or fail.

        Raises:
            UploadNotFoundError: If no metadata exists for upload_id
        """
        metadata = self.get(upload_id)
        if metadata is None:
            raise UploadNotFoundError(f"File metadata not found for id {upload_id}")
        return metadata

    def mark_completed(self, upload_id: str, completed_at: Optional[datetime] = None) -> UploadMetadata:
        with self._lock:
            current = self._uploads.get(upload_id)
            if current is None:
                raise UploadNotFoundError(f"File metadata not found for id {upload_id}")
            updated = replace(current, completed_at=completed_at or utc_now())
            self._uploads[upload_id] = updated
            return updated

    def remove(self, upload_id: str) -> bool:
        with self._lock:
            self._completion_locks.pop(upload_id, None)
            return self._uploads.pop(upload_id, None) is not None

    def expired(self, lease_seconds: int, now: Optional[datetime] = None) -> List[UploadMetadata]:
        """
        List uploads registered longer ago than the lease.

        Args:
            lease_seconds: Lease length in seconds
            now: Reference time (defaults to current UTC time)

        Returns:
            Metadata of expired uploads, completed or not
        """
        cutoff = (now or utc_now()) - timedelta(seconds=lease_seconds)
        with self._lock:
            return [m for m in self._uploads.values() if m.registered_at < cutoff]

    def completion_lock(self, upload_id: str) -> threading.Lock:
        with self._lock:
            lock = self._completion_locks.get(upload_id)
            if lock is None:
                lock = threading.Lock()
                self._completion_locks[upload_id] = lock
            return lock

    def __contains__(self, upload_id: str) -> bool:
        with self._lock:
            return upload_id in self._uploads

    def __len__(self) -> int:
        with self._lock:
            return len(self._uploads)
