"""Background task that reaps expired uploads and orphaned chunk files."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from common.types import utc_now
from receiver.chunk_storage import ChunkStorage
from receiver.metadata_store import UploadMetadataStore

logger = logging.getLogger(__name__)


@dataclass
class ReapResult:
    expired_uploads: int = 0
    deleted_chunks: int = 0
    orphaned_chunks: int = 0


class ExpiredUploadReaper:
    """
    Background task that periodically drops uploads whose lease has run out.

    An upload's lease starts at registration. Once it expires, its chunk
    files are deleted and its metadata is removed (completed uploads are
    already archived in the ledger). Removal waits for the upload's
    completion lock, so a running completion finishes first. Chunk files
    whose upload id is not registered at all are deleted once they are
    older than the lease.
    """

    def __init__(
        self,
        store: UploadMetadataStore,
        storage: ChunkStorage,
        lease_seconds: int,
        interval_seconds: int,
    ):
        """
        Initialize reaper task.

        Args:
            store: Metadata table shared with the services
            storage: Chunk storage to clean
            lease_seconds: Lifetime of an upload after registration
            interval_seconds: Time between reap cycles
        """
        self.store = store
        self.storage = storage
        self.lease_seconds = lease_seconds
        self.interval_seconds = interval_seconds
        self._running = False
        self._task = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background reaper task."""
        if self._running:
            logger.warning("Reaper task already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Started upload reaper task (interval: {self.interval_seconds}s, lease: {self.lease_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the background reaper task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Stopped upload reaper task")

    async def _run(self) -> None:
        """Main loop for reaper task."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await run_in_threadpool(self.run_cycle)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in reaper task: {e}", exc_info=True)

    def run_cycle(self, now: Optional[datetime] = None) -> ReapResult:
        """
        Execute one reap cycle.

        Args:
            now: Reference time (defaults to current UTC time)

        Returns:
            Counts of reaped uploads and deleted chunk files
        """
        now = now or utc_now()
        result = ReapResult()

        for expired in self.store.expired(self.lease_seconds, now=now):
            # Wait out an in-flight completion so it never loses its metadata halfway.
            with self.store.completion_lock(expired.id):
                metadata = self.store.get(expired.id)
                if metadata is None:
                    continue
                deleted = self.storage.delete_all_for_upload(metadata.id)
                self.store.remove(metadata.id)
            result.expired_uploads += 1
            result.deleted_chunks += deleted
            state = "completed" if metadata.is_completed else "incomplete"
            logger.info(f"Reaped {state} upload {metadata.id} ({deleted} chunk files removed)")

        cutoff = now - timedelta(seconds=self.lease_seconds)
        for upload_id, sequence_number in self.storage.list_all_chunks():
            if upload_id in self.store:
                continue
            chunk_path = self.storage.get_chunk_path(upload_id, sequence_number)
            try:
                modified = datetime.fromtimestamp(chunk_path.stat().st_mtime, tz=timezone.utc)
            except FileNotFoundError:
                continue
            if modified < cutoff and self.storage.delete_chunk(upload_id, sequence_number):
                result.orphaned_chunks += 1
                logger.info(f"Removed orphaned chunk {chunk_path.name}")

        if result.expired_uploads or result.orphaned_chunks:
            logger.info(
                f"Reap cycle complete: {result.expired_uploads} uploads expired, "
                f"{result.deleted_chunks + result.orphaned_chunks} chunk files removed"
            )
        else:
            logger.debug("Reap cycle complete: nothing to reap")

        return result
