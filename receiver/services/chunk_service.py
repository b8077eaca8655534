"""Chunk receive service: streams one chunk to disk and verifies its digest."""

import logging
from typing import AsyncIterator

from fastapi.concurrency import run_in_threadpool

from common.hashing import IncrementalChecksumCalculator
from receiver.chunk_storage import ChunkStorage
from receiver.exceptions import ChecksumMismatchError, InvalidRequestError, MissingChunkHashError

logger = logging.getLogger(__name__)


class ChunkReceiveService:
    def __init__(self, storage: ChunkStorage):
        self.storage = storage

    async def receive_chunk(
        self,
        upload_id: str,
        sequence_number: int,
        body: AsyncIterator[bytes],
        claimed_digest: str,
    ) -> int:
        """
        Write an inbound chunk body to its storage unit while hashing it.

        The body is consumed in a single pass; nothing beyond one network
        piece is held in memory. File I/O runs in the threadpool so the event
        loop keeps serving other requests. The upload id is not checked against the
        metadata table.

        Args:
            upload_id: Upload identity from the URL
            sequence_number: 1-indexed chunk number
            body: Async iterator over the request body
            claimed_digest: Hex SHA-256 digest sent by the sender

        Returns:
            Number of bytes stored

        Raises:
            MissingChunkHashError: If claimed_digest is empty
            InvalidRequestError: If sequence_number < 1
            ChecksumMismatchError: If the computed digest differs (chunk is deleted)
            OSError: If the chunk cannot be written (partial chunk is deleted)
        """
        if not claimed_digest or not claimed_digest.strip():
            raise MissingChunkHashError("Chunk hash is missing")
        if sequence_number < 1:
            raise InvalidRequestError(f"Sequence number must be >= 1, got {sequence_number}")

        expected = claimed_digest.strip().lower()
        calculator = IncrementalChecksumCalculator()

        try:
            chunk_file = await run_in_threadpool(self.storage.open_for_write, upload_id, sequence_number)
            try:
                async for piece in body:
                    if piece:
                        await run_in_threadpool(chunk_file.write, piece)
                        calculator.update(piece)
            finally:
                await run_in_threadpool(chunk_file.close)
        except Exception:
            self.storage.delete_chunk(upload_id, sequence_number)
            logger.error(
                f"Failed writing chunk {sequence_number} for upload {upload_id}; partial chunk removed"
            )
            raise

        computed = calculator.finalize()
        if computed != expected:
            self.storage.delete_chunk(upload_id, sequence_number)
            raise ChecksumMismatchError(
                f"Chunk hash mismatch for chunk {sequence_number} of upload {upload_id}: "
                f"expected {expected}, got {computed}"
            )

        logger.info(
            f"Stored chunk {sequence_number} for upload {upload_id} ({calculator.bytes_seen} bytes)"
        )
        return calculator.bytes_seen
