"""Reassembly service: folds verified chunks into the final file and records completion."""

import logging
import os
from pathlib import Path

from common.hashing import hash_stream
from common.types import CompletionRecord, UploadMetadata
from receiver.chunk_storage import ChunkStorage
from receiver.exceptions import FinalHashMismatchError, MissingChunkError
from receiver.ledger import CompletionLedger
from receiver.metadata_store import UploadMetadataStore
from receiver.utils import final_file_name

logger = logging.getLogger(__name__)


class ReassemblyService:
    def __init__(
        self,
        store: UploadMetadataStore,
        storage: ChunkStorage,
        ledger: CompletionLedger,
        output_dir: Path,
    ):
        self.store = store
        self.storage = storage
        self.ledger = ledger
        self.output_dir = Path(output_dir)

    def get_final_path(self, metadata: UploadMetadata) -> Path:
        return self.output_dir / final_file_name(metadata.id, metadata.file_name)

    def complete(self, upload_id: str) -> CompletionRecord:
        """
        Reassemble an upload from its chunks, verify it and append it to the ledger.

        Chunks are read strictly by sequence number 1..total_chunks, so arrival
        order does not matter but gaps do. Chunk files are only deleted after
        the whole-file digest matches; a failed verification can be retried.
        Completing the same upload twice fails on the second call with a
        missing chunk error and leaves the verified file untouched.

        Args:
            upload_id: Upload identity

        Returns:
            The CompletionRecord appended to the ledger

        Raises:
            UploadNotFoundError: If no metadata is registered for upload_id
            MissingChunkError: If any chunk is absent (destination left partially written)
            FinalHashMismatchError: If the reassembled digest differs (destination left on disk)
            OSError: On file create/read/write failures
        """
        self.store.require(upload_id)

        with self.store.completion_lock(upload_id):
            # The reaper may have dropped the upload while we waited for the lock.
            metadata = self.store.require(upload_id)
            final_path = self.get_final_path(metadata)

            if metadata.is_completed:
                raise MissingChunkError(
                    f"Chunk file does not exist: upload {upload_id} was already completed "
                    f"into {final_path} and its chunks were removed"
                )

            self.output_dir.mkdir(parents=True, exist_ok=True)
            logger.info(
                f"Reassembling upload {upload_id} into {final_path} ({metadata.total_chunks} chunks)"
            )

            with open(final_path, 'w+b') as final_file:
                self._fold_chunks(metadata, final_file)

                final_file.flush()
                os.fsync(final_file.fileno())

                final_file.seek(0)
                final_hash = hash_stream(final_file)

            if final_hash != metadata.file_hash:
                raise FinalHashMismatchError(
                    f"Final file hash mismatch for upload {upload_id}: "
                    f"expected {metadata.file_hash}, got {final_hash}"
                )

            for sequence_number in range(1, metadata.total_chunks + 1):
                self.storage.delete_chunk(upload_id, sequence_number)

            completed = self.store.mark_completed(upload_id)
            record = CompletionRecord.from_metadata(completed, str(final_path))
            self.ledger.append(record)

        logger.info(f"Upload {upload_id} completed and verified ({metadata.file_size} bytes)")
        return record

    def _fold_chunks(self, metadata: UploadMetadata, final_file) -> None:
        for sequence_number in range(1, metadata.total_chunks + 1):
            if not self.storage.chunk_exists(metadata.id, sequence_number):
                raise MissingChunkError(
                    f"Chunk file does not exist: chunk {sequence_number} of upload {metadata.id}"
                )

            for piece in self.storage.read_chunk_streaming(metadata.id, sequence_number):
                final_file.write(piece)
            logger.debug(f"Appended chunk {sequence_number}/{metadata.total_chunks} for upload {metadata.id}")
