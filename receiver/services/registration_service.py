"""Registration service: allocates upload identities and chunk plans."""

import logging

from common.types import UploadMetadata, utc_now
from receiver.chunk_planner import ChunkPlanner
from receiver.metadata_store import UploadMetadataStore
from receiver.utils import generate_upload_id

logger = logging.getLogger(__name__)


class RegistrationService:
    def __init__(self, store: UploadMetadataStore, planner: ChunkPlanner):
        self.store = store
        self.planner = planner

    def register(self, file_name: str, file_size: int, file_hash: str) -> UploadMetadata:
        """
        Register a new upload and fix its chunk plan.

        Args:
            file_name: Original file name
            file_size: File size in bytes (> 0)
            file_hash: Hex SHA-256 digest of the whole file

        Returns:
            Stored UploadMetadata including id, chunk_size and total_chunks

        Raises:
            InvalidRequestError: If file_size is not positive
            DuplicateUploadError: If the generated id collides with a live upload
        """
        plan = self.planner.plan(file_size)

        metadata = UploadMetadata(
            id=generate_upload_id(),
            file_name=file_name,
            file_size=file_size,
            file_hash=file_hash.strip().lower(),
            chunk_size=plan.chunk_size,
            total_chunks=plan.total_chunks,
            registered_at=utc_now(),
        )
        self.store.insert(metadata)

        logger.info(
            f"Registered upload {metadata.id} for '{file_name}' "
            f"({file_size} bytes, chunk_size={plan.chunk_size}, total_chunks={plan.total_chunks})"
        )
        return metadata
