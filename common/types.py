"""Shared data type definitions (UploadMetadata, Chunk, CompletionRecord)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChunkPlan:
    """
    Chunk size and count negotiated for one upload.
    """
    chunk_size: int
    total_chunks: int


@dataclass(frozen=True)
class UploadMetadata:
    """
    Identity and shape of one file transfer.

    chunk_size and total_chunks are fixed at registration; the record is
    frozen so a completed upload is represented by a replaced copy.
    """
    id: str
    file_name: str
    file_size: int
    file_hash: str
    chunk_size: int
    total_chunks: int
    registered_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def to_wire(self) -> Dict[str, Any]:
        """
        Serialize to the camelCase form exchanged with senders.

        Returns:
            Dictionary with id, fileName, fileSize, fileHash, chunkSize, totalChunks
        """
        return {
            "id": self.id,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "fileHash": self.file_hash,
            "chunkSize": self.chunk_size,
            "totalChunks": self.total_chunks,
        }


@dataclass(frozen=True)
class Chunk:
    """
    One numbered slice of a source file, as produced by the sender.
    """
    file_id: str
    sequence_number: int
    payload: bytes
    digest: str

    @property
    def size(self) -> int:
        return len(self.payload)


@dataclass(frozen=True)
class CompletionRecord:
    """
    Durable evidence that a transfer finished and verified.
    """
    id: str
    file_name: str
    file_size: int
    file_hash: str
    chunk_size: int
    total_chunks: int
    completed_at: str
    final_path: str

    @classmethod
    def from_metadata(cls, metadata: UploadMetadata, final_path: str) -> "CompletionRecord":
        completed_at = metadata.completed_at or utc_now()
        return cls(
            id=metadata.id,
            file_name=metadata.file_name,
            file_size=metadata.file_size,
            file_hash=metadata.file_hash,
            chunk_size=metadata.chunk_size,
            total_chunks=metadata.total_chunks,
            completed_at=completed_at.isoformat(),
            final_path=final_path,
        )

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "fileHash": self.file_hash,
            "chunkSize": self.chunk_size,
            "totalChunks": self.total_chunks,
            "completedAt": self.completed_at,
            "finalPath": self.final_path,
        }

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "CompletionRecord":
        return cls(
            id=data["id"],
            file_name=data["fileName"],
            file_size=data["fileSize"],
            file_hash=data["fileHash"],
            chunk_size=data["chunkSize"],
            total_chunks=data["totalChunks"],
            completed_at=data.get("completedAt", ""),
            final_path=data.get("finalPath", ""),
        )
