"""Pydantic schemas for upload protocol endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class RegisterFileRequest(BaseModel):
    """Request model for file registration."""
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName", min_length=1)
    file_size: int = Field(alias="fileSize", gt=0)
    file_hash: str = Field(alias="fileHash", min_length=1)


class RegisterFileResponse(BaseModel):
    """Response model for file registration."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize")
    file_hash: str = Field(alias="fileHash")
    chunk_size: int = Field(alias="chunkSize")
    total_chunks: int = Field(alias="totalChunks")


class UploadChunkResponse(BaseModel):
    """Response model for a stored chunk."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    sequence_number: int = Field(alias="sequenceNumber")
    size: int


class CompleteUploadResponse(BaseModel):
    """Response model for a completed, verified upload."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize")
    file_hash: str = Field(alias="fileHash")
    chunk_size: int = Field(alias="chunkSize")
    total_chunks: int = Field(alias="totalChunks")
    completed_at: str = Field(alias="completedAt")
    final_path: str = Field(alias="finalPath")
