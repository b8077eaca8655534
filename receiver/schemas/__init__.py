"""Pydantic schemas for API requests and responses."""

from receiver.schemas.uploads import (
    RegisterFileRequest,
    RegisterFileResponse,
    UploadChunkResponse,
    CompleteUploadResponse
)
from receiver.schemas.common import ErrorResponse

__all__ = [
    "RegisterFileRequest",
    "RegisterFileResponse",
    "UploadChunkResponse",
    "CompleteUploadResponse",
    "ErrorResponse"
]
