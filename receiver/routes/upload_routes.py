"""Upload protocol API routes: register, upload chunk, complete."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request

from common.constants import CHUNK_HASH_HEADER
from receiver.dependencies import (
    get_chunk_service,
    get_reassembly_service,
    get_registration_service,
)
from receiver.schemas.common import ErrorResponse
from receiver.schemas.uploads import (
    CompleteUploadResponse,
    RegisterFileRequest,
    RegisterFileResponse,
    UploadChunkResponse,
)
from receiver.services import ChunkReceiveService, ReassemblyService, RegistrationService

router = APIRouter(tags=["Uploads"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Malformed request"},
    500: {"model": ErrorResponse, "description": "Transfer failure"},
}


@router.post("/register_file", response_model=RegisterFileResponse, responses=ERROR_RESPONSES)
def register_file(
    request: RegisterFileRequest,
    registration_service: RegistrationService = Depends(get_registration_service)
):
    """
    Register a file and receive its upload id and chunk plan.

    Parameters:
        - fileName: Original file name
        - fileSize: File size in bytes (> 0)
        - fileHash: Hex SHA-256 digest of the whole file

    Returns:
        - id, fileName, fileSize, fileHash, chunkSize, totalChunks

    Raises:
        - 400: Malformed registration payload
        - 500: Internal server error
    """
    metadata = registration_service.register(
        file_name=request.file_name,
        file_size=request.file_size,
        file_hash=request.file_hash,
    )
    return metadata.to_wire()


@router.post("/upload_chunk/{upload_id}/{sequence_number}", response_model=UploadChunkResponse, responses=ERROR_RESPONSES)
async def upload_chunk(
    upload_id: str,
    sequence_number: int,
    request: Request,
    chunk_hash: Optional[str] = Header(default=None, alias=CHUNK_HASH_HEADER),
    chunk_service: ChunkReceiveService = Depends(get_chunk_service)
):
    """
    Store one chunk, streamed from the raw request body.

    Parameters:
        - upload_id: Upload id returned by /register_file
        - sequence_number: 1-indexed chunk number
        - Chunk-Hash header: Hex SHA-256 digest of the body (required)

    Raises:
        - 400: Missing Chunk-Hash header or invalid sequence number
        - 500: Chunk hash mismatch or storage failure
    """
    size = await chunk_service.receive_chunk(
        upload_id=upload_id,
        sequence_number=sequence_number,
        body=request.stream(),
        claimed_digest=chunk_hash or "",
    )
    return {"id": upload_id, "sequenceNumber": sequence_number, "size": size}


@router.get("/complete_upload/{upload_id}", response_model=CompleteUploadResponse, responses=ERROR_RESPONSES)
def complete_upload(
    upload_id: str,
    reassembly_service: ReassemblyService = Depends(get_reassembly_service)
):
    """
    Reassemble, verify and record a finished upload.

    Raises:
        - 500: Metadata not found, missing chunk, final hash mismatch or I/O failure
    """
    record = reassembly_service.complete(upload_id)
    return record.to_wire()
