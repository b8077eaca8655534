"""Drives one file transfer: hash, register, send chunks in order, complete."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Union

from common.hashing import compute_checksum, hash_stream
from common.logging_config import get_logger
from common.types import Chunk
from sender.exceptions import EmptyFileError, TransferError
from sender.receiver_client import ReceiverClient
from sender.utils import format_file_size, format_progress

logger = get_logger(__name__)


@dataclass
class TransferResult:
    upload_id: str
    file_name: str
    file_size: int
    file_hash: str
    chunk_size: int
    chunks_sent: int
    bytes_sent: int
    completion: dict = field(default_factory=dict)


def iter_chunks(stream, upload_id: str, chunk_size: int) -> Iterator[Chunk]:
    """
    Read a binary stream from its current position into numbered chunks.

    Sequence numbers start at 1; the last chunk holds the remainder.
    Iteration stops on the first empty read.

    Args:
        stream: Readable binary file object
        upload_id: Upload id the chunks belong to
        chunk_size: Bytes per chunk (>= 1)

    Yields:
        Chunk with payload and its digest
    """
    sequence_number = 1
    while True:
        payload = stream.read(chunk_size)
        if not payload:
            break
        yield Chunk(
            file_id=upload_id,
            sequence_number=sequence_number,
            payload=payload,
            digest=compute_checksum(payload),
        )
        sequence_number += 1


class SenderOrchestrator:
    """
    Sends a file strictly sequentially: chunk N+1 is read only after chunk N
    was acknowledged. Any failure aborts the whole transfer.
    """

    def __init__(self, client: ReceiverClient):
        self.client = client

    def send_file(self, file_path: Union[str, Path]) -> TransferResult:
        """
        Transfer one file to the receiver.

        Args:
            file_path: Path of the file to send

        Returns:
            TransferResult describing the finished upload

        Raises:
            EmptyFileError: If the file has zero bytes (checked before any request)
            TransferError: If registration, a chunk upload or completion fails
            OSError: If the local file cannot be opened or read
        """
        path = Path(file_path)

        with open(path, 'rb') as f:
            file_size = path.stat().st_size
            if file_size == 0:
                raise EmptyFileError(f"File is empty: {path}")

            file_hash = hash_stream(f)
            logger.info(f"Hashed {path.name} ({format_file_size(file_size)}): {file_hash}")

            registration = self.client.register_file(path.name, file_size, file_hash)
            upload_id = str(registration['id'])
            chunk_size = int(registration['chunkSize'])
            total_chunks = int(registration['totalChunks'])

            f.seek(0)

            chunks_sent = 0
            bytes_sent = 0
            for chunk in iter_chunks(f, upload_id, chunk_size):
                logger.debug(f"Sending chunk {chunk.sequence_number} (hash: {chunk.digest})")
                self.client.upload_chunk(upload_id, chunk.sequence_number, chunk.payload, chunk.digest)
                chunks_sent += 1
                bytes_sent += chunk.size
                logger.info(
                    f"Sent chunk {chunk.sequence_number}/{total_chunks}: {format_progress(bytes_sent, file_size)}"
                )

        if chunks_sent != total_chunks:
            raise TransferError(
                'upload_chunk',
                f"Sent {chunks_sent} chunks but receiver planned {total_chunks}; file changed during transfer?"
            )

        completion = self.client.complete_upload(upload_id)
        logger.info(f"Upload {upload_id} of {path.name} completed successfully")

        return TransferResult(
            upload_id=upload_id,
            file_name=path.name,
            file_size=file_size,
            file_hash=file_hash,
            chunk_size=chunk_size,
            chunks_sent=chunks_sent,
            bytes_sent=bytes_sent,
            completion=completion,
        )
