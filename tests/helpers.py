"""Helpers shared by test modules."""

from receiver.chunk_storage import ChunkStorage


def put_chunk(storage: ChunkStorage, upload_id: str, sequence_number: int, data: bytes) -> None:
    """Store a chunk the way the receive service does, without hashing."""
    with storage.open_for_write(upload_id, sequence_number) as f:
        f.write(data)
