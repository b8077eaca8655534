"""Manages chunk files on disk, one file per (upload id, sequence number)."""

from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Tuple

from common.constants import CHUNK_FILE_INFIX, STREAM_PIECE_SIZE_BYTES


class ChunkStorage:
    """
    Chunk files live flat in one directory as '<upload_id>_part_<n>'.
    """

    def __init__(self, chunks_dir: Path):
        """
        Args:
            chunks_dir: Directory holding chunk files (created on demand)
        """
        self.chunks_dir = Path(chunks_dir)

    def ensure_directory(self) -> None:
        """Ensure chunks directory exists."""
        self.chunks_dir.mkdir(parents=True, exist_ok=True)

    def get_chunk_path(self, upload_id: str, sequence_number: int) -> Path:
        """
        Get file path for a chunk.

        Args:
            upload_id: Upload identity
            sequence_number: 1-indexed chunk number

        Returns:
            Path object for chunk file
        """
        return self.chunks_dir / f"{upload_id}{CHUNK_FILE_INFIX}{sequence_number}"

    def open_for_write(self, upload_id: str, sequence_number: int) -> BinaryIO:
        """
        Open (truncating) the chunk file for writing; a re-sent chunk replaces the old one.

        Raises:
            OSError: If the file cannot be created
        """
        self.ensure_directory()
        return open(self.get_chunk_path(upload_id, sequence_number), 'wb')

    def read_chunk_streaming(
        self,
        upload_id: str,
        sequence_number: int,
        piece_size: int = STREAM_PIECE_SIZE_BYTES
    ) -> Iterator[bytes]:
        """
        Stream chunk data in pieces.

        Raises:
            FileNotFoundError: If chunk does not exist
        """
        filepath = self.get_chunk_path(upload_id, sequence_number)
        with open(filepath, 'rb') as f:
            while True:
                piece = f.read(piece_size)
                if not piece:
                    break
                yield piece

    def delete_chunk(self, upload_id: str, sequence_number: int) -> bool:
        """
        Delete chunk file from disk.

        Returns:
            True if file was deleted, False if it didn't exist
        """
        filepath = self.get_chunk_path(upload_id, sequence_number)
        if filepath.exists():
            filepath.unlink()
            return True
        return False

    def chunk_exists(self, upload_id: str, sequence_number: int) -> bool:
        return self.get_chunk_path(upload_id, sequence_number).is_file()

    def list_all_chunks(self) -> List[Tuple[str, int]]:
        """
        List every chunk in the storage directory.

        Returns:
            (upload_id, sequence_number) pairs; files not matching the
            naming scheme are ignored
        """
        if not self.chunks_dir.exists():
            return []

        chunks = []
        for filepath in self.chunks_dir.glob(f"*{CHUNK_FILE_INFIX}*"):
            parsed = parse_chunk_filename(filepath.name)
            if parsed is not None:
                chunks.append(parsed)
        return chunks

    def list_chunks_for_upload(self, upload_id: str) -> List[int]:
        """Sorted sequence numbers stored for one upload."""
        return sorted(seq for uid, seq in self.list_all_chunks() if uid == upload_id)

    def delete_all_for_upload(self, upload_id: str) -> int:
        deleted = 0
        for sequence_number in self.list_chunks_for_upload(upload_id):
            if self.delete_chunk(upload_id, sequence_number):
                deleted += 1
        return deleted


def parse_chunk_filename(name: str) -> Optional[Tuple[str, int]]:
    """
    Split '<upload_id>_part_<n>' into its parts.

    Returns:
        (upload_id, n) or None if the name does not follow the scheme
    """
    upload_id, sep, number = name.rpartition(CHUNK_FILE_INFIX)
    if not sep or not upload_id or not number.isdigit():
        return None
    return upload_id, int(number)
