"""SHA-256 digest helpers shared by sender and receiver."""

import hashlib
from typing import BinaryIO

from common.constants import STREAM_PIECE_SIZE_BYTES


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Hexadecimal string representation of SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


class IncrementalChecksumCalculator:
    """
    Calculate SHA-256 checksum incrementally for streaming data.

    The digest depends only on the bytes fed in and their order, not on how
    they were split across update() calls.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(piece1)
        calculator.update(piece2)
        final_checksum = calculator.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.sha256()
        self._finalized = False
        self.bytes_seen = 0

    def update(self, data: bytes) -> None:
        """
        Update checksum with new data.

        Args:
            data: Bytes to add to checksum calculation

        Raises:
            ValueError: If called after finalize()
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)
        self.bytes_seen += len(data)

    def finalize(self) -> str:
        """
        Finalize checksum calculation and return result.

        Returns:
            Hexadecimal string representation of SHA-256 hash
        """
        self._finalized = True
        return self._hasher.hexdigest()


def hash_stream(stream: BinaryIO, piece_size: int = STREAM_PIECE_SIZE_BYTES) -> str:
    """
    Hash a binary stream from its current position to EOF.

    Args:
        stream: Readable binary file object
        piece_size: Bytes per read

    Returns:
        Hexadecimal SHA-256 digest of the remaining stream content
    """
    calculator = IncrementalChecksumCalculator()
    while True:
        piece = stream.read(piece_size)
        if not piece:
            break
        calculator.update(piece)
    return calculator.finalize()
