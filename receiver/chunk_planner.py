"""Chooses the chunk size and chunk count for a newly registered upload."""

import random
from typing import Optional

from common.constants import MAX_CHUNK_SIZE_BYTES, MIN_CHUNK_SIZE_BYTES
from common.types import ChunkPlan
from receiver.exceptions import InvalidRequestError


def compute_total_chunks(file_size: int, chunk_size: int) -> int:
    """
    Number of chunks needed to cover file_size bytes (ceil division).

    Args:
        file_size: File size in bytes
        chunk_size: Chunk size in bytes (>= 1)

    Returns:
        ceil(file_size / chunk_size)
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    return -(-file_size // chunk_size)


class ChunkPlanner:
    """
    Picks a chunk size uniformly at random within fixed bounds.

    The plan is not content-addressed: registering the same file twice may
    yield different chunk sizes. Setting min_chunk_size == max_chunk_size
    forces a fixed size.
    """

    def __init__(
        self,
        min_chunk_size: int = MIN_CHUNK_SIZE_BYTES,
        max_chunk_size: int = MAX_CHUNK_SIZE_BYTES,
        rng: Optional[random.Random] = None,
    ):
        if min_chunk_size < 1:
            raise ValueError(f"min_chunk_size must be >= 1, got {min_chunk_size}")
        if min_chunk_size > max_chunk_size:
            raise ValueError(
                f"min_chunk_size ({min_chunk_size}) exceeds max_chunk_size ({max_chunk_size})"
            )
        self.min_chunk_size = min_chunk_size
        self.max_chunk_size = max_chunk_size
        self._rng = rng or random.Random()

    def choose_chunk_size(self, file_size: int) -> int:
        """
        Choose a chunk size for a file, clamped so a small file is one chunk.

        Args:
            file_size: File size in bytes (> 0)

        Returns:
            Chunk size with 1 <= chunk_size <= file_size

        Raises:
            InvalidRequestError: If file_size is not positive
        """
        if file_size <= 0:
            raise InvalidRequestError(f"fileSize must be positive, got {file_size}")
        chunk_size = self._rng.randint(self.min_chunk_size, self.max_chunk_size)
        return min(chunk_size, file_size)

    def plan(self, file_size: int) -> ChunkPlan:
        chunk_size = self.choose_chunk_size(file_size)
        return ChunkPlan(
            chunk_size=chunk_size,
            total_chunks=compute_total_chunks(file_size, chunk_size),
        )
