"""Tests for SHA-256 digest helpers."""

import hashlib
import io

import pytest

from common.hashing import (
    IncrementalChecksumCalculator,
    compute_checksum,
    hash_stream,
)


def test_compute_checksum_matches_sha256():
    data = b'chunkrelay'
    assert compute_checksum(data) == hashlib.sha256(data).hexdigest()
    assert len(compute_checksum(data)) == 64


def test_incremental_checksum_independent_of_split():
    data = bytes(range(256)) * 10

    whole = IncrementalChecksumCalculator()
    whole.update(data)

    pieces = IncrementalChecksumCalculator()
    for i in range(0, len(data), 7):
        pieces.update(data[i:i + 7])

    assert whole.finalize() == pieces.finalize() == compute_checksum(data)
    assert pieces.bytes_seen == len(data)


def test_incremental_checksum_rejects_update_after_finalize():
    calculator = IncrementalChecksumCalculator()
    calculator.update(b'abc')
    calculator.finalize()

    with pytest.raises(ValueError):
        calculator.update(b'def')


def test_hash_stream_reads_from_current_position():
    stream = io.BytesIO(b'headerBODY')
    stream.seek(6)
    assert hash_stream(stream, piece_size=2) == compute_checksum(b'BODY')
