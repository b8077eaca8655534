"""Shared pytest fixtures for all tests."""

import pytest
from fastapi.testclient import TestClient

from common.hashing import compute_checksum
from receiver.config import ReceiverSettings
from receiver.main import create_app
from sender.config import SenderSettings
from sender.receiver_client import ReceiverClient


@pytest.fixture
def receiver_settings(tmp_path):
    """
    Receiver settings rooted in a temporary directory with a forced chunk size of 4 bytes.
    """
    return ReceiverSettings(
        chunk_dir=tmp_path / 'chunks',
        output_dir=tmp_path / 'received',
        ledger_path=tmp_path / 'fileInfoDB.json',
        min_chunk_size=4,
        max_chunk_size=4,
        enable_reaper=False,
    )


@pytest.fixture
def receiver_app(receiver_settings):
    """Receiver FastAPI application wired to temporary storage."""
    return create_app(receiver_settings)


@pytest.fixture
def api(receiver_app):
    """Create FastAPI test client."""
    return TestClient(receiver_app)


@pytest.fixture
def sender_settings():
    """Default sender settings (no retries)."""
    return SenderSettings()


@pytest.fixture
def e2e_client(sender_settings, api):
    """ReceiverClient whose HTTP session talks to the in-process receiver."""
    client = ReceiverClient('http://testserver', sender_settings)
    client.session.close()
    client.session = api
    return client


@pytest.fixture
def ten_byte_file(tmp_path):
    """
    Create a 10-byte sample file.

    Returns:
        Path to sample file
    """
    file_path = tmp_path / 'source' / 'ten.bin'
    file_path.parent.mkdir()
    file_path.write_bytes(b'0123456789')
    return file_path


@pytest.fixture
def register_data(api):
    """Return a helper that registers bytes with the receiver and returns the JSON reply."""
    def _register(data=b'0123456789', file_name='ten.bin'):
        response = api.post('/register_file', json={
            'fileName': file_name,
            'fileSize': len(data),
            'fileHash': compute_checksum(data),
        })
        assert response.status_code == 200, response.text
        return response.json()

    return _register


@pytest.fixture
def upload_chunk(api):
    """Return a helper that POSTs one chunk with its Chunk-Hash header."""
    def _upload(upload_id, sequence_number, payload, digest=None):
        return api.post(
            f'/upload_chunk/{upload_id}/{sequence_number}',
            content=payload,
            headers={
                'Content-Type': 'application/octet-stream',
                'Chunk-Hash': digest if digest is not None else compute_checksum(payload),
            },
        )

    return _upload
