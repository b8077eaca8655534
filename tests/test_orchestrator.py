"""End-to-end transfer tests: sender orchestrator against the in-process receiver."""

import io
import json
from unittest.mock import Mock

import pytest

from common.hashing import compute_checksum
from sender.exceptions import EmptyFileError, TransferError
from sender.orchestrator import SenderOrchestrator, iter_chunks


def test_iter_chunks_splits_remainder():
    chunks = list(iter_chunks(io.BytesIO(b'0123456789'), 'abc', 4))

    assert [len(c.payload) for c in chunks] == [4, 4, 2]
    assert [c.sequence_number for c in chunks] == [1, 2, 3]
    assert all(c.file_id == 'abc' for c in chunks)
    assert chunks[2].digest == compute_checksum(b'89')


def test_iter_chunks_exact_multiple():
    chunks = list(iter_chunks(io.BytesIO(b'01234567'), 'abc', 4))
    assert [c.size for c in chunks] == [4, 4]


def test_send_file_end_to_end(e2e_client, ten_byte_file, receiver_settings):
    sent = []
    upload = e2e_client.upload_chunk

    def recording_upload(upload_id, sequence_number, payload, digest):
        sent.append((sequence_number, len(payload)))
        return upload(upload_id, sequence_number, payload, digest)

    e2e_client.upload_chunk = recording_upload

    result = SenderOrchestrator(e2e_client).send_file(ten_byte_file)

    assert sent == [(1, 4), (2, 4), (3, 2)]
    assert result.chunk_size == 4
    assert result.chunks_sent == 3
    assert result.bytes_sent == 10
    assert result.file_hash == compute_checksum(b'0123456789')

    final_path = receiver_settings.output_dir / f'final_{result.upload_id}_ten.bin'
    assert final_path.read_bytes() == ten_byte_file.read_bytes()
    assert result.completion['finalPath'] == str(final_path)

    ledger = json.loads(receiver_settings.ledger_path.read_text())
    assert len(ledger) == 1
    assert ledger[0]['id'] == result.upload_id


def test_two_transfers_grow_ledger(e2e_client, ten_byte_file, receiver_settings):
    orchestrator = SenderOrchestrator(e2e_client)
    orchestrator.send_file(ten_byte_file)
    orchestrator.send_file(ten_byte_file)

    assert len(json.loads(receiver_settings.ledger_path.read_text())) == 2


def test_empty_file_rejected_before_network(tmp_path):
    empty = tmp_path / 'empty.bin'
    empty.write_bytes(b'')
    client = Mock()

    with pytest.raises(EmptyFileError):
        SenderOrchestrator(client).send_file(empty)

    assert client.method_calls == []


def test_missing_file_raises_os_error(tmp_path):
    client = Mock()
    with pytest.raises(FileNotFoundError):
        SenderOrchestrator(client).send_file(tmp_path / 'missing.bin')
    assert client.method_calls == []


def test_chunk_failure_aborts_transfer(tmp_path):
    source = tmp_path / 'ten.bin'
    source.write_bytes(b'0123456789')
    client = Mock()
    client.register_file.return_value = {'id': 'abc', 'chunkSize': 4, 'totalChunks': 3}
    client.upload_chunk.side_effect = [None, TransferError('upload_chunk', 'boom', status_code=500)]

    with pytest.raises(TransferError):
        SenderOrchestrator(client).send_file(source)

    assert client.upload_chunk.call_count == 2
    client.complete_upload.assert_not_called()


def test_plan_disagreement_aborts_before_complete(tmp_path):
    source = tmp_path / 'ten.bin'
    source.write_bytes(b'0123456789')
    client = Mock()
    client.register_file.return_value = {'id': 'abc', 'chunkSize': 4, 'totalChunks': 5}

    with pytest.raises(TransferError, match="planned 5"):
        SenderOrchestrator(client).send_file(source)

    client.complete_upload.assert_not_called()
