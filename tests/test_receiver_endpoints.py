"""HTTP-level tests for the receiver API."""

import json

from common.hashing import compute_checksum


class TestServiceEndpoints:

    def test_root(self, api):
        response = api.get('/')
        assert response.status_code == 200
        assert response.json()['status'] == 'running'

    def test_health(self, api, register_data):
        register_data()
        response = api.get('/health')
        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'healthy'
        assert data['service'] == 'receiver'
        assert data['active_uploads'] == 1

    def test_request_id_header(self, api):
        response = api.get('/health')
        assert response.headers.get('X-Request-ID')


class TestRegisterFile:

    def test_register_returns_plan(self, api):
        data = b'0123456789'
        response = api.post('/register_file', json={
            'fileName': 'ten.bin',
            'fileSize': 10,
            'fileHash': compute_checksum(data),
        })

        assert response.status_code == 200
        body = response.json()
        assert body['id']
        assert body['fileName'] == 'ten.bin'
        assert body['fileSize'] == 10
        assert body['fileHash'] == compute_checksum(data)
        assert body['chunkSize'] == 4
        assert body['totalChunks'] == 3

    def test_register_ids_are_unique(self, register_data):
        ids = {register_data()['id'] for _ in range(5)}
        assert len(ids) == 5

    def test_register_malformed_json(self, api):
        response = api.post(
            '/register_file',
            content=b'{not json',
            headers={'Content-Type': 'application/json'},
        )
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'

    def test_register_missing_field(self, api):
        response = api.post('/register_file', json={'fileName': 'ten.bin', 'fileSize': 10})
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'

    def test_register_zero_size(self, api):
        response = api.post('/register_file', json={
            'fileName': 'empty.bin',
            'fileSize': 0,
            'fileHash': compute_checksum(b''),
        })
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'


class TestUploadChunk:

    def test_upload_chunk_stores_file(self, api, register_data, upload_chunk, receiver_settings):
        upload_id = register_data()['id']

        response = upload_chunk(upload_id, 1, b'0123')

        assert response.status_code == 200
        assert response.json() == {'id': upload_id, 'sequenceNumber': 1, 'size': 4}
        assert (receiver_settings.chunk_dir / f'{upload_id}_part_1').read_bytes() == b'0123'

    def test_uppercase_digest_accepted(self, register_data, upload_chunk):
        upload_id = register_data()['id']
        response = upload_chunk(upload_id, 1, b'0123', digest=compute_checksum(b'0123').upper())
        assert response.status_code == 200

    def test_missing_chunk_hash(self, api, register_data):
        upload_id = register_data()['id']
        response = api.post(
            f'/upload_chunk/{upload_id}/1',
            content=b'0123',
            headers={'Content-Type': 'application/octet-stream'},
        )
        assert response.status_code == 400
        assert response.json()['code'] == 'MISSING_CHUNK_HASH'

    def test_non_numeric_sequence_number(self, register_data, upload_chunk):
        upload_id = register_data()['id']
        response = upload_chunk(upload_id, 'abc', b'0123')
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'

    def test_zero_sequence_number(self, register_data, upload_chunk):
        upload_id = register_data()['id']
        response = upload_chunk(upload_id, 0, b'0123')
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_REQUEST'

    def test_tampered_chunk_rejected_and_deleted(self, register_data, upload_chunk, receiver_settings):
        upload_id = register_data()['id']

        response = upload_chunk(upload_id, 1, b'0123', digest=compute_checksum(b'9999'))

        assert response.status_code == 500
        assert response.json()['code'] == 'CHECKSUM_MISMATCH'
        assert not (receiver_settings.chunk_dir / f'{upload_id}_part_1').exists()

    def test_resent_chunk_replaces_previous(self, register_data, upload_chunk, receiver_settings):
        upload_id = register_data()['id']
        upload_chunk(upload_id, 1, b'xxxxxxxx')
        upload_chunk(upload_id, 1, b'0123')
        assert (receiver_settings.chunk_dir / f'{upload_id}_part_1').read_bytes() == b'0123'


class TestCompleteUpload:

    def test_complete_upload(self, api, register_data, upload_chunk, receiver_settings):
        upload_id = register_data()['id']
        for n, payload in enumerate([b'0123', b'4567', b'89'], start=1):
            assert upload_chunk(upload_id, n, payload).status_code == 200

        response = api.get(f'/complete_upload/{upload_id}')

        assert response.status_code == 200, response.text
        body = response.json()
        assert body['id'] == upload_id
        assert body['completedAt']
        final_path = receiver_settings.output_dir / f'final_{upload_id}_ten.bin'
        assert body['finalPath'] == str(final_path)
        assert final_path.read_bytes() == b'0123456789'

        ledger = json.loads(receiver_settings.ledger_path.read_text())
        assert [entry['id'] for entry in ledger] == [upload_id]

    def test_second_complete_keeps_verified_file(self, api, register_data, upload_chunk, receiver_settings):
        upload_id = register_data()['id']
        for n, payload in enumerate([b'0123', b'4567', b'89'], start=1):
            upload_chunk(upload_id, n, payload)
        final_path = api.get(f'/complete_upload/{upload_id}').json()['finalPath']

        response = api.get(f'/complete_upload/{upload_id}')

        assert response.status_code == 500
        assert response.json()['code'] == 'MISSING_CHUNK'
        with open(final_path, 'rb') as f:
            assert f.read() == b'0123456789'
        assert len(json.loads(receiver_settings.ledger_path.read_text())) == 1

    def test_complete_unknown_upload(self, api):
        response = api.get('/complete_upload/does-not-exist')
        assert response.status_code == 500
        assert response.json()['code'] == 'METADATA_NOT_FOUND'

    def test_complete_with_missing_chunk(self, api, register_data, upload_chunk):
        upload_id = register_data()['id']
        upload_chunk(upload_id, 1, b'0123')
        upload_chunk(upload_id, 3, b'89')

        response = api.get(f'/complete_upload/{upload_id}')

        assert response.status_code == 500
        assert response.json()['code'] == 'MISSING_CHUNK'

    def test_complete_with_wrong_final_hash(self, api, upload_chunk):
        response = api.post('/register_file', json={
            'fileName': 'ten.bin',
            'fileSize': 10,
            'fileHash': compute_checksum(b'something else'),
        })
        upload_id = response.json()['id']
        for n, payload in enumerate([b'0123', b'4567', b'89'], start=1):
            upload_chunk(upload_id, n, payload)

        response = api.get(f'/complete_upload/{upload_id}')

        assert response.status_code == 500
        assert response.json()['code'] == 'FINAL_HASH_MISMATCH'


def test_openapi_documents_error_model(api):
    schema = api.get('/openapi.json').json()
    responses = schema['paths']['/complete_upload/{upload_id}']['get']['responses']
    assert '500' in responses
    assert 'ErrorResponse' in schema['components']['schemas']
