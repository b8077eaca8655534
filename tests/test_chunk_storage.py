"""Tests for on-disk chunk storage."""

from helpers import put_chunk
from receiver.chunk_storage import ChunkStorage, parse_chunk_filename


def test_chunk_path_naming(tmp_path):
    storage = ChunkStorage(tmp_path / 'chunks')
    assert storage.get_chunk_path('abc', 3) == tmp_path / 'chunks' / 'abc_part_3'


def test_write_stream_delete(tmp_path):
    storage = ChunkStorage(tmp_path / 'chunks')

    put_chunk(storage, 'abc', 1, b'data')

    assert storage.chunk_exists('abc', 1)
    assert b''.join(storage.read_chunk_streaming('abc', 1, piece_size=3)) == b'data'
    assert list(storage.read_chunk_streaming('abc', 1, piece_size=3)) == [b'dat', b'a']

    assert storage.delete_chunk('abc', 1) is True
    assert storage.delete_chunk('abc', 1) is False
    assert not storage.chunk_exists('abc', 1)


def test_open_for_write_creates_directory_and_overwrites(tmp_path):
    storage = ChunkStorage(tmp_path / 'chunks')
    put_chunk(storage, 'abc', 1, b'old-content')

    with storage.open_for_write('abc', 1) as f:
        f.write(b'new')

    assert storage.get_chunk_path('abc', 1).read_bytes() == b'new'


def test_list_chunks(tmp_path):
    storage = ChunkStorage(tmp_path / 'chunks')
    assert storage.list_all_chunks() == []

    put_chunk(storage, 'abc', 2, b'b')
    put_chunk(storage, 'abc', 1, b'a')
    put_chunk(storage, 'xyz', 1, b'z')
    (tmp_path / 'chunks' / 'stray.txt').write_text('ignored')

    assert sorted(storage.list_all_chunks()) == [('abc', 1), ('abc', 2), ('xyz', 1)]
    assert storage.list_chunks_for_upload('abc') == [1, 2]

    assert storage.delete_all_for_upload('abc') == 2
    assert storage.list_all_chunks() == [('xyz', 1)]


def test_parse_chunk_filename():
    assert parse_chunk_filename('abc_part_12') == ('abc', 12)
    assert parse_chunk_filename('a_part_b_part_3') == ('a_part_b', 3)
    assert parse_chunk_filename('abc_part_') is None
    assert parse_chunk_filename('_part_1') is None
    assert parse_chunk_filename('random.bin') is None
