"""Project-wide constants (chunk bounds, header names, default paths)."""

MIN_CHUNK_SIZE_BYTES: int = 100 * 1024  # 100 KiB lower bound for a planned chunk
MAX_CHUNK_SIZE_BYTES: int = 4 * 1024 * 1024  # 4 MiB upper bound for a planned chunk

STREAM_PIECE_SIZE_BYTES: int = 64 * 1024

CHUNK_HASH_HEADER: str = "Chunk-Hash"
CHUNK_CONTENT_TYPE: str = "application/octet-stream"

REGISTER_PATH: str = "/register_file"
UPLOAD_CHUNK_PATH: str = "/upload_chunk"
COMPLETE_UPLOAD_PATH: str = "/complete_upload"

FINAL_FILE_PREFIX: str = "final_"
CHUNK_FILE_INFIX: str = "_part_"

DEFAULT_RECEIVER_PORT: int = 8000
DEFAULT_CHUNK_STORAGE_PATH: str = "./data/chunks"
DEFAULT_OUTPUT_PATH: str = "."
DEFAULT_LEDGER_PATH: str = "./fileInfoDB.json"

DEFAULT_UPLOAD_LEASE_SECONDS: int = 24 * 3600
DEFAULT_REAPER_INTERVAL_SECONDS: int = 3600
