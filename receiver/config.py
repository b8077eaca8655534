"""Configuration settings for the Receiver server."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from common.constants import (
    DEFAULT_CHUNK_STORAGE_PATH,
    DEFAULT_LEDGER_PATH,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_RECEIVER_PORT,
    DEFAULT_REAPER_INTERVAL_SECONDS,
    DEFAULT_UPLOAD_LEASE_SECONDS,
    MAX_CHUNK_SIZE_BYTES,
    MIN_CHUNK_SIZE_BYTES,
)


RECEIVER_HOST = os.environ.get("CHUNKRELAY_HOST", "0.0.0.0")

RECEIVER_PORT = int(os.environ.get("CHUNKRELAY_PORT", str(DEFAULT_RECEIVER_PORT)))

CHUNK_STORAGE_PATH = os.environ.get("CHUNKRELAY_CHUNK_DIR", DEFAULT_CHUNK_STORAGE_PATH)

OUTPUT_PATH = os.environ.get("CHUNKRELAY_OUTPUT_DIR", DEFAULT_OUTPUT_PATH)

LEDGER_PATH = os.environ.get("CHUNKRELAY_LEDGER_PATH", DEFAULT_LEDGER_PATH)

MIN_CHUNK_SIZE = int(os.environ.get("CHUNKRELAY_MIN_CHUNK_SIZE", str(MIN_CHUNK_SIZE_BYTES)))

MAX_CHUNK_SIZE = int(os.environ.get("CHUNKRELAY_MAX_CHUNK_SIZE", str(MAX_CHUNK_SIZE_BYTES)))

UPLOAD_LEASE_SECONDS = int(
    os.environ.get("CHUNKRELAY_UPLOAD_LEASE_SECONDS", str(DEFAULT_UPLOAD_LEASE_SECONDS))
)

REAPER_INTERVAL_SECONDS = int(
    os.environ.get("CHUNKRELAY_REAPER_INTERVAL_SECONDS", str(DEFAULT_REAPER_INTERVAL_SECONDS))
)


@dataclass
class ReceiverSettings:
    """
    Runtime settings for one receiver application instance.

    Defaults come from the CHUNKRELAY_* environment variables above; tests
    build their own instance pointing at temporary directories.
    """
    chunk_dir: Path = field(default_factory=lambda: Path(CHUNK_STORAGE_PATH))
    output_dir: Path = field(default_factory=lambda: Path(OUTPUT_PATH))
    ledger_path: Path = field(default_factory=lambda: Path(LEDGER_PATH))
    min_chunk_size: int = MIN_CHUNK_SIZE
    max_chunk_size: int = MAX_CHUNK_SIZE
    upload_lease_seconds: int = UPLOAD_LEASE_SECONDS
    reaper_interval_seconds: int = REAPER_INTERVAL_SECONDS
    enable_reaper: bool = True
