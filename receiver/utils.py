"""Utility helper functions for the Receiver."""

import uuid
from pathlib import PurePath

from common.constants import FINAL_FILE_PREFIX


def generate_upload_id() -> str:
    """
    Generate a new upload id from 128 random bits (UUID4, hex form).

    Returns:
        32-character hex string
    """
    return uuid.uuid4().hex


def final_file_name(upload_id: str, file_name: str) -> str:
    """
    Destination file name for a reassembled upload.

    The upload id keeps two uploads of the same file name from sharing a
    destination. Only the last path component of the sender-supplied name
    is kept, so a name such as '../etc/passwd' cannot escape the output
    directory.

    Args:
        upload_id: Upload identity
        file_name: Original file name as registered

    Returns:
        'final_<upload_id>_<basename>'
    """
    base = PurePath(file_name.replace('\\', '/')).name or "unnamed"
    return f"{FINAL_FILE_PREFIX}{upload_id}_{base}"
