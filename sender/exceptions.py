"""Exceptions raised by the sender."""

from typing import Optional


class SenderError(Exception):
    """
    Base exception class for sender-side failures.
    """
    pass


class EmptyFileError(SenderError):
    """
    Raised when the file to send has zero bytes; no request is made.
    """
    pass


class TransferError(SenderError):
    """
    Raised when a protocol step fails at the receiver or on the network.

    Attributes:
        step: Protocol step that failed ('register', 'upload_chunk', 'complete')
        status_code: HTTP status, or None for network failures
        code: Error code reported by the receiver (e.g. 'CHECKSUM_MISMATCH')
    """

    def __init__(
        self,
        step: str,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.step = step
        self.status_code = status_code
        self.code = code
        self.message = message

    def __str__(self) -> str:
        status = f" (status {self.status_code})" if self.status_code is not None else ""
        return f"{self.step} failed{status}: {self.message}"


class ConfigError(SenderError):
    """
    Raised when the sender config file cannot be used.
    """
    pass
