"""Custom exception classes for the Receiver."""


class TransferProtocolError(Exception):
    """
    Base exception class for all receiver-side protocol errors.
    """
    pass


class InvalidRequestError(TransferProtocolError):
    """
    Raised when a request is malformed (bad payload, bad sequence number).
    """
    pass


class MissingChunkHashError(InvalidRequestError):
    """
    Raised when a chunk upload arrives without its Chunk-Hash header.
    """
    pass


class ChecksumMismatchError(TransferProtocolError):
    """
    Raised when a chunk's computed digest differs from the claimed one.
    """
    pass


class FinalHashMismatchError(ChecksumMismatchError):
    """
    Raised when the reassembled file's digest differs from the registered hash.
    """
    pass


class UploadNotFoundError(TransferProtocolError):
    """
    Raised when no metadata is registered for an upload id.
    """
    pass


class MissingChunkError(TransferProtocolError):
    """
    Raised when a chunk needed for reassembly is not in storage.
    """
    pass


class DuplicateUploadError(TransferProtocolError):
    """
    Raised when an upload id is inserted into the metadata table twice.
    """
    pass
