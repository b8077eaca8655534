"""HTTP client for the receiver's upload protocol endpoints."""

import time
import uuid
from typing import Optional

import httpx

from common.constants import (
    CHUNK_CONTENT_TYPE,
    CHUNK_HASH_HEADER,
    COMPLETE_UPLOAD_PATH,
    REGISTER_PATH,
    UPLOAD_CHUNK_PATH,
)
from common.logging_config import get_logger
from sender.config import SenderSettings
from sender.exceptions import TransferError

logger = get_logger(__name__)


class ReceiverClient:
    """HTTP client for the receiver API with optional retry and error mapping."""

    def __init__(self, base_url: str, settings: Optional[SenderSettings] = None):
        """
        Initialize receiver client.

        Args:
            base_url: Receiver base URL, e.g. "http://localhost:8000"
            settings: Timeout and retry settings (defaults when omitted)
        """
        self.settings = settings or SenderSettings()
        self.session = httpx.Client(
            base_url=base_url,
            timeout=self.settings.timeout
        )
        self.request_id = None
        logger.info(f"Initialized ReceiverClient [base_url={base_url}]")

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ReceiverClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _request_with_retry(
        self,
        step: str,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request, retrying 5xx responses and network failures.

        Retries are off unless max_retries is configured above zero.

        Args:
            step: Protocol step name used in error reports
            method: HTTP method (GET, POST)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses settings default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            TransferError: If the receiver cannot be reached
        """
        max_retries = max_retries if max_retries is not None else self.settings.max_retries
        backoff = self.settings.retry_backoff_multiplier

        last_exception = None

        self.request_id = str(uuid.uuid4())
        headers = dict(kwargs.pop('headers', None) or {})
        headers['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, headers=headers, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error: {method} {endpoint} error={e} [request_id={self.request_id}]"
                )

        if isinstance(last_exception, httpx.TimeoutException):
            raise TransferError(step, "Request timed out. Receiver may be overloaded.") from last_exception
        raise TransferError(step, "Cannot connect to receiver. Is it running?") from last_exception

    def _raise_for_error(self, step: str, response: httpx.Response) -> None:
        """
        Convert a non-200 response into a TransferError.

        Args:
            step: Protocol step name
            response: HTTP response object

        Raises:
            TransferError: If the response status is not 200
        """
        if response.status_code == 200:
            return

        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code')
        except ValueError:
            detail = response.text or 'Unknown error'
            code = None

        logger.error(
            f"Receiver returned non-OK status: {response.status_code} code={code} detail={detail} "
            f"[request_id={self.request_id}]"
        )
        raise TransferError(step, str(detail), status_code=response.status_code, code=code)

    def register_file(self, file_name: str, file_size: int, file_hash: str) -> dict:
        """
        Register a file with the receiver.

        Args:
            file_name: Base name of the file
            file_size: Size in bytes
            file_hash: Hex SHA-256 digest of the whole file

        Returns:
            Registration dictionary with id, chunkSize, totalChunks (plus echoed metadata)

        Raises:
            TransferError: On non-OK response, malformed reply or network failure
        """
        response = self._request_with_retry(
            'register',
            'POST',
            REGISTER_PATH,
            json={"fileName": file_name, "fileSize": file_size, "fileHash": file_hash},
        )
        self._raise_for_error('register', response)

        try:
            registration = response.json()
            chunk_size = int(registration['chunkSize'])
            total_chunks = int(registration['totalChunks'])
            upload_id = str(registration['id'])
        except (ValueError, KeyError, TypeError) as e:
            raise TransferError('register', f"Malformed registration response: {e}") from e

        if chunk_size < 1:
            raise TransferError('register', f"Receiver returned invalid chunk size {chunk_size}")

        logger.info(
            f"Registered '{file_name}' as {upload_id} (chunk_size={chunk_size}, total_chunks={total_chunks})"
        )
        return registration

    def upload_chunk(self, upload_id: str, sequence_number: int, payload: bytes, digest: str) -> None:
        """
        Send one chunk; returns only after the receiver acknowledged it.

        Args:
            upload_id: Upload id from registration
            sequence_number: 1-indexed chunk number
            payload: Raw chunk bytes
            digest: Hex SHA-256 digest of payload

        Raises:
            TransferError: On non-OK response or network failure
        """
        endpoint = f"{UPLOAD_CHUNK_PATH}/{upload_id}/{sequence_number}"
        response = self._request_with_retry(
            'upload_chunk',
            'POST',
            endpoint,
            content=payload,
            headers={
                'Content-Type': CHUNK_CONTENT_TYPE,
                CHUNK_HASH_HEADER: digest,
            },
        )
        self._raise_for_error('upload_chunk', response)
        logger.debug(f"Chunk {sequence_number} accepted ({len(payload)} bytes, hash {digest})")

    def complete_upload(self, upload_id: str) -> dict:
        """
        Ask the receiver to reassemble and verify the upload.

        Args:
            upload_id: Upload id from registration

        Returns:
            Completion record dictionary reported by the receiver

        Raises:
            TransferError: On non-OK response or network failure
        """
        response = self._request_with_retry('complete', 'GET', f"{COMPLETE_UPLOAD_PATH}/{upload_id}")
        self._raise_for_error('complete', response)
        try:
            return response.json()
        except ValueError:
            return {"id": upload_id}
