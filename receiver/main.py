"""Entry point for the Receiver service."""

import argparse
import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.logging_config import get_logger, setup_logging
from receiver.chunk_planner import ChunkPlanner
from receiver.chunk_storage import ChunkStorage
from receiver.cleanup_task import ExpiredUploadReaper
from receiver.config import RECEIVER_HOST, RECEIVER_PORT, ReceiverSettings
from receiver.exceptions import (
    ChecksumMismatchError,
    DuplicateUploadError,
    FinalHashMismatchError,
    InvalidRequestError,
    MissingChunkError,
    MissingChunkHashError,
    TransferProtocolError,
    UploadNotFoundError,
)
from receiver.ledger import CompletionLedger
from receiver.metadata_store import UploadMetadataStore
from receiver.routes.upload_routes import router as upload_router
from receiver.services import ChunkReceiveService, ReassemblyService, RegistrationService

logger = get_logger('receiver')


def _error_response(request: Request, status_code: int, code: str, detail: str, level: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    log = logger.error if level == 'error' else logger.warning
    log(f"{code}: {detail} [request_id={request_id}] path={request.url.path}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "code": code}
    )


def _register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return _error_response(
            request, status.HTTP_400_BAD_REQUEST, "INVALID_REQUEST",
            errors or "Invalid request", 'warning'
        )

    @app.exception_handler(MissingChunkHashError)
    async def missing_chunk_hash_handler(request: Request, exc: MissingChunkHashError):
        return _error_response(request, status.HTTP_400_BAD_REQUEST, "MISSING_CHUNK_HASH", str(exc), 'warning')

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        return _error_response(request, status.HTTP_400_BAD_REQUEST, "INVALID_REQUEST", str(exc), 'warning')

    @app.exception_handler(FinalHashMismatchError)
    async def final_hash_mismatch_handler(request: Request, exc: FinalHashMismatchError):
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "FINAL_HASH_MISMATCH", str(exc), 'error'
        )

    @app.exception_handler(ChecksumMismatchError)
    async def checksum_mismatch_handler(request: Request, exc: ChecksumMismatchError):
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "CHECKSUM_MISMATCH", str(exc), 'error'
        )

    @app.exception_handler(UploadNotFoundError)
    async def upload_not_found_handler(request: Request, exc: UploadNotFoundError):
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "METADATA_NOT_FOUND", str(exc), 'error'
        )

    @app.exception_handler(MissingChunkError)
    async def missing_chunk_handler(request: Request, exc: MissingChunkError):
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "MISSING_CHUNK", str(exc), 'error'
        )

    @app.exception_handler(DuplicateUploadError)
    async def duplicate_upload_handler(request: Request, exc: DuplicateUploadError):
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "DUPLICATE_UPLOAD", str(exc), 'error'
        )

    @app.exception_handler(TransferProtocolError)
    async def protocol_error_handler(request: Request, exc: TransferProtocolError):
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", str(exc), 'error'
        )

    @app.exception_handler(OSError)
    async def storage_error_handler(request: Request, exc: OSError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(
            f"Storage error: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Storage error: {exc}", "code": "STORAGE_ERROR"}
        )


def create_app(settings: Optional[ReceiverSettings] = None) -> FastAPI:
    """
    Build the receiver application with its collaborators wired onto app.state.

    Args:
        settings: Receiver settings (defaults from CHUNKRELAY_* environment)

    Returns:
        FastAPI application
    """
    settings = settings or ReceiverSettings()

    app = FastAPI(
        title="chunkrelay Receiver",
        description="Chunked file-transfer receiver: register, upload chunks, complete",
        version="1.0.0"
    )

    store = UploadMetadataStore()
    storage = ChunkStorage(settings.chunk_dir)
    ledger = CompletionLedger(settings.ledger_path)
    planner = ChunkPlanner(settings.min_chunk_size, settings.max_chunk_size)

    app.state.settings = settings
    app.state.metadata_store = store
    app.state.chunk_storage = storage
    app.state.ledger = ledger
    app.state.registration_service = RegistrationService(store, planner)
    app.state.chunk_service = ChunkReceiveService(storage)
    app.state.reassembly_service = ReassemblyService(store, storage, ledger, settings.output_dir)
    app.state.reaper = ExpiredUploadReaper(
        store,
        storage,
        lease_seconds=settings.upload_lease_seconds,
        interval_seconds=settings.reaper_interval_seconds,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

        response = await call_next(request)

        duration = time.time() - start_time

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id

        return response

    @app.on_event("startup")
    async def startup_event():
        """
        Prepare storage directories and start the reaper.
        """
        logger.info("Receiver service starting up...")
        storage.ensure_directory()
        settings.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            f"Chunk dir={settings.chunk_dir} output dir={settings.output_dir} ledger={settings.ledger_path}"
        )

        if settings.enable_reaper:
            await app.state.reaper.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Receiver service shutting down...")
        await app.state.reaper.stop()

    _register_exception_handlers(app)

    app.include_router(upload_router)

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {"message": "chunkrelay Receiver API", "status": "running"}

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "receiver",
            "active_uploads": len(store),
        }

    return app


app = create_app()


def main() -> None:
    """
    Start the receiver with uvicorn.

    Usage: chunkrelay-receiver [host] [port] [--debug]
    """
    parser = argparse.ArgumentParser(prog="chunkrelay-receiver", description="Run the chunkrelay receiver")
    parser.add_argument("host", nargs="?", default=RECEIVER_HOST, help="Interface to bind")
    parser.add_argument("port", nargs="?", type=int, default=RECEIVER_PORT, help="Port to listen on")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging('receiver', log_level='DEBUG' if args.debug else None)
    logger.info(f"Starting receiver on {args.host}:{args.port}")

    uvicorn.run(
        "receiver.main:app",
        host=args.host,
        port=args.port,
    )


if __name__ == "__main__":
    main()
