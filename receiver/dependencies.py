"""FastAPI dependency providers reading the services wired onto app.state."""

from fastapi import Request

from receiver.services import ChunkReceiveService, ReassemblyService, RegistrationService


def get_registration_service(request: Request) -> RegistrationService:
    return request.app.state.registration_service


def get_chunk_service(request: Request) -> ChunkReceiveService:
    return request.app.state.chunk_service


def get_reassembly_service(request: Request) -> ReassemblyService:
    return request.app.state.reassembly_service
