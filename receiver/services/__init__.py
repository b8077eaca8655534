"""Service layer for the transfer protocol."""

from receiver.services.registration_service import RegistrationService
from receiver.services.chunk_service import ChunkReceiveService
from receiver.services.reassembly_service import ReassemblyService

__all__ = [
    "RegistrationService",
    "ChunkReceiveService",
    "ReassemblyService",
]
