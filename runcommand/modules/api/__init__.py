"""
API Module - Black Box Interface

Purpose: Response models for the HTTP layer
Interface: ReadyResponse, ExitCodeResponse, StatusResponse

The API layer only orchestrates - it contains no business logic.
"""

from .models import (
    CONFLICT_STATUS,
    SPAWNED_STATUS,
    ExitCodeResponse,
    ReadyResponse,
    StatusResponse,
)

__all__ = [
    "CONFLICT_STATUS",
    "SPAWNED_STATUS",
    "ExitCodeResponse",
    "ReadyResponse",
    "StatusResponse",
]
