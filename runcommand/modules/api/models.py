"""
Run Command Service response models.

These models define the JSON bodies returned by the HTTP layer.
"""

from pydantic import BaseModel, Field

SPAWNED_STATUS = "Process spawned successfully"
CONFLICT_STATUS = "job still running in background"


class ReadyResponse(BaseModel):
    """Readiness check response."""

    status: str = Field(default="ok", description="Service readiness")


class ExitCodeResponse(BaseModel):
    """Result of a foreground execution."""

    exit_code: int = Field(..., description="Exit code of the command", ge=0)


class StatusResponse(BaseModel):
    """Result of a background trigger."""

    status: str = Field(..., description="Human readable trigger status")
