"""
Session status schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SessionStatus(BaseModel):
    """Read-only snapshot of the upstream session held by the relay."""

    authenticated: bool = Field(..., description="Whether a valid upstream session is currently held")
    generation: int = Field(..., description="Number of successful logins since process start")
    established_at: datetime | None = Field(default=None, description="When the current session was created")


class SessionResetResponse(BaseModel):
    """Response for a manual session reset."""

    reset: bool = True
    session: SessionStatus
