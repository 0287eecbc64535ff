"""
Health check schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness response, served without authentication."""

    status: str = Field(default="ok", description="Always 'ok' while the process is serving")
    timestamp: str = Field(..., description="Current server time (ISO 8601, UTC)")
