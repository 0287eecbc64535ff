"""
Health check endpoint (no authentication required).
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter

from sunsama_relay.models.schemas.health import HealthResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness probe. Does not touch the upstream session.",
    tags=["Health"],
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(UTC).isoformat())
