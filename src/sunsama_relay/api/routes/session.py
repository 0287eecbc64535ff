"""
Upstream session endpoints.

Lets operators inspect the shared upstream session and force a fresh
login (for example after rotating SUNSAMA_PASSWORD) without restarting
the relay.
"""

from __future__ import annotations

from fastapi import APIRouter

from sunsama_relay.api.dependencies import UpstreamSessions
from sunsama_relay.core.constants import reload_settings
from sunsama_relay.models.schemas.session import SessionResetResponse, SessionStatus
from sunsama_relay.utils.logger import logger

router = APIRouter()


@router.get(
    "",
    response_model=SessionStatus,
    summary="Session status",
    description="Report whether the relay currently holds a valid upstream session.",
)
async def get_session_status(sessions: UpstreamSessions) -> SessionStatus:
    return sessions.status()


@router.post(
    "/reset",
    response_model=SessionResetResponse,
    summary="Reset upstream session",
    description="Reload configuration and drop the upstream session. The next relayed call logs in again.",
)
async def reset_session(sessions: UpstreamSessions) -> SessionResetResponse:
    reload_settings()
    await sessions.reset_session()
    logger.info("Upstream session reset on request")
    return SessionResetResponse(session=sessions.status())
