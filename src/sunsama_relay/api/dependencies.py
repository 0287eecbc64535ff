from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from sunsama_relay.core.constants import Settings, get_settings
from sunsama_relay.core.session_manager import SessionManager, get_session_manager


def get_app_settings() -> Settings:
    """Provide application settings via dependency injection.

    With CONFIG_HOT_RELOAD=true, settings are reloaded on each request to
    pick up rotated credentials without restart.
    """
    return get_settings()


def get_upstream_sessions() -> SessionManager:
    """Provide the process-wide upstream session manager."""
    return get_session_manager()


# Type aliases for cleaner route signatures
AppSettings = Annotated[Settings, Depends(get_app_settings)]
UpstreamSessions = Annotated[SessionManager, Depends(get_upstream_sessions)]
