from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sunsama_relay import __version__
from sunsama_relay.api.middleware.exception_handlers import register_exception_handlers
from sunsama_relay.api.middleware.request_context import RequestContextMiddleware
from sunsama_relay.api.routes import api_router, health
from sunsama_relay.core.constants import get_settings
from sunsama_relay.core.session_manager import SessionManager, set_session_manager
from sunsama_relay.utils.logger import configure_uvicorn_logging, logger

settings = get_settings()

if settings.debug:
    from sunsama_relay.core.constants import _get_env_files

    logger.info(f"Env files: {[f.name for f in _get_env_files()]}")
    logger.info(f"Settings: app_env={settings.app_env}, operations={settings.upstream_operations_list}")

# Configure uvicorn logging at module level to ensure workers use it
configure_uvicorn_logging()


def _warn_on_missing_config() -> None:
    """Report missing configuration at startup without refusing to start."""
    missing = [
        env_name
        for env_name, value in (
            ("SUNSAMA_EMAIL", settings.sunsama_email),
            ("SUNSAMA_PASSWORD", settings.sunsama_password),
            ("UPSTREAM_CLIENT_FACTORY", settings.upstream_client_factory),
            ("API_KEY", settings.api_key),
        )
        if not value
    ]
    if missing:
        logger.warning(f"Missing configuration, affected requests will fail: {', '.join(missing)}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: install the shared session manager, release it on shutdown."""
    _warn_on_missing_config()

    # Login is lazy: the first relayed request pays for it
    manager = SessionManager()
    set_session_manager(manager)
    app.state.session_manager = manager
    logger.info(f"Starting sunsama-relay on port {settings.port}...")

    try:
        yield
    finally:
        logger.info("Initiating graceful shutdown sequence")
        await manager.close()
        set_session_manager(None)


app = FastAPI(
    title="Sunsama Relay",
    description="""
## Sunsama Relay

Authenticated HTTP relay that forwards calls to Sunsama through one
shared, self-renewing upstream session.

### Authentication
All `/api` endpoints require `Authorization: Bearer <API_KEY>` (a bare
`<API_KEY>` is accepted too). `/health` is public.
""",
    version=__version__,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Health", "description": "Liveness check"},
        {"name": "Session", "description": "Inspect or reset the shared upstream session"},
        {"name": "Operations", "description": "Relay allowlisted upstream operations"},
    ],
)

register_exception_handlers(app)

# Middleware is executed in reverse order of registration
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=settings.cors_methods_list,
    allow_headers=settings.cors_headers_list,
)

app.include_router(health.router)
app.include_router(api_router, prefix="/api")


def run() -> None:
    """Console entry point: serve the relay with uvicorn."""
    import uvicorn

    uvicorn.run(
        "sunsama_relay.api.main:app",
        host=settings.api_host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
