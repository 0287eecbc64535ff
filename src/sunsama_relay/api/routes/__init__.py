"""
API Router - Aggregates all relay endpoints.

Usage in main.py:
    from sunsama_relay.api.routes import api_router, health
    app.include_router(health.router)
    app.include_router(api_router, prefix="/api")
"""

from fastapi import APIRouter, Depends

from sunsama_relay.api.middleware.auth import require_api_key
from sunsama_relay.api.routes import health, operations, session

# Everything under /api sits behind the API key gate
api_router = APIRouter(dependencies=[Depends(require_api_key)])

api_router.include_router(
    session.router,
    prefix="/session",
    tags=["Session"],
)

api_router.include_router(
    operations.router,
    prefix="/operations",
    tags=["Operations"],
)

__all__ = ["api_router", "health"]
