"""
Upstream session manager.

Owns the single authenticated upstream client shared by every request.
The session is created lazily on first use, reused until invalidated,
and renewed at most once per ``with_session`` call when an operation
fails with an auth-classified error.

State transitions (issue, swap, clear) are serialized by one asyncio
lock. Operations themselves run outside the lock, so concurrent requests
only wait on each other while a login or logout is in progress.
"""

from __future__ import annotations

import asyncio

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar

from sunsama_relay.core.constants import Settings, get_settings
from sunsama_relay.core.error_classifier import is_auth_error
from sunsama_relay.core.exceptions import ConfigurationError
from sunsama_relay.core.upstream import ClientFactory, Operation, load_client_factory, maybe_await
from sunsama_relay.models.schemas.session import SessionStatus
from sunsama_relay.utils.logger import logger

T = TypeVar("T")


@dataclass
class UpstreamSession:
    """Authenticated upstream client plus bookkeeping.

    A session is never re-authenticated in place. Renewal replaces it with
    a new instance and the old one is marked invalid.
    """

    client: Any
    generation: int
    established_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    valid: bool = True


class SessionManager:
    """Lazily authenticated, self-healing holder of the upstream session."""

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        settings_provider: Callable[[], Settings] = get_settings,
    ) -> None:
        self._client_factory = client_factory
        self._settings_provider = settings_provider
        self._session: UpstreamSession | None = None
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None and self._session.valid

    def status(self) -> SessionStatus:
        session = self._session if self.is_authenticated else None
        return SessionStatus(
            authenticated=session is not None,
            generation=self._generation,
            established_at=session.established_at if session else None,
        )

    async def authenticate(self) -> UpstreamSession:
        """Log in with the configured credentials and replace the current session.

        Raises:
            ConfigurationError: If credentials or the client factory are missing.
            Exception: Whatever the upstream login raised, unchanged.
        """
        async with self._lock:
            return await self._authenticate_locked()

    async def get_session(self) -> UpstreamSession:
        """Return the current session, authenticating first if there is none."""
        session = self._session
        if session is not None and session.valid:
            return session

        async with self._lock:
            # Another caller may have logged in while we waited
            if self._session is not None and self._session.valid:
                return self._session
            return await self._authenticate_locked()

    async def reset_session(self) -> None:
        """Drop the current session so the next request logs in again. Never raises."""
        async with self._lock:
            await self._teardown_locked()

    async def close(self) -> None:
        """Release the upstream session on shutdown."""
        await self.reset_session()
        logger.info("Upstream session manager closed")

    async def with_session(self, operation: Operation[T]) -> T:
        """Run *operation* with a live upstream client.

        If the operation fails with an auth-classified error, the session is
        reset, a fresh one is established and the operation is retried once.
        The outcome of that retry is final. Other failures propagate
        immediately without a retry.
        """
        session = await self.get_session()
        try:
            return await maybe_await(operation(session.client))
        except Exception as exc:
            if not is_auth_error(exc):
                raise
            logger.warning(
                "Auth error detected, re-authenticating",
                generation=session.generation,
                error_type=type(exc).__name__,
            )

        fresh = await self._renew(session)
        return await maybe_await(operation(fresh.client))

    # -- private helpers -----------------------------------------------------

    async def _renew(self, stale: UpstreamSession) -> UpstreamSession:
        async with self._lock:
            current = self._session
            if current is not None and current.valid and current is not stale:
                # A concurrent caller already replaced the rejected session
                return current
            await self._teardown_locked()
            return await self._authenticate_locked()

    async def _authenticate_locked(self) -> UpstreamSession:
        settings = self._settings_provider()
        email = settings.sunsama_email
        password = settings.sunsama_password.get_secret_value() if settings.sunsama_password else None
        if not email or not password:
            raise ConfigurationError(
                "SUNSAMA_EMAIL and SUNSAMA_PASSWORD environment variables are required",
                setting="sunsama_email" if not email else "sunsama_password",
            )

        factory = self._resolve_factory(settings)

        await self._teardown_locked()

        client = factory()
        await maybe_await(client.login(email, password))

        self._generation += 1
        self._session = UpstreamSession(client=client, generation=self._generation)
        logger.info("Sunsama client authenticated successfully", generation=self._generation)
        return self._session

    async def _teardown_locked(self) -> None:
        session = self._session
        self._session = None
        if session is None:
            return
        session.valid = False
        try:
            await maybe_await(session.client.logout())
        except Exception as e:
            logger.debug(f"Ignoring logout failure: {e}", generation=session.generation)

    def _resolve_factory(self, settings: Settings) -> ClientFactory:
        if self._client_factory is None:
            self._client_factory = load_client_factory(settings.upstream_client_factory)
        return self._client_factory


# Module-level state holder to avoid global statement (PLW0603)
_state: dict[str, SessionManager | None] = {"manager": None}


def get_session_manager() -> SessionManager:
    """Get the process-wide session manager, creating it on first use."""
    manager = _state["manager"]
    if manager is None:
        manager = SessionManager()
        _state["manager"] = manager
    return manager


def set_session_manager(manager: SessionManager | None) -> None:
    """Install (or clear, with None) the process-wide session manager."""
    _state["manager"] = manager
