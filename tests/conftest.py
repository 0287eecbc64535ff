"""Shared test fixtures for the Sunsama Relay test suite.

Provides an in-memory upstream client, settings builders and isolation
of the process-wide settings cache and session manager.
"""

from __future__ import annotations

import asyncio

from collections.abc import Generator
from typing import Any

import pytest

from sunsama_relay.core.constants import Settings, clear_settings_cache
from sunsama_relay.core.session_manager import SessionManager, set_session_manager

RELAY_ENV_VARS = (
    "API_KEY",
    "SUNSAMA_EMAIL",
    "SUNSAMA_PASSWORD",
    "UPSTREAM_CLIENT_FACTORY",
    "UPSTREAM_OPERATIONS",
    "CONFIG_HOT_RELOAD",
    "APP_ENV",
    "DEBUG",
)

# ============================================================================
# Test Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_process_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Start every test with no cached settings, no relay env vars and no shared manager."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    set_session_manager(None)
    yield
    clear_settings_cache()
    set_session_manager(None)


# ============================================================================
# Fake Upstream
# ============================================================================


class FakeUpstreamClient:
    """In-memory stand-in for the Sunsama client."""

    def __init__(
        self,
        login_error: Exception | None = None,
        logout_error: Exception | None = None,
        login_delay: float = 0.0,
    ) -> None:
        self.login_error = login_error
        self.logout_error = logout_error
        self.login_delay = login_delay
        self.login_calls: list[tuple[str, str]] = []
        self.logout_calls = 0
        self.logged_in = False

    async def login(self, email: str, password: str) -> None:
        self.login_calls.append((email, password))
        if self.login_delay:
            await asyncio.sleep(self.login_delay)
        if self.login_error:
            raise self.login_error
        self.logged_in = True

    def logout(self) -> None:
        self.logout_calls += 1
        self.logged_in = False
        if self.logout_error:
            raise self.logout_error

    async def get_user(self) -> dict[str, Any]:
        return {"id": "user-1", "email": "me@example.com"}

    async def get_tasks_backlog(self) -> list[dict[str, Any]]:
        return [{"id": "task-1", "text": "Write report"}]

    def get_streams(self, group_id: str | None = None) -> list[dict[str, Any]]:
        return [{"id": "stream-1", "group": group_id}]


class FakeClientFactory:
    """Callable factory recording every client it builds.

    ``login_errors`` is consumed one entry per built client; None means the
    login succeeds.
    """

    def __init__(
        self,
        login_errors: list[Exception | None] | None = None,
        logout_error: Exception | None = None,
        login_delay: float = 0.0,
    ) -> None:
        self.login_errors = list(login_errors or [])
        self.logout_error = logout_error
        self.login_delay = login_delay
        self.clients: list[FakeUpstreamClient] = []

    def __call__(self) -> FakeUpstreamClient:
        login_error = self.login_errors.pop(0) if self.login_errors else None
        client = FakeUpstreamClient(
            login_error=login_error,
            logout_error=self.logout_error,
            login_delay=self.login_delay,
        )
        self.clients.append(client)
        return client

    @property
    def login_count(self) -> int:
        return sum(len(c.login_calls) for c in self.clients)


# ============================================================================
# Settings and Manager Fixtures
# ============================================================================


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "sunsama_email": "me@example.com",
        "sunsama_password": "hunter2",
        "api_key": "s3cr3t",
        "upstream_operations": "get_user,get_tasks_backlog,get_streams",
        "config_hot_reload": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def session_manager(client_factory: FakeClientFactory, settings: Settings) -> SessionManager:
    return SessionManager(client_factory=client_factory, settings_provider=lambda: settings)
