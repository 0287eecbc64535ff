"""
Constants and configuration for Sunsama Relay.
Centralizes default values and environment-driven settings.
Includes Pydantic validation for environment variables.
"""

from __future__ import annotations

import os
import threading

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import (
    DotEnvSettingsSource,
    PydanticBaseSettingsSource,
)

# ============================================================================
# Project Paths
# ============================================================================

#: Project root directory (parent of src/)
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

#: Directory for rotating JSON log files
LOG_DIR = PROJECT_ROOT / "logs"

# ============================================================================
# Logging
# ============================================================================

LOG_MAX_SIZE = 10 * 1024 * 1024  # 10MB per file
LOG_BACKUP_COUNT_ERRORS = 3

# ============================================================================
# Upstream Session
# ============================================================================

#: Case-insensitive message fragments that mark a failure as session/auth related.
AUTH_ERROR_MESSAGE_MARKERS: tuple[str, ...] = (
    "unauthorized",
    "unauthenticated",
    "session",
    "login required",
)

#: Upstream client methods that may never be relayed as named operations.
RESERVED_OPERATIONS: frozenset[str] = frozenset({"login", "logout"})

#: Accepted Authorization header prefix (the bare token form is accepted too)
BEARER_PREFIX = "Bearer "

# ============================================================================
# Environment Configuration with Pydantic Validation
# ============================================================================

#: Valid environment names for configuration loading
Environment = Literal["development", "production", "test"]


def _get_env_files() -> list[Path]:
    """Determine which .env files to load based on APP_ENV.

    Load order (later files override earlier - pydantic-settings last-wins):
    1. .env (base defaults) - lowest priority
    2. .env.{environment} (environment-specific overrides)
    3. .env.local (local developer overrides, gitignored) - highest priority

    Returns:
        List of Path objects for env files that exist.
    """
    env_name = os.getenv("APP_ENV", "development").lower()
    if env_name not in ("development", "production", "test"):
        env_name = "development"

    candidates = [
        PROJECT_ROOT / ".env",
        PROJECT_ROOT / f".env.{env_name}",
        PROJECT_ROOT / ".env.local",
    ]
    return [p for p in candidates if p.exists()]


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Environment settings with validation and environment-specific file support.

    Configuration priority (highest to lowest):
    1. Values passed to Settings() constructor
    2. Environment variables (standard Docker/K8s behavior)
    3. .env.local > .env.{APP_ENV} > .env (dotenv files, last wins)

    Upstream credentials and the inbound API key are optional here. Their
    absence is reported as a ConfigurationError when they are first needed.
    """

    # Environment identification
    app_env: Environment = Field(default="development", description="Application environment")

    # Debug and logging
    debug: bool = Field(default=False, description="Enable debug logging and debug error payloads")

    # Upstream credentials
    sunsama_email: str | None = Field(default=None, description="Sunsama account email used for login")
    sunsama_password: SecretStr | None = Field(default=None, description="Sunsama account password")

    # Upstream client
    upstream_client_factory: str | None = Field(
        default=None,
        description="Import path of the upstream client factory, e.g. 'package.module:SunsamaClient'",
    )
    upstream_operations: str = Field(
        default="",
        description="Comma-separated allowlist of upstream operation names exposed by the relay",
    )

    # Inbound gate
    api_key: SecretStr | None = Field(default=None, description="Secret callers must present in Authorization")

    # API server
    api_host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Bind port")

    # CORS
    cors_allow_origins: str = Field(default="*", description="Comma-separated allowed origins")
    cors_allow_methods: str = Field(default="*", description="Comma-separated allowed methods")
    cors_allow_headers: str = Field(default="*", description="Comma-separated allowed headers")

    # Hot-reload support (lets credentials rotate without restart)
    config_hot_reload: bool = Field(
        default=False,
        description="Reload configuration on every settings read (has a performance cost)",
    )

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings source priority for environment-specific config.

        Priority (highest to lowest):
        1. init_settings - Values passed to Settings() constructor
        2. env_settings - Environment variables
        3. dotenv files - .env.local > .env.{APP_ENV} > .env (last-wins in list)
        """
        dotenv_source = DotEnvSettingsSource(
            settings_cls,
            env_file=_get_env_files(),
            env_file_encoding="utf-8",
        )
        return (init_settings, env_settings, dotenv_source)

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | None) -> str:
        """Validate and normalize APP_ENV value."""
        if v is None:
            return "development"
        normalized = str(v).lower()
        if normalized not in ("development", "production", "test"):
            raise ValueError(f"app_env must be 'development', 'production', or 'test', got '{v}'")
        return normalized

    @field_validator("sunsama_email", "upstream_client_factory", mode="before")
    @classmethod
    def blank_as_missing(cls, v: str | None) -> str | None:
        """Treat empty strings as unset so they fail as missing configuration."""
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("sunsama_password", "api_key", mode="before")
    @classmethod
    def blank_secret_as_missing(cls, v: object) -> object:
        if isinstance(v, str) and not v:
            return None
        return v

    @field_validator("upstream_client_factory")
    @classmethod
    def validate_factory_path(cls, v: str | None) -> str | None:
        """Require the 'module:attribute' form."""
        if v is not None and (":" not in v or v.startswith(":") or v.endswith(":")):
            raise ValueError("upstream_client_factory must look like 'package.module:attribute'")
        return v

    @property
    def upstream_operations_list(self) -> list[str]:
        """Allowlisted operation names, excluding reserved and private names."""
        return [
            name
            for name in _split_csv(self.upstream_operations)
            if name not in RESERVED_OPERATIONS and not name.startswith("_")
        ]

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.cors_allow_origins)

    @property
    def cors_methods_list(self) -> list[str]:
        return _split_csv(self.cors_allow_methods)

    @property
    def cors_headers_list(self) -> list[str]:
        return _split_csv(self.cors_allow_headers)


# ============================================================================
# Settings Management (Thread-safe with Hot-Reload Support)
# ============================================================================


class _SettingsManager:
    """Thread-safe settings manager with optional hot-reload support."""

    __slots__ = ("_instance", "_lock")

    def __init__(self) -> None:
        self._instance: Settings | None = None
        self._lock = threading.Lock()

    def get(self) -> Settings:
        """Get settings instance with optional hot-reload support.

        Settings are loaded once and cached unless hot-reload is enabled,
        in which case they are reloaded on each call.
        """
        if self._instance is not None and not self._instance.config_hot_reload:
            return self._instance

        with self._lock:
            # Double-check after acquiring lock
            if self._instance is not None and not self._instance.config_hot_reload:
                return self._instance
            self._instance = Settings()
            return self._instance

    def reload(self) -> Settings:
        """Force reload settings from the environment and dotenv files."""
        with self._lock:
            self._instance = Settings()
            return self._instance

    def clear(self) -> None:
        """Clear cached settings instance (used by tests)."""
        with self._lock:
            self._instance = None


# Module-level singleton manager
_settings_manager = _SettingsManager()


def get_settings() -> Settings:
    """Get settings instance with optional hot-reload support.

    This is the primary entry point for accessing application settings.

    Raises:
        ValueError: If configuration present in the environment is invalid.
    """
    return _settings_manager.get()


def reload_settings() -> Settings:
    """Force reload settings, picking up rotated credentials."""
    return _settings_manager.reload()


def clear_settings_cache() -> None:
    """Clear cached settings instance.

    Primarily useful for testing to ensure fresh settings on each test.
    """
    _settings_manager.clear()
