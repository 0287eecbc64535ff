"""
API key gate for inbound relay requests.

Accepts either ``Authorization: Bearer <api-key>`` or a bare
``Authorization: <api-key>`` and compares the token with the ``API_KEY``
setting, which is re-read on every request so the key can be rotated
without restarting the process.
"""

from __future__ import annotations

import secrets

from typing import Annotated

from fastapi import Header

from sunsama_relay.api.dependencies import AppSettings
from sunsama_relay.core.constants import BEARER_PREFIX
from sunsama_relay.core.exceptions import (
    ConfigurationError,
    InvalidCredentialError,
    MissingCredentialError,
)
from sunsama_relay.utils.logger import logger


def verify_api_key(authorization: str | None, api_key: str | None) -> None:
    """Check an Authorization header value against the configured key.

    Raises:
        ConfigurationError: No key is configured (checked before the header).
        MissingCredentialError: The header is absent or empty.
        InvalidCredentialError: The token does not match.
    """
    if not api_key:
        logger.error("API_KEY environment variable is not set")
        raise ConfigurationError("Server is not properly configured", setting="api_key")

    if not authorization:
        raise MissingCredentialError()

    token = authorization[len(BEARER_PREFIX) :] if authorization.startswith(BEARER_PREFIX) else authorization

    if not secrets.compare_digest(token.encode("utf-8"), api_key.encode("utf-8")):
        raise InvalidCredentialError()


async def require_api_key(
    settings: AppSettings,
    authorization: Annotated[str | None, Header(include_in_schema=False)] = None,
) -> None:
    """FastAPI dependency guarding every relay route under /api."""
    configured = settings.api_key
    verify_api_key(authorization, configured.get_secret_value() if configured else None)
