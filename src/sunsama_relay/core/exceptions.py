"""
Exception taxonomy for Sunsama Relay.

Every error the relay raises on purpose carries an ErrorCode, which the
global exception handlers turn into an HTTP status and a consistent
error body. Upstream clients may raise UpstreamAuthError (or its
SessionExpiredError subclass) to mark a failure as session related
without relying on message text.
"""

from __future__ import annotations

from typing import Any

from sunsama_relay.models.error_models import ErrorCode


class AppException(Exception):
    """Base application exception with error code support.

    Example:
        raise AppException(
            code=ErrorCode.RESOURCE_NOT_FOUND,
            message="Operation not found",
            details={"operation": name},
        )
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        self.cause = cause
        super().__init__(message)


class ConfigurationError(AppException):
    """Required configuration is absent or unusable (a server-side fault)."""

    def __init__(self, message: str, setting: str | None = None):
        super().__init__(
            code=ErrorCode.INTERNAL_CONFIGURATION_ERROR,
            message=message,
            details={"setting": setting} if setting else None,
        )


class ValidationException(AppException):
    """Caller input rejected before anything is sent upstream."""

    def __init__(self, message: str = "Validation error", details: dict[str, Any] | None = None):
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message, details=details)


# ---------------------------------------------------------------------------
# Inbound gate
# ---------------------------------------------------------------------------


class InboundAuthError(AppException):
    """Inbound request rejected by the API key gate."""

    def __init__(self, message: str, code: ErrorCode):
        super().__init__(code=code, message=message)


class MissingCredentialError(InboundAuthError):
    """Caller supplied no Authorization header."""

    def __init__(self, message: str = "Missing Authorization header"):
        super().__init__(message=message, code=ErrorCode.AUTH_REQUIRED)


class InvalidCredentialError(InboundAuthError):
    """Caller supplied a credential that does not match the configured key."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message=message, code=ErrorCode.AUTH_INVALID_TOKEN)


# ---------------------------------------------------------------------------
# Upstream
# ---------------------------------------------------------------------------


class UpstreamError(AppException):
    """Base class for failures reported by the upstream service."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        cause: Exception | None = None,
    ):
        super().__init__(code=code, message=message, details={"service": "sunsama"}, cause=cause)


class UpstreamAuthError(UpstreamError):
    """Upstream rejected the credentials or the current session."""

    def __init__(self, message: str = "Upstream authentication failed", cause: Exception | None = None):
        super().__init__(message=message, code=ErrorCode.EXTERNAL_AUTH_FAILED, cause=cause)

    def is_auth_error(self) -> bool:
        return True


class SessionExpiredError(UpstreamAuthError):
    """The upstream session is no longer valid."""

    def __init__(self, message: str = "Upstream session expired", cause: Exception | None = None):
        super().__init__(message=message, cause=cause)


class UpstreamOperationError(UpstreamError):
    """Any other upstream failure, surfaced verbatim to the caller."""


class ResourceNotFoundError(AppException):
    """Resource not found errors."""

    def __init__(self, resource: str, resource_id: str | None = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} '{resource_id}' not found"
        super().__init__(
            code=ErrorCode.RESOURCE_NOT_FOUND,
            message=message,
            details={"resource": resource, "id": resource_id},
        )


__all__ = [
    "AppException",
    "ConfigurationError",
    "InboundAuthError",
    "InvalidCredentialError",
    "MissingCredentialError",
    "ResourceNotFoundError",
    "SessionExpiredError",
    "UpstreamAuthError",
    "UpstreamError",
    "UpstreamOperationError",
    "ValidationException",
]
