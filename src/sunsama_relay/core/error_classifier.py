"""
Classification of upstream failures as session/authentication related.

Policy, in order:

1. Structured markers: an ``UpstreamAuthError`` (including
   ``SessionExpiredError``), any object whose ``is_auth_error`` attribute is
   ``True`` or whose ``is_auth_error()`` method returns ``True``, and an
   ``httpx.HTTPStatusError`` carrying a 401 response.
2. Message text: a case-insensitive substring match against
   ``AUTH_ERROR_MESSAGE_MARKERS``.
3. Anything else is not an auth error, including failures whose marker
   or message cannot be read.

The text fallback is approximate. A failure whose message merely mentions
one of the markers (for example a task note containing "session" echoed
back in an error) is classified as an auth error and will be retried once.
"""

from __future__ import annotations

import httpx

from sunsama_relay.core.constants import AUTH_ERROR_MESSAGE_MARKERS
from sunsama_relay.core.exceptions import UpstreamAuthError


def _has_auth_marker(failure: object) -> bool:
    if isinstance(failure, UpstreamAuthError):
        return True

    if isinstance(failure, httpx.HTTPStatusError):
        return failure.response.status_code == httpx.codes.UNAUTHORIZED

    try:
        marker = getattr(failure, "is_auth_error", None)
        if callable(marker):
            return marker() is True
        return marker is True
    except Exception:
        return False


def _message_of(failure: object) -> str | None:
    try:
        if isinstance(failure, BaseException):
            return str(failure)
        if isinstance(failure, str):
            return failure
        message = getattr(failure, "message", None)
    except Exception:
        return None
    return message if isinstance(message, str) else None


def is_auth_error(failure: object) -> bool:
    """Return True if *failure* indicates an invalid or expired upstream session."""
    if _has_auth_marker(failure):
        return True

    message = _message_of(failure)
    if not message:
        return False

    lowered = message.lower()
    return any(marker in lowered for marker in AUTH_ERROR_MESSAGE_MARKERS)
