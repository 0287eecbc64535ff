"""
Relay of named upstream operations.

Only operations listed in UPSTREAM_OPERATIONS are reachable. Each call
runs through the session manager, so an expired upstream session is
renewed and the call retried once before the caller sees an error.
"""

from __future__ import annotations

import inspect

from typing import Annotated, Any

from fastapi import APIRouter, Body
from fastapi.encoders import jsonable_encoder

from sunsama_relay.api.dependencies import AppSettings, UpstreamSessions
from sunsama_relay.core.exceptions import (
    AppException,
    ResourceNotFoundError,
    UpstreamOperationError,
    ValidationException,
)
from sunsama_relay.core.upstream import maybe_await
from sunsama_relay.models.error_models import ErrorResponseWrapper
from sunsama_relay.models.schemas.operations import OperationListResponse, OperationResult
from sunsama_relay.utils.logger import logger

router = APIRouter()


def _check_arguments(name: str, method: Any, kwargs: dict[str, Any]) -> None:
    """Reject keyword arguments the client method cannot accept."""
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        # No introspectable signature; let the call itself decide
        return
    try:
        signature.bind(**kwargs)
    except TypeError as exc:
        raise ValidationException(
            "Invalid arguments for operation",
            details={"operation": name, "arguments": str(exc)},
        ) from exc


@router.get(
    "",
    response_model=OperationListResponse,
    summary="List relayed operations",
)
async def list_operations(settings: AppSettings) -> OperationListResponse:
    return OperationListResponse(operations=settings.upstream_operations_list)


@router.post(
    "/{name}",
    response_model=OperationResult,
    summary="Invoke an upstream operation",
    description="The JSON object body is passed to the upstream client method as keyword arguments.",
    responses={
        404: {"model": ErrorResponseWrapper, "description": "Operation not exposed by this relay"},
        422: {"model": ErrorResponseWrapper, "description": "Arguments do not match the operation"},
        502: {"model": ErrorResponseWrapper, "description": "Upstream failure"},
    },
)
async def invoke_operation(
    name: str,
    sessions: UpstreamSessions,
    settings: AppSettings,
    arguments: Annotated[dict[str, Any] | None, Body()] = None,
) -> OperationResult:
    if name not in settings.upstream_operations_list:
        raise ResourceNotFoundError(resource="Operation", resource_id=name)

    kwargs = arguments or {}

    async def call(client: Any) -> Any:
        method = getattr(client, name, None)
        if not callable(method):
            # Message must not echo the name: it could trip auth classification
            raise ResourceNotFoundError(resource="Operation")
        _check_arguments(name, method, kwargs)
        return await maybe_await(method(**kwargs))

    try:
        result = await sessions.with_session(call)
    except AppException:
        raise
    except Exception as exc:
        logger.error(f"Error relaying {name}: {type(exc).__name__}", exc_info=True, operation=name)
        raise UpstreamOperationError(str(exc) or f"Failed to run {name}", cause=exc) from exc

    return OperationResult(operation=name, result=jsonable_encoder(result))
