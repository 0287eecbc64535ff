"""
Schemas for relayed upstream operations.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class OperationListResponse(BaseModel):
    """Operations the relay is configured to forward."""

    operations: list[str] = Field(default_factory=list)


class OperationResult(BaseModel):
    """Result envelope for a relayed operation."""

    operation: str
    result: Any = None
