"""Pydantic request/response schemas for the relay API."""
