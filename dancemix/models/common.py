"""Shared response models used across all endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response: {"detail": "message"}."""

    detail: str
