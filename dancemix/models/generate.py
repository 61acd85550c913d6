"""Request / response models for playlist generation."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from dancemix.models.song import Song


class CategoryRequest(BaseModel):
    """One dance style in a generate request.

    ``reference`` is a playlist link, short link or raw id. Leave it out
    for a manual-only category.
    """

    name: str | None = None
    reference: str | None = None
    manual_song_ids: list[int | str] = []
    allow_base_fill: bool = True
    weight: float | None = Field(default=None, ge=0)

    @field_validator("reference", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class GenerateRequest(BaseModel):
    """POST /api/generate."""

    categories: list[CategoryRequest] = []
    duration_minutes: float | None = Field(default=None, ge=0)
    cookie: str = ""
    mode: Literal["sequential", "weighted"] | None = None
    seed: int | None = None
    collective_song_ids: list[int | str] | None = None
    collective_interval: int | None = Field(default=None, ge=1)
    publish: bool = True
    playlist_name: str | None = None


class GenerateResponse(BaseModel):
    """Result of a generate call; ``success`` False carries a message."""

    success: bool
    message: str | None = None
    count: int = 0
    playlist_id: int | str | None = None
    duration_ms: int = 0
    exhausted: bool = False
    songs: list[Song] = []
