"""Application config models, mapped to config.json."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class CategoryPreset(BaseModel):
    """A named source playlist used when a request supplies no categories."""

    name: str
    reference: str
    weight: float | None = Field(default=None, ge=0)  # used in weighted mode


class AppConfig(BaseModel):
    """Full application config as persisted in config.json."""

    music_api_base: str = "http://localhost:3000"
    request_timeout: float = 10.0
    default_duration_minutes: float = 60
    default_mode: Literal["sequential", "weighted"] = "sequential"
    default_categories: list[CategoryPreset] = []
    collective_song_ids: list[int | str] = []
    collective_name: str = "集体舞"
    playlist_name_template: str = "DanceTool_{date}"
    reverse_on_publish: bool = True


class ConfigUpdate(BaseModel):
    """Partial config update (PUT /api/config)."""

    music_api_base: str | None = None
    request_timeout: float | None = Field(default=None, gt=0)
    default_duration_minutes: float | None = Field(default=None, ge=0)
    default_mode: Literal["sequential", "weighted"] | None = None
    default_categories: list[CategoryPreset] | None = None
    collective_song_ids: list[int | str] | None = None
    collective_name: str | None = None
    playlist_name_template: str | None = None
    reverse_on_publish: bool | None = None
