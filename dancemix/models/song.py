"""Song model: one track as read from the music service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class Song(BaseModel):
    """A single track.

    Immutable once built by the client layer. The composer only reads
    ``id``, ``duration_ms`` and ``category``.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    title: str = ""
    artists: str = ""
    duration_ms: int = 0
    category: str | None = None

    @field_validator("duration_ms", mode="before")
    @classmethod
    def coerce_duration(cls, v):
        """Missing durations count as zero."""
        if v is None:
            return 0
        try:
            f = float(v)
            if f != f:  # NaN check
                return 0
            return int(f)
        except (TypeError, ValueError):
            return 0

    @field_validator("duration_ms")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("duration_ms must be >= 0")
        return v

    def labelled(self, category: str) -> Song:
        """Return this song carrying ``category`` as its label."""
        if self.category == category:
            return self
        return self.model_copy(update={"category": category})
