"""Pydantic v2 models for the DanceMix API types."""

from dancemix.models.common import ErrorResponse
from dancemix.models.config import AppConfig, CategoryPreset, ConfigUpdate
from dancemix.models.generate import CategoryRequest, GenerateRequest, GenerateResponse
from dancemix.models.song import Song

__all__ = [
    # common
    "ErrorResponse",
    # config
    "AppConfig",
    "CategoryPreset",
    "ConfigUpdate",
    # generate
    "CategoryRequest",
    "GenerateRequest",
    "GenerateResponse",
    # song
    "Song",
]
