"""Shared dependencies used across routers."""

from fastapi import Depends

from dancemix.config import load_config
from dancemix.music_api import MusicApiClient
from dancemix.state import AppState, get_state


async def get_config() -> dict:
    """FastAPI dependency: current merged config."""
    return await load_config()


async def get_music_client(
    config: dict = Depends(get_config),
    state: AppState = Depends(get_state),
) -> MusicApiClient:
    """FastAPI dependency for the shared music service client."""
    return state.client_for(config)
