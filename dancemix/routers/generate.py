"""Playlist generation route."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from dancemix.composer import ConfigurationError
from dancemix.generator import GenerationError, generate_playlist
from dancemix.models.common import ErrorResponse
from dancemix.models.generate import GenerateRequest, GenerateResponse
from dancemix.music_api import MusicApiClient, MusicApiError
from dancemix.routers._helpers import get_config, get_music_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generate"])


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}},
)
async def generate(
    body: GenerateRequest,
    config: dict = Depends(get_config),
    client: MusicApiClient = Depends(get_music_client),
):
    try:
        result = await generate_playlist(body, client, config)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationError as e:
        return GenerateResponse(success=False, message=str(e))
    except MusicApiError as e:
        logger.warning("Generation failed: %s", e)
        return GenerateResponse(success=False, message=f"Music service error: {e}")

    return GenerateResponse(
        success=True,
        count=len(result.songs),
        playlist_id=result.playlist_id,
        duration_ms=result.duration_ms,
        exhausted=result.exhausted,
        songs=result.songs,
    )
