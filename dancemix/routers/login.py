"""QR-code login routes.

Thin pass-through to the music service's QR login flow; the frontend
keeps the returned cookie and sends it back with each generate request.
"""

from fastapi import APIRouter, Depends, HTTPException

from dancemix.music_api import MusicApiClient, MusicApiError
from dancemix.routers._helpers import get_music_client

router = APIRouter(prefix="/api/login", tags=["login"])


@router.get("/key")
async def login_key(client: MusicApiClient = Depends(get_music_client)):
    try:
        return await client.login_qr_key()
    except MusicApiError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/create")
async def login_create(key: str, client: MusicApiClient = Depends(get_music_client)):
    try:
        return await client.login_qr_create(key)
    except MusicApiError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/check")
async def login_check(key: str, client: MusicApiClient = Depends(get_music_client)):
    try:
        return await client.login_qr_check(key)
    except MusicApiError as e:
        raise HTTPException(status_code=502, detail=str(e))
