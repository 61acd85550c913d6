"""Client for a NeteaseCloudMusicApi-compatible music service.

Covers everything the generator needs from the outside world: turning
share links into playlist ids, reading playlist and song metadata, the QR
login flow, and publishing the composed playlist back to the account.

Usage::

    client = MusicApiClient("http://localhost:3000")
    pid = await client.resolve_playlist_id("https://163cn.tv/xyz")
    songs = await client.fetch_playlist_songs(pid, cookie, category="Rumba")

Calls are blocking urllib requests pushed onto worker threads, so several
playlists can be fetched at once with ``asyncio.gather``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
import urllib.error
import urllib.request
from collections.abc import Sequence
from typing import Any

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from dancemix.models.song import Song

logger = logging.getLogger(__name__)

_USER_AGENT = "DanceMix/1.0"
_SONG_DETAIL_CHUNK = 500

_ID_PARAM_RE = re.compile(r"(?<![A-Za-z_])id=(\d+)")
_PLAYLIST_PATH_RE = re.compile(r"/playlist/(\d+)")
_DIGITS_RE = re.compile(r"^\d+$")
_URL_RE = re.compile(r"https?://\S+")


class MusicApiError(RuntimeError):
    """The music service failed or answered with an error envelope."""


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def parse_playlist_reference(text: str | None) -> str | None:
    """Extract a playlist id from a link or raw id without touching the network."""
    if not text:
        return None
    text = text.strip()
    if not text:
        return None
    m = _ID_PARAM_RE.search(text)
    if m:
        return m.group(1)
    if _DIGITS_RE.match(text):
        return text
    m = _PLAYLIST_PATH_RE.search(text)
    if m:
        return m.group(1)
    return None


def song_from_api(raw: dict, category: str | None = None) -> Song:
    """Build a Song from one track object of the service's JSON."""
    artists = "/".join(a.get("name", "") for a in (raw.get("ar") or []) if a.get("name"))
    return Song(
        id=raw["id"],
        title=raw.get("name") or "",
        artists=artists,
        duration_ms=raw.get("dt"),
        category=category,
    )


def _envelope_code(body: dict) -> Any:
    if "code" in body:
        return body["code"]
    inner = body.get("body")
    if isinstance(inner, dict):
        return inner.get("code")
    return None


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, urllib.error.HTTPError):
        return exc.code >= 500
    return isinstance(exc, (urllib.error.URLError, TimeoutError, ConnectionError))


# ---------------------------------------------------------------------------
# MusicApiClient
# ---------------------------------------------------------------------------

class MusicApiClient:
    """Async facade over the music service's HTTP API."""

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ----- Transport -----

    @retry(
        wait=wait_fixed(2),
        stop=stop_after_attempt(3),
        retry=retry_if_exception(_is_transient),
        before_sleep=before_sleep_log(logger, logging.INFO),
        reraise=True,
    )
    def _post(self, path: str, params: dict) -> dict:
        payload = {**params, "timestamp": int(time.time() * 1000)}
        req = urllib.request.Request(
            f"{self.base_url}{path}",
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json", "User-Agent": _USER_AGENT},
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            return json.loads(resp.read().decode("utf-8"))

    async def _call(self, path: str, *, check: bool = True, **params: Any) -> dict:
        logger.debug("Music API %s %s", path, {k: v for k, v in params.items() if k != "cookie"})
        try:
            body = await asyncio.to_thread(self._post, path, params)
        except (urllib.error.URLError, TimeoutError, ConnectionError, ValueError) as e:
            raise MusicApiError(f"{path} failed: {e}") from e
        if not isinstance(body, dict):
            raise MusicApiError(f"{path} returned a non-object payload")
        code = _envelope_code(body)
        if check and code is not None and code != 200:
            msg = body.get("message") or body.get("msg") or ""
            raise MusicApiError(f"{path} returned code {code} {msg}".strip())
        return body

    def _final_url(self, url: str) -> str:
        req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            return resp.geturl()

    # ----- Identity resolution -----

    async def resolve_playlist_id(self, reference: str | None) -> str | None:
        """Canonical playlist id for a link, short link or raw id; None if unresolvable."""
        pid = parse_playlist_reference(reference)
        if pid or not reference:
            return pid
        m = _URL_RE.search(reference)
        if not m:
            return None
        try:
            final = await asyncio.to_thread(self._final_url, m.group(0))
        except (urllib.error.URLError, TimeoutError, ConnectionError, ValueError):
            logger.warning("Could not follow playlist link %s", m.group(0), exc_info=True)
            return None
        m = _ID_PARAM_RE.search(final) or _PLAYLIST_PATH_RE.search(final)
        return m.group(1) if m else None

    # ----- Reads -----

    async def fetch_playlist_songs(
        self, playlist_id: str, cookie: str = "", category: str | None = None
    ) -> list[Song]:
        """All tracks of a playlist, in playlist order."""
        body = await self._call("/playlist/track/all", id=playlist_id, cookie=cookie)
        try:
            return [song_from_api(raw, category) for raw in body.get("songs") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise MusicApiError(f"Malformed track list for playlist {playlist_id}") from e

    async def fetch_songs_by_ids(
        self, song_ids: Sequence[int | str], cookie: str = "", category: str | None = None
    ) -> list[Song]:
        """Metadata for explicit song ids, in the order given. Unknown ids are dropped."""
        if not song_ids:
            return []
        found: dict[str, Song] = {}
        for start in range(0, len(song_ids), _SONG_DETAIL_CHUNK):
            chunk = song_ids[start:start + _SONG_DETAIL_CHUNK]
            body = await self._call(
                "/song/detail", ids=",".join(str(i) for i in chunk), cookie=cookie
            )
            try:
                for raw in body.get("songs") or []:
                    song = song_from_api(raw, category)
                    found[str(song.id)] = song
            except (KeyError, TypeError, ValueError) as e:
                raise MusicApiError("Malformed song detail payload") from e
        missing = [i for i in song_ids if str(i) not in found]
        if missing:
            logger.warning("Song ids not found: %s", missing)
        return [found[str(i)] for i in song_ids if str(i) in found]

    # ----- Publishing -----

    async def create_playlist(self, name: str, cookie: str) -> int | str:
        body = await self._call("/playlist/create", name=name, cookie=cookie)
        pid = body.get("id") or (body.get("playlist") or {}).get("id")
        if not pid:
            raise MusicApiError("Playlist creation returned no id")
        logger.info("Created playlist '%s' id=%s", name, pid)
        return pid

    async def append_tracks(
        self, playlist_id: int | str, track_ids: Sequence[int | str], cookie: str
    ) -> None:
        if not track_ids:
            return
        await self._call(
            "/playlist/tracks",
            op="add",
            pid=playlist_id,
            tracks=",".join(str(t) for t in track_ids),
            cookie=cookie,
        )
        logger.info("Added %d tracks to playlist %s", len(track_ids), playlist_id)

    # ----- QR login (pass-through) -----

    async def login_qr_key(self) -> dict:
        return await self._call("/login/qr/key")

    async def login_qr_create(self, key: str) -> dict:
        return await self._call("/login/qr/create", key=key, qrimg=True)

    async def login_qr_check(self, key: str) -> dict:
        # 800 expired, 801 waiting, 802 scanned, 803 authorised
        return await self._call("/login/qr/check", check=False, key=key)
