"""Request handler glue: resolve sources, fetch concurrently, compose, publish.

All network work happens before composition starts; if any fetch fails the
composer is never called for that request.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import date

from dancemix.composer import PlaylistComposer
from dancemix.models.generate import CategoryRequest, GenerateRequest
from dancemix.models.song import Song
from dancemix.music_api import MusicApiClient
from dancemix.pools import SourcePool

logger = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """A request could not be served (e.g. unresolvable playlist link)."""


@dataclass
class GenerationResult:
    songs: list[Song]
    duration_ms: int
    exhausted: bool
    playlist_id: int | str | None = None


def category_requests(request: GenerateRequest, config: dict) -> list[CategoryRequest]:
    """Requested categories, or the configured defaults; unnamed ones get ``Style N``."""
    if request.categories:
        cats = request.categories
    else:
        cats = [CategoryRequest(**preset) for preset in config["default_categories"]]
    return [
        cat if cat.name else cat.model_copy(update={"name": f"Style {i + 1}"})
        for i, cat in enumerate(cats)
    ]


def playlist_name(request: GenerateRequest, config: dict) -> str:
    if request.playlist_name:
        return request.playlist_name
    return config["playlist_name_template"].format(date=date.today().isoformat())


async def generate_playlist(
    request: GenerateRequest,
    client: MusicApiClient,
    config: dict,
    rng: random.Random | None = None,
) -> GenerationResult:
    """Build (and optionally publish) one playlist for ``request``."""
    cats = category_requests(request, config)
    names = [s.name for s in cats]
    minutes = (
        request.duration_minutes
        if request.duration_minutes is not None
        else config["default_duration_minutes"]
    )
    target_ms = int(round(minutes * 60_000))
    collective_ids = (
        request.collective_song_ids
        if request.collective_song_ids is not None
        else config["collective_song_ids"]
    )
    collective_name = config["collective_name"]

    # weights only matter (and are only validated) in weighted mode
    weights = {s.name: s.weight for s in cats if s.weight is not None}
    rng = rng or random.Random(request.seed)
    composer = PlaylistComposer(
        request.mode or config["default_mode"],
        weights=weights,
        rng=rng,
        round_size=request.collective_interval,
    )
    composer.validate(names, target_ms, collective_name if collective_ids else None)

    # -- Resolve share links --
    linked = [s for s in cats if s.reference]
    resolved = await asyncio.gather(*(client.resolve_playlist_id(s.reference) for s in linked))
    failed = [s.name for s, pid in zip(linked, resolved) if pid is None]
    if failed:
        raise GenerationError(f"Some playlists could not be resolved: {', '.join(failed)}")
    playlist_ids = {s.name: pid for s, pid in zip(linked, resolved)}

    # -- Fetch every source concurrently --
    cookie = request.cookie

    async def fetch_base(cat: CategoryRequest) -> list[Song]:
        pid = playlist_ids.get(cat.name)
        if pid is None or not cat.allow_base_fill:
            return []
        return await client.fetch_playlist_songs(pid, cookie, category=cat.name)

    async def fetch_manual(cat: CategoryRequest) -> list[Song]:
        return await client.fetch_songs_by_ids(cat.manual_song_ids, cookie, category=cat.name)

    base_lists, manual_lists, collective = await asyncio.gather(
        asyncio.gather(*(fetch_base(s) for s in cats)),
        asyncio.gather(*(fetch_manual(s) for s in cats)),
        client.fetch_songs_by_ids(collective_ids, cookie, category=collective_name),
    )
    logger.info(
        "Fetched %d categories (%d base songs, %d manual, %d collective)",
        len(cats),
        sum(len(b) for b in base_lists),
        sum(len(m) for m in manual_lists),
        len(collective),
    )

    # -- Compose --
    pools = [
        SourcePool(cat.name, base, manual, allow_base_fill=cat.allow_base_fill, rng=rng)
        for cat, base, manual in zip(cats, base_lists, manual_lists)
    ]
    special = SourcePool.ordered(collective_name, collective) if collective else None
    composed = composer.run(pools, special, target_ms)
    result = GenerationResult(
        songs=composed.songs,
        duration_ms=composed.duration_ms,
        exhausted=composed.exhausted,
    )

    # -- Publish --
    if request.publish and result.songs:
        track_ids = [s.id for s in result.songs]
        if config["reverse_on_publish"]:
            # the service inserts each added track at the head of the playlist
            track_ids.reverse()
        result.playlist_id = await client.create_playlist(playlist_name(request, config), cookie)
        await client.append_tracks(result.playlist_id, track_ids, cookie)
    return result
