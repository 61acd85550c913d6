"""Shared fixtures: song factories, a fake music client, an isolated config file."""

import pytest

from dancemix.config import CONFIG_PATH, set_config_path
from dancemix.models.song import Song
from dancemix.music_api import MusicApiError, parse_playlist_reference


def make_songs(prefix, n, duration_ms=200_000):
    """``n`` songs with ids ``<prefix>0`` .. ``<prefix>{n-1}``."""
    return [
        Song(id=f"{prefix}{i}", title=f"{prefix} song {i}", artists="Band", duration_ms=duration_ms)
        for i in range(n)
    ]


class FixedRandom:
    """Stand-in rng whose ``random()`` always returns the same value."""

    def __init__(self, value=0.0):
        self.value = value

    def random(self):
        return self.value


class FakeMusicClient:
    """In-memory replacement for MusicApiClient."""

    def __init__(self, playlists=None, songs=None, links=None, failing=()):
        self.playlists = playlists or {}  # playlist id -> [Song]
        self.songs = {str(s.id): s for s in (songs or [])}
        self.links = links or {}  # short link -> playlist id
        self.failing = set(failing)
        self.calls = []
        self.created = []
        self.appended = []

    async def resolve_playlist_id(self, reference):
        self.calls.append(("resolve", reference))
        return parse_playlist_reference(reference) or self.links.get(reference)

    async def fetch_playlist_songs(self, playlist_id, cookie="", category=None):
        self.calls.append(("playlist", playlist_id))
        if playlist_id in self.failing:
            raise MusicApiError(f"/playlist/track/all returned code 404")
        return [s.model_copy(update={"category": category}) for s in self.playlists.get(playlist_id, [])]

    async def fetch_songs_by_ids(self, song_ids, cookie="", category=None):
        if song_ids:
            self.calls.append(("songs", list(song_ids)))
        return [
            self.songs[str(i)].model_copy(update={"category": category})
            for i in song_ids
            if str(i) in self.songs
        ]

    async def create_playlist(self, name, cookie):
        self.created.append(name)
        return 4242

    async def append_tracks(self, playlist_id, track_ids, cookie):
        self.appended.append((playlist_id, list(track_ids)))

    async def login_qr_key(self):
        return {"code": 200, "data": {"unikey": "k1"}}

    async def login_qr_create(self, key):
        return {"code": 200, "data": {"qrurl": f"https://example.test/qr?key={key}", "qrimg": ""}}

    async def login_qr_check(self, key):
        return {"code": 801, "message": "waiting for scan"}


@pytest.fixture()
def fake_client():
    return FakeMusicClient(
        playlists={
            "111": make_songs("w", 6),
            "222": make_songs("r", 6),
        },
        songs=make_songs("c", 3, duration_ms=180_000) + make_songs("m", 3),
        links={"https://163cn.tv/abc": "222"},
    )


@pytest.fixture()
def tmp_config(tmp_path):
    """Point the config store at a temp file for the duration of a test."""
    store = set_config_path(str(tmp_path / "config.json"))
    yield store
    set_config_path(CONFIG_PATH)
