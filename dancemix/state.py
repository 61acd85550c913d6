"""Process-wide application state.

Only long-lived, shareable objects live here (the music service client).
Composition runs keep their own state and never touch this object.
FastAPI routes receive it via `Depends(get_state)`.
"""

from __future__ import annotations

from dataclasses import dataclass

from dancemix.music_api import MusicApiClient


@dataclass
class AppState:
    music_client: MusicApiClient | None = None

    def client_for(self, config: dict) -> MusicApiClient:
        """Return the shared client, rebuilding it if the configured endpoint changed."""
        base = config["music_api_base"].rstrip("/")
        timeout = float(config["request_timeout"])
        client = self.music_client
        if client is None or client.base_url != base or client.timeout != timeout:
            client = MusicApiClient(base, timeout=timeout)
            self.music_client = client
        return client


# ---------------------------------------------------------------------------
# Singleton + FastAPI dependency
# ---------------------------------------------------------------------------

_app_state: AppState | None = None


def get_state() -> AppState:
    """FastAPI dependency returning the singleton AppState."""
    global _app_state
    if _app_state is None:
        _app_state = AppState()
    return _app_state


def reset_state() -> AppState:
    """Create a fresh AppState (for testing or app restart)."""
    global _app_state
    _app_state = AppState()
    return _app_state
