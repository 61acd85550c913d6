import os

from dotenv import load_dotenv

from dancemix.persistence import JsonStore

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(_project_root, ".env"))

CONFIG_PATH = os.getenv("DANCEMIX_CONFIG", os.path.join(_project_root, "config.json"))

# Source playlists for the seven ballroom styles used when a request names none.
DEFAULT_CATEGORIES = [
    {"name": "慢三", "reference": "8425345141", "weight": 1},
    {"name": "平四", "reference": "8425653027", "weight": 1},
    {"name": "伦巴", "reference": "8425693717", "weight": 1},
    {"name": "并四", "reference": "8842144798", "weight": 1},
    {"name": "快三", "reference": "8425599404", "weight": 1},
    {"name": "慢四", "reference": "8425648233", "weight": 1},
    {"name": "吉特巴", "reference": "8425582396", "weight": 1},
]

DEFAULT_CONFIG = {
    "music_api_base": "http://localhost:3000",
    "request_timeout": 10.0,
    "default_duration_minutes": 60,
    "default_mode": "sequential",
    "default_categories": DEFAULT_CATEGORIES,
    "collective_song_ids": [],
    "collective_name": "集体舞",
    "playlist_name_template": "DanceTool_{date}",
    "reverse_on_publish": True,
}

_store = JsonStore(CONFIG_PATH)


def set_config_path(path: str) -> JsonStore:
    """Point the config at another file (tests, alternate deployments)."""
    global _store
    _store = JsonStore(path)
    return _store


def default_config() -> dict:
    return {**DEFAULT_CONFIG, "default_categories": [dict(c) for c in DEFAULT_CATEGORIES]}


async def load_config(apply_env: bool = True) -> dict:
    """Defaults merged with config.json; MUSIC_API_BASE in the env wins unless ``apply_env`` is off."""
    config = {**default_config(), **(await _store.load(default={}))}
    env_base = os.getenv("MUSIC_API_BASE")
    if apply_env and env_base:
        config["music_api_base"] = env_base
    return config


async def save_config(config_dict: dict) -> None:
    await _store.save(config_dict)
