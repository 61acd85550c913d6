"""On-disk storage for the JSON config document.

Usage::

    store = JsonStore("config.json")
    data = await store.load()
    await store.save({**data, "default_duration_minutes": 90})
"""

from __future__ import annotations

import asyncio
import json
import logging
import os

import aiofiles
import aiofiles.os
import aiofiles.tempfile

logger = logging.getLogger(__name__)


class JsonStore:
    """A JSON object kept in one file, read and written through aiofiles.

    ``save`` writes a sibling temp file and renames it over the target
    while holding a per-store lock, so a reader sees either the old
    document or the new one.
    """

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)
        self._lock = asyncio.Lock()

    async def load(self, default: dict | None = None) -> dict:
        """The stored object, or a copy of ``default`` when absent or unreadable."""
        fallback = dict(default or {})
        if not await aiofiles.os.path.exists(self.path):
            return fallback
        async with aiofiles.open(self.path, encoding="utf-8") as f:
            text = await f.read()
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable JSON in %s", self.path)
            return fallback
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top level is %s, not an object", self.path, type(data).__name__)
            return fallback
        return data

    async def save(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        async with self._lock:
            await aiofiles.os.makedirs(directory, exist_ok=True)
            async with aiofiles.tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, prefix=".config_", suffix=".tmp", delete=False
            ) as tmp:
                tmp_path = tmp.name
                try:
                    await tmp.write(json.dumps(data, indent=2, ensure_ascii=False))
                except OSError:
                    await aiofiles.os.remove(tmp_path)
                    raise
            await aiofiles.os.replace(tmp_path, self.path)
            logger.debug("Saved %s", self.path)
