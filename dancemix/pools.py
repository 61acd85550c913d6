"""Per-category song pools and identity dedup.

A composition run owns one SourcePool per category plus one ordered pool
for collective (special) songs. Pools are consumed destructively and
discarded after the run.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Iterable, Sequence

from dancemix.models.song import Song

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Random permutation
# ---------------------------------------------------------------------------

def permute(items: Iterable[Song], rng: random.Random | None = None) -> list[Song]:
    """Return a uniformly random permutation of ``items``.

    The input is copied, never shuffled in place. Pass a seeded
    ``random.Random`` for reproducible order.
    """
    out = list(items)
    (rng or random).shuffle(out)
    return out


# ---------------------------------------------------------------------------
# SourcePool
# ---------------------------------------------------------------------------

class SourcePool:
    """Two-tier queue for one category.

    Manual requests are served first, FIFO. After that the base pool is
    served by pointer, in the order fixed by the one-time permutation at
    construction. ``allow_base_fill=False`` makes the category manual-only.
    """

    def __init__(
        self,
        name: str,
        base: Sequence[Song] = (),
        manual: Sequence[Song] = (),
        *,
        allow_base_fill: bool = True,
        rng: random.Random | None = None,
        shuffle: bool = True,
    ) -> None:
        self.name = name
        self.allow_base_fill = allow_base_fill
        self._manual: deque[Song] = deque(manual)
        self._base: list[Song] = permute(base, rng) if shuffle else list(base)
        self._pointer = 0

    @classmethod
    def ordered(cls, name: str, songs: Sequence[Song]) -> SourcePool:
        """Pool that yields ``songs`` strictly in supplied order (collective songs)."""
        return cls(name, manual=songs, allow_base_fill=False, shuffle=False)

    def next(self) -> Song | None:
        """Next song for this category, or None once exhausted."""
        if self._manual:
            return self._manual.popleft()
        if self.allow_base_fill and self._pointer < len(self._base):
            song = self._base[self._pointer]
            self._pointer += 1
            return song
        return None

    @property
    def remaining(self) -> int:
        count = len(self._manual)
        if self.allow_base_fill:
            count += len(self._base) - self._pointer
        return count

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0

    def __repr__(self) -> str:
        return (
            f"SourcePool({self.name!r}, manual={len(self._manual)}, "
            f"base={len(self._base) - self._pointer}/{len(self._base)})"
        )


# ---------------------------------------------------------------------------
# Dedup
# ---------------------------------------------------------------------------

class DedupFilter:
    """Set of song ids already placed in the playlist."""

    def __init__(self) -> None:
        self._used: set[int | str] = set()

    def accept(self, song: Song) -> bool:
        """Record ``song.id`` and return True, or False if it was already used."""
        if song.id in self._used:
            logger.debug("Skipping duplicate song id=%s", song.id)
            return False
        self._used.add(song.id)
        return True
