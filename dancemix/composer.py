"""Playlist composition engine.

Interleaves songs from several category pools until a duration target is
met or every pool is dry, injecting collective songs at intervals.

Usage::

    pools = [SourcePool("Waltz", waltz_songs, rng=rng),
             SourcePool("Rumba", rumba_songs, rng=rng)]
    specials = SourcePool.ordered("Collective", collective_songs)
    songs = compose(pools, specials, target_ms=3_600_000, mode="sequential")

The engine is synchronous and pure: it reads already-fetched songs and
owns its run state, so concurrent requests never share anything mutable.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from dancemix.models.song import Song
from dancemix.pools import DedupFilter, SourcePool
from dancemix.selection import (
    SelectionMode,
    SelectionPolicy,
    SequentialPolicy,
    WeightedPolicy,
)

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Invalid composition request; raised before any song is drawn."""


# ---------------------------------------------------------------------------
# Run state
# ---------------------------------------------------------------------------

@dataclass
class RunState:
    """Mutable state of a single composition run."""

    accumulated_ms: int = 0
    last_category: str | None = None
    result: list[Song] = field(default_factory=list)

    def append(self, song: Song) -> None:
        assert song.duration_ms >= 0, f"negative duration on song {song.id}"
        self.result.append(song)
        self.accumulated_ms += song.duration_ms
        self.last_category = song.category


@dataclass
class ComposeResult:
    """Outcome of a run."""

    songs: list[Song]
    duration_ms: int
    exhausted: bool  # True when supply ran out before the target was met


# ---------------------------------------------------------------------------
# Collective insertion
# ---------------------------------------------------------------------------

class InsertionScheduler:
    """Decides when a collective song is due.

    Weighted mode: once ``round_size`` regular songs have been accepted
    since the last insertion. Sequential mode: after every full pass that
    accepted at least one regular song. An empty collective pool simply
    turns insertion off. Once the regular categories are dry, whatever is
    left in the collective pool is played out until the target is met.
    """

    def __init__(self, pool: SourcePool | None, round_size: int, per_round: bool) -> None:
        self.pool = pool
        self.round_size = round_size
        self.per_round = per_round
        self.picks_since_special = 0
        self._enabled = pool is not None and not pool.exhausted

    @property
    def active(self) -> bool:
        return self._enabled

    def record_pick(self) -> None:
        self.picks_since_special += 1

    def due_after_pick(self) -> bool:
        return (
            self._enabled
            and not self.per_round
            and self.picks_since_special >= self.round_size
        )

    def due_after_round(self) -> bool:
        return self._enabled and self.per_round and self.picks_since_special > 0

    def take(self, dedup: DedupFilter) -> Song | None:
        """Pull the next unused collective song, or None when the pool is dry."""
        while True:
            song = self.pool.next()
            if song is None:
                logger.debug("Collective pool '%s' exhausted", self.pool.name)
                self._enabled = False
                return None
            if dedup.accept(song):
                self.picks_since_special = 0
                return song.labelled(self.pool.name)


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------

class PlaylistComposer:
    """Configured composer; ``run`` may be called once per set of pools."""

    def __init__(
        self,
        mode: SelectionMode | str = SelectionMode.SEQUENTIAL,
        weights: Mapping[str, float] | None = None,
        rng: random.Random | None = None,
        round_size: int | None = None,
    ) -> None:
        try:
            self.mode = SelectionMode(mode)
        except ValueError:
            raise ConfigurationError(f"Unknown selection mode: {mode!r}") from None
        self.weights = dict(weights) if weights is not None else None
        self.rng = rng or random.Random()
        if round_size is not None and (isinstance(round_size, bool) or round_size < 1):
            raise ConfigurationError("round_size must be a positive integer")
        self.round_size = round_size

    # ----- Validation -----

    def validate(
        self,
        names: Sequence[str],
        target_ms: int,
        special_name: str | None = None,
    ) -> None:
        """Raise ConfigurationError unless a run over ``names`` is well formed."""
        if not names:
            raise ConfigurationError("At least one category is required")
        names = list(names)
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Duplicate category names: {names}")
        if special_name is not None and special_name in names:
            raise ConfigurationError(
                f"Collective pool name '{special_name}' clashes with a category"
            )
        if isinstance(target_ms, bool) or not isinstance(target_ms, int) or target_ms < 0:
            raise ConfigurationError(f"target_ms must be a non-negative integer, got {target_ms!r}")

        if self.mode is not SelectionMode.WEIGHTED:
            return
        if self.weights is None:
            raise ConfigurationError("Weighted mode requires weights")
        missing = [n for n in names if n not in self.weights]
        if missing:
            raise ConfigurationError(f"Missing weights for categories: {missing}")
        unknown = [n for n in self.weights if n not in names]
        if unknown:
            raise ConfigurationError(f"Weights given for unknown categories: {unknown}")
        for name, w in self.weights.items():
            if isinstance(w, bool) or not isinstance(w, (int, float)) or not math.isfinite(w) or w < 0:
                raise ConfigurationError(f"Invalid weight for '{name}': {w!r}")

    def _policy(self, categories: Sequence[SourcePool]) -> SelectionPolicy:
        if self.mode is SelectionMode.WEIGHTED:
            return WeightedPolicy({c.name: self.weights[c.name] for c in categories}, self.rng)
        return SequentialPolicy([c.name for c in categories])

    # ----- Run -----

    def run(
        self,
        categories: Sequence[SourcePool],
        special_pool: SourcePool | None,
        target_ms: int,
    ) -> ComposeResult:
        self.validate(
            [c.name for c in categories],
            target_ms,
            special_pool.name if special_pool is not None else None,
        )

        pools = {c.name: c for c in categories}
        policy = self._policy(categories)
        dedup = DedupFilter()
        scheduler = InsertionScheduler(
            special_pool,
            round_size=self.round_size or len(categories),
            per_round=self.mode is SelectionMode.SEQUENTIAL,
        )
        state = RunState()
        exhausted = False

        while True:
            name = policy.choose(state.last_category)
            if name is None:
                exhausted = True
                while scheduler.active:
                    if self._insert_special(state, scheduler, dedup, target_ms):
                        exhausted = False
                        break
                break

            song = pools[name].next()
            policy.report(name, song is not None)

            if song is not None and dedup.accept(song):
                state.append(song.labelled(name))
                scheduler.record_pick()
                if state.accumulated_ms >= target_ms:
                    break
                if scheduler.due_after_pick() and self._insert_special(state, scheduler, dedup, target_ms):
                    break

            if policy.round_complete() and scheduler.due_after_round():
                if self._insert_special(state, scheduler, dedup, target_ms):
                    break

        logger.info(
            "Composed %d songs (%.1f min of %.1f min target, mode=%s%s)",
            len(state.result),
            state.accumulated_ms / 60000,
            target_ms / 60000,
            self.mode.value,
            ", pools exhausted" if exhausted else "",
        )
        return ComposeResult(
            songs=state.result,
            duration_ms=state.accumulated_ms,
            exhausted=exhausted,
        )

    @staticmethod
    def _insert_special(
        state: RunState,
        scheduler: InsertionScheduler,
        dedup: DedupFilter,
        target_ms: int,
    ) -> bool:
        """Append a collective song if one is left. Returns True if the target is now met."""
        special = scheduler.take(dedup)
        if special is None:
            return False
        state.append(special)
        return state.accumulated_ms >= target_ms


def compose(
    categories: Sequence[SourcePool],
    special_pool: SourcePool | None,
    target_ms: int,
    mode: SelectionMode | str = SelectionMode.SEQUENTIAL,
    weights: Mapping[str, float] | None = None,
    *,
    rng: random.Random | None = None,
    round_size: int | None = None,
) -> list[Song]:
    """Compose a playlist and return its songs in play order."""
    composer = PlaylistComposer(mode, weights=weights, rng=rng, round_size=round_size)
    return composer.run(categories, special_pool, target_ms).songs
