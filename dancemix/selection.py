"""Category selection policies.

A policy decides which category the composer draws from next. The
composer reports the outcome of every draw back through ``report`` so the
policy can retire categories that have run dry.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Mapping, Sequence
from enum import Enum

logger = logging.getLogger(__name__)


class SelectionMode(str, Enum):
    SEQUENTIAL = "sequential"
    WEIGHTED = "weighted"


class SelectionPolicy:
    """Interface shared by the two policies."""

    def choose(self, last: str | None) -> str | None:
        """Name of the next category to draw from, or None to end the run."""
        raise NotImplementedError

    def report(self, name: str, produced: bool) -> None:
        """Record whether the draw from ``name`` yielded a song."""

    def round_complete(self) -> bool:
        """True right after the last category of a full pass was drawn."""
        return False


# ---------------------------------------------------------------------------
# Sequential: strict round-robin in declared order
# ---------------------------------------------------------------------------

class SequentialPolicy(SelectionPolicy):
    """Visit every category once per pass, in declared order.

    An empty category is skipped for that pass. A whole pass in which no
    category produced anything ends the run.
    """

    def __init__(self, names: Sequence[str]) -> None:
        self._names = list(names)
        self._index = 0
        self._produced = False

    def choose(self, last: str | None) -> str | None:
        if self._index == len(self._names):
            if not self._produced:
                return None
            self._index = 0
            self._produced = False
        name = self._names[self._index]
        self._index += 1
        return name

    def report(self, name: str, produced: bool) -> None:
        if produced:
            self._produced = True

    def round_complete(self) -> bool:
        return self._index == len(self._names)


# ---------------------------------------------------------------------------
# Weighted: proportional draw without back-to-back repeats
# ---------------------------------------------------------------------------

class WeightedPolicy(SelectionPolicy):
    """Draw a category with probability proportional to its weight.

    The previously drawn category is excluded unless nothing else with a
    positive weight is left. A category that comes back empty has its
    weight forced to 0 for the rest of the run. Weights are copied, so the
    caller's mapping is never modified.
    """

    def __init__(self, weights: Mapping[str, float], rng: random.Random | None = None) -> None:
        self._weights: dict[str, float] = {name: float(w) for name, w in weights.items()}
        self._rng = rng or random.Random()

    @property
    def weights(self) -> dict[str, float]:
        """Current remaining weights."""
        return dict(self._weights)

    def choose(self, last: str | None) -> str | None:
        live = [(name, w) for name, w in self._weights.items() if w > 0]
        if not live:
            return None
        eligible = [(name, w) for name, w in live if name != last]
        if not eligible:
            # only the last category is left, repeating beats stalling
            eligible = live

        total = math.fsum(w for _, w in eligible)
        r = self._rng.random() * total
        cumulative = 0.0
        for name, w in eligible:
            cumulative += w
            if r < cumulative:
                return name
        return eligible[-1][0]

    def report(self, name: str, produced: bool) -> None:
        if not produced and self._weights.get(name, 0) > 0:
            logger.debug("Category '%s' exhausted, weight set to 0", name)
            self._weights[name] = 0.0
