"""Uniform selection with a Fisher-Yates shuffle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TypeVar

from ...schemas import Contest, FairnessAlgorithm, Participant
from ..random_source import RandomSource, resolve_random_source
from .base import clamp_count

T = TypeVar("T")


def pure_random_selection(
    participants: Sequence[T],
    count: int = 1,
    seed: str | None = None,
    *,
    rng: RandomSource | None = None,
) -> list[T]:
    """Select ``count`` items with equal probability.

    The pool is shuffled with Fisher-Yates (walking ``i`` from the last index
    down to 1 and swapping with ``j`` drawn from ``[0, i]``) and the first
    ``count`` items are returned. OS entropy is used unless ``seed`` is given,
    in which case a :class:`~contestfair.core.random_source.SeededRandomSource`
    makes the draw reproducible from the published seed. ``rng`` overrides
    both.
    """
    size = clamp_count(count, len(participants))
    if size == 0:
        return []

    source = resolve_random_source(seed=seed, rng=rng)
    pool = list(participants)
    for i in range(len(pool) - 1, 0, -1):
        j = source.randbelow(i + 1)
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:size]


@dataclass
class PureRandomConfig:
    """Configuration for pure random selection."""

    use_contest_seed: bool = True


class PureRandomStrategy:
    """Equal-probability draw, reproducible when the contest publishes a seed."""

    algorithm = FairnessAlgorithm.PURE_RANDOM.value

    def __init__(
        self,
        *,
        config: PureRandomConfig | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self._config = config or PureRandomConfig()
        self._rng = rng

    def select(
        self,
        participants: Sequence[Participant],
        count: int,
        contest: Contest,
    ) -> list[Participant]:
        seed = contest.random_seed if self._config.use_contest_seed else None
        return pure_random_selection(participants, count, seed, rng=self._rng)
