"""Stratified sampling across registration-time windows."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from ...schemas import Contest, FairnessAlgorithm, Participant
from ..random_source import RandomSource, resolve_random_source
from .base import clamp_count
from .pure_random import pure_random_selection

DEFAULT_WINDOW_COUNT = 5


def split_time_windows(
    participants: Sequence[Participant],
    window_count: int = DEFAULT_WINDOW_COUNT,
) -> list[list[Participant]]:
    """Partition participants into contiguous chronological windows.

    Windows hold ``ceil(n / window_count)`` participants each; the last one
    may be smaller and fewer windows are produced when the pool is small.
    """
    if window_count < 1:
        raise ValueError("window_count must be at least 1")
    ordered = sorted(participants, key=lambda p: p.registration_date)
    if not ordered:
        return []
    window_size = math.ceil(len(ordered) / window_count)
    return [
        ordered[start:start + window_size]
        for start in range(0, len(ordered), window_size)
    ]


def time_based_selection(
    participants: Sequence[Participant],
    count: int = 1,
    window_count: int = DEFAULT_WINDOW_COUNT,
    *,
    rng: RandomSource | None = None,
) -> list[Participant]:
    """Draw ``ceil(count / windows)`` winners per window, then truncate.

    Early and late registrants each get proportional representation instead of
    one period dominating the result.
    """
    size = clamp_count(count, len(participants))
    if size == 0:
        return []

    windows = split_time_windows(participants, window_count)
    per_window = math.ceil(size / len(windows))
    source = resolve_random_source(rng=rng)

    winners: list[Participant] = []
    for window in windows:
        winners.extend(pure_random_selection(window, per_window, rng=source))
    # Small trailing windows can leave the concatenation short of ``size``.
    if len(winners) < size:
        chosen = {id(winner) for winner in winners}
        leftovers = [p for p in participants if id(p) not in chosen]
        winners.extend(pure_random_selection(leftovers, size - len(winners), rng=source))
    return winners[:size]


@dataclass
class TimeBasedConfig:
    """Configuration for stratified time-window sampling."""

    window_count: int = DEFAULT_WINDOW_COUNT

    def __post_init__(self) -> None:
        if self.window_count < 1:
            raise ValueError("window_count must be at least 1")


class TimeBasedStrategy:
    algorithm = FairnessAlgorithm.TIME_BASED.value

    def __init__(
        self,
        *,
        config: TimeBasedConfig | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self._config = config or TimeBasedConfig()
        self._rng = rng

    def select(
        self,
        participants: Sequence[Participant],
        count: int,
        contest: Contest,
    ) -> list[Participant]:
        return time_based_selection(
            participants,
            count,
            self._config.window_count,
            rng=self._rng,
        )
