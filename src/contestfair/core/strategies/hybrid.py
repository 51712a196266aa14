"""Composite-score ranking mixing randomness with engagement signals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Sequence

import pendulum

from ...schemas import Contest, FairnessAlgorithm, Participant
from ..random_source import RandomSource, resolve_random_source
from .base import clamp_count


@dataclass
class HybridConfig:
    """Weights of the four composite-score components.

    The weights are not normalized; callers choose meaningful proportions.
    """

    random_weight: float = 0.4
    engagement_weight: float = 0.3
    priority_weight: float = 0.2
    time_weight: float = 0.1
    time_horizon_days: float = 30.0


def time_component(
    registration_date: datetime,
    now: datetime,
    horizon_days: float = 30.0,
) -> float:
    """Return ``max(0, 1 - age / horizon)`` clipped to ``[0, 1]``."""
    horizon_seconds = horizon_days * 24 * 60 * 60
    if horizon_seconds <= 0:
        return 0.0
    age_seconds = (now - registration_date).total_seconds()
    return min(1.0, max(0.0, 1.0 - age_seconds / horizon_seconds))


def composite_scores(
    participants: Sequence[Participant],
    config: HybridConfig,
    source: RandomSource,
    now: datetime,
) -> list[tuple[Participant, dict[str, float]]]:
    scored: list[tuple[Participant, dict[str, float]]] = []
    for participant in participants:
        components = {
            "random": source.random(),
            "engagement": participant.engagement_score / 100,
            "priority": participant.priority / 100,
            "time": time_component(
                participant.registration_date,
                now,
                config.time_horizon_days,
            ),
        }
        components["composite"] = (
            components["random"] * config.random_weight
            + components["engagement"] * config.engagement_weight
            + components["priority"] * config.priority_weight
            + components["time"] * config.time_weight
        )
        scored.append((participant, components))
    return scored


def hybrid_selection(
    participants: Sequence[Participant],
    count: int = 1,
    weights: HybridConfig | None = None,
    *,
    rng: RandomSource | None = None,
    now: datetime | None = None,
) -> list[Participant]:
    """Rank participants by composite score and return the top ``count``."""
    size = clamp_count(count, len(participants))
    if size == 0:
        return []

    config = weights or HybridConfig()
    source = resolve_random_source(rng=rng)
    reference = now or pendulum.now("UTC")
    scored = composite_scores(participants, config, source, reference)
    scored.sort(key=lambda item: item[1]["composite"], reverse=True)
    return [participant for participant, _ in scored[:size]]


class HybridStrategy:
    algorithm = FairnessAlgorithm.HYBRID.value

    def __init__(
        self,
        *,
        config: HybridConfig | None = None,
        rng: RandomSource | None = None,
        now_provider: Callable[[], Any] | None = None,
    ) -> None:
        self._config = config or HybridConfig()
        self._rng = rng
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))

    def select(
        self,
        participants: Sequence[Participant],
        count: int,
        contest: Contest,
    ) -> list[Participant]:
        return hybrid_selection(
            participants,
            count,
            self._config,
            rng=self._rng,
            now=self._now_provider(),
        )
