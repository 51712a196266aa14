"""Fitness-proportionate (roulette wheel) selection without replacement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ...schemas import Contest, EngagementWeights, FairnessAlgorithm, Participant
from ..random_source import RandomSource, resolve_random_source
from .base import clamp_count
from .pure_random import pure_random_selection

MIN_WEIGHT = 1.0


def participant_weight(participant: Participant, weights: EngagementWeights) -> float:
    """Return ``1 + engagement*m + referrals*b + priority*f`` for a participant."""
    return (
        1.0
        + participant.engagement_score * weights.engagement_multiplier
        + participant.referral_count * weights.referral_bonus
        + participant.priority * weights.priority_factor
    )


def weighted_random_selection(
    participants: Sequence[Participant],
    count: int = 1,
    weights: EngagementWeights | None = None,
    *,
    rng: RandomSource | None = None,
    min_weight: float = MIN_WEIGHT,
) -> list[Participant]:
    """Draw winners with probability proportional to their weight.

    Every round recomputes the total over the remaining pool, draws a value in
    ``[0, total)`` and walks the pool until the running sum reaches it. The
    chosen participant is removed before the next round.

    Each weight is floored at ``min_weight`` (1 by default), so negative
    multipliers or priorities never remove a participant from the draw. With
    ``min_weight=0`` a pool whose total weight is not positive falls back to
    :func:`pure_random_selection`.
    """
    size = clamp_count(count, len(participants))
    if size == 0:
        return []

    weights = weights or EngagementWeights()
    source = resolve_random_source(rng=rng)
    remaining = [
        (participant, max(participant_weight(participant, weights), min_weight, 0.0))
        for participant in participants
    ]

    if sum(weight for _, weight in remaining) <= 0:
        return pure_random_selection(participants, size, rng=source)

    winners: list[Participant] = []
    while len(winners) < size and remaining:
        total = sum(weight for _, weight in remaining)
        if total <= 0:
            winners.extend(
                pure_random_selection(
                    [participant for participant, _ in remaining],
                    size - len(winners),
                    rng=source,
                )
            )
            break
        draw = source.random() * total
        accumulated = 0.0
        selected = len(remaining) - 1
        for index, (_, weight) in enumerate(remaining):
            accumulated += weight
            if accumulated >= draw:
                selected = index
                break
        winner, _ = remaining.pop(selected)
        winners.append(winner)
    return winners


@dataclass
class WeightedRandomConfig:
    """Optional overrides applied on top of the contest engagement weights."""

    engagement_multiplier: float | None = None
    referral_bonus: float | None = None
    priority_factor: float | None = None
    min_weight: float = MIN_WEIGHT

    def apply(self, weights: EngagementWeights) -> EngagementWeights:
        overrides = {
            key: value
            for key, value in (
                ("engagement_multiplier", self.engagement_multiplier),
                ("referral_bonus", self.referral_bonus),
                ("priority_factor", self.priority_factor),
            )
            if value is not None
        }
        if not overrides:
            return weights
        return weights.model_copy(update=overrides)


class WeightedRandomStrategy:
    """Engagement-weighted draw driven by ``Contest.engagement_weights``."""

    algorithm = FairnessAlgorithm.WEIGHTED_RANDOM.value

    def __init__(
        self,
        *,
        config: WeightedRandomConfig | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self._config = config or WeightedRandomConfig()
        self._rng = rng

    def select(
        self,
        participants: Sequence[Participant],
        count: int,
        contest: Contest,
    ) -> list[Participant]:
        weights = self._config.apply(contest.engagement_weights)
        return weighted_random_selection(
            participants,
            count,
            weights,
            rng=self._rng,
            min_weight=self._config.min_weight,
        )
