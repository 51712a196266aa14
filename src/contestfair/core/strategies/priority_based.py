"""Deterministic top-K selection by priority."""

from __future__ import annotations

from typing import Sequence

from ...schemas import Contest, FairnessAlgorithm, Participant
from .base import clamp_count


def priority_sort_key(participant: Participant) -> tuple:
    # Higher priority first, earlier registration breaks ties.
    return (-participant.priority, participant.registration_date)


def priority_based_selection(
    participants: Sequence[Participant],
    count: int = 1,
) -> list[Participant]:
    """Return the ``count`` highest-priority participants.

    The ordering is fully deterministic, so the criteria can be announced
    before the draw.
    """
    size = clamp_count(count, len(participants))
    if size == 0:
        return []
    return sorted(participants, key=priority_sort_key)[:size]


class PriorityBasedStrategy:
    algorithm = FairnessAlgorithm.PRIORITY_BASED.value

    def select(
        self,
        participants: Sequence[Participant],
        count: int,
        contest: Contest,
    ) -> list[Participant]:
        return priority_based_selection(participants, count)
