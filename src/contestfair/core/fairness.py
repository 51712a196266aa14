"""Fairness auditing of a completed selection."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

import pendulum

from ..schemas import Contest, FairnessAlgorithm, Participant, RegistrationRecord

HIGH_FRAUD_SCORE = 70
RATIO_TOLERANCE = 0.01
PLATFORM_DIVERSITY_FLOOR = 0.5
TIME_SKEW_LIMIT = 0.7

RATIO_PENALTY = 10
DUPLICATE_PENALTY = 30
FRAUD_PENALTY = 25
PLATFORM_PENALTY = 15
TIME_SKEW_PENALTY = 10

_SELECTION_CRITERIA: dict[str, str] = {
    FairnessAlgorithm.PURE_RANDOM.value: (
        "Winners were drawn with a cryptographically secure Fisher-Yates shuffle "
        "(or a published seed when one was set). Every participant had the same "
        "probability of winning."
    ),
    FairnessAlgorithm.WEIGHTED_RANDOM.value: (
        "Winners were drawn at random with probability proportional to engagement, "
        "referrals and priority. Higher engagement improves the odds but never "
        "guarantees a win, and every participant keeps a non-zero chance."
    ),
    FairnessAlgorithm.PRIORITY_BASED.value: (
        "Winners are the participants with the highest priority score; ties go to "
        "the earliest registration. The ranking is deterministic and can be "
        "announced in advance."
    ),
    FairnessAlgorithm.TIME_BASED.value: (
        "Participants were split into registration-time windows and winners were "
        "drawn at random from each window, so every period is represented."
    ),
    FairnessAlgorithm.HYBRID.value: (
        "Winners were ranked by a composite score combining a random draw, "
        "engagement, priority and registration time."
    ),
}


@dataclass(slots=True)
class TimeDistribution:
    """Spread of registration times within a group of records."""

    earliest: datetime | None = None
    latest: datetime | None = None
    spread_seconds: float = 0.0
    skewness: float = 0.0


@dataclass(slots=True)
class WinnerSummary:
    """Public-safe projection of a winning participant."""

    id: str
    name: str
    email: str | None
    engagement_score: int
    priority: int
    registration_date: datetime
    platform: str

    @classmethod
    def from_participant(cls, participant: Participant) -> "WinnerSummary":
        return cls(
            id=participant.id,
            name=participant.name,
            email=participant.email,
            engagement_score=participant.engagement_score,
            priority=participant.priority,
            registration_date=participant.registration_date,
            platform=participant.platform,
        )


@dataclass(slots=True)
class FairnessMetrics:
    duplicates_detected: int
    fraud_attempts: int
    average_engagement: float
    platform_distribution: dict[str, int]
    time_distribution: TimeDistribution
    selection_criteria: str


@dataclass(slots=True)
class FairnessReport:
    """Auditable summary of one selection run."""

    algorithm: str
    timestamp: datetime
    total_participants: int
    total_winners: int
    fairness_score: int
    metrics: FairnessMetrics
    winners: list[WinnerSummary] = field(default_factory=list)


def analyze_time_distribution(records: Sequence[RegistrationRecord]) -> TimeDistribution:
    """Summarize registration times of ``records``.

    Skewness is ``|mean - median| / range`` over the timestamps, with the median
    taken as the element at index ``n // 2`` of the sorted values. It is 0 when
    all registrations share one instant.
    """
    dates = sorted(
        record.registration_date
        for record in records
        if record.registration_date is not None
    )
    if not dates:
        return TimeDistribution()

    times = [value.timestamp() for value in dates]
    mean = sum(times) / len(times)
    median = times[len(times) // 2]
    spread = times[-1] - times[0]
    skewness = abs(mean - median) / spread if spread > 0 else 0.0
    return TimeDistribution(
        earliest=dates[0],
        latest=dates[-1],
        spread_seconds=spread,
        skewness=skewness,
    )


def calculate_fairness_score(
    contest: Contest,
    participants: Sequence[Participant],
    winners: Sequence[Participant],
) -> int:
    """Audit a selection and return a score between 0 and 100.

    Starting from 100, independent deductions apply for a winner ratio that
    drifts from the configured one (-10), any duplicate winner (-30), any
    winner with a fraud score above 70 (-25), poor platform coverage among
    winners when the pool spans several platforms (-15), and a skewed
    registration-time distribution among winners (-10).
    """
    score = 100

    if participants:
        expected_ratio = contest.number_of_winners / len(participants)
        actual_ratio = len(winners) / len(participants)
        if abs(expected_ratio - actual_ratio) > RATIO_TOLERANCE:
            score -= RATIO_PENALTY

    if any(winner.is_duplicate for winner in winners):
        score -= DUPLICATE_PENALTY

    if any(winner.fraud_score > HIGH_FRAUD_SCORE for winner in winners):
        score -= FRAUD_PENALTY

    platforms = {participant.platform for participant in participants}
    if len(platforms) > 1:
        winner_platforms = {winner.platform for winner in winners}
        if len(winner_platforms) / len(platforms) < PLATFORM_DIVERSITY_FLOOR:
            score -= PLATFORM_PENALTY

    if analyze_time_distribution(winners).skewness > TIME_SKEW_LIMIT:
        score -= TIME_SKEW_PENALTY

    return max(0, min(100, score))


def explain_selection_criteria(algorithm: str) -> str:
    return _SELECTION_CRITERIA.get(algorithm, "Custom selection algorithm")


def _average(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _distribution(participants: Sequence[Participant], attribute: str) -> dict[str, int]:
    counter: Counter[str] = Counter(
        str(getattr(participant, attribute, None) or "Unknown")
        for participant in participants
    )
    return dict(counter)


def generate_fairness_report(
    contest: Contest,
    participants: Sequence[Participant],
    winners: Sequence[Participant],
    algorithm: str,
    *,
    generated_at: datetime | None = None,
) -> FairnessReport:
    """Assemble the audit report for a selection.

    Parameters
    ----------
    contest : Contest
        Contest the selection ran for.
    participants : Sequence[Participant]
        Eligible pool handed to the strategy.
    winners : Sequence[Participant]
        Ordered winners returned by the strategy.
    algorithm : str
        Name of the strategy that produced ``winners``.
    generated_at : datetime | None, default: None
        Report timestamp; the current UTC time when omitted.

    Returns
    -------
    FairnessReport
        Counts, fairness score, pool metrics and the public winner projection.
    """
    metrics = FairnessMetrics(
        duplicates_detected=sum(1 for p in participants if p.is_duplicate),
        fraud_attempts=sum(1 for p in participants if p.fraud_score > HIGH_FRAUD_SCORE),
        average_engagement=_average([p.engagement_score for p in participants]),
        platform_distribution=_distribution(participants, "platform"),
        time_distribution=analyze_time_distribution(participants),
        selection_criteria=explain_selection_criteria(algorithm),
    )
    return FairnessReport(
        algorithm=algorithm,
        timestamp=generated_at or pendulum.now("UTC"),
        total_participants=len(participants),
        total_winners=len(winners),
        fairness_score=calculate_fairness_score(contest, participants, winners),
        metrics=metrics,
        winners=[WinnerSummary.from_participant(winner) for winner in winners],
    )


__all__ = [
    "FairnessMetrics",
    "FairnessReport",
    "TimeDistribution",
    "WinnerSummary",
    "analyze_time_distribution",
    "calculate_fairness_score",
    "explain_selection_criteria",
    "generate_fairness_report",
]
