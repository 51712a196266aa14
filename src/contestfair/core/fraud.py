"""Heuristic fraud scoring over shared identity signals."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterable

from ..schemas import RegistrationRecord

EMAIL_PENALTY = 40
DEVICE_PENALTY = 30
IP_PENALTY = 20
BURST_PENALTY = 10

DEVICE_SHARE_LIMIT = 2
IP_SHARE_LIMIT = 5
BURST_LIMIT = 10
BURST_WINDOW = timedelta(seconds=60)

SUSPICIOUS_THRESHOLD = 70
MAX_SCORE = 100


@dataclass(slots=True)
class FraudAssessment:
    """Fraud score together with the signals that contributed to it."""

    score: int
    signals: list[str] = field(default_factory=list)

    @property
    def is_suspicious(self) -> bool:
        return self.score > SUSPICIOUS_THRESHOLD


def _others(
    candidate: RegistrationRecord,
    population: Iterable[RegistrationRecord],
) -> list[RegistrationRecord]:
    if candidate.id is None:
        return list(population)
    return [record for record in population if record.id != candidate.id]


def _same_email(left: str | None, right: str | None) -> bool:
    if not left or not right:
        return False
    return left.strip().lower() == right.strip().lower()


def assess_fraud(
    candidate: RegistrationRecord,
    reference_population: Iterable[RegistrationRecord],
) -> FraudAssessment:
    """Score ``candidate`` against the other registrations of the contest.

    Each check is an independent additive signal:

    * ``shared_email`` (+40): any other record uses the same email.
    * ``shared_device`` (+30): more than 2 other records share the device
      fingerprint.
    * ``shared_ip`` (+20): more than 5 other records share the IP address.
    * ``registration_burst`` (+10): more than 10 other records registered
      within 60 seconds of the candidate.

    The total is capped at 100.
    """
    others = _others(candidate, reference_population)
    score = 0
    signals: list[str] = []

    if any(_same_email(candidate.email, record.email) for record in others):
        score += EMAIL_PENALTY
        signals.append("shared_email")

    if candidate.device_fingerprint:
        shared = sum(
            1 for record in others
            if record.device_fingerprint == candidate.device_fingerprint
        )
        if shared > DEVICE_SHARE_LIMIT:
            score += DEVICE_PENALTY
            signals.append("shared_device")

    if candidate.ip_address:
        shared = sum(1 for record in others if record.ip_address == candidate.ip_address)
        if shared > IP_SHARE_LIMIT:
            score += IP_PENALTY
            signals.append("shared_ip")

    if candidate.registration_date is not None:
        registered_at = candidate.registration_date
        nearby = sum(
            1 for record in others
            if record.registration_date is not None
            and abs(record.registration_date - registered_at) < BURST_WINDOW
        )
        if nearby > BURST_LIMIT:
            score += BURST_PENALTY
            signals.append("registration_burst")

    return FraudAssessment(score=min(score, MAX_SCORE), signals=signals)


def calculate_fraud_score(
    candidate: RegistrationRecord,
    reference_population: Iterable[RegistrationRecord],
) -> int:
    """Return the 0-100 fraud score of ``candidate``."""
    return assess_fraud(candidate, reference_population).score


__all__ = [
    "FraudAssessment",
    "assess_fraud",
    "calculate_fraud_score",
]
