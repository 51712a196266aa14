"""Participant workflow transitions that feed the selection engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence
from uuid import uuid4

import pendulum

from .core.errors import FairnessError
from .core.fraud import FraudAssessment, assess_fraud
from .core.hashing import build_hash_index, generate_device_fingerprint, generate_identity_hash
from .core.priority_queue import PriorityQueue
from .schemas import Participant, ParticipantStage, RegistrationRequest

BASE_PRIORITY = 50
REFERRAL_ENGAGEMENT_BONUS = 10
QUALIFICATION_PRIORITY_BOOST = 20
MAX_ELIGIBLE_FRAUD_SCORE = 70


class DuplicateRegistrationError(FairnessError):
    """Raised when the same identity registers twice for one contest."""

    def __init__(self, existing: Participant):
        super().__init__(f"Participant already registered for this contest (id {existing.id!r})")
        self.existing = existing


@dataclass(slots=True)
class RegistrationOutcome:
    """New participant, its fraud assessment and the credited referrer, if any."""

    participant: Participant
    fraud: FraudAssessment
    referrer: Participant | None = None


@dataclass
class EligibilityPolicy:
    """Rules deciding which participants enter a winner draw."""

    stages: tuple[ParticipantStage, ...] = (
        ParticipantStage.QUALIFIED,
        ParticipantStage.FINALIST,
    )
    exclude_duplicates: bool = True
    max_fraud_score: int = MAX_ELIGIBLE_FRAUD_SCORE

    def allows(self, participant: Participant) -> bool:
        if participant.stage not in self.stages:
            return False
        if self.exclude_duplicates and participant.is_duplicate:
            return False
        return participant.fraud_score < self.max_fraud_score

    def filter(self, participants: Iterable[Participant]) -> list[Participant]:
        return [participant for participant in participants if self.allows(participant)]


def transition_stage(participant: Participant, stage: ParticipantStage) -> Participant:
    """Return a copy of ``participant`` moved to ``stage``.

    Entering ``Qualified`` from another stage boosts priority by 20.
    """
    update: dict[str, object] = {"stage": stage}
    if stage is ParticipantStage.QUALIFIED and participant.stage is not ParticipantStage.QUALIFIED:
        update["priority"] = participant.priority + QUALIFICATION_PRIORITY_BOOST
    return participant.model_copy(update=update)


def record_engagement(participant: Participant, value: int) -> Participant:
    """Return a copy with ``value`` engagement points and half as much priority."""
    if value < 0:
        raise ValueError("engagement can only increase")
    return participant.model_copy(
        update={
            "engagement_score": participant.engagement_score + value,
            "priority": participant.priority + value // 2,
        }
    )


def qualification_order(left: Participant, right: Participant) -> int:
    # Higher priority + engagement leaves the queue first.
    return (right.priority + right.engagement_score) - (left.priority + left.engagement_score)


def rank_for_qualification(
    participants: Sequence[Participant],
    count: int | None = None,
) -> list[Participant]:
    """Pick the strongest registrations with a priority queue."""
    queue = PriorityQueue.from_iterable(participants, qualification_order)
    limit = len(participants) if count is None else min(count, len(participants))
    return queue.take(limit)


def find_registration(
    email: str,
    phone: str | None,
    contest_id: str,
    existing: Iterable[Participant],
) -> Participant | None:
    """Return the earlier registration sharing this identity hash, if any."""
    unique_hash = generate_identity_hash(email, phone, contest_id)
    return build_hash_index(existing).get(unique_hash)


def is_duplicate_registration(
    email: str,
    phone: str | None,
    contest_id: str,
    existing: Iterable[Participant],
) -> bool:
    return find_registration(email, phone, contest_id, existing) is not None


def credit_referral(referrer: Participant, referral_id: str) -> Participant:
    """Return a copy of ``referrer`` with ``referral_id`` recorded and +10 engagement."""
    if isinstance(referrer.referrals, int):
        referrals: list[str] | int = referrer.referrals + 1
    else:
        referrals = [*referrer.referrals, referral_id]
    return referrer.model_copy(
        update={
            "referrals": referrals,
            "engagement_score": referrer.engagement_score + REFERRAL_ENGAGEMENT_BONUS,
        }
    )


def register_participant(
    request: RegistrationRequest,
    existing: Sequence[Participant],
    contest_id: str,
    *,
    reject_duplicates: bool = True,
    registered_at: datetime | None = None,
) -> RegistrationOutcome:
    """Turn a sign-up into a scored ``Participant``.

    Parameters
    ----------
    request : RegistrationRequest
        Submitted sign-up.
    existing : Sequence[Participant]
        Participants already registered for ``contest_id``.
    contest_id : str
        Contest being joined; part of the identity hash.
    reject_duplicates : bool, default: True
        Raise on a repeated identity instead of flagging ``is_duplicate``.
    registered_at : datetime | None, default: None
        Registration time when the request carries none; now (UTC) otherwise.

    Returns
    -------
    RegistrationOutcome
        The new participant (stage ``Registered``, priority 50, fraud score
        against ``existing``) and, when ``referred_by`` names an existing
        participant, that referrer with the referral credited.

    Raises
    ------
    DuplicateRegistrationError
        If the identity is already registered and ``reject_duplicates`` is set.
    InvalidInputError
        If the email or contest id is missing.
    """
    pool = list(existing)
    unique_hash = generate_identity_hash(request.email, request.phone, contest_id)
    duplicate_of = build_hash_index(pool).get(unique_hash)
    if duplicate_of is not None and reject_duplicates:
        raise DuplicateRegistrationError(duplicate_of)

    fingerprint = None
    if request.ip_address or request.user_agent:
        fingerprint = generate_device_fingerprint(request.ip_address, request.user_agent)

    participant = Participant(
        id=request.id or uuid4().hex,
        name=request.name,
        email=request.email,
        phone=request.phone,
        platform=request.platform,
        ip_address=request.ip_address,
        device_fingerprint=fingerprint,
        unique_hash=unique_hash,
        referred_by=request.referred_by,
        registration_date=request.registration_date or registered_at or pendulum.now("UTC"),
        priority=BASE_PRIORITY,
        is_duplicate=duplicate_of is not None,
        stage=ParticipantStage.REGISTERED,
    )
    assessment = assess_fraud(participant, pool)
    participant = participant.model_copy(update={"fraud_score": assessment.score})

    referrer = None
    if request.referred_by:
        match = next((p for p in pool if p.id == request.referred_by), None)
        if match is not None:
            referrer = credit_referral(match, participant.id)
    return RegistrationOutcome(participant=participant, fraud=assessment, referrer=referrer)


def score_registrations(
    participants: Sequence[Participant],
    contest_id: str | None = None,
) -> list[Participant]:
    """Recompute duplicate flags and fraud scores over a registration snapshot.

    Records are replayed in registration order; each one is scored against
    the registrations before it. Records without ``unique_hash`` get one when
    ``contest_id`` is given and they carry an email. Input order is kept.
    """
    order = sorted(range(len(participants)), key=lambda i: participants[i].registration_date)
    scored: dict[int, Participant] = {}
    earlier: list[Participant] = []
    seen_hashes: set[str] = set()
    for index in order:
        participant = participants[index]
        unique_hash = participant.unique_hash
        if unique_hash is None and contest_id and (participant.email or "").strip():
            unique_hash = generate_identity_hash(participant.email, participant.phone, contest_id)
        is_duplicate = participant.is_duplicate or (
            unique_hash is not None and unique_hash in seen_hashes
        )
        updated = participant.model_copy(
            update={
                "unique_hash": unique_hash,
                "is_duplicate": is_duplicate,
                "fraud_score": assess_fraud(participant, earlier).score,
            }
        )
        if unique_hash is not None:
            seen_hashes.add(unique_hash)
        earlier.append(updated)
        scored[index] = updated
    return [scored[index] for index in range(len(participants))]


__all__ = [
    "BASE_PRIORITY",
    "DuplicateRegistrationError",
    "EligibilityPolicy",
    "QUALIFICATION_PRIORITY_BOOST",
    "REFERRAL_ENGAGEMENT_BONUS",
    "RegistrationOutcome",
    "credit_referral",
    "find_registration",
    "is_duplicate_registration",
    "qualification_order",
    "rank_for_qualification",
    "record_engagement",
    "register_participant",
    "score_registrations",
    "transition_stage",
]
