"""Pydantic schema definitions for contests and participants."""

from __future__ import annotations

from .contest import (
    Contest,
    ContestStatus,
    EngagementWeights,
    FairnessAlgorithm,
)
from .participant import (
    Participant,
    ParticipantStage,
    RegistrationRecord,
    RegistrationRequest,
)

__all__ = [
    "Contest",
    "ContestStatus",
    "EngagementWeights",
    "FairnessAlgorithm",
    "Participant",
    "ParticipantStage",
    "RegistrationRecord",
    "RegistrationRequest",
]
