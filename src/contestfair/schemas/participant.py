from __future__ import annotations

from datetime import datetime
from enum import Enum

import pendulum
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ParticipantStage(str, Enum):
    """Workflow stage of a participant within a contest."""

    REGISTERED = "Registered"
    QUALIFIED = "Qualified"
    FINALIST = "Finalist"
    WINNER = "Winner"
    DISQUALIFIED = "Disqualified"


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    # Naive timestamps are taken as UTC.
    return pendulum.instance(value, tz="UTC")


class RegistrationRecord(BaseModel):
    """Identity signals captured when somebody registers for a contest."""

    id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("id", "_id"),
    )
    email: str | None = None
    phone: str | None = None
    device_fingerprint: str | None = None
    ip_address: str | None = None
    registration_date: datetime | None = None
    unique_hash: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("registration_date")
    @classmethod
    def _normalize_registration_date(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class Participant(RegistrationRecord):
    """Read-only view of a contest participant as seen by the selection core."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    name: str = ""
    email: str | None = None
    platform: str = "Other"
    engagement_score: int = Field(default=0, ge=0)
    priority: int = 0
    registration_date: datetime
    is_duplicate: bool = False
    fraud_score: int = Field(default=0, ge=0, le=100)
    referrals: list[str] | int = Field(default_factory=list)
    referred_by: str | None = None
    stage: ParticipantStage = ParticipantStage.REGISTERED

    @field_validator("referrals", mode="before")
    @classmethod
    def _stringify_referrals(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        return value

    @property
    def referral_count(self) -> int:
        if isinstance(self.referrals, int):
            return max(self.referrals, 0)
        return len(self.referrals)


class RegistrationRequest(BaseModel):
    """Sign-up submitted for a contest, before hashing and fraud scoring."""

    id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("id", "_id"),
    )
    name: str = ""
    email: str
    phone: str | None = None
    platform: str = "Other"
    ip_address: str | None = None
    user_agent: str | None = None
    referred_by: str | None = None
    registration_date: datetime | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("id", "referred_by", mode="before")
    @classmethod
    def _stringify_ids(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("registration_date")
    @classmethod
    def _normalize_registration_date(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)
