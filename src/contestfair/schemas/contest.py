from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FairnessAlgorithm(str, Enum):
    """Names of the built-in winner selection strategies."""

    PURE_RANDOM = "PureRandom"
    WEIGHTED_RANDOM = "WeightedRandom"
    PRIORITY_BASED = "PriorityBased"
    TIME_BASED = "TimeBased"
    HYBRID = "Hybrid"


class ContestStatus(str, Enum):
    DRAFT = "Draft"
    ACTIVE = "Active"
    PAUSED = "Paused"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class EngagementWeights(BaseModel):
    """Multipliers used by weighted random selection."""

    engagement_multiplier: float = 1.0
    referral_bonus: float = 5.0
    priority_factor: float = 1.0

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Contest(BaseModel):
    """Contest settings consumed by the selection engine."""

    contest_id: str = Field(
        default="",
        validation_alias=AliasChoices("contest_id", "contestId", "id", "_id"),
    )
    title: str | None = None
    number_of_winners: int = Field(default=1, ge=1)
    random_seed: str | None = None
    engagement_weights: EngagementWeights = Field(default_factory=EngagementWeights)
    # Left as a plain string so unknown names reach the engine and fail there.
    fairness_algorithm: str = FairnessAlgorithm.PURE_RANDOM.value
    status: ContestStatus = ContestStatus.ACTIVE

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("contest_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        if value is None:
            return ""
        return str(value)

    @field_validator("fairness_algorithm", mode="before")
    @classmethod
    def _algorithm_name(cls, value: object) -> object:
        if isinstance(value, FairnessAlgorithm):
            return value.value
        return value
