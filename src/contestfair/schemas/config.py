"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EngineConfig(BaseModel):
    fallback_algorithm: str | None = None

    model_config = ConfigDict(extra="forbid")


class StrategyConfig(BaseModel):
    pure_random: dict[str, Any] | None = None
    weighted: dict[str, Any] | None = None
    time_based: dict[str, Any] | None = None
    hybrid: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")


class EligibilityConfig(BaseModel):
    stages: list[str] | None = None
    exclude_duplicates: bool | None = None
    max_fraud_score: int | None = Field(default=None, ge=0, le=101)

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    strategies: StrategyConfig = Field(default_factory=StrategyConfig)
    eligibility: EligibilityConfig = Field(default_factory=EligibilityConfig)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        engine_settings = self.engine.model_dump(exclude_none=True)
        if engine_settings:
            settings["engine"] = engine_settings
        strategy_settings = self.strategies.model_dump(exclude_none=True)
        if strategy_settings:
            settings["strategies"] = strategy_settings
        eligibility_settings = self.eligibility.model_dump(exclude_none=True)
        if eligibility_settings:
            settings["eligibility"] = eligibility_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValueError("Config must be a mapping")
    return AppConfig.model_validate(raw)


__all__ = [
    "AppConfig",
    "EligibilityConfig",
    "EngineConfig",
    "StrategyConfig",
    "load_config",
]
