"""Dependency injection container for the selection engine."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import FairnessEngine, StrategyRegistry
from .core.strategies import (
    HybridConfig,
    HybridStrategy,
    PriorityBasedStrategy,
    PureRandomConfig,
    PureRandomStrategy,
    TimeBasedConfig,
    TimeBasedStrategy,
    WeightedRandomConfig,
    WeightedRandomStrategy,
)
from .pipeline import SelectionLedger, SelectionPipeline
from .schemas import ParticipantStage
from .workflow import EligibilityPolicy


class SelectionContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    pure_random_strategy = providers.Singleton(PureRandomStrategy)
    weighted_strategy = providers.Singleton(WeightedRandomStrategy)
    priority_strategy = providers.Singleton(PriorityBasedStrategy)
    time_based_strategy = providers.Singleton(TimeBasedStrategy)
    hybrid_strategy = providers.Singleton(HybridStrategy)

    strategies = providers.List(
        pure_random_strategy,
        weighted_strategy,
        priority_strategy,
        time_based_strategy,
        hybrid_strategy,
    )

    registry = providers.Singleton(StrategyRegistry, strategies=strategies)

    engine = providers.Singleton(
        FairnessEngine,
        registry=registry,
        fallback_algorithm=config.fallback_algorithm,
    )

    eligibility = providers.Singleton(EligibilityPolicy)

    ledger = providers.Singleton(SelectionLedger)

    pipeline = providers.Factory(
        SelectionPipeline,
        engine=engine,
        eligibility=eligibility,
        ledger=ledger,
    )


def create_container(*, settings: dict | None = None) -> SelectionContainer:
    """Instantiate container with optional overrides."""

    container = SelectionContainer()

    if not settings:
        return container

    engine_settings = settings.get("engine", {}) if isinstance(settings, dict) else {}
    if engine_settings:
        container.config.override(engine_settings)

    strategy_settings = settings.get("strategies", {}) if isinstance(settings, dict) else {}

    if "pure_random" in strategy_settings:
        pure_config = PureRandomConfig(**strategy_settings["pure_random"])
        container.pure_random_strategy.override(
            providers.Singleton(PureRandomStrategy, config=pure_config)
        )

    if "weighted" in strategy_settings:
        weighted_config = WeightedRandomConfig(**strategy_settings["weighted"])
        container.weighted_strategy.override(
            providers.Singleton(WeightedRandomStrategy, config=weighted_config)
        )

    if "time_based" in strategy_settings:
        time_config = TimeBasedConfig(**strategy_settings["time_based"])
        container.time_based_strategy.override(
            providers.Singleton(TimeBasedStrategy, config=time_config)
        )

    if "hybrid" in strategy_settings:
        hybrid_config = HybridConfig(**strategy_settings["hybrid"])
        container.hybrid_strategy.override(
            providers.Singleton(HybridStrategy, config=hybrid_config)
        )

    eligibility_settings = settings.get("eligibility", {}) if isinstance(settings, dict) else {}
    if eligibility_settings:
        policy_kwargs = dict(eligibility_settings)
        if "stages" in policy_kwargs:
            policy_kwargs["stages"] = tuple(
                ParticipantStage(stage) for stage in policy_kwargs["stages"]
            )
        container.eligibility.override(
            providers.Singleton(EligibilityPolicy, **policy_kwargs)
        )

    return container
