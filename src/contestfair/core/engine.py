"""Selection engine orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Protocol, Sequence, runtime_checkable

import pendulum
import structlog

from ..schemas import Contest, FairnessAlgorithm, Participant
from .errors import UnknownStrategyError
from .fairness import FairnessReport, generate_fairness_report
from .random_source import RandomSource
from .strategies import (
    HybridStrategy,
    PriorityBasedStrategy,
    PureRandomStrategy,
    TimeBasedStrategy,
    WeightedRandomStrategy,
)


@runtime_checkable
class SelectionStrategy(Protocol):
    """Strategy contract for choosing winners from an eligible pool."""

    algorithm: str

    def select(
        self,
        participants: Sequence[Participant],
        count: int,
        contest: Contest,
    ) -> list[Participant]:
        """Return at most ``count`` distinct winners, best first."""


@dataclass(slots=True)
class SelectionResult:
    """Winners of one selection run plus its audit report."""

    contest_id: str
    algorithm: str
    winners: list[Participant]
    report: FairnessReport

    @property
    def winner_ids(self) -> list[str]:
        return [winner.id for winner in self.winners]


class StrategyRegistry:
    """Mutable registry mapping algorithm names to strategies."""

    def __init__(self, strategies: Iterable[SelectionStrategy] = ()) -> None:
        self._strategies: dict[str, SelectionStrategy] = {}
        for strategy in strategies:
            self.register(strategy)

    def register(self, strategy: SelectionStrategy, *, replace: bool = False) -> None:
        """Register ``strategy`` under its ``algorithm`` name.

        Raises
        ------
        ValueError
            If the name is taken and ``replace`` is ``False``.
        """
        if not replace and strategy.algorithm in self._strategies:
            raise ValueError(f"Strategy '{strategy.algorithm}' is already registered")
        self._strategies[strategy.algorithm] = strategy

    def get(self, algorithm: str) -> SelectionStrategy:
        try:
            return self._strategies[algorithm]
        except KeyError as exc:
            raise UnknownStrategyError(algorithm, list(self._strategies)) from exc

    def __contains__(self, algorithm: object) -> bool:
        return algorithm in self._strategies

    def available(self) -> list[str]:
        return list(self._strategies)


def default_registry(*, rng: RandomSource | None = None) -> StrategyRegistry:
    """Return a registry holding the five built-in strategies.

    ``rng`` is shared by every strategy that draws random numbers.
    """
    return StrategyRegistry(
        [
            PureRandomStrategy(rng=rng),
            WeightedRandomStrategy(rng=rng),
            PriorityBasedStrategy(),
            TimeBasedStrategy(rng=rng),
            HybridStrategy(rng=rng),
        ]
    )


class FairnessEngine:
    """Runs one strategy over an eligible pool and audits the outcome.

    The engine keeps no per-call state; the same instance can serve many
    contests concurrently.
    """

    def __init__(
        self,
        registry: StrategyRegistry | None = None,
        *,
        fallback_algorithm: str | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._registry = registry or default_registry()
        if fallback_algorithm is not None and fallback_algorithm not in self._registry:
            raise UnknownStrategyError(fallback_algorithm, self._registry.available())
        self._fallback_algorithm = fallback_algorithm
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))
        self._logger = structlog.get_logger(__name__)

    @property
    def registry(self) -> StrategyRegistry:
        return self._registry

    def resolve_strategy(self, algorithm: str) -> SelectionStrategy:
        """Return the strategy for ``algorithm``.

        Unknown names raise :class:`UnknownStrategyError` unless the engine was
        built with a ``fallback_algorithm``, kept for contests created before
        the name was validated.
        """
        if algorithm in self._registry or self._fallback_algorithm is None:
            return self._registry.get(algorithm)
        self._logger.warning(
            "selection.algorithm_fallback",
            requested=algorithm,
            fallback=self._fallback_algorithm,
        )
        return self._registry.get(self._fallback_algorithm)

    def select_winners(
        self,
        contest: Contest,
        participants: Sequence[Participant],
        *,
        algorithm: str | FairnessAlgorithm | None = None,
        count: int | None = None,
    ) -> SelectionResult:
        """Select winners for ``contest`` from an already-filtered pool.

        ``algorithm`` and ``count`` override the contest's
        ``fairness_algorithm`` and ``number_of_winners``. An empty pool yields
        an empty result, not an error.
        """
        requested = algorithm or contest.fairness_algorithm
        if isinstance(requested, FairnessAlgorithm):
            requested = requested.value
        strategy = self.resolve_strategy(requested)
        target = count if count is not None else contest.number_of_winners

        pool = list(participants)
        winners = strategy.select(pool, target, contest)
        report = generate_fairness_report(
            contest,
            pool,
            winners,
            strategy.algorithm,
            generated_at=self._now_provider(),
        )

        self._logger.info(
            "selection.completed",
            contest_id=contest.contest_id,
            algorithm=strategy.algorithm,
            pool_size=len(pool),
            requested=target,
            winners=len(winners),
            fairness_score=report.fairness_score,
            seed_prefix=(contest.random_seed or "")[:8] or None,
        )
        return SelectionResult(
            contest_id=contest.contest_id,
            algorithm=strategy.algorithm,
            winners=winners,
            report=report,
        )


__all__ = [
    "FairnessEngine",
    "SelectionResult",
    "SelectionStrategy",
    "StrategyRegistry",
    "default_registry",
]
