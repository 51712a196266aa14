from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from contestfair.core import (
    FairnessEngine,
    FairnessError,
    PriorityBasedStrategy,
    StrategyRegistry,
    UnknownStrategyError,
    default_registry,
)
from contestfair.schemas import Contest, FairnessAlgorithm, Participant

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)
FIXED_NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)


def build_pool(size: int = 6) -> list[Participant]:
    return [
        Participant(
            id=f"p{i}",
            priority=i * 10,
            engagement_score=i,
            registration_date=BASE_TIME + timedelta(hours=i),
        )
        for i in range(size)
    ]


class FirstComeStrategy:
    algorithm = "FirstCome"

    def select(self, participants, count, contest):
        return sorted(participants, key=lambda p: p.registration_date)[:count]


def test_default_registry_holds_builtin_strategies():
    registry = default_registry()

    assert sorted(registry.available()) == sorted(member.value for member in FairnessAlgorithm)


def test_unknown_algorithm_raises():
    engine = FairnessEngine()
    contest = Contest(contest_id="c1", fairness_algorithm="Bogus")

    with pytest.raises(UnknownStrategyError) as excinfo:
        engine.select_winners(contest, build_pool())

    assert isinstance(excinfo.value, KeyError)
    assert isinstance(excinfo.value, FairnessError)
    assert "Bogus" in str(excinfo.value)
    assert "PureRandom" in excinfo.value.available


def test_configured_fallback_replaces_unknown_algorithm():
    engine = FairnessEngine(fallback_algorithm="PriorityBased")
    contest = Contest(contest_id="c1", fairness_algorithm="Legacy", number_of_winners=2)

    result = engine.select_winners(contest, build_pool())

    assert result.algorithm == "PriorityBased"
    assert result.winner_ids == ["p5", "p4"]


def test_invalid_fallback_is_rejected_at_construction():
    with pytest.raises(UnknownStrategyError):
        FairnessEngine(fallback_algorithm="Nope")


def test_overrides_take_precedence_over_contest():
    engine = FairnessEngine(now_provider=lambda: FIXED_NOW)
    contest = Contest(contest_id="c1", fairness_algorithm="PureRandom", number_of_winners=1)

    result = engine.select_winners(
        contest,
        build_pool(),
        algorithm=FairnessAlgorithm.PRIORITY_BASED,
        count=3,
    )

    assert result.algorithm == "PriorityBased"
    assert result.winner_ids == ["p5", "p4", "p3"]
    assert result.report.algorithm == "PriorityBased"
    assert result.report.timestamp == FIXED_NOW
    assert result.contest_id == "c1"


def test_empty_pool_yields_empty_result():
    result = FairnessEngine().select_winners(Contest(contest_id="c1", number_of_winners=3), [])

    assert result.winners == []
    assert result.report.total_participants == 0
    assert result.report.fairness_score == 100


def test_published_seed_reproduces_pure_random_draw():
    contest = Contest(contest_id="c1", number_of_winners=3, random_seed="4d2c9a7e1f3b8c60")
    pool = build_pool(20)

    first = FairnessEngine().select_winners(contest, pool)
    second = FairnessEngine().select_winners(contest, pool)

    assert first.winner_ids == second.winner_ids
    assert len(set(first.winner_ids)) == 3


@pytest.mark.parametrize("algorithm", [member.value for member in FairnessAlgorithm])
def test_every_builtin_returns_distinct_winners(algorithm):
    contest = Contest(contest_id="c1", number_of_winners=4, fairness_algorithm=algorithm)

    result = FairnessEngine().select_winners(contest, build_pool(12))

    assert len(result.winner_ids) == 4
    assert len(set(result.winner_ids)) == 4
    assert result.report.total_winners == 4


def test_custom_strategy_registration():
    registry = default_registry()
    registry.register(FirstComeStrategy())
    engine = FairnessEngine(registry)

    result = engine.select_winners(
        Contest(contest_id="c1", fairness_algorithm="FirstCome", number_of_winners=2),
        list(reversed(build_pool())),
    )

    assert result.winner_ids == ["p0", "p1"]
    assert result.report.metrics.selection_criteria == "Custom selection algorithm"


def test_duplicate_registration_requires_replace():
    registry = StrategyRegistry([PriorityBasedStrategy()])
    replacement = PriorityBasedStrategy()

    with pytest.raises(ValueError):
        registry.register(PriorityBasedStrategy())

    registry.register(replacement, replace=True)
    assert registry.get("PriorityBased") is replacement
    assert "PriorityBased" in registry
    assert "PureRandom" not in registry


def test_blank_contest_seed_is_treated_as_unset():
    contest = Contest(contest_id="c1", number_of_winners=2, random_seed="   ")

    result = FairnessEngine().select_winners(contest, build_pool(5))

    assert len(set(result.winner_ids)) == 2
