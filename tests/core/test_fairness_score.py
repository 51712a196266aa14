from __future__ import annotations

from datetime import datetime, timedelta, timezone

from contestfair.core import calculate_fairness_score
from contestfair.core.fairness import TimeDistribution
from contestfair.schemas import Contest, Participant

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def build_pool(size: int = 10, platforms: tuple[str, ...] = ("Instagram",)) -> list[Participant]:
    return [
        Participant(
            id=f"p{i}",
            platform=platforms[i % len(platforms)],
            registration_date=BASE_TIME + timedelta(hours=i),
        )
        for i in range(size)
    ]


def flag(participant: Participant, **changes) -> Participant:
    return participant.model_copy(update=changes)


def test_clean_selection_scores_one_hundred():
    pool = build_pool()
    contest = Contest(contest_id="c1", number_of_winners=2)

    assert calculate_fairness_score(contest, pool, pool[:2]) == 100


def test_duplicate_winner_deducts_thirty():
    pool = build_pool()
    contest = Contest(contest_id="c1", number_of_winners=2)
    winners = [flag(pool[0], is_duplicate=True), pool[1]]

    assert calculate_fairness_score(contest, pool, winners) == 70


def test_high_fraud_winner_deducts_twenty_five():
    pool = build_pool()
    contest = Contest(contest_id="c1", number_of_winners=2)

    assert calculate_fairness_score(contest, pool, [flag(pool[0], fraud_score=71), pool[1]]) == 75
    assert calculate_fairness_score(contest, pool, [flag(pool[0], fraud_score=70), pool[1]]) == 100


def test_duplicate_and_fraud_deductions_stack():
    pool = build_pool()
    contest = Contest(contest_id="c1", number_of_winners=2)
    winners = [flag(pool[0], is_duplicate=True, fraud_score=90), pool[1]]

    assert calculate_fairness_score(contest, pool, winners) == 45


def test_winner_ratio_drift_deducts_ten():
    pool = build_pool()
    contest = Contest(contest_id="c1", number_of_winners=3)

    assert calculate_fairness_score(contest, pool, pool[:2]) == 90


def test_poor_platform_coverage_deducts_fifteen():
    pool = build_pool(8, ("Instagram", "Twitter", "Facebook", "TikTok"))
    contest = Contest(contest_id="c1", number_of_winners=2)

    # pool[0] and pool[4] are both Instagram.
    assert calculate_fairness_score(contest, pool, [pool[0], pool[4]]) == 85
    assert calculate_fairness_score(contest, pool, [pool[0], pool[1]]) == 100


def test_skewed_winner_times_deduct_ten(monkeypatch):
    pool = build_pool()
    contest = Contest(contest_id="c1", number_of_winners=2)
    monkeypatch.setattr(
        "contestfair.core.fairness.analyze_time_distribution",
        lambda records: TimeDistribution(skewness=0.8),
    )

    assert calculate_fairness_score(contest, pool, pool[:2]) == 90


def test_all_deductions_bottom_out_at_ten(monkeypatch):
    pool = build_pool(8, ("Instagram", "Twitter", "Facebook", "TikTok"))
    contest = Contest(contest_id="c1", number_of_winners=5)
    monkeypatch.setattr(
        "contestfair.core.fairness.analyze_time_distribution",
        lambda records: TimeDistribution(skewness=0.9),
    )
    winners = [flag(pool[0], is_duplicate=True, fraud_score=95)]

    assert calculate_fairness_score(contest, pool, winners) == 10


def test_empty_pool_is_not_penalised():
    assert calculate_fairness_score(Contest(contest_id="c1"), [], []) == 100
