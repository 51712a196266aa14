from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from contestfair.core import analyze_time_distribution, generate_fairness_report
from contestfair.core.fairness import explain_selection_criteria
from contestfair.schemas import Contest, FairnessAlgorithm, Participant

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)
GENERATED_AT = datetime(2025, 2, 1, 9, 30, tzinfo=timezone.utc)


def build_pool() -> list[Participant]:
    return [
        Participant(id="p1", name="Ada", platform="Instagram", engagement_score=10,
                    registration_date=BASE_TIME),
        Participant(id="p2", name="Bo", platform="Twitter", engagement_score=20,
                    registration_date=BASE_TIME + timedelta(hours=1), is_duplicate=True),
        Participant(id="p3", name="Cy", platform="Instagram", engagement_score=30,
                    registration_date=BASE_TIME + timedelta(hours=2), fraud_score=80),
        Participant(id="p4", name="Di", engagement_score=40,
                    registration_date=BASE_TIME + timedelta(hours=10)),
    ]


def test_time_distribution_skewness():
    distribution = analyze_time_distribution(build_pool())

    assert distribution.spread_seconds == pytest.approx(36000.0)
    # mean 3.25h, median (index 2) 2h, range 10h
    assert distribution.skewness == pytest.approx(0.125)
    assert distribution.earliest == BASE_TIME
    assert distribution.latest == BASE_TIME + timedelta(hours=10)


def test_time_distribution_degenerate_inputs():
    single = analyze_time_distribution(build_pool()[:1])

    assert single.skewness == 0.0
    assert single.spread_seconds == 0.0
    assert analyze_time_distribution([]).earliest is None


def test_report_collects_pool_metrics():
    pool = build_pool()
    contest = Contest(contest_id="c1", number_of_winners=1)

    report = generate_fairness_report(
        contest,
        pool,
        [pool[0]],
        FairnessAlgorithm.PURE_RANDOM.value,
        generated_at=GENERATED_AT,
    )

    assert report.algorithm == "PureRandom"
    assert report.timestamp == GENERATED_AT
    assert report.total_participants == 4
    assert report.total_winners == 1
    assert report.metrics.duplicates_detected == 1
    assert report.metrics.fraud_attempts == 1
    assert report.metrics.average_engagement == pytest.approx(25.0)
    assert report.metrics.platform_distribution == {"Instagram": 2, "Twitter": 1, "Other": 1}
    assert "Fisher-Yates" in report.metrics.selection_criteria
    assert 0 <= report.fairness_score <= 100


def test_report_winner_projection():
    pool = build_pool()

    report = generate_fairness_report(
        Contest(contest_id="c1", number_of_winners=2),
        pool,
        [pool[3], pool[0]],
        "PriorityBased",
        generated_at=GENERATED_AT,
    )

    assert [winner.id for winner in report.winners] == ["p4", "p1"]
    assert report.winners[1].name == "Ada"
    assert report.winners[1].platform == "Instagram"
    assert report.winners[0].registration_date == BASE_TIME + timedelta(hours=10)


def test_empty_pool_report():
    report = generate_fairness_report(
        Contest(contest_id="c1"),
        [],
        [],
        "Hybrid",
        generated_at=GENERATED_AT,
    )

    assert report.total_participants == 0
    assert report.total_winners == 0
    assert report.fairness_score == 100
    assert report.metrics.average_engagement == 0.0
    assert report.metrics.platform_distribution == {}
    assert report.winners == []


def test_report_timestamp_defaults_to_now():
    report = generate_fairness_report(Contest(contest_id="c1"), [], [], "Hybrid")

    assert report.timestamp.tzinfo is not None


@pytest.mark.parametrize("algorithm", [member.value for member in FairnessAlgorithm])
def test_every_builtin_algorithm_has_criteria(algorithm):
    assert explain_selection_criteria(algorithm) != "Custom selection algorithm"


def test_unknown_algorithm_criteria():
    assert explain_selection_criteria("Lottery") == "Custom selection algorithm"
