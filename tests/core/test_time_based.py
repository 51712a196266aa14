from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from contestfair.core import TimeBasedStrategy, time_based_selection
from contestfair.core.strategies import TimeBasedConfig
from contestfair.core.strategies.time_based import split_time_windows
from contestfair.schemas import Contest, Participant

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


def build_pool(size: int) -> list[Participant]:
    return [
        Participant(id=f"p{i}", registration_date=BASE_TIME + timedelta(days=i))
        for i in range(size)
    ]


def test_windows_are_contiguous_and_chronological():
    pool = build_pool(7)

    windows = split_time_windows(list(reversed(pool)), 3)

    assert [len(window) for window in windows] == [3, 3, 1]
    assert [p.id for p in windows[0]] == ["p0", "p1", "p2"]
    assert [p.id for p in windows[2]] == ["p6"]


def test_small_pool_produces_fewer_windows():
    assert [len(w) for w in split_time_windows(build_pool(3), 5)] == [1, 1, 1]
    assert split_time_windows([], 5) == []


def test_invalid_window_count_rejected():
    with pytest.raises(ValueError):
        split_time_windows(build_pool(3), 0)


def test_each_half_gets_equal_representation():
    pool = build_pool(8)
    early = {p.id for p in pool[:4]}

    for _ in range(50):
        winners = time_based_selection(pool, 4, window_count=2)
        assert len(winners) == 4
        assert sum(1 for p in winners if p.id in early) == 2


@pytest.mark.parametrize(
    ("size", "count", "window_count"),
    [(7, 3, 3), (10, 4, 5), (11, 7, 5), (3, 3, 5), (6, 6, 4), (9, 1, 5)],
)
def test_result_has_requested_number_of_distinct_winners(size, count, window_count):
    pool = build_pool(size)

    winners = time_based_selection(pool, count, window_count)

    assert len(winners) == count
    assert len({p.id for p in winners}) == count


def test_strategy_uses_configured_window_count():
    pool = build_pool(6)
    strategy = TimeBasedStrategy(config=TimeBasedConfig(window_count=3))

    winners = strategy.select(pool, 3, Contest(contest_id="c1"))

    # One winner per pair of consecutive days.
    assert sorted(int(p.id[1:]) // 2 for p in winners) == [0, 1, 2]
