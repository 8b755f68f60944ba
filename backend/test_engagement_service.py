from datetime import timedelta
import itertools

import pytest

from conftest import ref_time
from services.engagement_service import (
    GOOD,
    RISK,
    WARNING,
    HealthInputs,
    health_breakdown,
    health_distribution,
    health_score,
    health_tier,
    recency_points,
)

NOW = ref_time(2026, 3, 16, 12)


def inputs(m7=0, n7=0, m30=0, n30=0, last=None):
    return HealthInputs(m7, n7, m30, n30, last)


def test_worked_example():
    breakdown = health_breakdown(inputs(7, 7, 20, 20, NOW), NOW)
    assert breakdown["frequency_7"] == pytest.approx(40)
    assert breakdown["frequency_30"] == pytest.approx(20)
    assert breakdown["recency"] == pytest.approx(30)
    assert breakdown["total"] == 90
    assert health_tier(90) == GOOD


def test_never_posted_scores_zero():
    assert health_score(inputs(), NOW) == 0
    assert health_breakdown(inputs(), NOW)["days_since_activity"] is None


def test_frequency_components_are_capped():
    # More posts than the theoretical maximum still caps at 40 + 30
    assert health_score(inputs(20, 20, 90, 90, NOW - timedelta(days=30)), NOW) == 73


@pytest.mark.parametrize("days, points", [
    (0, 100), (1, 90), (2, 70), (3, 70), (4, 50), (7, 50), (8, 30), (14, 30), (15, 10), (200, 10),
])
def test_recency_steps(days, points):
    assert recency_points(days) == points


def test_recency_uses_whole_elapsed_days():
    # 47 hours is one whole day
    assert health_score(inputs(last=NOW - timedelta(hours=47)), NOW) == 27
    assert health_score(inputs(last=NOW - timedelta(hours=48)), NOW) == 21


def test_rounds_to_nearest_integer():
    # 1 post in 7 days: 1/14*100*0.4 = 2.857..., 1 in 30 days: 0.5 -> 3.357 -> 3
    assert health_score(inputs(1, 0, 1, 0), NOW) == 3


def test_score_bounded_and_deterministic():
    lasts = [None, NOW, NOW - timedelta(days=5), NOW - timedelta(days=40)]
    for m7, n7, m30, n30, last in itertools.product([0, 3, 7, 14], [0, 7], [0, 15, 30, 60], [0, 30], lasts):
        first = health_score(inputs(m7, n7, m30, n30, last), NOW)
        again = health_score(inputs(m7, n7, m30, n30, last), NOW)
        assert 0 <= first <= 100
        assert first == again


@pytest.mark.parametrize("score, tier", [
    (100, GOOD), (70, GOOD), (69, WARNING), (40, WARNING), (39, RISK), (0, RISK),
])
def test_tiers(score, tier):
    assert health_tier(score) == tier


def test_distribution():
    assert health_distribution([90, 70, 55, 12, 39]) == {GOOD: 2, WARNING: 1, RISK: 2}
