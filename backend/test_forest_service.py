from datetime import timedelta

import pytest

from conftest import ref_time
from services.forest_service import (
    ForestMemberInputs,
    TreeGrowth,
    find_mvp,
    tree_growth,
    visible_forest,
    water_bonus,
    wither_penalty,
)

NOW = ref_time(2026, 3, 20, 12)


def member(user_id=1, posts=0, waters=0, last_post=None, last_water=None):
    return ForestMemberInputs(user_id, posts, waters, last_post, last_water)


def test_growth_combines_posts_and_water():
    growth = tree_growth(member(posts=15, waters=7, last_post=NOW), 30, 20, NOW)
    assert growth.base_progress == 50
    assert growth.water_bonus == 10
    assert growth.wither_penalty == 0
    assert growth.days_since_activity == 0
    assert growth.progress == 60


@pytest.mark.parametrize("waters, bonus", [(0, 0), (2, 0), (3, 5), (8, 10), (12, 20), (30, 20)])
def test_water_bonus_steps_and_cap(waters, bonus):
    assert water_bonus(waters) == bonus


@pytest.mark.parametrize("days, penalty", [(0, 0), (2, 0), (3, 5), (4, 10), (8, 30), (40, 30)])
def test_wither_penalty_after_two_idle_days(days, penalty):
    assert wither_penalty(days) == penalty


def test_never_active_member_is_as_stale_as_the_month():
    growth = tree_growth(member(), 30, 20, NOW)
    assert growth.days_since_activity == 20
    assert growth.wither_penalty == 30
    assert growth.progress == -30


def test_never_active_member_early_in_month_has_no_penalty():
    growth = tree_growth(member(), 31, 2, ref_time(2026, 3, 2))
    assert growth.wither_penalty == 0
    assert growth.progress == 0


def test_progress_floor_for_very_stale_member():
    growth = tree_growth(member(last_post=NOW - timedelta(days=90)), 31, 20, NOW)
    assert growth.progress == -30


def test_progress_ceiling():
    growth = tree_growth(member(posts=31, waters=12, last_post=NOW), 31, 31, NOW)
    assert growth.base_progress == 100
    assert growth.water_bonus == 20
    assert growth.progress == 100


def test_recent_watering_counts_as_activity():
    growth = tree_growth(
        member(posts=10, last_post=NOW - timedelta(days=10), last_water=NOW - timedelta(days=1)),
        31, 20, NOW,
    )
    assert growth.days_since_activity == 1
    assert growth.wither_penalty == 0


def test_base_progress_rounds_to_nearest():
    # 1/31 = 3.2% -> 3, 2/3 of a 30 day month is 66.67 -> 67
    assert tree_growth(member(posts=1, last_post=NOW), 31, 20, NOW).base_progress == 3
    assert tree_growth(member(posts=20, last_post=NOW), 30, 20, NOW).base_progress == 67


def _growth(user_id, progress):
    return TreeGrowth(user_id, 0, 0, progress, 0, 0, 0, progress)


def test_visible_forest_hides_non_positive_and_sorts():
    forest = visible_forest([_growth(1, 20), _growth(2, 0), _growth(3, 80), _growth(4, -10), _growth(5, 20)])
    assert [g.user_id for g in forest] == [3, 1, 5]


def test_mvp_is_top_waterer():
    assert find_mvp({1: 2, 2: 5, 3: 1}) == (2, 5)


def test_no_mvp_when_nobody_watered():
    assert find_mvp({1: 0, 2: 0}) is None
    assert find_mvp({}) is None


def test_mvp_tie_goes_to_lowest_user_id():
    assert find_mvp({4: 3, 2: 3, 9: 1}) == (2, 3)
