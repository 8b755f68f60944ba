"""
forest_service.py — Growth Forest
Each cohort member grows a tree over the calendar month: posts drive the
base progress, waterings from peers add a bonus and inactivity withers it.
The MVP is the member who watered others most over the trailing week.
"""

from dataclasses import dataclass, asdict
from datetime import datetime

from services.clock import whole_days_between
from services.engagement_service import round_half_up

WATER_BONUS_STEP = 3  # waterings received per bonus step
WATER_BONUS_POINTS = 5
WATER_BONUS_CAP = 20

WITHER_GRACE_DAYS = 2
WITHER_POINTS_PER_DAY = 5
WITHER_CAP = 30

PROGRESS_FLOOR = -30
PROGRESS_CEILING = 100

MVP_LOOKBACK_DAYS = 7


@dataclass(frozen=True)
class ForestMemberInputs:
    user_id: int
    post_count_this_month: int
    water_received_this_month: int
    last_post_at: datetime | None
    last_water_received_at: datetime | None


@dataclass(frozen=True)
class TreeGrowth:
    user_id: int
    post_count: int
    water_received: int
    base_progress: int
    water_bonus: int
    wither_penalty: int
    days_since_activity: int
    progress: int

    def to_dict(self) -> dict:
        return asdict(self)


def water_bonus(water_received: int) -> int:
    return min((water_received // WATER_BONUS_STEP) * WATER_BONUS_POINTS, WATER_BONUS_CAP)


def wither_penalty(days_since_activity: int) -> int:
    if days_since_activity <= WITHER_GRACE_DAYS:
        return 0
    return min((days_since_activity - WITHER_GRACE_DAYS) * WITHER_POINTS_PER_DAY, WITHER_CAP)


def tree_growth(member: ForestMemberInputs, days_in_month: int, current_day: int, now: datetime) -> TreeGrowth:
    base = round_half_up(member.post_count_this_month / days_in_month * 100)
    bonus = water_bonus(member.water_received_this_month)

    activity = [t for t in (member.last_post_at, member.last_water_received_at) if t is not None]
    if activity:
        days_since = whole_days_between(max(activity), now)
    else:
        # Never active: as stale as the month itself
        days_since = current_day

    penalty = wither_penalty(days_since)
    progress = max(PROGRESS_FLOOR, min(base + bonus - penalty, PROGRESS_CEILING))

    return TreeGrowth(
        user_id=member.user_id,
        post_count=member.post_count_this_month,
        water_received=member.water_received_this_month,
        base_progress=base,
        water_bonus=bonus,
        wither_penalty=penalty,
        days_since_activity=days_since,
        progress=progress,
    )


def visible_forest(growths: list[TreeGrowth]) -> list[TreeGrowth]:
    """Members with a positive tree, highest progress first."""
    visible = [g for g in growths if g.progress > 0]
    visible.sort(key=lambda g: (-g.progress, g.user_id))
    return visible


def find_mvp(waterings_given: dict[int, int]) -> tuple[int, int] | None:
    """(user_id, count) of the top waterer, lowest user id on ties. None when nobody watered."""
    best = None
    for user_id in sorted(waterings_given):
        count = waterings_given[user_id]
        if count > 0 and (best is None or count > best[1]):
            best = (user_id, count)
    return best
