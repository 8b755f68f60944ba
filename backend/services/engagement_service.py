"""
engagement_service.py — Engagement Health Score
Blends 7-day frequency (40%), 30-day frequency (30%) and recency of the
last post (30%) into a 0..100 score with a good/warning/risk tier.
"""

import math
from dataclasses import dataclass
from datetime import datetime

from services.clock import whole_days_between

GOOD = "good"
WARNING = "warning"
RISK = "risk"

# (max days since last activity, points)
RECENCY_STEPS = [
    (0, 100),
    (1, 90),
    (3, 70),
    (7, 50),
    (14, 30),
]
RECENCY_FLOOR = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class HealthInputs:
    morning_count_7: int
    night_count_7: int
    morning_count_30: int
    night_count_30: int
    last_activity: datetime | None


def recency_points(days_since: int) -> int:
    for max_days, points in RECENCY_STEPS:
        if days_since <= max_days:
            return points
    return RECENCY_FLOOR


def health_breakdown(inputs: HealthInputs, now: datetime) -> dict:
    posts_7 = inputs.morning_count_7 + inputs.night_count_7
    posts_30 = inputs.morning_count_30 + inputs.night_count_30

    frequency_7 = min(posts_7 / 14 * 100, 100) * 0.4  # 2 posts/day x 7 days
    frequency_30 = min(posts_30 / 60 * 100, 100) * 0.3  # 2 posts/day x 30 days

    if inputs.last_activity is None:
        days_since = None
        recency = 0.0
    else:
        days_since = whole_days_between(inputs.last_activity, now)
        recency = recency_points(days_since) * 0.3

    return {
        "frequency_7": frequency_7,
        "frequency_30": frequency_30,
        "recency": recency,
        "days_since_activity": days_since,
        "total": round_half_up(frequency_7 + frequency_30 + recency),
    }


def health_score(inputs: HealthInputs, now: datetime) -> int:
    return health_breakdown(inputs, now)["total"]


def health_tier(score: int) -> str:
    if score >= 70:
        return GOOD
    if score >= 40:
        return WARNING
    return RISK


def health_distribution(scores: list[int]) -> dict:
    distribution = {GOOD: 0, WARNING: 0, RISK: 0}
    for score in scores:
        distribution[health_tier(score)] += 1
    return distribution
