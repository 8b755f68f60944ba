"""
streak_service.py — Consecutive-day posting streak
Counts backward from today over reference-timezone day keys. A missing
entry today does not break the streak; the first gap before today does.
"""

from datetime import datetime, timedelta

from config import STREAK_LOOKBACK_DAYS
from services.clock import day_key


def calculate_streak(posted_day_keys, now: datetime, lookback: int = STREAK_LOOKBACK_DAYS) -> int:
    posted = set(posted_day_keys)
    streak = 0
    for i in range(lookback):
        check = day_key(now - timedelta(days=i))
        if check in posted:
            streak += 1
        elif i > 0:
            break
        # i == 0: today may simply not be posted yet
    return streak
