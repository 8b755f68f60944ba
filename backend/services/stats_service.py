"""
stats_service.py — Personal statistics & engagement dashboard
Per-member posting totals, streak, self-score averages and cheers, plus
the superadmin health dashboard across the cohort.
"""

from datetime import datetime, timedelta

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from errors import store_errors
from models.cheer import Cheer
from models.evening_entry import EveningEntry
from models.goal import Goal
from models.morning_entry import MorningEntry
from services.aggregation_service import AggregationService
from services.clock import as_utc, start_of_reference_month, start_of_reference_week, trailing_day_keys
from services.engagement_service import health_breakdown, health_distribution, health_tier
from services.streak_service import calculate_streak
from config import STREAK_LOOKBACK_DAYS

TREND_WEEKS = 4


def _average(scores: list[int]) -> float | None:
    return sum(scores) / len(scores) if scores else None


class StatsService:
    @staticmethod
    def personal(db: Session, user_id: int, now: datetime) -> dict:
        week_start = start_of_reference_week(now)
        month_start = start_of_reference_month(now)
        trend_start = week_start - timedelta(weeks=TREND_WEEKS - 1)

        with store_errors("loading personal stats"):
            mornings = db.query(MorningEntry).filter_by(user_id=user_id)
            morning_total = mornings.count()
            morning_week = mornings.filter(MorningEntry.created_at >= week_start).count()
            morning_month = mornings.filter(MorningEntry.created_at >= month_start).count()

            recent_keys = [
                k for (k,) in db.query(MorningEntry.day_key).filter(
                    MorningEntry.user_id == user_id,
                    MorningEntry.day_key.in_(trailing_day_keys(now, STREAK_LOOKBACK_DAYS)),
                ).all()
            ]

            evenings = db.query(EveningEntry).filter(
                EveningEntry.user_id == user_id,
                EveningEntry.created_at >= min(month_start, trend_start),
            ).all()

            cheers_given = db.query(Cheer).filter_by(user_id=user_id).count()
            my_mornings = select(MorningEntry.id).where(MorningEntry.user_id == user_id)
            my_evenings = select(EveningEntry.id).where(EveningEntry.user_id == user_id)
            my_goals = select(Goal.id).where(Goal.user_id == user_id)
            cheers_received = db.query(Cheer).filter(or_(
                and_(Cheer.post_kind == "morning", Cheer.post_id.in_(my_mornings)),
                and_(Cheer.post_kind == "evening", Cheer.post_id.in_(my_evenings)),
                and_(Cheer.post_kind == "goal", Cheer.post_id.in_(my_goals)),
            )).count()

        evening_week = [e for e in evenings if as_utc(e.created_at) >= week_start]
        evening_month = [e for e in evenings if as_utc(e.created_at) >= month_start]

        def scores(entries):
            return [e.self_score for e in entries if e.self_score is not None]

        trend = []
        for i in range(TREND_WEEKS - 1, -1, -1):
            start = week_start - timedelta(weeks=i)
            end = start + timedelta(weeks=1)
            in_week = scores(e for e in evenings if start <= as_utc(e.created_at) < end)
            trend.append({
                "weeks_ago": i,
                "avg_score": _average(in_week),
                "count": len(in_week),
            })

        return {
            "morning": {
                "total": morning_total,
                "this_week": morning_week,
                "this_month": morning_month,
                "streak": calculate_streak(recent_keys, now),
            },
            "evening": {
                "this_week": len(evening_week),
                "this_month": len(evening_month),
            },
            "scores": {
                "weekly_avg": _average(scores(evening_week)),
                "monthly_avg": _average(scores(evening_month)),
                "weekly_trend": trend,
            },
            "cheers": {
                "given": cheers_given,
                "received": cheers_received,
            },
        }

    @staticmethod
    def health_dashboard(db: Session, now: datetime) -> dict:
        """Health score and tier for every cohort member, lowest score first."""
        users = []
        for user in AggregationService.cohort(db):
            inputs = AggregationService.health_inputs(db, user.id, now)
            breakdown = health_breakdown(inputs, now)
            users.append({
                "id": user.id,
                "username": user.username,
                "name": user.display_name,
                "role": user.role,
                "stats": {
                    "morning_7": inputs.morning_count_7,
                    "night_7": inputs.night_count_7,
                    "morning_30": inputs.morning_count_30,
                    "night_30": inputs.night_count_30,
                    "last_activity": inputs.last_activity.isoformat() if inputs.last_activity else None,
                    "days_since_activity": breakdown["days_since_activity"],
                    "health_score": breakdown["total"],
                    "tier": health_tier(breakdown["total"]),
                },
            })

        users.sort(key=lambda u: (u["stats"]["health_score"], u["id"]))
        return {
            "users": users,
            "summary": {
                "total_users": len(users),
                "health_distribution": health_distribution([u["stats"]["health_score"] for u in users]),
            },
        }
