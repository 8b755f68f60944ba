"""
aggregation_service.py — Read port for the engagement scorers
Runs the count/latest queries and packs the results into the typed input
records the health and forest scorers consume. Missing counts become 0
here and nowhere else; a failing query fails the whole computation.
"""

import re
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import COHORT_EXCLUDE_PATTERN
from errors import store_errors
from models.user import User
from models.morning_entry import MorningEntry
from models.evening_entry import EveningEntry
from models.watering_event import WateringEvent
from services.clock import as_utc, day_key, start_of_reference_month, trailing_day_keys
from services.engagement_service import HealthInputs
from services.forest_service import ForestMemberInputs, MVP_LOOKBACK_DAYS


def _latest(*timestamps):
    present = [as_utc(t) for t in timestamps if t is not None]
    return max(present) if present else None


def _grouped_counts(query) -> dict[int, int]:
    return {user_id: count for user_id, count in query.all()}


class AggregationService:
    @staticmethod
    def cohort(db: Session, exclude_pattern: str = COHORT_EXCLUDE_PATTERN) -> list[User]:
        """All users except sample/test accounts, ordered by id."""
        with store_errors("loading cohort"):
            users = db.query(User).order_by(User.id.asc()).all()
        if not exclude_pattern:
            return users
        excluded = re.compile(exclude_pattern, re.IGNORECASE)
        return [u for u in users if not excluded.search(u.username)]

    # ------------------------------------------------------------------
    @staticmethod
    def health_inputs(db: Session, user_id: int, now: datetime) -> HealthInputs:
        keys_30 = trailing_day_keys(now, 30)
        keys_7 = keys_30[:7]

        with store_errors("counting entries for health score"):
            def count(model, keys):
                return db.query(model).filter(model.user_id == user_id, model.day_key.in_(keys)).count()

            morning_7 = count(MorningEntry, keys_7)
            night_7 = count(EveningEntry, keys_7)
            morning_30 = count(MorningEntry, keys_30)
            night_30 = count(EveningEntry, keys_30)

            last_morning = db.query(func.max(MorningEntry.created_at)).filter(MorningEntry.user_id == user_id).scalar()
            last_night = db.query(func.max(EveningEntry.created_at)).filter(EveningEntry.user_id == user_id).scalar()

        return HealthInputs(
            morning_count_7=morning_7,
            night_count_7=night_7,
            morning_count_30=morning_30,
            night_count_30=night_30,
            last_activity=_latest(last_morning, last_night),
        )

    # ------------------------------------------------------------------
    @staticmethod
    def forest_inputs(db: Session, user_ids: list[int], now: datetime) -> list[ForestMemberInputs]:
        if not user_ids:
            return []
        month_start = start_of_reference_month(now)

        with store_errors("aggregating forest inputs"):
            posts = _grouped_counts(
                db.query(MorningEntry.user_id, func.count(MorningEntry.id))
                .filter(MorningEntry.user_id.in_(user_ids), MorningEntry.created_at >= month_start)
                .group_by(MorningEntry.user_id)
            )
            waters = _grouped_counts(
                db.query(WateringEvent.target_user_id, func.count(WateringEvent.id))
                .filter(WateringEvent.target_user_id.in_(user_ids), WateringEvent.created_at >= month_start)
                .group_by(WateringEvent.target_user_id)
            )
            last_posts = dict(
                db.query(MorningEntry.user_id, func.max(MorningEntry.created_at))
                .filter(MorningEntry.user_id.in_(user_ids))
                .group_by(MorningEntry.user_id)
                .all()
            )
            last_waters = dict(
                db.query(WateringEvent.target_user_id, func.max(WateringEvent.created_at))
                .filter(WateringEvent.target_user_id.in_(user_ids))
                .group_by(WateringEvent.target_user_id)
                .all()
            )

        return [
            ForestMemberInputs(
                user_id=user_id,
                post_count_this_month=posts.get(user_id, 0),
                water_received_this_month=waters.get(user_id, 0),
                last_post_at=_latest(last_posts.get(user_id)),
                last_water_received_at=_latest(last_waters.get(user_id)),
            )
            for user_id in user_ids
        ]

    # ------------------------------------------------------------------
    @staticmethod
    def waterings_given(db: Session, user_ids: list[int], now: datetime) -> dict[int, int]:
        """Outgoing waterings per member over the trailing week."""
        if not user_ids:
            return {}
        since = now - timedelta(days=MVP_LOOKBACK_DAYS)
        with store_errors("counting waterings given"):
            counts = _grouped_counts(
                db.query(WateringEvent.from_user_id, func.count(WateringEvent.id))
                .filter(WateringEvent.from_user_id.in_(user_ids), WateringEvent.created_at >= since)
                .group_by(WateringEvent.from_user_id)
            )
        return {user_id: counts.get(user_id, 0) for user_id in user_ids}

    # ------------------------------------------------------------------
    @staticmethod
    def watered_today_by(db: Session, from_user_id: int, now: datetime) -> set[int]:
        with store_errors("loading today's waterings"):
            rows = db.query(WateringEvent.target_user_id).filter(
                WateringEvent.from_user_id == from_user_id,
                WateringEvent.day_key == day_key(now),
            ).all()
        return {target_id for (target_id,) in rows}
