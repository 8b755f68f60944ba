"""
timeline_service.py — Community timeline
Morning entries and shared evening entries from the last 7 days, newest first.
"""

from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from errors import store_errors
from models.evening_entry import EveningEntry
from models.morning_entry import MorningEntry
from models.user import User
from services.clock import as_utc
from services.journal_service import evening_to_dict, morning_to_dict

TIMELINE_DAYS = 7
FETCH_LIMIT = 50
TIMELINE_LIMIT = 30
UNKNOWN_NAME = "unknown"


class TimelineService:
    @staticmethod
    def recent(db: Session, now: datetime) -> list[dict]:
        since = now - timedelta(days=TIMELINE_DAYS)
        with store_errors("loading timeline"):
            mornings = db.query(MorningEntry).filter(MorningEntry.created_at >= since)\
                         .order_by(MorningEntry.created_at.desc()).limit(FETCH_LIMIT).all()
            evenings = db.query(EveningEntry).filter(
                EveningEntry.created_at >= since,
                EveningEntry.is_shared == True,
            ).order_by(EveningEntry.created_at.desc()).limit(FETCH_LIMIT).all()

            user_ids = {e.user_id for e in mornings} | {e.user_id for e in evenings}
            users = {u.id: u for u in db.query(User).filter(User.id.in_(user_ids)).all()} if user_ids else {}

        def author(entry):
            user = users.get(entry.user_id)
            return {
                "user_name": user.display_name if user else UNKNOWN_NAME,
                "user_avatar": user.avatar if user else None,
            }

        timeline = [
            (as_utc(e.created_at), {"type": "morning", **morning_to_dict(e), **author(e)})
            for e in mornings
        ] + [
            (as_utc(e.created_at), {"type": "evening", **evening_to_dict(e), **author(e)})
            for e in evenings
        ]
        timeline.sort(key=lambda item: item[0], reverse=True)
        return [item for _, item in timeline[:TIMELINE_LIMIT]]
