"""
journal_service.py — Morning & evening entries
One entry of each kind per user per day key. Saving today's entry is an
upsert: creating it is gated by the kind's posting window, editing it is not.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ValidationError, store_errors
from models.coaching_note import CoachingNote
from models.evening_entry import EveningEntry
from models.morning_entry import MorningEntry, MOODS
from models.user import User
from services.clock import WindowPolicy, as_utc, day_key
from services.entry_guard import ensure_post_allowed

logger = logging.getLogger(__name__)

MORNING_FIELDS = ("mood", "value", "action", "let_go", "declaration")
EVENING_FIELDS = ("proud_choice", "off_choice", "mood_reflection", "learning", "tomorrow_message", "self_score", "is_shared")


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _apply(entry, fields, data: dict, now: datetime):
    for field in fields:
        if field in data:
            setattr(entry, field, _blank_to_none(data[field]))
    entry.updated_at = now


def validate_morning(data: dict):
    if data.get("mood") not in MOODS:
        raise ValidationError(f"Mood must be one of: {', '.join(MOODS)}")
    if not (data.get("declaration") or "").strip():
        raise ValidationError("Please enter today's declaration")


def validate_evening(data: dict):
    score = data.get("self_score")
    if score is not None and (isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 10):
        raise ValidationError("Self score must be an integer between 1 and 10")


class JournalService:
    @staticmethod
    def _save(db: Session, model, fields, user_id: int, data: dict, policy: WindowPolicy, now: datetime):
        now = as_utc(now)
        today = day_key(now)
        with store_errors(f"saving {policy.kind} entry", db):
            entry = db.query(model).filter_by(user_id=user_id, day_key=today).first()
            decision = ensure_post_allowed(entry, policy.status_at(now), policy)

            if entry is None:
                entry = model(user_id=user_id, day_key=today, created_at=now)
                db.add(entry)
            _apply(entry, fields, data, now)

            try:
                db.commit()
            except IntegrityError:
                if decision.is_edit:
                    raise
                # A concurrent create for the same day won; save over it instead
                db.rollback()
                entry = db.query(model).filter_by(user_id=user_id, day_key=today).one()
                _apply(entry, fields, data, now)
                db.commit()
            db.refresh(entry)

        logger.info(f"{policy.kind} entry {'updated' if decision.is_edit else 'created'} for user {user_id} on {today}")
        return entry

    @staticmethod
    def save_morning(db: Session, user_id: int, data: dict, policy: WindowPolicy, now: datetime) -> MorningEntry:
        validate_morning(data)
        return JournalService._save(db, MorningEntry, MORNING_FIELDS, user_id, data, policy, now)

    @staticmethod
    def save_evening(db: Session, user_id: int, data: dict, policy: WindowPolicy, now: datetime) -> EveningEntry:
        validate_evening(data)
        return JournalService._save(db, EveningEntry, EVENING_FIELDS, user_id, data, policy, now)

    @staticmethod
    def get_for_day(db: Session, model, user_id: int, key: str):
        with store_errors("loading entry"):
            return db.query(model).filter_by(user_id=user_id, day_key=key).first()

    @staticmethod
    def morning_feed(db: Session, viewer_id: int, key: str) -> dict:
        """Everyone's morning entries for the day plus the viewer's coaching note."""
        with store_errors("loading morning feed"):
            rows = db.query(MorningEntry, User).join(User, User.id == MorningEntry.user_id)\
                     .filter(MorningEntry.day_key == key)\
                     .order_by(MorningEntry.created_at.asc()).all()
            note = db.query(CoachingNote).filter_by(user_id=viewer_id, day_key=key).first()

        return {
            "day_key": key,
            "entries": [{**morning_to_dict(e), "user_name": u.display_name} for e, u in rows],
            "my_coaching_note": {"correction": note.correction, "question": note.question} if note else None,
        }

    @staticmethod
    def evening_feed(db: Session, viewer_id: int, key: str) -> dict:
        with store_errors("loading evening feed"):
            mine = db.query(EveningEntry).filter_by(user_id=viewer_id, day_key=key).first()
            rows = db.query(EveningEntry, User).join(User, User.id == EveningEntry.user_id)\
                     .filter(EveningEntry.day_key == key, EveningEntry.is_shared == True)\
                     .order_by(EveningEntry.created_at.asc()).all()

        return {
            "day_key": key,
            "my_entry": evening_to_dict(mine) if mine else None,
            "shared_entries": [{**evening_to_dict(e), "user_name": u.display_name} for e, u in rows],
        }


def morning_to_dict(entry: MorningEntry) -> dict:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "day_key": entry.day_key,
        "mood": entry.mood,
        "value": entry.value,
        "action": entry.action,
        "let_go": entry.let_go,
        "declaration": entry.declaration,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


def evening_to_dict(entry: EveningEntry) -> dict:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "day_key": entry.day_key,
        "proud_choice": entry.proud_choice,
        "off_choice": entry.off_choice,
        "mood_reflection": entry.mood_reflection,
        "learning": entry.learning,
        "tomorrow_message": entry.tomorrow_message,
        "self_score": entry.self_score,
        "is_shared": entry.is_shared,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }
