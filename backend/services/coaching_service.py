"""
coaching_service.py — Coach annotations
A coach leaves at most one note per member per day: a short correction
and a short question. Saving again overwrites it.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import NotFoundError, ValidationError, store_errors
from models.coaching_note import CoachingNote
from models.morning_entry import MorningEntry
from models.user import User
from services.clock import as_utc, day_key
from services.journal_service import morning_to_dict

logger = logging.getLogger(__name__)

MAX_NOTE_LENGTH = 500


class CoachingService:
    @staticmethod
    def save_note(db: Session, coach_id: int, user_id: int, correction: str | None,
                  question: str | None, now: datetime) -> CoachingNote:
        for label, text in (("Correction", correction), ("Question", question)):
            if text and len(text) > MAX_NOTE_LENGTH:
                raise ValidationError(f"{label} must be at most {MAX_NOTE_LENGTH} characters")

        now = as_utc(now)
        today = day_key(now)

        def apply(note):
            note.coach_id = coach_id
            note.correction = correction or None
            note.question = question or None
            note.updated_at = now

        with store_errors("saving coaching note", db):
            if not db.query(User).filter_by(id=user_id).first():
                raise NotFoundError("User not found")

            note = db.query(CoachingNote).filter_by(user_id=user_id, day_key=today).first()
            created = note is None
            if created:
                note = CoachingNote(user_id=user_id, day_key=today, created_at=now)
                db.add(note)
            apply(note)

            try:
                db.commit()
            except IntegrityError:
                if not created:
                    raise
                # Another coach saved first; last write wins
                db.rollback()
                note = db.query(CoachingNote).filter_by(user_id=user_id, day_key=today).one()
                apply(note)
                db.commit()
            db.refresh(note)

        logger.info(f"Coach {coach_id} saved note for user {user_id} on {today}")
        return note

    @staticmethod
    def today_board(db: Session, now: datetime) -> list[dict]:
        """Today's morning entries, each with its coaching note if any."""
        today = day_key(now)
        with store_errors("loading coach board"):
            rows = db.query(MorningEntry, User).join(User, User.id == MorningEntry.user_id)\
                     .filter(MorningEntry.day_key == today)\
                     .order_by(MorningEntry.created_at.asc()).all()
            notes = {n.user_id: n for n in db.query(CoachingNote).filter_by(day_key=today).all()}

        board = []
        for entry, user in rows:
            note = notes.get(entry.user_id)
            board.append({
                **morning_to_dict(entry),
                "user_name": user.display_name,
                "coaching_note": {"correction": note.correction, "question": note.question} if note else None,
            })
        return board
