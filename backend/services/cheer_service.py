"""
cheer_service.py — Cheers on posts
Anyone may cheer any post as often as they like. The cheering member's
name and avatar are stored as written; reads prefer the live profile.
"""

from datetime import datetime

from sqlalchemy.orm import Session

from errors import NotFoundError, ValidationError, store_errors
from models.cheer import Cheer, POST_KINDS
from models.evening_entry import EveningEntry
from models.goal import Goal
from models.morning_entry import MorningEntry
from models.user import User
from services.clock import as_utc

POST_MODELS = {
    "morning": MorningEntry,
    "evening": EveningEntry,
    "goal": Goal,
}


def merge_display_name(snapshot: str | None, live: str | None) -> str | None:
    """Snapshot name, overridden by the current name when one is available."""
    return live or snapshot


class CheerService:
    @staticmethod
    def create(db: Session, user_id: int, post_kind: str, post_id: int, now: datetime) -> Cheer:
        if post_kind not in POST_KINDS:
            raise ValidationError(f"Post kind must be one of: {', '.join(POST_KINDS)}")

        now = as_utc(now)
        with store_errors("cheering a post", db):
            user = db.query(User).filter_by(id=user_id).first()
            if not user:
                raise NotFoundError("User not found")
            post = db.query(POST_MODELS[post_kind]).filter_by(id=post_id).first()
            if not post:
                raise NotFoundError("Post not found")

            cheer = Cheer(
                post_id=post_id,
                post_kind=post_kind,
                user_id=user_id,
                user_name=user.display_name,
                user_avatar=user.avatar,
                created_at=now,
            )
            db.add(cheer)
            db.commit()
            db.refresh(cheer)
            return cheer

    @staticmethod
    def list_for_post(db: Session, post_kind: str, post_id: int) -> list[dict]:
        if post_kind not in POST_KINDS:
            raise ValidationError(f"Post kind must be one of: {', '.join(POST_KINDS)}")

        with store_errors("listing cheers"):
            rows = db.query(Cheer, User).outerjoin(User, User.id == Cheer.user_id)\
                     .filter(Cheer.post_kind == post_kind, Cheer.post_id == post_id)\
                     .order_by(Cheer.created_at.desc(), Cheer.id.desc()).all()

        return [
            {
                "id": c.id,
                "user_id": c.user_id,
                "user_name": merge_display_name(c.user_name, u.display_name if u else None),
                "user_avatar": (u.avatar if u else None) or c.user_avatar,
                "snapshot_name": c.user_name,
                "created_at": c.created_at.isoformat() if c.created_at else None,
            }
            for c, u in rows
        ]
