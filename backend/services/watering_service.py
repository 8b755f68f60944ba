"""
watering_service.py — Peer watering
A member may water each other member's tree once per reference-timezone
day. The pre-check gives a clean error; the unique (from, target, day)
constraint closes the race between concurrent requests.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import ConflictError, NotFoundError, ValidationError, store_errors
from models.user import User
from models.watering_event import WateringEvent
from services.cache_service import TTLCache
from services.clock import as_utc, day_key
from services.forest_view_service import forest_cache_key

logger = logging.getLogger(__name__)

ALREADY_WATERED = "You have already watered this tree today"


class WateringService:
    @staticmethod
    def water(db: Session, from_user_id: int, target_user_id: int, now: datetime,
              cache: TTLCache | None = None) -> WateringEvent:
        if from_user_id == target_user_id:
            raise ValidationError("You cannot water your own tree")

        now = as_utc(now)
        today = day_key(now)
        with store_errors("watering a tree", db):
            giver = db.query(User).filter_by(id=from_user_id).first()
            target = db.query(User).filter_by(id=target_user_id).first()
            if giver is None or target is None:
                raise NotFoundError("User not found")

            existing = db.query(WateringEvent).filter_by(
                from_user_id=from_user_id, target_user_id=target_user_id, day_key=today
            ).first()
            if existing:
                logger.info(f"Duplicate watering {from_user_id}->{target_user_id} on {today}")
                raise ConflictError(ALREADY_WATERED)

            event = WateringEvent(
                from_user_id=from_user_id,
                target_user_id=target_user_id,
                from_user_name=giver.display_name,
                day_key=today,
                created_at=now,
            )
            db.add(event)
            try:
                db.commit()
            except IntegrityError:
                # Lost the race against a concurrent request for the same pair
                db.rollback()
                logger.info(f"Concurrent duplicate watering {from_user_id}->{target_user_id} on {today}")
                raise ConflictError(ALREADY_WATERED)
            db.refresh(event)

        if cache is not None:
            cache.invalidate(forest_cache_key(now))
        return event

    @staticmethod
    def received(db: Session, target_user_id: int, since: datetime) -> list[WateringEvent]:
        with store_errors("listing waterings"):
            return db.query(WateringEvent).filter(
                WateringEvent.target_user_id == target_user_id,
                WateringEvent.created_at >= since,
            ).order_by(WateringEvent.created_at.desc()).all()
