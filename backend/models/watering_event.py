from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Index
from database import Base


class WateringEvent(Base):
    __tablename__ = "watering_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    target_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    from_user_name = Column(String(100), nullable=False)  # snapshot at write time
    day_key = Column(String(10), nullable=False)  # reference-timezone day of created_at
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        # One watering per pair per day, enforced by the store
        UniqueConstraint("from_user_id", "target_user_id", "day_key", name="uq_water_pair_day"),
        Index("ix_water_target_created", "target_user_id", "created_at"),
    )
