from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, UniqueConstraint
from database import Base

MOODS = ("chaotic", "flat", "stable", "fire", "recover")


class MorningEntry(Base):
    __tablename__ = "morning_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    day_key = Column(String(10), nullable=False)  # YYYY-MM-DD, reference timezone
    mood = Column(String(20), nullable=False)
    value = Column(Text, nullable=True)  # the value to hold on to today
    action = Column(Text, nullable=True)  # the one action that means progress
    let_go = Column(Text, nullable=True)  # thought or feeling to let go of
    declaration = Column(Text, nullable=False)
    is_shared = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "day_key", name="uq_morning_user_day"),
    )
