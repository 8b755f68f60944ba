from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from database import Base


class CoachingNote(Base):
    __tablename__ = "coaching_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)  # coached user
    coach_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    day_key = Column(String(10), nullable=False)
    correction = Column(String(500), nullable=True)
    question = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "day_key", name="uq_coaching_user_day"),
    )
