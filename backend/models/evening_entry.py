from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, UniqueConstraint
from database import Base


class EveningEntry(Base):
    __tablename__ = "evening_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    day_key = Column(String(10), nullable=False)  # YYYY-MM-DD, reference timezone
    proud_choice = Column(Text, nullable=True)
    off_choice = Column(Text, nullable=True)
    mood_reflection = Column(Text, nullable=True)
    learning = Column(Text, nullable=True)
    tomorrow_message = Column(Text, nullable=True)
    self_score = Column(Integer, nullable=True)  # 1-10
    is_shared = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "day_key", name="uq_evening_user_day"),
    )
