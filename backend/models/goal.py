from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, UniqueConstraint
from database import Base


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    period_type = Column(String(20), nullable=False)  # weekly/monthly
    period_key = Column(String(10), nullable=False)  # YYYY-Www or YYYY-MM
    objective = Column(Text, nullable=False)
    key_results = Column(Text, nullable=True)  # JSON array, at most 3 strings
    key_results_progress = Column(Text, nullable=True)  # JSON array of 0-100 ints
    focus = Column(Text, nullable=True)
    identity_focus = Column(Text, nullable=True)
    is_shared = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "period_type", "period_key", name="uq_goal_user_period"),
    )
