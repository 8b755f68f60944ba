from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from database import Base

POST_KINDS = ("morning", "evening", "goal")


class Cheer(Base):
    __tablename__ = "cheers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, nullable=False)
    post_kind = Column(String(20), nullable=False)  # morning/evening/goal
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    user_name = Column(String(100), nullable=False)  # snapshot at write time
    user_avatar = Column(String(255), nullable=True)  # snapshot at write time
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_cheer_post", "post_kind", "post_id"),
    )
