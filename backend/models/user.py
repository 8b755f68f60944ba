from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime
from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    display_name = Column(String(100), nullable=False)
    avatar = Column(String(255), nullable=True)  # emoji or image URL
    role = Column(String(20), default="member")  # member/coach/superadmin
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
