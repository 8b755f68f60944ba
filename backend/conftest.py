import os

# Keep the app's own engine off the filesystem while tests import it
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth import create_token
from database import Base, get_db
from models.user import User
from services.cache_service import TTLCache
from services.clock import REFERENCE_TZ


def ref_time(year, month, day, hour=12, minute=0) -> datetime:
    """A reference-timezone wall-clock time, as a UTC instant."""
    return datetime(year, month, day, hour, minute, tzinfo=REFERENCE_TZ).astimezone(timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(username, display_name=None, role="member", avatar=None):
        user = User(username=username, display_name=display_name or username.title(), role=role, avatar=avatar)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def clock():
    return FrozenClock(ref_time(2026, 3, 16, 7, 30))  # a Monday, morning window open


@pytest.fixture
def client(session_factory, clock):
    from main import app
    from dependencies import get_now

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: clock.now
    app.state.forest_cache = TTLCache(ttl_seconds=60)
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_token({'user_id': user_id})}"}


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file-backed SQLite database, each with its own connection."""
    engine = create_engine(f"sqlite:///{tmp_path / 'journal.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
