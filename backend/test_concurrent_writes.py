"""Two requests racing to create the same row: the second session commits its
row just before the first session flushes."""

import json

import pytest
from sqlalchemy import event

from conftest import ref_time
from errors import ConflictError
from models.coaching_note import CoachingNote
from models.goal import Goal
from models.morning_entry import MorningEntry
from models.user import User
from models.watering_event import WateringEvent
from services.clock import WindowPolicy
from services.coaching_service import CoachingService
from services.goal_service import GoalService
from services.journal_service import JournalService
from services.watering_service import WateringService

NOW = ref_time(2026, 3, 16, 7, 30)
MORNING = WindowPolicy.parse("morning", "06:00-09:00")


@pytest.fixture
def sessions(file_session_factory):
    setup = file_session_factory()
    setup.add_all([
        User(username="alice", display_name="Alice", role="member"),
        User(username="bob", display_name="Bob", role="member"),
        User(username="coach", display_name="Coach", role="coach"),
    ])
    setup.commit()
    setup.close()

    mine = file_session_factory()
    yield mine, file_session_factory
    mine.close()


def commit_before_flush(session, factory, make_row):
    """Have another session commit make_row() right before session's next flush."""

    def race(flushing, flush_context, instances):
        other = factory()
        try:
            other.add(make_row())
            other.commit()
        finally:
            other.close()

    event.listen(session, "before_flush", race, once=True)


def test_watering_lost_race_is_a_conflict(sessions):
    db, factory = sessions
    commit_before_flush(db, factory, lambda: WateringEvent(
        from_user_id=1, target_user_id=2, from_user_name="Alice", day_key="2026-03-16", created_at=NOW,
    ))

    with pytest.raises(ConflictError):
        WateringService.water(db, 1, 2, NOW)

    assert db.query(WateringEvent).count() == 1


def test_journal_lost_create_race_saves_as_edit(sessions):
    db, factory = sessions
    commit_before_flush(db, factory, lambda: MorningEntry(
        user_id=1, day_key="2026-03-16", mood="flat", declaration="first", created_at=NOW,
    ))

    entry = JournalService.save_morning(db, 1, {"mood": "fire", "declaration": "second"}, MORNING, NOW)

    assert entry.declaration == "second"
    assert entry.mood == "fire"
    assert db.query(MorningEntry).count() == 1


def test_coaching_note_lost_create_race_last_write_wins(sessions):
    db, factory = sessions
    commit_before_flush(db, factory, lambda: CoachingNote(
        user_id=2, coach_id=3, day_key="2026-03-16", correction="first", created_at=NOW,
    ))

    note = CoachingService.save_note(db, 3, 2, "second", None, NOW)

    assert note.correction == "second"
    assert db.query(CoachingNote).count() == 1


def test_goal_lost_create_race_last_write_wins(sessions):
    db, factory = sessions
    commit_before_flush(db, factory, lambda: Goal(
        user_id=1, period_type="weekly", period_key="2026-W12", objective="first",
        key_results=json.dumps([]), created_at=NOW,
    ))

    goal = GoalService.save(db, 1, {"period_type": "weekly", "objective": "second"}, NOW)

    assert goal.objective == "second"
    assert db.query(Goal).count() == 1
