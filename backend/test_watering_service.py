from datetime import timedelta

import pytest

from conftest import ref_time
from errors import ConflictError, NotFoundError, ValidationError
from models.watering_event import WateringEvent
from services.clock import REFERENCE_TZ, as_utc
from services.cache_service import TTLCache
from services.forest_view_service import forest_cache_key
from services.watering_service import WateringService

NOW = ref_time(2026, 3, 16, 10)


def test_water_records_snapshot_and_day_key(db, make_user):
    alice = make_user("alice", "Alice")
    bob = make_user("bob")

    event = WateringService.water(db, alice.id, bob.id, NOW)

    assert event.from_user_name == "Alice"
    assert event.day_key == "2026-03-16"


def test_second_watering_same_day_conflicts(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    WateringService.water(db, alice.id, bob.id, NOW)
    with pytest.raises(ConflictError):
        WateringService.water(db, alice.id, bob.id, NOW + timedelta(hours=5))

    assert db.query(WateringEvent).count() == 1


def test_next_reference_day_is_allowed(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    WateringService.water(db, alice.id, bob.id, ref_time(2026, 3, 16, 23, 50))
    WateringService.water(db, alice.id, bob.id, ref_time(2026, 3, 17, 0, 10))

    assert db.query(WateringEvent).count() == 2


def test_other_pairs_are_independent(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")

    WateringService.water(db, alice.id, bob.id, NOW)
    WateringService.water(db, alice.id, carol.id, NOW)
    WateringService.water(db, bob.id, alice.id, NOW)

    assert db.query(WateringEvent).count() == 3


def test_self_watering_rejected_without_insert(db, make_user):
    alice = make_user("alice")

    with pytest.raises(ValidationError):
        WateringService.water(db, alice.id, alice.id, NOW)

    assert db.query(WateringEvent).count() == 0


def test_unknown_target(db, make_user):
    alice = make_user("alice")

    with pytest.raises(NotFoundError):
        WateringService.water(db, alice.id, 999, NOW)


def test_local_time_is_stored_as_utc(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    event = WateringService.water(db, alice.id, bob.id, NOW.astimezone(REFERENCE_TZ))

    assert as_utc(event.created_at) == NOW
    assert event.day_key == "2026-03-16"


def test_snapshot_name_survives_rename(db, make_user):
    alice = make_user("alice", "Alice")
    bob = make_user("bob")
    WateringService.water(db, alice.id, bob.id, NOW)

    alice.display_name = "Alicia"
    db.commit()

    event = db.query(WateringEvent).one()
    assert event.from_user_name == "Alice"


def test_watering_invalidates_forest_cache(db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    cache = TTLCache(ttl_seconds=60)
    cache.set(forest_cache_key(NOW), {"forest": []})

    WateringService.water(db, alice.id, bob.id, NOW, cache)

    assert cache.get(forest_cache_key(NOW)) is None
