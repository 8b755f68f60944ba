from services.cache_service import TTLCache


class ManualClock:
    def __init__(self):
        self.t = 1000.0

    def __call__(self):
        return self.t


def test_entries_expire_after_ttl():
    clock = ManualClock()
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("forest", {"n": 1})

    clock.t += 59
    assert cache.get("forest") == {"n": 1}
    clock.t += 1
    assert cache.get("forest") is None


def test_get_or_compute_only_computes_on_miss():
    calls = []
    cache = TTLCache(ttl_seconds=60, clock=ManualClock())

    def compute():
        calls.append(1)
        return "value"

    assert cache.get_or_compute("k", compute) == "value"
    assert cache.get_or_compute("k", compute) == "value"
    assert len(calls) == 1


def test_invalidate_single_key_and_all():
    cache = TTLCache(ttl_seconds=60, clock=ManualClock())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.invalidate("a")
    assert cache.get("a") is None
    assert cache.get("b") == 2
    cache.invalidate()
    assert cache.get("b") is None


def test_zero_ttl_disables_caching():
    cache = TTLCache(ttl_seconds=0, clock=ManualClock())
    cache.set("a", 1)
    assert cache.get("a") is None


def test_clear_expired_and_stats():
    clock = ManualClock()
    cache = TTLCache(ttl_seconds=10, clock=clock)
    cache.set("old", 1)
    clock.t += 5
    cache.set("new", 2)
    clock.t += 6
    cache.clear_expired()

    assert cache.get("new") == 2
    stats = cache.get_stats()
    assert stats["total_entries"] == 1
    assert stats["hits"] == 1
    assert stats["misses"] == 0
