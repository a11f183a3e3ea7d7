from platecost.services.pricing.cache import PriceCache, cache_key


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_cache_key_is_normalized():
    assert cache_key("kroger", "Red,  Onion", "New York, NY 10001") == "kroger|red onion|10001"
    assert cache_key("kroger", "onion", None) == "kroger|onion|default"
    assert cache_key("kroger", "onion", "Austin,  TX") == "kroger|onion|austin tx"


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = PriceCache(ttl_seconds=10, clock=clock)
    cache.set("k", "quote")
    clock.now = 9.9
    assert cache.get("k") == "quote"
    clock.now = 10.0
    assert cache.get("k") is None


def test_reads_do_not_extend_ttl():
    clock = FakeClock()
    cache = PriceCache(ttl_seconds=10, clock=clock)
    cache.set("k", "quote")
    for t in (3, 6, 9):
        clock.now = t
        assert cache.get("k") == "quote"
    clock.now = 11
    assert cache.get("k") is None


def test_rewrite_restarts_ttl():
    clock = FakeClock()
    cache = PriceCache(ttl_seconds=10, clock=clock)
    cache.set("k", "old")
    clock.now = 8
    cache.set("k", "new")
    clock.now = 15
    assert cache.get("k") == "new"


def test_capacity_evicts_oldest():
    cache = PriceCache(ttl_seconds=100, max_entries=2, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    assert len(cache) == 2
    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_evict_expired_and_clear():
    clock = FakeClock()
    cache = PriceCache(ttl_seconds=5, clock=clock)
    cache.set("a", 1)
    clock.now = 3
    cache.set("b", 2)
    clock.now = 6
    assert cache.evict_expired() == 1
    assert len(cache) == 1
    cache.clear()
    assert len(cache) == 0
