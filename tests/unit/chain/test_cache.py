"""Tests for the TTL cache used by chain readers."""

from dexroute.chain.cache import MISSING, TtlCache
from tests.helpers import FakeClock


class TestTtlCache:
    def test_returns_value_within_ttl(self):
        """Entries are served until their ttl has elapsed."""
        clock = FakeClock()
        cache = TtlCache(60, clock=clock)
        cache.set("k", 1)

        clock.advance(59.9)
        assert cache.get("k") == 1

    def test_expires_after_ttl(self):
        clock = FakeClock()
        cache = TtlCache(60, clock=clock)
        cache.set("k", 1)

        clock.advance(60)
        assert cache.get("k") is MISSING
        assert len(cache) == 0

    def test_cached_none_is_not_missing(self):
        """A cached None (e.g. "no pool") is distinguishable from a miss."""
        cache = TtlCache(60, clock=FakeClock())
        cache.set("pair", None)

        assert cache.get("pair") is None
        assert cache.get("other") is MISSING

    def test_zero_ttl_disables_storage(self):
        cache = TtlCache(0, clock=FakeClock())
        cache.set("k", 1)

        assert not cache.enabled
        assert cache.get("k") is MISSING
        assert len(cache) == 0

    def test_invalidate_and_clear(self):
        cache = TtlCache(60, clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)

        cache.invalidate("a")
        cache.invalidate("never-set")
        assert cache.get("a") is MISSING
        assert cache.get("b") == 2

        cache.clear()
        assert len(cache) == 0
