import time

from atio_search.cache.ranked import CacheSweeper, RankedResultCache, cache_key
from atio_search.ranking.models import ScoredResult


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def ranking(*ids):
    return [ScoredResult(id=i, score=90 - n) for n, i in enumerate(ids)]


def test_key_is_trimmed_and_lower_cased():
    assert cache_key("  Drought Seeds ") == "drought seeds"

    cache = RankedResultCache(clock=FakeClock())
    cache.put("Drought Seeds", ranking(1, 2))
    assert cache.get("  drought seeds  ") == ranking(1, 2)
    assert "DROUGHT SEEDS" in cache


def test_ttl_boundary():
    clock = FakeClock()
    cache = RankedResultCache(ttl_s=300, clock=clock)
    cache.put("q", ranking(1))

    clock.now += 4 * 60 + 59
    assert cache.get("q") == ranking(1)

    clock.now += 2  # 5m01s after creation
    assert cache.get("q") is None
    assert len(cache) == 0


def test_201st_insert_evicts_oldest_50():
    clock = FakeClock()
    cache = RankedResultCache(max_entries=200, evict_batch=50, clock=clock)
    for n in range(201):
        clock.now += 1
        cache.put(f"query {n}", ranking(n))

    assert len(cache) <= 151
    for n in range(50):
        assert f"query {n}" not in cache
    for n in range(50, 201):
        assert cache.get(f"query {n}") == ranking(n)


def test_eviction_with_equal_timestamps_drops_earliest_inserted():
    cache = RankedResultCache(max_entries=3, evict_batch=2, clock=FakeClock())
    for key in ("a", "b", "c", "d"):
        cache.put(key, ranking(1))

    assert len(cache) == 2
    assert "c" in cache and "d" in cache


def test_overwrite_refreshes_timestamp():
    clock = FakeClock()
    cache = RankedResultCache(ttl_s=10, clock=clock)
    cache.put("q", ranking(1))
    clock.now += 8
    cache.put("q", ranking(2))
    clock.now += 8
    assert cache.get("q") == ranking(2)


def test_purge_expired():
    clock = FakeClock()
    cache = RankedResultCache(ttl_s=10, clock=clock)
    cache.put("old", ranking(1))
    clock.now += 6
    cache.put("new", ranking(2))
    clock.now += 6

    assert cache.purge_expired() == 1
    assert "old" not in cache and "new" in cache


def test_cached_ranking_is_a_copy():
    cache = RankedResultCache(clock=FakeClock())
    cache.put("q", ranking(1, 2))
    cache.get("q").clear()
    assert cache.get("q") == ranking(1, 2)


def test_sweeper_purges_in_background():
    clock = FakeClock()
    cache = RankedResultCache(ttl_s=10, clock=clock)
    cache.put("q", ranking(1))
    clock.now += 11

    sweeper = CacheSweeper(cache, interval_s=0.01)
    sweeper.start()
    try:
        deadline = time.monotonic() + 2
        while len(cache) and time.monotonic() < deadline:
            time.sleep(0.01)
        assert sweeper.running
    finally:
        sweeper.stop()

    assert len(cache) == 0
    assert not sweeper.running
