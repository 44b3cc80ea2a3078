"""
Ranked-result cache.

Holds the full ranking for a query so that every page of the same search
reuses one rerank. Entries expire after a TTL; above capacity the oldest
batch is dropped at once (query repetition is bursty, so strict LRU buys
nothing here). Requests run in a thread pool, hence the lock.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable

from atio_search.config.settings import settings
from atio_search.ranking.models import ScoredResult
from atio_search.logger import get_logger

logger = get_logger(__name__)


def cache_key(query: str) -> str:
    return query.strip().lower()


@dataclass(frozen=True)
class CacheEntry:
    ranked: tuple[ScoredResult, ...]
    created_at: float


class RankedResultCache:
    def __init__(
        self,
        ttl_s: float | None = None,
        max_entries: int | None = None,
        evict_batch: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_s = settings.cache_ttl_s if ttl_s is None else ttl_s
        self.max_entries = settings.cache_max_entries if max_entries is None else max_entries
        self.evict_batch = settings.cache_evict_batch if evict_batch is None else evict_batch
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, query: str) -> bool:
        with self._lock:
            return cache_key(query) in self._entries

    def get(self, query: str) -> list[ScoredResult] | None:
        """Cached ranking, or None on a miss. Expired entries are dropped here."""
        key = cache_key(query)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at > self.ttl_s:
                del self._entries[key]
                return None
            return list(entry.ranked)

    def put(self, query: str, ranked: list[ScoredResult]) -> None:
        key = cache_key(query)
        with self._lock:
            self._entries[key] = CacheEntry(ranked=tuple(ranked), created_at=self._clock())
            if len(self._entries) > self.max_entries:
                self._evict_oldest()

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now - e.created_at > self.ttl_s]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug("cache_purged", count=len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict_oldest(self) -> None:
        # Caller holds the lock. sorted() is stable, so equal timestamps go by insertion order.
        oldest = sorted(self._entries, key=lambda k: self._entries[k].created_at)
        for k in oldest[: self.evict_batch]:
            del self._entries[k]
        logger.info("cache_evicted", count=min(self.evict_batch, len(oldest)), remaining=len(self._entries))


class CacheSweeper:
    """Background thread that purges expired entries on a fixed interval."""

    def __init__(self, cache: RankedResultCache, interval_s: float | None = None):
        self.cache = cache
        self.interval_s = settings.cache_sweep_interval_s if interval_s is None else interval_s
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="cache-sweeper", daemon=True)
        self._thread.start()
        logger.info("cache_sweeper_started", interval_s=self.interval_s)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval_s + 1)
            self._thread = None
        logger.info("cache_sweeper_stopped")

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            try:
                self.cache.purge_expired()
            except Exception as e:
                logger.error("cache_sweep_failed", error=str(e))
