"""Time-bounded cache of unified results, keyed by normalized query and options."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from cachetools import TTLCache

from src.contracts.catalog_search_v1 import SearchOptions
from src.core.config import config
from src.orchestrators.resolver.models import SearchQuery, UnifiedResult

logger = logging.getLogger(__name__)


def make_cache_key(query: SearchQuery, options: SearchOptions) -> str:
    return f"{query.normalized}|{options.cache_fragment()}"


@dataclass
class CacheEntry:
    key: str
    result: UnifiedResult
    created_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    writes: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class ResultCache:
    """TTL cache with oldest-first batch eviction once capacity is exceeded.

    Entries are readable while `now - created_at < ttl`. When a write pushes
    the size above `max_entries`, the `evict_batch` oldest entries are dropped.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        evict_batch: int | None = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds if ttl_seconds is not None else config.cache_ttl_seconds
        self._max_entries = max_entries if max_entries is not None else config.cache_max_entries
        self._evict_batch = evict_batch if evict_batch is not None else config.cache_evict_batch
        self._timer = timer
        # One slot of headroom so the overflowing write lands before batch eviction.
        self._store: TTLCache = TTLCache(
            maxsize=self._max_entries + 1, ttl=self._ttl, timer=timer
        )
        self._lock = threading.Lock()
        self._stats = CacheStats()

    def get(self, key: str) -> UnifiedResult | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None or self._timer() - entry.created_at >= self._ttl:
                self._stats.misses += 1
                return None
            self._stats.hits += 1
            return entry.result

    def put(self, key: str, result: UnifiedResult) -> None:
        with self._lock:
            self._store[key] = CacheEntry(key=key, result=result, created_at=self._timer())
            self._stats.writes += 1
            if len(self._store) > self._max_entries:
                self._evict_oldest()

    def _evict_oldest(self) -> None:
        self._store.expire()
        if len(self._store) <= self._max_entries:
            return
        oldest = sorted(self._store.values(), key=lambda e: e.created_at)[: self._evict_batch]
        for entry in oldest:
            self._store.pop(entry.key, None)
        self._stats.evictions += len(oldest)
        logger.debug("Cache: evicted %s oldest entries", len(oldest))

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            self._store.expire()
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._store

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                writes=self._stats.writes,
                evictions=self._stats.evictions,
            )
