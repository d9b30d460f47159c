# =============================================================================
# relate/cache.py  —  TTL cache for identity-graph documents
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Keeps successful upstream payloads in process memory for `ttl` seconds
#   so repeated lookups of the same (platform, identity) skip the network.
#
# TWO EXPIRY PATHS, ONE PREDICATE:
#   1. Lazy:      get() drops an entry it finds stale and reports a miss.
#   2. Proactive: sweep() drops every stale entry.  CacheSweeper calls it
#                 on a fixed interval shorter than the TTL, so keys that
#                 are looked up once and never again don't pile up.
#   Both go through IdentityCache.is_stale(), so they can never disagree
#   about what "stale" means.
#
# CONCURRENCY:
#   One IdentityCache is shared by every concurrent lookup.  All reads and
#   writes of the underlying dict happen under a single lock, so get/put/
#   sweep are safe from asyncio tasks and from worker threads alike.  None
#   of them block on I/O.
#
# SIZE:
#   Unbounded by default: entries are bounded in lifetime, not in count.
#   Pass max_entries to cap it; put() then evicts the oldest entries.
# =============================================================================

import asyncio
import logging
import threading
import time
from typing import Callable

from relate.models import CacheEntry, IdentityGraphDocument, NormalizedKey

logger = logging.getLogger(__name__)


DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 3 * 60


class IdentityCache:
    """An in-memory, TTL-bounded NormalizedKey -> payload store.

    Args:
        ttl: Maximum entry age in seconds.  An entry older than this is stale.
        max_entries: Optional cap on the number of entries.  None = unbounded.
        clock: Returns the current time in seconds.  Defaults to
            time.monotonic; tests pass a fake to move time without sleeping.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl!r}")
        if max_entries is not None and max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries!r}")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[NormalizedKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def is_stale(self, entry: CacheEntry, now: float) -> bool:
        """The single staleness rule shared by get() and sweep()."""
        return now - entry.stored_at > self.ttl

    def get(self, key: NormalizedKey) -> IdentityGraphDocument | None:
        """Return the cached payload for `key`, or None if absent or stale.

        A stale entry is removed on the spot, whether or not a sweep has run.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self.is_stale(entry, now):
                del self._entries[key]
                return None
            return entry.payload

    def put(self, key: NormalizedKey, payload: IdentityGraphDocument) -> None:
        """Store `payload` under `key`, replacing any previous entry wholesale."""
        entry = CacheEntry(key=key, payload=payload, stored_at=self._clock())
        with self._lock:
            self._entries[key] = entry
            self._evict_overflow()
        logger.debug("Cached %s", key)

    def sweep(self) -> int:
        """Remove every stale entry.  Returns how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [key for key, entry in self._entries.items() if self.is_stale(entry, now)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Swept %d stale cache entries", len(stale))
        return len(stale)

    def _evict_overflow(self) -> None:
        # Caller holds the lock.
        if self.max_entries is None or len(self._entries) <= self.max_entries:
            return
        overflow = len(self._entries) - self.max_entries
        oldest = sorted(self._entries.values(), key=lambda entry: entry.stored_at)[:overflow]
        for entry in oldest:
            del self._entries[entry.key]


# =============================================================================
# CacheSweeper — runs IdentityCache.sweep() on a fixed interval
# =============================================================================
# Owned by LookupService: started when the server starts, stopped (and
# awaited) when it shuts down.  A failing sweep is logged and the loop
# keeps going; only cancellation ends it.
# =============================================================================
class CacheSweeper:
    """Background asyncio task that sweeps a cache every `interval` seconds."""

    def __init__(self, cache: IdentityCache, interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self.cache = cache
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop on the running event loop.  No-op if running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.cache.sweep()
            except Exception:
                logger.exception("Cache sweep failed")
