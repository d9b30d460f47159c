# =============================================================================
# relate/lookup.py  —  The lookup orchestrator
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Composes normalizer → cache → upstream → formatter into the single
#   operation the MCP tool exposes:
#
#       LookupService.lookup(platform, identity) -> ToolResult
#
# THE FLOW (per call):
#
#   normalize ──invalid──────────────────────────────────────▶ format_error
#       │
#       ▼ key (derived once, reused for get AND put)
#   cache.get(key) ──hit──────────────────────────────────────▶ format_success
#       │ miss
#       ▼
#   upstream.execute(key) ──fail─────────────────────────────▶ format_error
#       │ ok
#       ▼
#   cache.put(key, payload) ──────────────────────────────────▶ format_success
#
#   - A hit never touches the upstream.
#   - Only a fully successful fetch is cached; errors are never cached.
#   - lookup() never raises: every failure ends as an error ToolResult.
#
# CONCURRENT MISSES:
#   By default two concurrent misses for the same key both fetch, and the
#   later put() wins.  With coalesce=True, concurrent misses for one key
#   share a single in-flight fetch (single-flight), so the upstream sees
#   one call instead of N.  This changes upstream call counts, so it is
#   opt-in (RELATE_COALESCE=true).
# =============================================================================

import asyncio
import logging
from typing import Protocol

from relate.cache import CacheSweeper, IdentityCache
from relate.config import Settings
from relate.errors import RelateError
from relate.formatter import format_error, format_success
from relate.models import IdentityGraphDocument, NormalizedKey, ToolResult
from relate.normalizer import is_known_platform, normalize
from relate.upstream import IdentityGraphClient

logger = logging.getLogger(__name__)


def _consume_exception(future: asyncio.Future) -> None:
    # Every waiter may be gone by the time a shared fetch fails.
    if not future.cancelled():
        future.exception()


class QueryExecutor(Protocol):
    """Anything that can fetch an identity graph for a key."""

    async def execute(self, key: NormalizedKey) -> IdentityGraphDocument: ...


class LookupService:
    """Cache-first identity-graph lookups.

    Args:
        executor: Fetches documents on a cache miss (normally an
            IdentityGraphClient; tests pass a double).
        cache: The shared IdentityCache.
        sweep_interval: Seconds between proactive sweeps once start() runs.
            None disables the background sweeper.
        coalesce: Share one in-flight fetch between concurrent misses of
            the same key.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        cache: IdentityCache,
        sweep_interval: float | None = None,
        coalesce: bool = False,
    ):
        self.executor = executor
        self.cache = cache
        self.coalesce = coalesce
        self.sweeper = CacheSweeper(cache, sweep_interval) if sweep_interval else None
        self._inflight: dict[NormalizedKey, asyncio.Future] = {}

    async def lookup(self, platform: object, identity: object) -> ToolResult:
        """Resolve the identity graph for (platform, identity)."""
        try:
            key = normalize(platform, identity)
        except RelateError as exc:
            return format_error(exc)

        if not is_known_platform(key.platform):
            logger.debug("Unrecognized platform %r, passing through", key.platform)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Cache hit for %s", key)
            return format_success(cached)

        logger.info("Fetching data for %s", key)
        try:
            payload = await self._fetch(key)
        except RelateError as exc:
            return format_error(exc)
        except Exception as exc:
            logger.exception("Unexpected error looking up %s", key)
            return format_error(exc)
        return format_success(payload)

    async def _fetch(self, key: NormalizedKey) -> IdentityGraphDocument:
        if not self.coalesce:
            return await self._fetch_and_store(key)

        future = self._inflight.get(key)
        if future is None:
            future = asyncio.ensure_future(self._fetch_and_store(key))
            self._inflight[key] = future
            future.add_done_callback(lambda _: self._inflight.pop(key, None))
            future.add_done_callback(_consume_exception)
        else:
            logger.info("Joining in-flight fetch for %s", key)
        # shield: one waiter going away must not cancel the others' fetch.
        return await asyncio.shield(future)

    async def _fetch_and_store(self, key: NormalizedKey) -> IdentityGraphDocument:
        payload = await self.executor.execute(key)
        if payload is not None:
            self.cache.put(key, payload)
        return payload

    # --- lifecycle ----------------------------------------------------------

    async def start(self) -> None:
        """Start the background sweeper (if configured)."""
        if self.sweeper is not None:
            self.sweeper.start()

    async def close(self) -> None:
        """Stop the sweeper and release the executor's HTTP resources."""
        if self.sweeper is not None:
            await self.sweeper.stop()
        aclose = getattr(self.executor, "aclose", None)
        if aclose is not None:
            await aclose()


def build_service(settings: Settings, executor: QueryExecutor | None = None) -> LookupService:
    """Wire a LookupService from Settings.

    Args:
        settings: Loaded configuration.
        executor: Optional executor override; defaults to an
            IdentityGraphClient for settings.endpoint_url.
    """
    if executor is None:
        executor = IdentityGraphClient(
            endpoint=settings.endpoint_url,
            timeout=settings.request_timeout,
            access_token=settings.access_token,
        )
    cache = IdentityCache(ttl=settings.cache_ttl, max_entries=settings.cache_max_entries)
    return LookupService(
        executor=executor,
        cache=cache,
        sweep_interval=settings.sweep_interval,
        coalesce=settings.coalesce_inflight,
    )
