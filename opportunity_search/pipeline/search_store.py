"""Search history and result cache persisted in the SQLite key-value store.

Both lists live as JSON under a single key each. Expired cache entries are
pruned lazily on lookup; there is no background eviction. Persistence failures
are logged and absorbed: reads degrade to "empty", writes to no-ops.
"""

import asyncio
import json
import logging
import sqlite3
import time
from collections.abc import Callable

from pydantic import TypeAdapter, ValidationError

from opportunity_search.core.config import CacheConfig, HistoryConfig
from opportunity_search.core.db import delete_item, get_item, set_item
from opportunity_search.core.schemas import CacheEntry, SearchOptions, SearchResult

logger = logging.getLogger(__name__)

HISTORY_KEY = "search_history"
CACHE_KEY = "search_cache"

_HISTORY_ADAPTER = TypeAdapter(list[str])
_CACHE_ADAPTER = TypeAdapter(dict[str, CacheEntry])

# Errors a read or write of the persisted JSON can raise.
_STORE_ERRORS = (sqlite3.Error, ValidationError, ValueError, TypeError)


class SearchStore:
    """Recent-query history plus a TTL-bounded result cache.

    Usage::

        store = SearchStore(conn)
        cached = await store.get_cached(options)
        if cached is None:
            results = search_opportunities(candidates, options)
            await store.put_cached(options, results)
        await store.record_query(options.query)
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        history: HistoryConfig | None = None,
        cache: CacheConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._conn = conn
        self._history = history or HistoryConfig()
        self._cache = cache or CacheConfig()
        self._clock = clock

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def get_history(self) -> list[str]:
        """Return persisted queries, most recent first ([] on any failure)."""
        try:
            raw = await asyncio.to_thread(get_item, self._conn, HISTORY_KEY)
            if raw is None:
                return []
            return _HISTORY_ADAPTER.validate_json(raw)
        except _STORE_ERRORS as e:
            logger.warning("Could not read search history: %s", e)
            return []

    async def record_query(self, query: str) -> None:
        """Move query to the front of the history, dropping case-insensitive duplicates."""
        query = (query or "").strip()
        if not query:
            return
        history = await self.get_history()
        history = [item for item in history if item.lower() != query.lower()]
        history.insert(0, query)
        history = history[: self._history.max_items]
        try:
            await asyncio.to_thread(set_item, self._conn, HISTORY_KEY, json.dumps(history))
        except _STORE_ERRORS as e:
            logger.warning("Could not save search history: %s", e)

    async def clear_history(self) -> None:
        """Delete the persisted history."""
        try:
            await asyncio.to_thread(delete_item, self._conn, HISTORY_KEY)
        except _STORE_ERRORS as e:
            logger.warning("Could not clear search history: %s", e)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    async def get_cached(self, options: SearchOptions) -> list[SearchResult] | None:
        """Return cached results for options, or None on miss, expiry or failure."""
        try:
            cache = await self._load_cache()
            key = options.cache_key()
            entry = cache.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp > self._cache.ttl_seconds:
                logger.debug("Cache entry expired for query '%s'", entry.query)
                del cache[key]
                await self._save_cache(cache)
                return None
            return entry.results
        except _STORE_ERRORS as e:
            logger.warning("Could not read search cache: %s", e)
            return None

    async def put_cached(self, options: SearchOptions, results: list[SearchResult]) -> None:
        """Cache results under options, evicting the oldest entries beyond max_entries."""
        try:
            cache = await self._load_cache()
            cache[options.cache_key()] = CacheEntry(
                query=options.query,
                results=list(results),
                timestamp=self._clock(),
                options=options,
            )
            overflow = len(cache) - self._cache.max_entries
            if overflow > 0:
                oldest = sorted(cache, key=lambda k: cache[k].timestamp)[:overflow]
                for key in oldest:
                    del cache[key]
                logger.debug("Evicted %d cache entries", overflow)
            await self._save_cache(cache)
        except _STORE_ERRORS as e:
            logger.warning("Could not cache search results: %s", e)

    async def _load_cache(self) -> dict[str, CacheEntry]:
        """Read the persisted map; malformed content counts as empty and is overwritten on next put."""
        raw = await asyncio.to_thread(get_item, self._conn, CACHE_KEY)
        if raw is None:
            return {}
        try:
            return _CACHE_ADAPTER.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding malformed search cache: %s", e)
            return {}

    async def _save_cache(self, cache: dict[str, CacheEntry]) -> None:
        payload = _CACHE_ADAPTER.dump_json(cache).decode()
        await asyncio.to_thread(set_item, self._conn, CACHE_KEY, payload)
