"""Cache provider contracts, a default in-memory backend and a fetch wrapper."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from .config import CacheConfig
from .errors import CacheError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class CacheBackend[ValueT](Protocol):
    """Protocol implemented by async cache backends keyed by strings."""

    async def get(self, key: str) -> ValueT | None:  # pragma: no cover - protocol
        """Return a cached value for *key* if present and fresh."""
        ...

    async def set(
        self, key: str, value: ValueT, *, ttl: timedelta | None = None
    ) -> None:  # pragma: no cover - protocol
        """Store *value* for *key* in the cache."""
        ...

    async def has(self, key: str) -> bool:  # pragma: no cover - protocol
        """Return ``True`` when *key* holds a fresh value."""
        ...

    async def delete(self, key: str) -> None:  # pragma: no cover - protocol
        """Remove *key* from the cache."""
        ...

    async def clear(self) -> None:  # pragma: no cover - protocol
        """Drop every entry in the cache."""
        ...

    async def get_timestamp(self, key: str) -> datetime | None:  # pragma: no cover - protocol
        """Return when *key* was stored, or ``None`` when absent."""
        ...


@dataclass(slots=True)
class _CacheEntry[ValueT]:
    """Internal cache entry storing a value with its storage and expiry timestamps."""

    value: ValueT
    stored_at: datetime
    expires_at: datetime


class InMemoryCache[ValueT](CacheBackend[ValueT]):
    """Namespaced in-memory cache honoring a time-to-live per entry."""

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Create an in-memory cache with optional *config*."""
        self._config = config or CacheConfig()
        self._clock = clock
        self._store: dict[str, _CacheEntry[ValueT]] = {}
        self._last_cleanup = clock()

    def __len__(self) -> int:
        return len(self._store)

    async def get(self, key: str) -> ValueT | None:
        """Return the cached value when it has not expired."""
        self._cleanup_if_needed()
        entry = self._entry(key)
        return None if entry is None else entry.value

    async def set(self, key: str, value: ValueT, *, ttl: timedelta | None = None) -> None:
        """Store *value*, expiring after *ttl* or the configured TTL."""
        self._cleanup_if_needed()
        effective_ttl = self._config.ttl if ttl is None else ttl
        if effective_ttl.total_seconds() <= 0:
            raise CacheError("Cache TTL must be positive")
        now = self._clock()
        self._store[self._namespaced(key)] = _CacheEntry(
            value=value, stored_at=now, expires_at=now + effective_ttl
        )

    async def has(self, key: str) -> bool:
        """Return ``True`` when *key* holds a value that has not expired."""
        return self._entry(key) is not None

    async def delete(self, key: str) -> None:
        """Remove *key* if present."""
        self._store.pop(self._namespaced(key), None)

    async def clear(self) -> None:
        """Drop every entry."""
        self._store.clear()

    async def get_timestamp(self, key: str) -> datetime | None:
        """Return the storage time of a fresh entry for *key*."""
        entry = self._entry(key)
        return None if entry is None else entry.stored_at

    def cleanup(self) -> int:
        """Purge expired entries and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._store.items() if now >= entry.expires_at]
        for key in expired:
            del self._store[key]
        self._last_cleanup = now
        if expired:
            logger.debug("Purged %d expired cache entries", len(expired))
        return len(expired)

    def _cleanup_if_needed(self) -> None:
        if self._clock() - self._last_cleanup >= self._config.cleanup_interval:
            self.cleanup()

    def _entry(self, key: str) -> _CacheEntry[ValueT] | None:
        namespaced = self._namespaced(key)
        entry = self._store.get(namespaced)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._store.pop(namespaced, None)
            return None
        return entry

    def _namespaced(self, key: str) -> str:
        return f"{self._config.namespace}:{key}"


class CachedFetcher[ValueT]:
    """Wrap async fetches with a cache so repeated loads are served locally."""

    def __init__(self, cache: CacheBackend[ValueT] | None = None) -> None:
        """Create a fetcher backed by *cache* (an :class:`InMemoryCache` by default)."""
        self._cache: CacheBackend[ValueT] = cache or InMemoryCache()
        self._inflight: dict[str, asyncio.Future[ValueT]] = {}

    @property
    def cache(self) -> CacheBackend[ValueT]:
        """Return the underlying cache backend."""
        return self._cache

    async def fetch_with_cache(
        self,
        key: str,
        fetch: Callable[[], Awaitable[ValueT]],
        *,
        force_refresh: bool = False,
        ttl: timedelta | None = None,
    ) -> ValueT:
        """Return the cached value for *key* or await *fetch* and cache its result.

        Concurrent misses for the same key share a single fetch. Failures propagate
        to every waiter and are not cached.
        """
        if not force_refresh:
            cached = await self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for key %s", key)
                return cached
        pending = self._inflight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight fetch for key %s", key)
            return await asyncio.shield(pending)
        task = asyncio.ensure_future(self._fetch_and_store(key, fetch, ttl))
        self._inflight[key] = task
        # The entry lives as long as the fetch, even if the first waiter is cancelled.
        task.add_done_callback(lambda done: self._forget(key, done))
        return await asyncio.shield(task)

    def _forget(self, key: str, done: asyncio.Future[ValueT]) -> None:
        if self._inflight.get(key) is done:
            del self._inflight[key]
        if not done.cancelled() and done.exception() is not None:
            logger.debug("Fetch for key %s failed: %s", key, done.exception())

    async def update_cache(
        self,
        key: str,
        update: Callable[[ValueT | None], ValueT],
        *,
        ttl: timedelta | None = None,
    ) -> ValueT:
        """Store ``update(previous)`` for *key* and return the new value."""
        previous = await self._cache.get(key)
        value = update(previous)
        await self._cache.set(key, value, ttl=ttl)
        return value

    async def _fetch_and_store(
        self, key: str, fetch: Callable[[], Awaitable[ValueT]], ttl: timedelta | None
    ) -> ValueT:
        logger.debug("Cache miss for key %s; fetching", key)
        value = await fetch()
        await self._cache.set(key, value, ttl=ttl)
        return value
