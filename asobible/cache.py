"""
Time-boxed Caches

PatternCache holds the single process-wide value of effective intent
patterns as ``{value, expires_at}``. Writes come only from the pattern
loader and from ``invalidate()``. No lock guards the fetch-then-store
sequence: concurrent misses may fetch twice, and the last write wins.

RuleSetCache is a keyed TTL cache for merged rule sets, one entry per
(vertical, market, organization, app) scope.

Usage:
    from asobible.cache import RuleSetCache
    cache = RuleSetCache(ttl_seconds=300)
    merged = await cache.get("finance", "us")
    if merged is None:
        merged = build(...)
        await cache.put("finance", "us", merged)
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class PatternCache(Generic[T]):
    """A single cached value with an absolute expiry time."""

    def __init__(self, ttl_seconds: float = 300):
        self.ttl = ttl_seconds
        self.value: Optional[T] = None
        self.expires_at: float = 0.0

    def get(self) -> Optional[T]:
        """Return the cached value if present and not expired."""
        if self.value is None or time.monotonic() >= self.expires_at:
            return None
        return self.value

    def set(self, value: T) -> None:
        self.value = value
        self.expires_at = time.monotonic() + self.ttl

    def invalidate(self) -> None:
        """Drop the cached value. Admin-only; never called from classification."""
        self.value = None
        self.expires_at = 0.0


class RuleSetCache:
    """Keyed in-memory cache with TTL eviction, guarded by an asyncio lock."""

    def __init__(self, ttl_seconds: int = 300, max_entries: int = 256):
        self._cache: dict[str, tuple[float, Any]] = {}
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(
        vertical: Optional[str],
        market: Optional[str],
        organization_id: Optional[str] = None,
        app_id: Optional[str] = None,
    ) -> str:
        return ":".join((
            vertical or "base",
            market or "global",
            organization_id or "-",
            app_id or "-",
        ))

    async def get(
        self,
        vertical: Optional[str],
        market: Optional[str],
        organization_id: Optional[str] = None,
        app_id: Optional[str] = None,
    ) -> Optional[Any]:
        """Return the cached rule set if it exists and has not expired."""
        key = self.make_key(vertical, market, organization_id, app_id)
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            ts, value = entry
            if time.monotonic() - ts > self._ttl:
                del self._cache[key]
                self._misses += 1
                return None

            self._hits += 1
            return value

    async def put(
        self,
        vertical: Optional[str],
        market: Optional[str],
        value: Any,
        organization_id: Optional[str] = None,
        app_id: Optional[str] = None,
    ) -> None:
        """Store a rule set. Evicts the oldest entry when full."""
        key = self.make_key(vertical, market, organization_id, app_id)
        async with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_entries:
                oldest_key = min(self._cache, key=lambda k: self._cache[k][0])
                del self._cache[oldest_key]

            self._cache[key] = (time.monotonic(), value)

    async def invalidate(
        self,
        vertical: Optional[str],
        market: Optional[str],
        organization_id: Optional[str] = None,
        app_id: Optional[str] = None,
    ) -> None:
        """Remove a specific entry."""
        key = self.make_key(vertical, market, organization_id, app_id)
        async with self._lock:
            self._cache.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()

    @property
    def stats(self) -> dict:
        """Cache hit/miss statistics."""
        total = self._hits + self._misses
        return {
            "entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }
