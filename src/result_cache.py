"""Single-entry cache for the dashboard statistics snapshot.

Two interchangeable backends implement :class:`ResultCache`:

* :class:`RedisResultCache`: shared across processes, expiry handled by Redis.
* :class:`InMemoryResultCache`: a thread-safe in-process entry, used when no
  ``REDIS_URL`` is configured and in tests.

The cache is purely an optimisation. Backend errors are logged and treated
as a miss on read and as a no-op on write.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol

import redis

from src import config

logger = logging.getLogger(__name__)


class ResultCache(Protocol):
    def get(self) -> Optional[Dict[str, Any]]:
        ...

    def put(self, stats: Dict[str, Any], ttl_seconds: int = config.STATS_CACHE_TTL_SECONDS) -> None:
        ...

    def invalidate(self) -> None:
        ...


class RedisResultCache:
    """Redis-backed stats cache keyed by :data:`config.STATS_CACHE_KEY`."""

    def __init__(self, client: "redis.Redis", key: str = config.STATS_CACHE_KEY):
        self.client = client
        self.key = key

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisResultCache":
        logger.info("Using Redis stats cache at %s", redis_url)
        return cls(redis.Redis.from_url(redis_url))

    def get(self) -> Optional[Dict[str, Any]]:
        try:
            raw = self.client.get(self.key)
        except redis.RedisError as exc:
            logger.warning("Redis cache error on get: %s", exc)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Discarding undecodable cache entry %s: %s", self.key, exc)
            return None

    def put(self, stats: Dict[str, Any], ttl_seconds: int = config.STATS_CACHE_TTL_SECONDS) -> None:
        try:
            self.client.setex(self.key, ttl_seconds, json.dumps(stats))
        except redis.RedisError as exc:
            logger.warning("Redis cache error on put: %s", exc)

    def invalidate(self) -> None:
        try:
            self.client.delete(self.key)
        except redis.RedisError as exc:
            logger.warning("Redis cache error on invalidate: %s", exc)


class InMemoryResultCache:
    """A thread-safe, single-entry cache with a monotonic-clock expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entry: Optional[Dict[str, Any]] = None
        self._expires_at = 0.0
        self._clock = clock
        self._lock = threading.Lock()

    def get(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            if self._entry is None:
                return None
            if self._clock() >= self._expires_at:
                self._entry = None
                return None
            # Hand out a copy so callers cannot mutate the cached snapshot
            return json.loads(json.dumps(self._entry))

    def put(self, stats: Dict[str, Any], ttl_seconds: int = config.STATS_CACHE_TTL_SECONDS) -> None:
        with self._lock:
            self._entry = json.loads(json.dumps(stats))
            self._expires_at = self._clock() + ttl_seconds

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None


def create_result_cache(redis_url: Optional[str] = None) -> ResultCache:
    """Factory: return a Redis-backed cache if configured, else in-memory."""
    if redis_url:
        return RedisResultCache.from_url(redis_url)
    logger.info("REDIS_URL not set; using in-process stats cache")
    return InMemoryResultCache()
