"""
Key-value store capability used by the exact-match and embedding caches.

Components depend on the narrow KeyValueStore protocol, never on a concrete
client, so Redis can be swapped for the in-process store in development and
tests.
"""

import heapq
import json
import logging
import time
from threading import Lock
from typing import Any, Dict, List, Optional, Protocol, Tuple

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class RedisKeyValueStore:
    """
    Redis-backed store. Values are JSON-encoded; TTLs use SET EX.

    Socket timeouts are bounded so a slow Redis surfaces as an exception
    (which the caches treat as a miss) rather than a hung request.
    """

    def __init__(self, redis_url: str, timeout_seconds: float = 2.0):
        self.redis_url = redis_url
        self.timeout_seconds = timeout_seconds
        self.redis = None

    async def connect(self):
        """Initialize Redis connection"""
        self.redis = redis.from_url(
            self.redis_url,
            decode_responses=True,
            socket_timeout=self.timeout_seconds,
            socket_connect_timeout=self.timeout_seconds,
        )
        logger.info("Redis key-value store configured at %s", self.redis_url)

    async def close(self):
        """Close Redis connection"""
        if self.redis:
            await self.redis.aclose()
            self.redis = None

    def _client(self):
        if self.redis is None:
            raise RuntimeError("RedisKeyValueStore used before connect()")
        return self.redis

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._client().get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        await self._client().set(key, json.dumps(value), ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._client().delete(key)


class InMemoryKeyValueStore:
    """
    In-process store with per-entry expiry, used when REDIS_URL is unset.

    Expired entries are dropped lazily on read and swept on every write, so
    keys that are written once and never read again do not accumulate.
    """

    def __init__(self):
        self.cache: Dict[str, Tuple[Any, float]] = {}
        self.lock = Lock()
        # (expiry, key) min-heap; entries for overwritten keys go stale and are skipped
        self._expiries: List[Tuple[float, str]] = []

    async def get(self, key: str) -> Optional[Any]:
        with self.lock:
            if key not in self.cache:
                return None
            value, expiry = self.cache[key]
            if time.time() < expiry:
                return value
            # Clean up expired entry
            del self.cache[key]
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        # Round-trip through JSON so callers observe the same shapes Redis returns
        encoded = json.loads(json.dumps(value))
        now = time.time()
        expiry = now + ttl_seconds
        with self.lock:
            self._purge_expired(now)
            self.cache[key] = (encoded, expiry)
            heapq.heappush(self._expiries, (expiry, key))

    async def delete(self, key: str) -> None:
        with self.lock:
            self.cache.pop(key, None)

    def _purge_expired(self, now: float) -> int:
        # Caller holds self.lock
        removed = 0
        while self._expiries and self._expiries[0][0] <= now:
            expiry, key = heapq.heappop(self._expiries)
            entry = self.cache.get(key)
            if entry is not None and entry[1] == expiry:
                del self.cache[key]
                removed += 1
        if not self.cache:
            self._expiries.clear()
        return removed

    def cleanup_expired(self) -> int:
        """Remove all expired entries; returns how many were dropped"""
        now = time.time()
        with self.lock:
            return self._purge_expired(now)
