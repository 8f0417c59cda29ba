"""
Exact-match feedback cache.

Keyed by content hash under ``feedback:exact:{hash}``. Every operation is
best-effort: store outages and malformed entries are logged and surface to
callers as a plain miss (get) or a no-op (set/invalidate). A cache outage must
degrade to "always recompute", never to a failed request.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from reasonbridge_backend.config import EXACT_CACHE_TTL_SECONDS
from reasonbridge_backend.services.analysis_types import AnalysisResult, CachedAnalysisResult
from reasonbridge_backend.services.content_hash import exact_cache_key
from reasonbridge_backend.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheLookup:
    """
    Internal outcome of a cache read.

    Either a hit carrying a value, or a non-hit whose ``error`` tells a true
    miss (None) apart from a store failure. Public callers only ever see the
    value or None.
    """
    value: Optional[CachedAnalysisResult] = None
    error: Optional[Exception] = None

    @property
    def hit(self) -> bool:
        return self.value is not None

    @property
    def status(self) -> str:
        if self.value is not None:
            return "hit"
        return "error" if self.error is not None else "miss"


class FeedbackCacheService:
    def __init__(self, store: KeyValueStore, ttl_seconds: int = EXACT_CACHE_TTL_SECONDS):
        self.store = store
        self.ttl_seconds = ttl_seconds

    async def lookup(self, content_hash: str) -> CacheLookup:
        key = exact_cache_key(content_hash)
        try:
            raw = await self.store.get(key)
        except Exception as e:
            logger.warning(f"Exact cache read failed for {key}: {e}")
            return CacheLookup(error=e)

        if raw is None:
            return CacheLookup()

        try:
            return CacheLookup(value=CachedAnalysisResult.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed exact cache entry {key}: {e}")
            return CacheLookup(error=e)

    async def get(self, content_hash: str) -> Optional[CachedAnalysisResult]:
        outcome = await self.lookup(content_hash)
        logger.debug("Exact cache %s for %s", outcome.status, content_hash)
        return outcome.value

    async def set(self, content_hash: str, result: AnalysisResult) -> None:
        key = exact_cache_key(content_hash)
        entry = CachedAnalysisResult.stamp(result)
        try:
            await self.store.set(key, entry.to_dict(), self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Exact cache write failed for {key}: {e}")

    async def invalidate(self, content_hash: str) -> None:
        key = exact_cache_key(content_hash)
        try:
            await self.store.delete(key)
        except Exception as e:
            logger.warning(f"Exact cache delete failed for {key}: {e}")
