"""
Cache-orchestrated feedback analysis.

Lookup order:
1. Exact-match cache by content hash (fastest)
2. Semantic cache by embedding similarity (>= threshold)
3. Fresh analysis via the supplied analyzer function

Fresh results are written back to both caches. Cache and embedding failures
never reach the caller; analyzer failures do.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from reasonbridge_backend.services.analysis_types import (
    AnalysisResult,
    CacheLookupResult,
    FeedbackMetadata,
)
from reasonbridge_backend.services.content_hash import compute_content_hash
from reasonbridge_backend.services.embedding_service import EmbeddingService
from reasonbridge_backend.services.feedback_cache import FeedbackCacheService
from reasonbridge_backend.services.semantic_cache import SemanticCache

logger = logging.getLogger(__name__)

AnalyzeFunc = Callable[[], Awaitable[AnalysisResult]]


class AnalysisCacheService:
    def __init__(
        self,
        feedback_cache: FeedbackCacheService,
        embedding_service: EmbeddingService,
        semantic_cache: SemanticCache,
    ):
        self.feedback_cache = feedback_cache
        self.embedding_service = embedding_service
        self.semantic_cache = semantic_cache

    async def get_or_analyze(
        self,
        content: str,
        analyze_func: AnalyzeFunc,
        topic_id: Optional[str] = None,
    ) -> AnalysisResult:
        content_hash = compute_content_hash(content)

        cached = await self.feedback_cache.get(content_hash)
        if cached is not None:
            logger.debug("Cache hit: exact match")
            return cached.result

        embedding = await self.embedding_service.get_embedding(content)
        if embedding is not None:
            similar = await self.semantic_cache.search_similar(embedding)
            if similar is not None:
                logger.debug(f"Cache hit: semantic similarity {similar.similarity:.3f}")
                await self.feedback_cache.set(content_hash, similar.result)
                return similar.result

        logger.debug("Cache miss: running fresh analysis")
        result = await analyze_func()

        await self._populate_caches(content_hash, result, embedding, topic_id)
        return result

    async def lookup(self, content: str) -> CacheLookupResult:
        """Report where content would be served from, without analysing it."""
        content_hash = compute_content_hash(content)

        cached = await self.feedback_cache.get(content_hash)
        if cached is not None:
            return CacheLookupResult(hit=True, source="redis", result=cached.result)

        embedding = await self.embedding_service.get_embedding(content)
        if embedding is not None:
            similar = await self.semantic_cache.search_similar(embedding)
            if similar is not None:
                return CacheLookupResult(
                    hit=True,
                    source="qdrant",
                    result=similar.result,
                    similarity=similar.similarity,
                )

        return CacheLookupResult(hit=False, source="none")

    async def _populate_caches(
        self,
        content_hash: str,
        result: AnalysisResult,
        embedding: Optional[List[float]],
        topic_id: Optional[str],
    ) -> None:
        writes = [self.feedback_cache.set(content_hash, result)]
        if embedding is not None:
            metadata = FeedbackMetadata.for_result(content_hash, result, topic_id=topic_id)
            writes.append(self.semantic_cache.store(embedding, result, metadata))
        else:
            logger.debug("Skipping semantic cache population - embeddings not available")

        # Both writers absorb their own store errors
        await asyncio.gather(*writes)
