"""
Semantic feedback cache: reuse a cached verdict for near-duplicate phrasing.

Only the single nearest neighbour is considered, and it must clear the
similarity threshold; the threshold is kept high (0.95 by default) so that
semantically different content never inherits another response's verdict.
"""

import logging
import uuid
from typing import List, Optional

from reasonbridge_backend.config import SIMILARITY_THRESHOLD
from reasonbridge_backend.services.analysis_types import (
    AnalysisResult,
    FeedbackMetadata,
    FeedbackType,
    SimilarityHit,
)
from reasonbridge_backend.services.vector_store import VectorStore

logger = logging.getLogger(__name__)


def point_id_for_hash(content_hash: str) -> str:
    """Qdrant point ids must be UUIDs; derive one from the content hash."""
    return str(uuid.UUID(hex=content_hash[:32]))


def result_from_payload(payload: dict) -> AnalysisResult:
    """Rebuild an AnalysisResult from a FeedbackMetadata payload."""
    return AnalysisResult(
        type=FeedbackType(payload["feedbackType"]),
        subtype=payload.get("subtype"),
        suggestion_text=payload["suggestionText"],
        reasoning=payload["reasoning"],
        confidence_score=float(payload["confidenceScore"]),
    )


class SemanticCache:
    def __init__(self, vector_store: VectorStore, similarity_threshold: float = SIMILARITY_THRESHOLD):
        self.vector_store = vector_store
        self.similarity_threshold = similarity_threshold

    async def search_similar(
        self,
        embedding: List[float],
        similarity_threshold: Optional[float] = None,
    ) -> Optional[SimilarityHit]:
        threshold = self.similarity_threshold if similarity_threshold is None else similarity_threshold

        try:
            matches = await self.vector_store.search(embedding, limit=1)
        except Exception as e:
            logger.warning(f"Vector store search failed: {e}")
            return None

        if not matches:
            return None

        top = matches[0]
        if top.score < threshold:
            logger.debug(f"Nearest neighbour similarity {top.score:.3f} below threshold {threshold}")
            return None

        try:
            result = result_from_payload(top.payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed vector payload {top.point_id}: {e}")
            return None

        return SimilarityHit(result=result, similarity=top.score)

    async def store(
        self,
        embedding: List[float],
        result: AnalysisResult,
        metadata: FeedbackMetadata,
    ) -> None:
        # The payload is built from metadata; it mirrors result's fields
        point_id = point_id_for_hash(metadata.content_hash)
        try:
            await self.vector_store.upsert(point_id, embedding, metadata.to_payload())
        except Exception as e:
            logger.warning(f"Vector store upsert failed for {metadata.content_hash} ({result.type.value}): {e}")
