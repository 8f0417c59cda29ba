"""
Vector similarity store capability used by the semantic feedback cache.

QdrantVectorStore is the production adapter; InMemoryVectorStore keeps the
same contract with brute-force cosine similarity for development and tests.
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, List, Optional, Protocol

import numpy as np
from qdrant_client import AsyncQdrantClient
from qdrant_client.http.models import Distance, PointStruct, VectorParams

from reasonbridge_backend.services.embedding_service import EmbeddingService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VectorMatch:
    point_id: str
    score: float
    payload: Dict[str, Any]


class VectorStore(Protocol):
    async def search(self, vector: List[float], limit: int = 1) -> List[VectorMatch]:
        ...

    async def upsert(self, point_id: str, vector: List[float], payload: Dict[str, Any]) -> None:
        ...


class QdrantVectorStore:
    """
    Qdrant-backed store using cosine distance, so match scores are
    similarities in [-1, 1] (effectively [0, 1] for text embeddings).
    """

    def __init__(
        self,
        url: str,
        collection: str,
        dimensions: int,
        api_key: Optional[str] = None,
        timeout_seconds: int = 5,
    ):
        self.url = url
        self.collection = collection
        self.dimensions = dimensions
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.client: Optional[AsyncQdrantClient] = None

    async def connect(self):
        self.client = AsyncQdrantClient(url=self.url, api_key=self.api_key, timeout=self.timeout_seconds)
        await self.ensure_collection()

    async def close(self):
        if self.client is not None:
            await self.client.close()
            self.client = None

    def _client(self) -> AsyncQdrantClient:
        if self.client is None:
            raise RuntimeError("QdrantVectorStore used before connect()")
        return self.client

    async def ensure_collection(self):
        client = self._client()
        if await client.collection_exists(self.collection):
            return
        await client.create_collection(
            collection_name=self.collection,
            vectors_config=VectorParams(size=self.dimensions, distance=Distance.COSINE),
        )
        logger.info(f"Created Qdrant collection {self.collection} ({self.dimensions} dims, cosine)")

    async def search(self, vector: List[float], limit: int = 1) -> List[VectorMatch]:
        response = await self._client().query_points(
            collection_name=self.collection,
            query=vector,
            limit=limit,
            with_payload=True,
        )
        return [
            VectorMatch(point_id=str(point.id), score=float(point.score), payload=dict(point.payload or {}))
            for point in response.points
        ]

    async def upsert(self, point_id: str, vector: List[float], payload: Dict[str, Any]) -> None:
        await self._client().upsert(
            collection_name=self.collection,
            points=[PointStruct(id=point_id, vector=vector, payload=payload)],
        )


class InMemoryVectorStore:
    """Brute-force cosine similarity over points kept in process memory."""

    def __init__(self):
        self.points: Dict[str, tuple] = {}
        self.lock = Lock()

    async def search(self, vector: List[float], limit: int = 1) -> List[VectorMatch]:
        query = np.asarray(vector, dtype=float)
        with self.lock:
            candidates = list(self.points.items())

        matches = [
            VectorMatch(point_id=point_id, score=EmbeddingService.cosine_similarity(query, stored), payload=dict(payload))
            for point_id, (stored, payload) in candidates
        ]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:limit]

    async def upsert(self, point_id: str, vector: List[float], payload: Dict[str, Any]) -> None:
        with self.lock:
            self.points[point_id] = (np.asarray(vector, dtype=float), dict(payload))
