"""
Embedding Service for the semantic feedback cache.

Turns response content into vectors via a remote embedding provider
(OpenAI text-embedding-3-small by default, or an OpenAI-compatible local
server) and caches vectors by content hash so identical content never costs
a second provider call.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx
import numpy as np
from openai import AsyncOpenAI

from reasonbridge_backend.config import (
    EMBEDDING_CACHE_TTL_SECONDS,
    EMBEDDING_MODEL,
    EMBEDDING_PROVIDER,
    EMBEDDING_TIMEOUT_SECONDS,
    LOCAL_EMBEDDING_BASE_URL,
    OPENAI_API_KEY,
)
from reasonbridge_backend.services.content_hash import compute_content_hash, embedding_cache_key
from reasonbridge_backend.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> List[float]:
        ...


class OpenAIEmbeddingProvider:
    """
    OpenAI embeddings.

    text-embedding-3-small:
    - 1536 dimensions
    - $0.02 / 1M tokens
    """

    def __init__(self, api_key: str, model: str = EMBEDDING_MODEL, timeout_seconds: float = EMBEDDING_TIMEOUT_SECONDS):
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY not found in environment. "
                "Please set it to use the embedding service."
            )
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds)

    async def embed(self, text: str) -> List[float]:
        response = await self.client.embeddings.create(
            model=self.model,
            input=text,
            encoding_format="float",
        )
        return response.data[0].embedding


class LocalEmbeddingProvider:
    """OpenAI-compatible /v1/embeddings endpoint (LM Studio, llama.cpp, vLLM)."""

    def __init__(self, base_url: str, model: str = EMBEDDING_MODEL, timeout_seconds: float = EMBEDDING_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_seconds = timeout_seconds

    async def embed(self, text: str) -> List[float]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "input": text,
            "encoding_format": "float",
        }
        url = f"{self.base_url}/v1/embeddings"
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            return response.json()["data"][0]["embedding"]


def build_embedding_provider(provider: str = EMBEDDING_PROVIDER) -> Optional[EmbeddingProvider]:
    """
    Build the configured provider, or None when it cannot be configured
    (semantic caching is then disabled and lookups fall through).
    """
    if provider == "local":
        return LocalEmbeddingProvider(LOCAL_EMBEDDING_BASE_URL)
    if provider == "openai":
        if not OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY not set; semantic feedback cache disabled")
            return None
        return OpenAIEmbeddingProvider(OPENAI_API_KEY)
    logger.warning(f"Unknown EMBEDDING_PROVIDER '{provider}'; semantic feedback cache disabled")
    return None


class EmbeddingService:
    """Embeds content through a provider, caching vectors by content hash."""

    def __init__(
        self,
        provider: Optional[EmbeddingProvider],
        cache_store: KeyValueStore,
        ttl_seconds: int = EMBEDDING_CACHE_TTL_SECONDS,
    ):
        self.provider = provider
        self.cache_store = cache_store
        self.ttl_seconds = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self.provider is not None

    async def embed_text(self, text: str) -> List[float]:
        """
        Generate an embedding straight from the provider.

        Raises:
            ValueError: empty text or no provider configured
            Exception: provider failures propagate
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")
        if self.provider is None:
            raise ValueError("No embedding provider configured")
        return await self.provider.embed(text)

    async def get_embedding(self, content: str) -> Optional[List[float]]:
        """
        Cached embedding for content, or None when embeddings are unavailable.

        Never raises: cache and provider failures are logged and reported as
        None so callers skip the semantic cache for this request.
        """
        if self.provider is None or not content or not content.strip():
            return None

        key = embedding_cache_key(compute_content_hash(content))

        try:
            cached = await self.cache_store.get(key)
            if cached:
                logger.debug(f"Embedding cache hit for {key}")
                return [float(x) for x in cached]
        except Exception as e:
            logger.warning(f"Embedding cache read failed for {key}: {e}")

        try:
            embedding = await self.provider.embed(content)
        except Exception as e:
            logger.warning(f"Embedding provider failed; skipping semantic cache: {e}")
            return None

        try:
            await self.cache_store.set(key, embedding, self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Embedding cache write failed for {key}: {e}")

        return embedding

    @staticmethod
    def cosine_similarity(embedding1: List[float], embedding2: List[float]) -> float:
        """
        Calculate cosine similarity between two embeddings.

        Returns:
            Similarity score between -1 and 1 (typically 0-1 for text)
        """
        vec1 = np.array(embedding1)
        vec2 = np.array(embedding2)

        norm1 = np.linalg.norm(vec1)
        norm2 = np.linalg.norm(vec2)

        if norm1 == 0 or norm2 == 0:
            return 0.0

        return float(np.dot(vec1, vec2) / (norm1 * norm2))
