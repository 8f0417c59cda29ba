import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reasonbridge_backend.config import (
    EMBEDDING_DIMENSIONS,
    LOG_LEVEL,
    QDRANT_API_KEY,
    QDRANT_COLLECTION,
    QDRANT_TIMEOUT_SECONDS,
    QDRANT_URL,
    REDIS_TIMEOUT_SECONDS,
    REDIS_URL,
)
from reasonbridge_backend.alignments_api import router as alignments_router
from reasonbridge_backend.feedback_api import router as feedback_router
from reasonbridge_backend.services.analysis_cache import AnalysisCacheService
from reasonbridge_backend.services.embedding_service import EmbeddingService, build_embedding_provider
from reasonbridge_backend.services.feedback_cache import FeedbackCacheService
from reasonbridge_backend.services.kv_store import InMemoryKeyValueStore, RedisKeyValueStore
from reasonbridge_backend.services.response_analyzer import ResponseAnalyzer
from reasonbridge_backend.services.semantic_cache import SemanticCache
from reasonbridge_backend.services.vector_store import InMemoryVectorStore, QdrantVectorStore

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("reasonbridge_backend")


async def open_kv_store():
    if not REDIS_URL:
        logger.info("REDIS_URL not set; using in-memory key-value store")
        return InMemoryKeyValueStore()

    store = RedisKeyValueStore(REDIS_URL, timeout_seconds=REDIS_TIMEOUT_SECONDS)
    await store.connect()
    return store


async def open_vector_store():
    if not QDRANT_URL:
        logger.info("QDRANT_URL not set; using in-memory vector store")
        return InMemoryVectorStore()

    store = QdrantVectorStore(
        QDRANT_URL,
        QDRANT_COLLECTION,
        EMBEDDING_DIMENSIONS,
        api_key=QDRANT_API_KEY,
        timeout_seconds=QDRANT_TIMEOUT_SECONDS,
    )
    try:
        await store.connect()
    except Exception as e:
        logger.error(f"Failed to connect to Qdrant at {QDRANT_URL}: {e}; using in-memory vector store")
        await store.close()
        return InMemoryVectorStore()
    logger.info(f"Connected to Qdrant collection '{QDRANT_COLLECTION}'")
    return store


def attach_analysis_components(app: FastAPI, kv_store, vector_store, embedding_provider) -> None:
    """Build the cache stack and analyzer and expose them on app.state."""
    embedding_service = EmbeddingService(embedding_provider, kv_store)
    app.state.kv_store = kv_store
    app.state.vector_store = vector_store
    app.state.embedding_service = embedding_service
    app.state.analysis_cache = AnalysisCacheService(
        FeedbackCacheService(kv_store),
        embedding_service,
        SemanticCache(vector_store),
    )
    app.state.response_analyzer = ResponseAnalyzer()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting ReasonBridge feedback backend")
    kv_store = await open_kv_store()
    vector_store = await open_vector_store()
    attach_analysis_components(app, kv_store, vector_store, build_embedding_provider())
    yield
    logger.info("Shutting down ReasonBridge feedback backend")
    for store in (vector_store, kv_store):
        close = getattr(store, "close", None)
        if close is not None:
            await close()


# fastapi app
reasonbridge_app = FastAPI(lifespan=lifespan)

reasonbridge_app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

reasonbridge_app.include_router(feedback_router)
reasonbridge_app.include_router(alignments_router)
