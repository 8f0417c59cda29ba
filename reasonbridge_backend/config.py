"""Shared environment configuration constants for the ReasonBridge backend."""
import os


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def async_database_url(url):
    """Point postgres:// and postgresql:// URLs at the asyncpg driver; anything else passes through."""
    if not url:
        return url
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return "postgresql+asyncpg://" + url[len(scheme):]
    return url


# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_ECHO = _to_bool(os.getenv("DATABASE_ECHO", "false"))  # log every SQL statement

# --- Key-value cache (Redis) ---
REDIS_URL = os.getenv("REDIS_URL")
REDIS_TIMEOUT_SECONDS = float(os.getenv("REDIS_TIMEOUT_SECONDS", "2.0"))

# --- Vector store (Qdrant) ---
QDRANT_URL = os.getenv("QDRANT_URL")
QDRANT_API_KEY = os.getenv("QDRANT_API_KEY")
QDRANT_COLLECTION = os.getenv("QDRANT_COLLECTION", "feedback_embeddings")
QDRANT_TIMEOUT_SECONDS = int(os.getenv("QDRANT_TIMEOUT_SECONDS", "5"))

# --- Cache TTLs (seconds) ---
EXACT_CACHE_TTL_SECONDS = int(os.getenv("EXACT_CACHE_TTL_SECONDS", str(48 * 60 * 60)))  # 48h
EMBEDDING_CACHE_TTL_SECONDS = int(os.getenv("EMBEDDING_CACHE_TTL_SECONDS", str(7 * 24 * 60 * 60)))  # 7d

# --- Semantic cache ---
SIMILARITY_THRESHOLD = float(os.getenv("SIMILARITY_THRESHOLD", "0.95"))

# --- Embeddings ---
EMBEDDING_PROVIDER = os.getenv("EMBEDDING_PROVIDER", "openai").strip().lower()  # 'openai' or 'local'
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
EMBEDDING_DIMENSIONS = int(os.getenv("EMBEDDING_DIMENSIONS", "1536"))
LOCAL_EMBEDDING_BASE_URL = os.getenv("LOCAL_EMBEDDING_BASE_URL", "http://localhost:1234")
EMBEDDING_TIMEOUT_SECONDS = float(os.getenv("EMBEDDING_TIMEOUT_SECONDS", "10"))

# --- Analysis ---
TOLERATE_ANALYZER_FAILURES = _to_bool(os.getenv("TOLERATE_ANALYZER_FAILURES", "false"))
