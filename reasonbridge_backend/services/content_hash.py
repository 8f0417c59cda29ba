"""Deterministic content hashing for feedback cache keys."""

import hashlib
import re

EXACT_CACHE_PREFIX = "feedback:exact:"
EMBEDDING_CACHE_PREFIX = "feedback:embedding:"

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_content(content: str) -> str:
    """Trim, lowercase and collapse every whitespace run to a single space."""
    if not isinstance(content, str):
        raise TypeError(f"content must be str, got {type(content).__name__}")
    return _WHITESPACE_RUN.sub(" ", content.strip().lower())


def compute_content_hash(content: str) -> str:
    """SHA-256 of the normalized content as 64 lowercase hex chars."""
    return hashlib.sha256(normalize_content(content).encode("utf-8")).hexdigest()


def exact_cache_key(content_hash: str) -> str:
    return f"{EXACT_CACHE_PREFIX}{content_hash}"


def embedding_cache_key(content_hash: str) -> str:
    return f"{EMBEDDING_CACHE_PREFIX}{content_hash}"
