import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from reasonbridge_backend.services.kv_store import RedisKeyValueStore
from reasonbridge_backend.services.vector_store import QdrantVectorStore


@pytest.mark.asyncio
async def test_redis_store_encodes_json_with_ttl():
    store = RedisKeyValueStore("redis://localhost:6379")
    store.redis = AsyncMock()

    await store.set("feedback:exact:abc", {"type": "BIAS"}, 120)

    store.redis.set.assert_awaited_once_with("feedback:exact:abc", json.dumps({"type": "BIAS"}), ex=120)


@pytest.mark.asyncio
async def test_redis_store_decodes_json_and_reports_missing_keys():
    store = RedisKeyValueStore("redis://localhost:6379")
    store.redis = AsyncMock()
    store.redis.get.side_effect = ['{"a": 1}', None]

    assert await store.get("present") == {"a": 1}
    assert await store.get("absent") is None


@pytest.mark.asyncio
async def test_redis_store_requires_connect():
    store = RedisKeyValueStore("redis://localhost:6379")
    with pytest.raises(RuntimeError):
        await store.get("k")


@pytest.mark.asyncio
async def test_qdrant_store_maps_points_to_matches():
    store = QdrantVectorStore("http://localhost:6333", "feedback_embeddings", 3)
    store.client = AsyncMock()
    store.client.query_points.return_value = SimpleNamespace(
        points=[SimpleNamespace(id="p1", score=0.97, payload={"feedbackType": "BIAS"})]
    )

    matches = await store.search([0.1, 0.2, 0.3], limit=1)

    assert len(matches) == 1
    assert matches[0].point_id == "p1"
    assert matches[0].score == pytest.approx(0.97)
    assert matches[0].payload == {"feedbackType": "BIAS"}
    kwargs = store.client.query_points.await_args.kwargs
    assert kwargs["collection_name"] == "feedback_embeddings"
    assert kwargs["limit"] == 1


@pytest.mark.asyncio
async def test_qdrant_store_creates_missing_collection():
    store = QdrantVectorStore("http://localhost:6333", "feedback_embeddings", 1536)
    store.client = AsyncMock()
    store.client.collection_exists.return_value = False

    await store.ensure_collection()

    store.client.create_collection.assert_awaited_once()
    assert store.client.create_collection.await_args.kwargs["collection_name"] == "feedback_embeddings"


@pytest.mark.asyncio
async def test_qdrant_store_upserts_single_point():
    store = QdrantVectorStore("http://localhost:6333", "feedback_embeddings", 2)
    store.client = AsyncMock()

    await store.upsert("2f1c0e4a-0000-0000-0000-000000000000", [0.5, 0.5], {"contentHash": "abc"})

    points = store.client.upsert.await_args.kwargs["points"]
    assert len(points) == 1
    assert points[0].payload == {"contentHash": "abc"}
