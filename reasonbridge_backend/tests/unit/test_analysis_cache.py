from unittest.mock import AsyncMock

import pytest

from reasonbridge_backend.services.analysis_types import AnalysisResult, FeedbackType
from reasonbridge_backend.services.content_hash import compute_content_hash
from reasonbridge_backend.services.exceptions import AnalysisFailedError


def _result(confidence=0.78):
    return AnalysisResult(
        type=FeedbackType.FALLACY,
        subtype="strawman",
        suggestion_text="Engage with the actual argument.",
        reasoning="Detected 1 instance(s) of Strawman.",
        confidence_score=confidence,
    )


@pytest.mark.asyncio
async def test_fresh_analysis_populates_both_caches(make_analysis_cache, embedding_provider, vector_store):
    service = make_analysis_cache(embedding_provider)
    analyze = AsyncMock(return_value=_result())

    result = await service.get_or_analyze("By that logic we should ban cars.", analyze, topic_id="topic-1")

    assert result == _result()
    analyze.assert_awaited_once()
    assert await service.feedback_cache.get(compute_content_hash("By that logic we should ban cars.")) is not None
    assert len(vector_store.points) == 1


@pytest.mark.asyncio
async def test_exact_hit_skips_analysis(make_analysis_cache, embedding_provider):
    service = make_analysis_cache(embedding_provider)
    analyze = AsyncMock(return_value=_result())

    await service.get_or_analyze("By that logic we should ban cars.", analyze)
    again = await service.get_or_analyze("  by THAT logic we should ban cars. ", analyze)

    assert again == _result()
    analyze.assert_awaited_once()


@pytest.mark.asyncio
async def test_semantic_hit_reuses_verdict_and_fills_exact_cache(make_analysis_cache, embedding_provider):
    service = make_analysis_cache(embedding_provider)
    analyze = AsyncMock(return_value=_result())

    await service.get_or_analyze("By that logic we should ban cars.", analyze)
    # The fixture provider embeds every text to the same vector
    reused = await service.get_or_analyze("Following that logic, cars should be banned.", analyze)

    assert reused.type == FeedbackType.FALLACY
    assert reused.confidence_score == pytest.approx(0.78)
    analyze.assert_awaited_once()
    assert await service.feedback_cache.get(
        compute_content_hash("Following that logic, cars should be banned.")
    ) is not None


@pytest.mark.asyncio
async def test_without_embeddings_only_exact_cache_is_used(make_analysis_cache, vector_store):
    service = make_analysis_cache(provider=None)
    analyze = AsyncMock(return_value=_result())

    await service.get_or_analyze("first wording", analyze)
    await service.get_or_analyze("second wording", analyze)

    assert analyze.await_count == 2
    assert vector_store.points == {}


@pytest.mark.asyncio
async def test_cache_outage_still_returns_fresh_analysis(make_analysis_cache):
    service = make_analysis_cache(provider=None)
    service.feedback_cache.store = AsyncMock()
    service.feedback_cache.store.get.side_effect = TimeoutError("redis timed out")
    service.feedback_cache.store.set.side_effect = TimeoutError("redis timed out")
    analyze = AsyncMock(return_value=_result())

    assert await service.get_or_analyze("anything", analyze) == _result()


@pytest.mark.asyncio
async def test_analyzer_failure_propagates_and_caches_nothing(make_analysis_cache, embedding_provider, vector_store):
    service = make_analysis_cache(embedding_provider)
    analyze = AsyncMock(side_effect=AnalysisFailedError("ToneAnalyzer", RuntimeError("boom")))

    with pytest.raises(AnalysisFailedError):
        await service.get_or_analyze("some content", analyze)

    assert await service.feedback_cache.get(compute_content_hash("some content")) is None
    assert vector_store.points == {}


@pytest.mark.asyncio
async def test_lookup_reports_source(make_analysis_cache, embedding_provider):
    service = make_analysis_cache(embedding_provider)

    miss = await service.lookup("By that logic we should ban cars.")
    assert miss.hit is False
    assert miss.source == "none"

    await service.get_or_analyze("By that logic we should ban cars.", AsyncMock(return_value=_result()))

    exact = await service.lookup("by that logic we should ban cars.")
    assert exact.hit is True
    assert exact.source == "redis"

    semantic = await service.lookup("A differently worded response")
    assert semantic.source == "qdrant"
    assert semantic.similarity == pytest.approx(1.0)
    assert semantic.to_dict()["result"]["type"] == "FALLACY"
