"""
Pytest configuration and shared fixtures for ReasonBridge backend tests.

This module provides:
- In-memory repository fakes (propositions, alignments, responses, feedback)
- In-memory cache stack fixtures (key-value store, vector store, embeddings)
- A stub for the database session module so routers import without a database
"""

import importlib
import sys
import types
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from reasonbridge_backend.services.analysis_cache import AnalysisCacheService
from reasonbridge_backend.services.embedding_service import EmbeddingService
from reasonbridge_backend.services.feedback_cache import FeedbackCacheService
from reasonbridge_backend.services.kv_store import InMemoryKeyValueStore
from reasonbridge_backend.services.semantic_cache import SemanticCache
from reasonbridge_backend.services.vector_store import InMemoryVectorStore


def _now():
    return datetime.now(timezone.utc)


# ============================================================================
# Repository fakes
# ============================================================================

class FakePropositionRepository:
    def __init__(self):
        self.propositions = {}
        self.update_calls = []

    def add(self, statement="Cities should expand public transit"):
        proposition_id = str(uuid.uuid4())
        self.propositions[proposition_id] = SimpleNamespace(
            id=proposition_id,
            statement=statement,
            support_count=0,
            oppose_count=0,
            nuanced_count=0,
            consensus_score=None,
        )
        return proposition_id

    async def find_by_id(self, proposition_id):
        return self.propositions.get(str(proposition_id))

    async def list_ids(self):
        return list(self.propositions)

    async def update_aggregates(self, proposition_id, aggregates):
        self.update_calls.append((str(proposition_id), aggregates))
        proposition = self.propositions[str(proposition_id)]
        proposition.support_count = aggregates.support_count
        proposition.oppose_count = aggregates.oppose_count
        proposition.nuanced_count = aggregates.nuanced_count
        proposition.consensus_score = aggregates.consensus_score


class FakeAlignmentRepository:
    def __init__(self):
        self.rows = {}

    async def find_stances_by_proposition(self, proposition_id):
        return [row.stance for (_, pid), row in self.rows.items() if pid == str(proposition_id)]

    async def find_by_user_and_proposition(self, user_id, proposition_id):
        return self.rows.get((user_id, str(proposition_id)))

    async def create(self, user_id, proposition_id, stance, nuance_explanation):
        row = SimpleNamespace(
            id=uuid.uuid4(),
            user_id=user_id,
            proposition_id=str(proposition_id),
            stance=stance,
            nuance_explanation=nuance_explanation,
            created_at=_now(),
            updated_at=_now(),
        )
        self.rows[(user_id, str(proposition_id))] = row
        return row

    async def update(self, alignment, stance, nuance_explanation):
        alignment.stance = stance
        alignment.nuance_explanation = nuance_explanation
        alignment.updated_at = _now()
        return alignment

    async def delete(self, alignment):
        self.rows.pop((alignment.user_id, str(alignment.proposition_id)), None)

    def seed(self, proposition_id, *stances):
        for index, stance in enumerate(stances):
            self.rows[(f"user-{index}", str(proposition_id))] = SimpleNamespace(
                id=uuid.uuid4(),
                user_id=f"user-{index}",
                proposition_id=str(proposition_id),
                stance=stance,
                nuance_explanation="it depends" if stance == "NUANCED" else None,
                created_at=_now(),
                updated_at=_now(),
            )


class FakeResponseRepository:
    def __init__(self):
        self.responses = {}

    def add(self, content="", topic_id=None):
        response_id = str(uuid.uuid4())
        self.responses[response_id] = SimpleNamespace(
            id=response_id,
            topic_id=topic_id or str(uuid.uuid4()),
            author_id="author-1",
            content=content,
        )
        return response_id

    async def find_by_id(self, response_id):
        return self.responses.get(str(response_id))


class FakeFeedbackRepository:
    def __init__(self):
        self.records = {}
        self.analytics_calls = []

    async def create(self, response_id, fields):
        record = SimpleNamespace(
            id=uuid.uuid4(),
            response_id=str(response_id),
            user_acknowledged=False,
            user_revised=False,
            user_helpful_rating=None,
            dismissed_at=None,
            dismissal_reason=None,
            created_at=_now(),
            **fields,
        )
        self.records[str(record.id)] = record
        return record

    async def find_by_id(self, feedback_id):
        return self.records.get(str(feedback_id))

    async def mark_dismissed(self, feedback, dismissal_reason):
        feedback.dismissed_at = _now()
        feedback.dismissal_reason = dismissal_reason
        return feedback

    async def record_engagement(self, feedback, acknowledged=None, revised=None, helpful_rating=None):
        if acknowledged is not None:
            feedback.user_acknowledged = acknowledged
        if revised is not None:
            feedback.user_revised = revised
        if helpful_rating is not None:
            feedback.user_helpful_rating = helpful_rating
        return feedback

    async def find_for_analytics(self, start, end, feedback_type=None, response_id=None):
        self.analytics_calls.append((start, end, feedback_type, response_id))
        return [
            record for record in self.records.values()
            if start <= record.created_at <= end
            and (feedback_type is None or record.type == feedback_type)
            and (response_id is None or record.response_id == str(response_id))
        ]


@pytest.fixture
def proposition_repo():
    return FakePropositionRepository()


@pytest.fixture
def alignment_repo():
    return FakeAlignmentRepository()


@pytest.fixture
def response_repo():
    return FakeResponseRepository()


@pytest.fixture
def feedback_repo():
    return FakeFeedbackRepository()


# ============================================================================
# Cache stack
# ============================================================================

@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def vector_store():
    return InMemoryVectorStore()


@pytest.fixture
def embedding_provider():
    """Provider returning the same unit vector for any text."""
    provider = AsyncMock()
    provider.embed = AsyncMock(return_value=[1.0, 0.0, 0.0])
    return provider


@pytest.fixture
def make_analysis_cache(kv_store, vector_store):
    def _make(provider=None, similarity_threshold=0.95):
        return AnalysisCacheService(
            FeedbackCacheService(kv_store),
            EmbeddingService(provider, kv_store),
            SemanticCache(vector_store, similarity_threshold=similarity_threshold),
        )
    return _make


# ============================================================================
# Router loading
# ============================================================================

@pytest.fixture
def load_api_with_stubs(monkeypatch):
    """Import a router module with the database session module stubbed out."""
    def _load(module_name):
        async def dummy_get_async_session():
            yield object()

        dummy_db_session = types.ModuleType("reasonbridge_backend.db_session")
        dummy_db_session.get_async_session = dummy_get_async_session

        monkeypatch.setitem(sys.modules, "reasonbridge_backend.db_session", dummy_db_session)
        for name in (
            "reasonbridge_backend.dependencies",
            "reasonbridge_backend.feedback_api",
            "reasonbridge_backend.alignments_api",
            "reasonbridge_backend.backend",
        ):
            sys.modules.pop(name, None)
        return importlib.import_module(module_name)
    return _load
