import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from reasonbridge_backend.repositories import (
    AlignmentRepository,
    FeedbackRepository,
    PropositionRepository,
    as_uuid,
)
from reasonbridge_backend.services.analysis_types import PropositionAggregates


def _db():
    db = AsyncMock()
    db.add = MagicMock()
    return db


def test_as_uuid_accepts_strings_and_uuids():
    value = uuid.uuid4()
    assert as_uuid(value) is value
    assert as_uuid(str(value)) == value


def test_as_uuid_rejects_malformed_ids():
    with pytest.raises(ValueError):
        as_uuid("not-a-uuid")


@pytest.mark.asyncio
async def test_update_aggregates_issues_single_update():
    db = _db()
    repo = PropositionRepository(db)

    await repo.update_aggregates(str(uuid.uuid4()), PropositionAggregates(1, 0, 0, 1.0))

    db.execute.assert_awaited_once()
    statement = db.execute.await_args.args[0]
    assert statement.is_update


@pytest.mark.asyncio
async def test_create_alignment_flushes_before_returning():
    db = _db()
    repo = AlignmentRepository(db)
    proposition_id = uuid.uuid4()

    alignment = await repo.create("user-1", str(proposition_id), "SUPPORT", None)

    db.add.assert_called_once_with(alignment)
    db.flush.assert_awaited_once()
    assert alignment.proposition_id == proposition_id
    assert alignment.stance == "SUPPORT"


@pytest.mark.asyncio
async def test_mark_dismissed_stamps_time_and_reason():
    db = _db()
    repo = FeedbackRepository(db)
    feedback = SimpleNamespace(dismissed_at=None, dismissal_reason=None)

    await repo.mark_dismissed(feedback, "Already revised")

    assert feedback.dismissed_at is not None
    assert feedback.dismissal_reason == "Already revised"
    db.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_record_engagement_only_touches_provided_fields():
    db = _db()
    repo = FeedbackRepository(db)
    feedback = SimpleNamespace(user_acknowledged=True, user_revised=False, user_helpful_rating=None)

    await repo.record_engagement(feedback, revised=True)

    assert feedback.user_acknowledged is True
    assert feedback.user_revised is True
    assert feedback.user_helpful_rating is None
    db.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_find_for_analytics_filters_window_type_and_response():
    db = _db()
    rows = [SimpleNamespace(id=1)]
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    db.execute.return_value = result
    repo = FeedbackRepository(db)
    end = datetime.now(timezone.utc)

    found = await repo.find_for_analytics(end - timedelta(days=7), end, "FALLACY", str(uuid.uuid4()))

    assert found == rows
    sql = str(db.execute.await_args.args[0])
    assert "feedback.created_at >=" in sql
    assert "feedback.created_at <=" in sql
    assert "feedback.type =" in sql
    assert "feedback.response_id =" in sql


@pytest.mark.asyncio
async def test_find_for_analytics_without_filters_only_bounds_window():
    db = _db()
    result = MagicMock()
    result.scalars.return_value.all.return_value = []
    db.execute.return_value = result
    repo = FeedbackRepository(db)
    end = datetime.now(timezone.utc)

    assert await repo.find_for_analytics(end - timedelta(days=1), end) == []
    sql = str(db.execute.await_args.args[0])
    assert "feedback.type =" not in sql
    assert "feedback.response_id =" not in sql
