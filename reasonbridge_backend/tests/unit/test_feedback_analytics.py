from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from reasonbridge_backend.services.analysis_types import FeedbackType
from reasonbridge_backend.services.feedback_analytics import (
    DEFAULT_WINDOW_DAYS,
    FeedbackAnalyticsService,
    aggregate_feedback,
)


def _record(
    feedback_type="FALLACY",
    acknowledged=False,
    revised=False,
    dismissed=False,
    reason=None,
    rating=None,
    confidence=0.8,
):
    return SimpleNamespace(
        type=feedback_type,
        user_acknowledged=acknowledged,
        user_revised=revised,
        user_helpful_rating=rating,
        dismissed_at=datetime.now(timezone.utc) if dismissed else None,
        dismissal_reason=reason,
        confidence_score=confidence,
    )


def test_empty_window_reports_zeroes():
    analytics = aggregate_feedback([])

    assert analytics["total_feedback"] == 0
    assert analytics["acknowledgment_rate"] == 0
    assert analytics["revision_rate"] == 0
    assert analytics["dismissal_rate"] == 0
    assert analytics["average_helpful_score"] == 0
    assert analytics["by_type"] == []
    assert analytics["top_dismissal_reasons"] == []


def test_acknowledgment_rate():
    analytics = aggregate_feedback([
        _record(acknowledged=True),
        _record(acknowledged=True),
        _record(),
        _record(),
    ])

    assert analytics["acknowledged_count"] == 2
    assert analytics["acknowledgment_rate"] == 50


def test_revision_rate_is_rounded_percentage():
    analytics = aggregate_feedback([_record(revised=True), _record(), _record()])

    assert analytics["revision_count"] == 1
    assert analytics["revision_rate"] == pytest.approx(33.33)


def test_dismissal_rate():
    analytics = aggregate_feedback([_record(dismissed=True, reason="Not relevant"), _record()])

    assert analytics["dismissed_count"] == 1
    assert analytics["dismissal_rate"] == 50


def test_helpful_rating_distribution_and_average():
    analytics = aggregate_feedback([
        _record(rating="HELPFUL"),
        _record(rating="HELPFUL"),
        _record(rating="NOT_HELPFUL"),
        _record(),
    ])

    assert analytics["helpful_ratings"]["HELPFUL"] == 2
    assert analytics["helpful_ratings"]["NOT_HELPFUL"] == 1
    assert analytics["helpful_ratings"]["SOMEWHAT_HELPFUL"] == 0
    assert analytics["average_helpful_score"] == pytest.approx(0.67)


def test_groups_by_feedback_type():
    analytics = aggregate_feedback([
        _record("INFLAMMATORY", acknowledged=True, confidence=0.7),
        _record("INFLAMMATORY", confidence=0.8),
        _record("UNSOURCED", revised=True),
    ])

    by_type = {stats["type"]: stats for stats in analytics["by_type"]}
    assert len(by_type) == 2
    assert by_type["INFLAMMATORY"]["count"] == 2
    assert by_type["INFLAMMATORY"]["acknowledged_count"] == 1
    assert by_type["INFLAMMATORY"]["average_confidence"] == pytest.approx(0.75)
    assert by_type["UNSOURCED"]["count"] == 1
    assert by_type["UNSOURCED"]["revision_count"] == 1
    assert analytics["by_type"][0]["type"] == "INFLAMMATORY"


def test_top_dismissal_reasons_most_common_first():
    analytics = aggregate_feedback([
        _record(dismissed=True, reason="Not relevant"),
        _record(dismissed=True, reason="Too complex"),
        _record(dismissed=True, reason="Not relevant"),
        _record(dismissed=True),
    ])

    assert analytics["top_dismissal_reasons"] == [
        {"reason": "Not relevant", "count": 2},
        {"reason": "Too complex", "count": 1},
    ]


@pytest.mark.asyncio
async def test_default_window_is_last_thirty_days(feedback_repo):
    service = FeedbackAnalyticsService(feedback_repo)

    analytics = await service.get_analytics()

    start, end, feedback_type, response_id = feedback_repo.analytics_calls[0]
    assert end - start == timedelta(days=DEFAULT_WINDOW_DAYS)
    assert (feedback_type, response_id) == (None, None)
    assert analytics["date_range"] == {"start": start.isoformat(), "end": end.isoformat()}


@pytest.mark.asyncio
async def test_filters_are_passed_to_repository(feedback_repo):
    service = FeedbackAnalyticsService(feedback_repo)
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    end = datetime(2026, 1, 17, 23, 59, 59, tzinfo=timezone.utc)

    await service.get_analytics(start, end, FeedbackType.INFLAMMATORY, "response-1")

    assert feedback_repo.analytics_calls == [(start, end, "INFLAMMATORY", "response-1")]


@pytest.mark.asyncio
async def test_naive_dates_are_treated_as_utc(feedback_repo):
    service = FeedbackAnalyticsService(feedback_repo)

    await service.get_analytics(start_date=datetime(2026, 1, 1))

    start, end, _, _ = feedback_repo.analytics_calls[0]
    assert start == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert end.tzinfo is not None


@pytest.mark.asyncio
async def test_inverted_window_is_rejected(feedback_repo):
    service = FeedbackAnalyticsService(feedback_repo)

    with pytest.raises(ValueError):
        await service.get_analytics(
            start_date=datetime(2026, 2, 1, tzinfo=timezone.utc),
            end_date=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
    assert feedback_repo.analytics_calls == []


@pytest.mark.asyncio
async def test_summarises_stored_feedback(feedback_repo):
    kept = await feedback_repo.create("response-1", {"type": "FALLACY", "confidence_score": 0.8})
    await feedback_repo.create("response-2", {"type": "BIAS", "confidence_score": 0.6})
    await feedback_repo.record_engagement(kept, acknowledged=True)

    analytics = await FeedbackAnalyticsService(feedback_repo).get_analytics(response_id="response-1")

    assert analytics["total_feedback"] == 1
    assert analytics["acknowledgment_rate"] == 100
    assert analytics["by_type"][0]["type"] == "FALLACY"
