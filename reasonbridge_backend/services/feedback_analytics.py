"""
Feedback analytics: how authors react to the feedback they are shown.

Rates are percentages of the feedback in the window, rounded to 2 places.
The window defaults to the last 30 days.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from reasonbridge_backend.models import Feedback
from reasonbridge_backend.repositories import FeedbackRepository
from reasonbridge_backend.services.analysis_types import (
    FeedbackType,
    HELPFUL_RATING_SCORES,
    HelpfulRating,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30
TOP_DISMISSAL_REASONS = 5


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _percentage(value: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round((value / total) * 100, 2)


def aggregate_feedback(records: Iterable[Feedback]) -> Dict[str, Any]:
    records = list(records)
    total = len(records)

    acknowledged = sum(1 for record in records if record.user_acknowledged)
    revised = sum(1 for record in records if record.user_revised)
    dismissed = sum(1 for record in records if record.dismissed_at is not None)

    helpful_ratings = {rating.value: 0 for rating in HelpfulRating}
    rated_scores: List[float] = []
    for record in records:
        rating = getattr(record, "user_helpful_rating", None)
        if rating is None:
            continue
        helpful_ratings[rating] = helpful_ratings.get(rating, 0) + 1
        rated_scores.append(HELPFUL_RATING_SCORES[HelpfulRating(rating)])

    by_type: Dict[str, Dict[str, Any]] = {}
    for record in records:
        stats = by_type.setdefault(
            record.type,
            {"type": record.type, "count": 0, "acknowledged_count": 0, "revision_count": 0,
             "dismissed_count": 0, "confidence_total": 0.0},
        )
        stats["count"] += 1
        stats["acknowledged_count"] += int(bool(record.user_acknowledged))
        stats["revision_count"] += int(bool(record.user_revised))
        stats["dismissed_count"] += int(record.dismissed_at is not None)
        stats["confidence_total"] += float(record.confidence_score or 0.0)

    for stats in by_type.values():
        stats["average_confidence"] = round(stats.pop("confidence_total") / stats["count"], 2)

    reasons = Counter(
        record.dismissal_reason
        for record in records
        if record.dismissed_at is not None and record.dismissal_reason
    )
    # Most common first; ties alphabetical so the listing is stable
    top_reasons = sorted(reasons.items(), key=lambda item: (-item[1], item[0]))[:TOP_DISMISSAL_REASONS]

    return {
        "total_feedback": total,
        "acknowledged_count": acknowledged,
        "acknowledgment_rate": _percentage(acknowledged, total),
        "revision_count": revised,
        "revision_rate": _percentage(revised, total),
        "dismissed_count": dismissed,
        "dismissal_rate": _percentage(dismissed, total),
        "helpful_ratings": helpful_ratings,
        "average_helpful_score": round(sum(rated_scores) / len(rated_scores), 2) if rated_scores else 0.0,
        "by_type": sorted(by_type.values(), key=lambda stats: (-stats["count"], stats["type"])),
        "top_dismissal_reasons": [{"reason": reason, "count": count} for reason, count in top_reasons],
    }


class FeedbackAnalyticsService:
    def __init__(self, feedback: FeedbackRepository):
        self.feedback = feedback

    async def get_analytics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        feedback_type: Optional[FeedbackType] = None,
        response_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Summarise feedback created between start_date and end_date.

        Raises ValueError when the window is inverted.
        """
        end = _as_utc(end_date) or datetime.now(timezone.utc)
        start = _as_utc(start_date) or end - timedelta(days=DEFAULT_WINDOW_DAYS)
        if start > end:
            raise ValueError("start_date must not be after end_date")

        type_value = FeedbackType(feedback_type).value if feedback_type is not None else None
        records = await self.feedback.find_for_analytics(start, end, type_value, response_id)

        analytics = aggregate_feedback(records)
        analytics["date_range"] = {"start": start.isoformat(), "end": end.isoformat()}

        logger.info(
            f"Feedback analytics {start.isoformat()}..{end.isoformat()} "
            f"type={type_value} response={response_id}: {analytics['total_feedback']} record(s)"
        )
        return analytics
