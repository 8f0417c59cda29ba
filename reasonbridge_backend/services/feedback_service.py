"""
Feedback service: analyses a posted response and records the feedback shown.

Feedback is advisory. Whether a finding is displayed depends on the caller's
sensitivity; the finding is persisted either way so it can be reviewed later.
"""

import logging
from typing import Any, Dict, List, Optional

from reasonbridge_backend.models import Feedback
from reasonbridge_backend.repositories import FeedbackRepository, ResponseRepository
from reasonbridge_backend.services.analysis_cache import AnalysisCacheService
from reasonbridge_backend.services.analysis_types import (
    AnalysisResult,
    FeedbackSensitivity,
    HelpfulRating,
    SENSITIVITY_THRESHOLDS,
)
from reasonbridge_backend.services.exceptions import (
    FeedbackAlreadyDismissedError,
    FeedbackNotFoundError,
    ResponseNotFoundError,
)
from reasonbridge_backend.services.response_analyzer import ResponseAnalyzer

logger = logging.getLogger(__name__)


def confidence_threshold(sensitivity: FeedbackSensitivity) -> float:
    return SENSITIVITY_THRESHOLDS[FeedbackSensitivity(sensitivity)]


def feedback_to_dict(feedback: Feedback) -> Dict[str, Any]:
    return {
        "id": str(feedback.id),
        "response_id": str(feedback.response_id),
        "type": feedback.type,
        "subtype": feedback.subtype,
        "suggestion_text": feedback.suggestion_text,
        "reasoning": feedback.reasoning,
        "confidence_score": feedback.confidence_score,
        "educational_resources": feedback.educational_resources,
        "displayed_to_user": bool(feedback.displayed_to_user),
        "user_acknowledged": bool(feedback.user_acknowledged),
        "user_revised": bool(feedback.user_revised),
        "user_helpful_rating": feedback.user_helpful_rating,
        "dismissed_at": feedback.dismissed_at.isoformat() if feedback.dismissed_at else None,
        "dismissal_reason": feedback.dismissal_reason,
        "created_at": feedback.created_at.isoformat() if feedback.created_at else None,
    }


class FeedbackService:
    def __init__(
        self,
        responses: ResponseRepository,
        feedback: FeedbackRepository,
        analyzer: ResponseAnalyzer,
        analysis_cache: AnalysisCacheService,
    ):
        self.responses = responses
        self.feedback = feedback
        self.analyzer = analyzer
        self.analysis_cache = analysis_cache

    async def request_feedback(
        self,
        response_id,
        content: str,
        sensitivity: FeedbackSensitivity = FeedbackSensitivity.MEDIUM,
        topic_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Analyse content for a stored response and persist the resulting feedback."""
        threshold = confidence_threshold(sensitivity)

        response = await self.responses.find_by_id(response_id)
        if response is None:
            raise ResponseNotFoundError(response_id)

        if topic_id is None and getattr(response, "topic_id", None) is not None:
            topic_id = str(response.topic_id)

        result = await self.analysis_cache.get_or_analyze(
            content,
            lambda: self.analyzer.analyze_content(content),
            topic_id=topic_id,
        )

        displayed = result.confidence_score >= threshold
        record = await self.feedback.create(
            response_id,
            {
                "type": result.type.value,
                "subtype": result.subtype,
                "suggestion_text": result.suggestion_text,
                "reasoning": result.reasoning,
                "confidence_score": result.confidence_score,
                "educational_resources": result.educational_resources,
                "displayed_to_user": displayed,
            },
        )

        logger.info(
            f"Feedback {record.id} for response {response_id}: {result.type.value} "
            f"(confidence={result.confidence_score:.2f}, displayed={displayed})"
        )
        return feedback_to_dict(record)

    async def preview_feedback(
        self,
        content: str,
        sensitivity: FeedbackSensitivity = FeedbackSensitivity.MEDIUM,
    ) -> Dict[str, Any]:
        """Analyse draft content without persisting anything."""
        threshold = confidence_threshold(sensitivity)
        findings: List[AnalysisResult] = await self.analyzer.analyze_content_full(content)
        shown = [finding for finding in findings if finding.confidence_score >= threshold]

        return {
            "sensitivity": FeedbackSensitivity(sensitivity).value,
            "threshold": threshold,
            "feedback": [finding.to_dict() for finding in shown],
            "has_issues": any(finding.type.value != "AFFIRMATION" for finding in shown),
        }

    async def get_feedback_by_id(self, feedback_id) -> Dict[str, Any]:
        record = await self.feedback.find_by_id(feedback_id)
        if record is None:
            raise FeedbackNotFoundError(feedback_id)
        return feedback_to_dict(record)

    async def dismiss_feedback(self, feedback_id, dismissal_reason: Optional[str] = None) -> Dict[str, Any]:
        record = await self.feedback.find_by_id(feedback_id)
        if record is None:
            raise FeedbackNotFoundError(feedback_id)
        if record.dismissed_at is not None:
            raise FeedbackAlreadyDismissedError(feedback_id)

        record = await self.feedback.mark_dismissed(record, dismissal_reason)
        logger.info(f"Feedback {feedback_id} dismissed")
        return feedback_to_dict(record)

    async def record_engagement(
        self,
        feedback_id,
        acknowledged: Optional[bool] = None,
        revised: Optional[bool] = None,
        helpful_rating: Optional[HelpfulRating] = None,
    ) -> Dict[str, Any]:
        """
        Record how the author reacted to a piece of feedback.

        Revising a response implies the feedback was acknowledged, so
        revised=True also sets acknowledged unless the caller says otherwise.
        """
        if acknowledged is None and revised is None and helpful_rating is None:
            raise ValueError("At least one of acknowledged, revised or helpful_rating is required")

        rating = HelpfulRating(helpful_rating).value if helpful_rating is not None else None
        if revised and acknowledged is None:
            acknowledged = True

        record = await self.feedback.find_by_id(feedback_id)
        if record is None:
            raise FeedbackNotFoundError(feedback_id)

        record = await self.feedback.record_engagement(
            record,
            acknowledged=acknowledged,
            revised=revised,
            helpful_rating=rating,
        )
        logger.info(
            f"Feedback {feedback_id} engagement: acknowledged={record.user_acknowledged} "
            f"revised={record.user_revised} rating={record.user_helpful_rating}"
        )
        return feedback_to_dict(record)
