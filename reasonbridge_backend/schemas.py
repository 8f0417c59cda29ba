"""Pydantic request/response models shared by the feedback and alignment routers."""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from reasonbridge_backend.services.analysis_types import FeedbackSensitivity, HelpfulRating, Stance


class FeedbackRequest(BaseModel):
    response_id: str
    content: str = Field(..., min_length=1)
    sensitivity: FeedbackSensitivity = FeedbackSensitivity.MEDIUM
    topic_id: Optional[str] = None

class PreviewFeedbackRequest(BaseModel):
    content: str = Field(..., min_length=1)
    sensitivity: FeedbackSensitivity = FeedbackSensitivity.MEDIUM

class DismissFeedbackRequest(BaseModel):
    dismissal_reason: Optional[str] = None

class FeedbackEngagementRequest(BaseModel):
    acknowledged: Optional[bool] = None
    revised: Optional[bool] = None
    helpful_rating: Optional[HelpfulRating] = None

class AnalysisResultResponse(BaseModel):
    type: str
    subtype: Optional[str] = None
    suggestion_text: str
    reasoning: str
    confidence_score: float
    educational_resources: Optional[Any] = None

class FeedbackResponse(BaseModel):
    id: str
    response_id: str
    type: str
    subtype: Optional[str] = None
    suggestion_text: str
    reasoning: str
    confidence_score: float
    educational_resources: Optional[Any] = None
    displayed_to_user: bool
    user_acknowledged: bool = False
    user_revised: bool = False
    user_helpful_rating: Optional[HelpfulRating] = None
    dismissed_at: Optional[str] = None
    dismissal_reason: Optional[str] = None
    created_at: Optional[str] = None

class FeedbackTypeStats(BaseModel):
    type: str
    count: int
    acknowledged_count: int
    revision_count: int
    dismissed_count: int
    average_confidence: float

class DismissalReasonCount(BaseModel):
    reason: str
    count: int

class FeedbackAnalyticsResponse(BaseModel):
    total_feedback: int
    acknowledged_count: int
    acknowledgment_rate: float  # percent
    revision_count: int
    revision_rate: float
    dismissed_count: int
    dismissal_rate: float
    helpful_ratings: Dict[str, int]
    average_helpful_score: float
    by_type: List[FeedbackTypeStats]
    top_dismissal_reasons: List[DismissalReasonCount]
    date_range: Dict[str, str]

class PreviewFeedbackResponse(BaseModel):
    sensitivity: FeedbackSensitivity
    threshold: float
    feedback: List[AnalysisResultResponse]
    has_issues: bool

class CacheLookupResponse(BaseModel):
    hit: bool
    source: str  # 'redis', 'qdrant' or 'none'
    result: Optional[AnalysisResultResponse] = None
    similarity: Optional[float] = None

class SetAlignmentRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    stance: Stance
    nuance_explanation: Optional[str] = None

class AlignmentResponse(BaseModel):
    id: str
    user_id: str
    proposition_id: str
    stance: Stance
    nuance_explanation: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

class AggregatesResponse(BaseModel):
    support_count: int
    oppose_count: int
    nuanced_count: int
    consensus_score: Optional[float] = None

class RecalculateResponse(BaseModel):
    recalculated: int

class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str
    details: Dict[str, Any] = {}
