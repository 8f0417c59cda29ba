"""
API endpoints for response feedback.

Provides endpoints for:
- Requesting feedback on a posted response (persisted)
- Previewing feedback on draft content (not persisted)
- Retrieving and dismissing feedback
- Recording how authors reacted to feedback, and reporting on it
- Inspecting the feedback caches
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from reasonbridge_backend.dependencies import (
    get_analysis_cache,
    get_feedback_analytics_service,
    get_feedback_service,
)
from reasonbridge_backend.schemas import (
    CacheLookupResponse,
    DismissFeedbackRequest,
    FeedbackAnalyticsResponse,
    FeedbackEngagementRequest,
    FeedbackRequest,
    FeedbackResponse,
    HealthResponse,
    PreviewFeedbackRequest,
    PreviewFeedbackResponse,
)
from reasonbridge_backend.services.analysis_cache import AnalysisCacheService
from reasonbridge_backend.services.analysis_types import FeedbackType
from reasonbridge_backend.services.exceptions import AnalysisFailedError, ConflictError, NotFoundError
from reasonbridge_backend.services.feedback_analytics import FeedbackAnalyticsService
from reasonbridge_backend.services.feedback_service import FeedbackService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(request: Request):
    """Health check endpoint for the feedback API."""
    state = request.app.state
    kv_store = getattr(state, "kv_store", None)
    vector_store = getattr(state, "vector_store", None)
    embedding_service = getattr(state, "embedding_service", None)
    return {
        "status": "healthy",
        "service": "feedback_api",
        "timestamp": datetime.now().isoformat(),
        "details": {
            "kv_store": type(kv_store).__name__ if kv_store is not None else None,
            "vector_store": type(vector_store).__name__ if vector_store is not None else None,
            "embeddings_enabled": bool(embedding_service and embedding_service.enabled),
        },
    }


@router.get("/cache/lookup", response_model=CacheLookupResponse)
async def cache_lookup(
    content: str = Query(..., min_length=1),
    analysis_cache: AnalysisCacheService = Depends(get_analysis_cache),
):
    """Report whether content would be served from cache, without analysing it."""
    lookup = await analysis_cache.lookup(content)
    logger.info(f"Cache lookup: hit={lookup.hit} source={lookup.source}")
    return lookup.to_dict()


@router.post("/request", response_model=FeedbackResponse)
async def request_feedback(
    request: FeedbackRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Analyse a posted response and persist the feedback.

    Returns 404 when the response does not exist and 502 when an analyzer fails.
    """
    logger.info(f"=== Feedback requested for response {request.response_id} ({request.sensitivity.value}) ===")
    try:
        return await service.request_feedback(
            request.response_id,
            request.content,
            sensitivity=request.sensitivity,
            topic_id=request.topic_id,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AnalysisFailedError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        logger.error(f"Invalid feedback request: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/preview", response_model=PreviewFeedbackResponse)
async def preview_feedback(
    request: PreviewFeedbackRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    """Analyse draft content; nothing is stored."""
    try:
        return await service.preview_feedback(request.content, sensitivity=request.sensitivity)
    except AnalysisFailedError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.get("/analytics", response_model=FeedbackAnalyticsResponse)
async def get_feedback_analytics(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    feedback_type: Optional[FeedbackType] = Query(None, alias="type"),
    response_id: Optional[str] = Query(None),
    service: FeedbackAnalyticsService = Depends(get_feedback_analytics_service),
):
    """Acknowledgment, revision and dismissal rates for feedback in a date window (default: last 30 days)."""
    try:
        return await service.get_analytics(
            start_date=start_date,
            end_date=end_date,
            feedback_type=feedback_type,
            response_id=response_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{feedback_id}", response_model=FeedbackResponse)
async def get_feedback(
    feedback_id: str,
    service: FeedbackService = Depends(get_feedback_service),
):
    try:
        return await service.get_feedback_by_id(feedback_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid UUID format: {str(e)}")


@router.patch("/{feedback_id}/dismiss", response_model=FeedbackResponse)
async def dismiss_feedback(
    feedback_id: str,
    request: DismissFeedbackRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    logger.info(f"Dismissing feedback {feedback_id}")
    try:
        return await service.dismiss_feedback(feedback_id, dismissal_reason=request.dismissal_reason)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid UUID format: {str(e)}")


@router.patch("/{feedback_id}/engagement", response_model=FeedbackResponse)
async def record_feedback_engagement(
    feedback_id: str,
    request: FeedbackEngagementRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    """Record whether the author acknowledged the feedback, revised, or rated it."""
    try:
        return await service.record_engagement(
            feedback_id,
            acknowledged=request.acknowledged,
            revised=request.revised,
            helpful_rating=request.helpful_rating,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
