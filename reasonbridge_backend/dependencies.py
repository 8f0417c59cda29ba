"""
FastAPI dependencies wiring request-scoped services.

Long-lived cache components are built once in the app lifespan and kept on
app.state; repositories and services are built per request around the
request's database session.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from reasonbridge_backend.db_session import get_async_session
from reasonbridge_backend.repositories import (
    AlignmentRepository,
    FeedbackRepository,
    PropositionRepository,
    ResponseRepository,
)
from reasonbridge_backend.services.alignment_aggregation import AlignmentAggregationService
from reasonbridge_backend.services.alignment_service import AlignmentService
from reasonbridge_backend.services.analysis_cache import AnalysisCacheService
from reasonbridge_backend.services.feedback_analytics import FeedbackAnalyticsService
from reasonbridge_backend.services.feedback_service import FeedbackService
from reasonbridge_backend.services.response_analyzer import ResponseAnalyzer


def get_analysis_cache(request: Request) -> AnalysisCacheService:
    return request.app.state.analysis_cache


def get_response_analyzer(request: Request) -> ResponseAnalyzer:
    return request.app.state.response_analyzer


def get_feedback_service(
    db: AsyncSession = Depends(get_async_session),
    analyzer: ResponseAnalyzer = Depends(get_response_analyzer),
    analysis_cache: AnalysisCacheService = Depends(get_analysis_cache),
) -> FeedbackService:
    return FeedbackService(
        responses=ResponseRepository(db),
        feedback=FeedbackRepository(db),
        analyzer=analyzer,
        analysis_cache=analysis_cache,
    )


def get_feedback_analytics_service(db: AsyncSession = Depends(get_async_session)) -> FeedbackAnalyticsService:
    return FeedbackAnalyticsService(FeedbackRepository(db))


def get_aggregation_service(db: AsyncSession = Depends(get_async_session)) -> AlignmentAggregationService:
    return AlignmentAggregationService(PropositionRepository(db), AlignmentRepository(db))


def get_alignment_service(db: AsyncSession = Depends(get_async_session)) -> AlignmentService:
    propositions = PropositionRepository(db)
    alignments = AlignmentRepository(db)
    return AlignmentService(
        propositions,
        alignments,
        AlignmentAggregationService(propositions, alignments),
    )
