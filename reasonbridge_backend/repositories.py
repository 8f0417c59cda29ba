"""
Repository layer over the async SQLAlchemy session.

Services depend on these narrow read/write methods rather than on the session
directly, so they can be exercised against in-memory fakes.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reasonbridge_backend.models import Alignment, Feedback, Proposition, Response
from reasonbridge_backend.services.analysis_types import PropositionAggregates

logger = logging.getLogger(__name__)

IdLike = Union[str, uuid.UUID]


def as_uuid(value: IdLike) -> uuid.UUID:
    """Coerce an id to UUID; raises ValueError for malformed ids."""
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


class PropositionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, proposition_id: IdLike) -> Optional[Proposition]:
        result = await self.db.execute(
            select(Proposition).where(Proposition.id == as_uuid(proposition_id))
        )
        return result.scalar_one_or_none()

    async def list_ids(self) -> List[uuid.UUID]:
        result = await self.db.execute(select(Proposition.id).order_by(Proposition.created_at))
        return list(result.scalars().all())

    async def update_aggregates(self, proposition_id: IdLike, aggregates: PropositionAggregates) -> None:
        """Write all four aggregate fields in a single UPDATE."""
        await self.db.execute(
            update(Proposition)
            .where(Proposition.id == as_uuid(proposition_id))
            .values(
                support_count=aggregates.support_count,
                oppose_count=aggregates.oppose_count,
                nuanced_count=aggregates.nuanced_count,
                consensus_score=aggregates.consensus_score,
            )
        )


class AlignmentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_stances_by_proposition(self, proposition_id: IdLike) -> List[str]:
        result = await self.db.execute(
            select(Alignment.stance).where(Alignment.proposition_id == as_uuid(proposition_id))
        )
        return list(result.scalars().all())

    async def find_by_user_and_proposition(self, user_id: str, proposition_id: IdLike) -> Optional[Alignment]:
        result = await self.db.execute(
            select(Alignment).where(
                Alignment.user_id == user_id,
                Alignment.proposition_id == as_uuid(proposition_id),
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        user_id: str,
        proposition_id: IdLike,
        stance: str,
        nuance_explanation: Optional[str],
    ) -> Alignment:
        alignment = Alignment(
            id=uuid.uuid4(),
            user_id=user_id,
            proposition_id=as_uuid(proposition_id),
            stance=stance,
            nuance_explanation=nuance_explanation,
        )
        self.db.add(alignment)
        # Flush so the re-aggregation that follows sees this row
        await self.db.flush()
        await self.db.refresh(alignment)
        return alignment

    async def update(self, alignment: Alignment, stance: str, nuance_explanation: Optional[str]) -> Alignment:
        alignment.stance = stance
        alignment.nuance_explanation = nuance_explanation
        await self.db.flush()
        await self.db.refresh(alignment)
        return alignment

    async def delete(self, alignment: Alignment) -> None:
        await self.db.delete(alignment)
        await self.db.flush()


class ResponseRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, response_id: IdLike) -> Optional[Response]:
        result = await self.db.execute(select(Response).where(Response.id == as_uuid(response_id)))
        return result.scalar_one_or_none()


class FeedbackRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, response_id: IdLike, fields: Dict[str, Any]) -> Feedback:
        feedback = Feedback(id=uuid.uuid4(), response_id=as_uuid(response_id), **fields)
        self.db.add(feedback)
        await self.db.flush()
        await self.db.refresh(feedback)
        return feedback

    async def find_by_id(self, feedback_id: IdLike) -> Optional[Feedback]:
        result = await self.db.execute(select(Feedback).where(Feedback.id == as_uuid(feedback_id)))
        return result.scalar_one_or_none()

    async def mark_dismissed(self, feedback: Feedback, dismissal_reason: Optional[str]) -> Feedback:
        feedback.dismissed_at = datetime.now(timezone.utc)
        feedback.dismissal_reason = dismissal_reason
        await self.db.flush()
        return feedback

    async def record_engagement(
        self,
        feedback: Feedback,
        acknowledged: Optional[bool] = None,
        revised: Optional[bool] = None,
        helpful_rating: Optional[str] = None,
    ) -> Feedback:
        """Apply only the engagement fields that were provided."""
        if acknowledged is not None:
            feedback.user_acknowledged = acknowledged
        if revised is not None:
            feedback.user_revised = revised
        if helpful_rating is not None:
            feedback.user_helpful_rating = helpful_rating
        await self.db.flush()
        return feedback

    async def find_for_analytics(
        self,
        start: datetime,
        end: datetime,
        feedback_type: Optional[str] = None,
        response_id: Optional[IdLike] = None,
    ) -> List[Feedback]:
        query = select(Feedback).where(Feedback.created_at >= start, Feedback.created_at <= end)
        if feedback_type is not None:
            query = query.where(Feedback.type == feedback_type)
        if response_id is not None:
            query = query.where(Feedback.response_id == as_uuid(response_id))

        result = await self.db.execute(query.order_by(Feedback.created_at))
        return list(result.scalars().all())
