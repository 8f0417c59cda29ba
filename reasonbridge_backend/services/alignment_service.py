"""
Alignment management: a user's single stance on a proposition.

Every create, update and delete re-aggregates the proposition.
"""

import logging
from typing import Any, Dict, Optional

from reasonbridge_backend.models import Alignment
from reasonbridge_backend.repositories import AlignmentRepository, PropositionRepository
from reasonbridge_backend.services.alignment_aggregation import AlignmentAggregationService
from reasonbridge_backend.services.analysis_types import Stance
from reasonbridge_backend.services.exceptions import (
    AlignmentNotFoundError,
    InvalidAlignmentError,
    PropositionNotFoundError,
)

logger = logging.getLogger(__name__)


def alignment_to_dict(alignment: Alignment) -> Dict[str, Any]:
    payload = {
        "id": str(alignment.id),
        "user_id": alignment.user_id,
        "proposition_id": str(alignment.proposition_id),
        "stance": alignment.stance,
        "created_at": alignment.created_at.isoformat() if alignment.created_at else None,
        "updated_at": alignment.updated_at.isoformat() if alignment.updated_at else None,
    }
    if alignment.nuance_explanation:
        payload["nuance_explanation"] = alignment.nuance_explanation
    return payload


class AlignmentService:
    def __init__(
        self,
        propositions: PropositionRepository,
        alignments: AlignmentRepository,
        aggregation: AlignmentAggregationService,
    ):
        self.propositions = propositions
        self.alignments = alignments
        self.aggregation = aggregation

    async def set_alignment(
        self,
        proposition_id,
        user_id: str,
        stance: Stance,
        nuance_explanation: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create or replace the user's alignment on a proposition."""
        stance = Stance(stance)

        if await self.propositions.find_by_id(proposition_id) is None:
            raise PropositionNotFoundError(proposition_id)

        if stance == Stance.NUANCED and not (nuance_explanation and nuance_explanation.strip()):
            raise InvalidAlignmentError("nuanceExplanation is required when stance is NUANCED")

        explanation = nuance_explanation if nuance_explanation else None

        existing = await self.alignments.find_by_user_and_proposition(user_id, proposition_id)
        if existing is None:
            alignment = await self.alignments.create(user_id, proposition_id, stance.value, explanation)
            logger.info(f"User {user_id} aligned {stance.value} on proposition {proposition_id}")
        else:
            alignment = await self.alignments.update(existing, stance.value, explanation)
            logger.info(f"User {user_id} changed alignment to {stance.value} on proposition {proposition_id}")

        await self.aggregation.update_proposition_aggregates(proposition_id)
        return alignment_to_dict(alignment)

    async def remove_alignment(self, proposition_id, user_id: str) -> None:
        existing = await self.alignments.find_by_user_and_proposition(user_id, proposition_id)
        if existing is None:
            raise AlignmentNotFoundError(proposition_id, user_id)

        await self.alignments.delete(existing)
        logger.info(f"User {user_id} removed alignment on proposition {proposition_id}")

        await self.aggregation.update_proposition_aggregates(proposition_id)

    async def get_user_alignment(self, proposition_id, user_id: str) -> Optional[Dict[str, Any]]:
        existing = await self.alignments.find_by_user_and_proposition(user_id, proposition_id)
        if existing is None:
            return None
        return alignment_to_dict(existing)
