"""
Alignment aggregation: stance counts and consensus score per proposition.

consensus_score = ((support - oppose) / total + 1) / 2, rounded to 2 places,
clamped to [0, 1], and None when nobody has aligned. Nuanced alignments count
toward the total but not the numerator, pulling the score toward 0.50.

Aggregation is read-count-then-write with no lock: a concurrent alignment
change can be missed until the next aggregation (last aggregation wins).
Alignment rows stay authoritative; recalculate_all_aggregates repairs drift.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from reasonbridge_backend.repositories import AlignmentRepository, PropositionRepository
from reasonbridge_backend.services.analysis_types import PropositionAggregates, Stance, StanceCounts
from reasonbridge_backend.services.exceptions import PropositionNotFoundError

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


def calculate_consensus_score(support: int, oppose: int, nuanced: int) -> Optional[float]:
    total = support + oppose + nuanced
    if total == 0:
        return None

    raw = ((support - oppose) / total + 1) / 2
    rounded = Decimal(str(raw)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return float(min(Decimal(1), max(Decimal(0), rounded)))


def count_stances(stances: Iterable[str]) -> StanceCounts:
    counts = StanceCounts()
    for stance in stances:
        if stance == Stance.SUPPORT.value:
            counts.support += 1
        elif stance == Stance.OPPOSE.value:
            counts.oppose += 1
        elif stance == Stance.NUANCED.value:
            counts.nuanced += 1
        else:
            counts.unknown.append(stance)
    return counts


class AlignmentAggregationService:
    def __init__(self, propositions: PropositionRepository, alignments: AlignmentRepository):
        self.propositions = propositions
        self.alignments = alignments

    async def update_proposition_aggregates(self, proposition_id) -> PropositionAggregates:
        stances = await self.alignments.find_stances_by_proposition(proposition_id)
        counts = count_stances(stances)
        if counts.unknown:
            logger.warning(
                f"Ignoring {len(counts.unknown)} alignment(s) with unknown stance on proposition {proposition_id}"
            )

        aggregates = PropositionAggregates(
            support_count=counts.support,
            oppose_count=counts.oppose,
            nuanced_count=counts.nuanced,
            consensus_score=calculate_consensus_score(counts.support, counts.oppose, counts.nuanced),
        )

        await self.propositions.update_aggregates(proposition_id, aggregates)
        logger.debug(f"Aggregates for proposition {proposition_id}: {aggregates}")
        return aggregates

    async def get_proposition_aggregates(self, proposition_id) -> PropositionAggregates:
        proposition = await self.propositions.find_by_id(proposition_id)
        if proposition is None:
            raise PropositionNotFoundError(proposition_id)

        score = proposition.consensus_score
        return PropositionAggregates(
            support_count=proposition.support_count or 0,
            oppose_count=proposition.oppose_count or 0,
            nuanced_count=proposition.nuanced_count or 0,
            consensus_score=float(score) if score is not None else None,
        )

    async def recalculate_all_aggregates(self) -> int:
        """Re-derive aggregates for every proposition; returns how many were processed."""
        proposition_ids = await self.propositions.list_ids()
        for proposition_id in proposition_ids:
            await self.update_proposition_aggregates(proposition_id)

        logger.info(f"Recalculated aggregates for {len(proposition_ids)} proposition(s)")
        return len(proposition_ids)
