"""
Recalculate alignment aggregates for every proposition.

Alignment rows are authoritative; run this to repair counts or consensus
scores that drifted after concurrent alignment changes.
"""
import asyncio
import logging

from reasonbridge_backend.db_session import async_engine, get_async_session_context
from reasonbridge_backend.repositories import AlignmentRepository, PropositionRepository
from reasonbridge_backend.services.alignment_aggregation import AlignmentAggregationService

logger = logging.getLogger(__name__)


async def recalculate_aggregates() -> int:
    async with get_async_session_context() as db:
        service = AlignmentAggregationService(PropositionRepository(db), AlignmentRepository(db))
        count = await service.recalculate_all_aggregates()
        await db.commit()

    await async_engine.dispose()
    return count


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    total = asyncio.run(recalculate_aggregates())
    print(f"✅ Recalculated aggregates for {total} proposition(s)")
