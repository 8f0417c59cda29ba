"""
API endpoints for proposition alignments and their aggregates.

A user holds at most one alignment (SUPPORT, OPPOSE or NUANCED) per
proposition; every change re-aggregates the proposition's counts and
consensus score.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from reasonbridge_backend.dependencies import get_aggregation_service, get_alignment_service
from reasonbridge_backend.schemas import (
    AggregatesResponse,
    AlignmentResponse,
    RecalculateResponse,
    SetAlignmentRequest,
)
from reasonbridge_backend.services.alignment_aggregation import AlignmentAggregationService
from reasonbridge_backend.services.alignment_service import AlignmentService
from reasonbridge_backend.services.exceptions import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/propositions", tags=["alignments"])


@router.post("/aggregates/recalculate", response_model=RecalculateResponse)
async def recalculate_aggregates(
    service: AlignmentAggregationService = Depends(get_aggregation_service),
):
    """Re-derive aggregates for every proposition from its alignment rows."""
    count = await service.recalculate_all_aggregates()
    return {"recalculated": count}


@router.put("/{proposition_id}/alignment", response_model=AlignmentResponse)
async def set_alignment(
    proposition_id: str,
    request: SetAlignmentRequest,
    service: AlignmentService = Depends(get_alignment_service),
):
    logger.info(f"=== Setting {request.stance.value} alignment on {proposition_id} for {request.user_id} ===")
    try:
        return await service.set_alignment(
            proposition_id,
            request.user_id,
            request.stance,
            nuance_explanation=request.nuance_explanation,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{proposition_id}/alignment", status_code=204)
async def remove_alignment(
    proposition_id: str,
    user_id: str = Query(..., min_length=1),
    service: AlignmentService = Depends(get_alignment_service),
):
    try:
        await service.remove_alignment(proposition_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{proposition_id}/alignment", response_model=AlignmentResponse)
async def get_alignment(
    proposition_id: str,
    user_id: str = Query(..., min_length=1),
    service: AlignmentService = Depends(get_alignment_service),
):
    try:
        alignment = await service.get_user_alignment(proposition_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if alignment is None:
        raise HTTPException(status_code=404, detail="Alignment not found")
    return alignment


@router.get("/{proposition_id}/aggregates", response_model=AggregatesResponse)
async def get_aggregates(
    proposition_id: str,
    service: AlignmentAggregationService = Depends(get_aggregation_service),
):
    try:
        aggregates = await service.get_proposition_aggregates(proposition_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return aggregates.to_dict()
