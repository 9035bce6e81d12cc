"""
Royalty Engine Earnings API Routes
"""

from fastapi import APIRouter, Depends

from ...database.schemas import ResolutionOutcome, ResolvePendingRequest
from ...services.resolution_service import ResolutionService
from ..dependencies import get_resolution_service

router = APIRouter()


@router.post("/earnings/resolve-pending", response_model=ResolutionOutcome)
async def resolve_pending(
    request: ResolvePendingRequest,
    service: ResolutionService = Depends(get_resolution_service)
):
    """
    Assign a pending collaborator name to a real identity

    Only works uploaded by one of the caller identities are touched; other
    ids are skipped but still counted in works_processed.
    """
    return await service.resolve_pending(
        request.pending_name,
        request.resolved_identity,
        request.work_ids,
        request.caller_identities
    )
