"""
Royalty Engine Works API Routes
Split validation, work creation and split model updates
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query

from ...core.splits import SplitValidation, validate_splits
from ...database.schemas import (
    PendingPlaceholderSummary,
    SplitsIn,
    SplitUpdate,
    WorkCreate,
    WorkResponse
)
from ...services.resolution_service import ResolutionService
from ...services.work_service import WorkService
from ..dependencies import get_resolution_service, get_work_service

router = APIRouter()


@router.post("/splits/validate", response_model=SplitValidation)
async def validate_split_model(request: SplitsIn):
    """Check a split model without persisting it"""
    return validate_splits(request.to_model().slots)


@router.post("/works", response_model=WorkResponse, status_code=201)
async def create_work(
    request: WorkCreate,
    service: WorkService = Depends(get_work_service)
):
    """Create a work with a validated split model"""
    work = await service.create_work(request)
    return WorkResponse.from_work(work)


@router.get("/works/pending", response_model=List[PendingPlaceholderSummary])
async def list_pending_placeholders(
    uploader: str = Query(..., description="Uploader identity"),
    service: ResolutionService = Depends(get_resolution_service)
):
    """Outstanding pending payees across an uploader's works"""
    return await service.list_pending(uploader)


@router.put("/works/{work_id}/splits", response_model=WorkResponse)
async def update_work_splits(
    work_id: uuid.UUID,
    request: SplitUpdate,
    service: WorkService = Depends(get_work_service)
):
    """Replace a work's split model (uploader only)"""
    work = await service.update_splits(work_id, request.caller_identity, request.to_model())
    return WorkResponse.from_work(work)
