"""
Royalty Engine Pass API Routes
Pass purchase, play logging, status and preview analytics
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...database.schemas import (
    IssuePassRequest,
    LogPlayRequest,
    PassResponse,
    PassStatus,
    PlayReceipt,
    PreviewPlayRequest,
    PreviewPlayResponse,
    UsageSummary
)
from ...services.metering_service import MeteringService
from ..dependencies import get_metering_service

router = APIRouter()


@router.post("/passes", response_model=PassResponse, status_code=201)
async def issue_pass(
    request: IssuePassRequest,
    service: MeteringService = Depends(get_metering_service)
):
    """Issue a listening pass for a confirmed payment"""
    access_pass = await service.issue_pass(request.payer_identity, request.tx_reference)
    return PassResponse.model_validate(access_pass)


@router.get("/passes/active", response_model=Optional[PassStatus])
async def get_active_pass(
    payer: str = Query(..., description="Payer identity"),
    service: MeteringService = Depends(get_metering_service)
):
    """The payer's live pass, or null"""
    return await service.active_pass_for(payer)


@router.get("/passes/{pass_id}", response_model=PassStatus)
async def get_pass_status(
    pass_id: uuid.UUID,
    service: MeteringService = Depends(get_metering_service)
):
    return await service.pass_status(pass_id)


@router.post("/passes/{pass_id}/plays", response_model=PlayReceipt, status_code=201)
async def log_play(
    pass_id: uuid.UUID,
    request: LogPlayRequest,
    service: MeteringService = Depends(get_metering_service)
):
    """Record a completed play under a pass"""
    return await service.log_play(
        pass_id,
        request.work_id,
        request.content_category,
        request.duration_seconds
    )


@router.get("/passes/{pass_id}/usage", response_model=UsageSummary)
async def get_pass_usage(
    pass_id: uuid.UUID,
    service: MeteringService = Depends(get_metering_service)
):
    return await service.usage_summary(pass_id)


@router.post("/previews", response_model=PreviewPlayResponse)
async def log_preview(
    request: PreviewPlayRequest,
    service: MeteringService = Depends(get_metering_service)
):
    """Record a preview play; never fails the caller"""
    recorded = await service.log_preview(
        request.work_id,
        request.content_category,
        request.listener_identity
    )
    return PreviewPlayResponse(recorded=recorded, preview_seconds=service.config.preview_seconds)
