"""
Royalty Engine Recording API Routes
Block-quantized recording cost and payment preparation
"""

from fastapi import APIRouter, Depends, Query

from ...database.schemas import CostResponse, PreparedPayment, PreparePaymentRequest
from ...services.payment_service import PaymentService
from ..dependencies import get_payment_service

router = APIRouter()


@router.get("/recording/cost", response_model=CostResponse)
async def get_recording_cost(
    bars: int = Query(..., description="Recorded length in bars"),
    tracks: int = Query(1, description="Number of source tracks mixed"),
    service: PaymentService = Depends(get_payment_service)
):
    """Cost breakdown for a recording"""
    return service.calculate_cost(bars, tracks)


@router.post("/recording/prepare-payment", response_model=PreparedPayment)
async def prepare_recording_payment(
    request: PreparePaymentRequest,
    service: PaymentService = Depends(get_payment_service)
):
    """Recipients and amounts for a recording made from the given source works"""
    return await service.prepare_recording_payment(request.bars, request.source_work_ids)
