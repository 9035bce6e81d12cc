"""
API Dependencies
Per-request session and service wiring
"""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import MeteringConfig, PricingConfig, get_settings
from ..core.credits import Clock, utc_now
from ..database.connection import database_manager
from ..database.repositories import (
    PassRepository,
    PlayRepository,
    PreviewRepository,
    WorkRepository
)
from ..services.metering_service import MeteringService
from ..services.payment_service import PaymentService
from ..services.resolution_service import ResolutionService
from ..services.work_service import WorkService


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request, committed when the handler succeeds"""
    async with database_manager.get_session() as session:
        yield session
        await session.commit()


def get_pricing_config() -> PricingConfig:
    return get_settings().get_pricing_config()


def get_metering_config() -> MeteringConfig:
    return get_settings().get_metering_config()


def get_clock() -> Clock:
    return utc_now


def get_work_service(
    session: AsyncSession = Depends(get_db),
    config: PricingConfig = Depends(get_pricing_config)
) -> WorkService:
    return WorkService(WorkRepository(session), config)


def get_resolution_service(session: AsyncSession = Depends(get_db)) -> ResolutionService:
    return ResolutionService(WorkRepository(session))


def get_payment_service(
    session: AsyncSession = Depends(get_db),
    config: PricingConfig = Depends(get_pricing_config)
) -> PaymentService:
    return PaymentService(WorkRepository(session), config)


def get_metering_service(
    session: AsyncSession = Depends(get_db),
    config: MeteringConfig = Depends(get_metering_config),
    clock: Clock = Depends(get_clock)
) -> MeteringService:
    return MeteringService(
        PassRepository(session),
        PlayRepository(session),
        PreviewRepository(session),
        config,
        clock
    )
