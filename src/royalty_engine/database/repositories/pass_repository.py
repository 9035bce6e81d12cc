"""
Pass Repository
Database operations for listening passes
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import AccessPass
from ...core.credits import PassState
from .base import BaseRepository, RepositoryError


class PassRepository(BaseRepository[AccessPass]):
    """Repository for pass operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(AccessPass, session)

    async def get_live_for_payer(self, payer_identity: str, now: datetime) -> Optional[AccessPass]:
        """Latest pass of a payer that is stored active and not yet expired"""
        try:
            result = await self.session.execute(
                select(AccessPass)
                .where(
                    AccessPass.payer_identity == payer_identity,
                    AccessPass.status == PassState.ACTIVE.value,
                    AccessPass.expires_at > now
                )
                .order_by(AccessPass.expires_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            raise RepositoryError(f"Error getting live pass for {payer_identity}: {str(e)}")
