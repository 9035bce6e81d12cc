"""
Work Repository
Database operations for works and their split models
"""

import uuid
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Work
from ...core.result import Result
from ...core.splits import SplitModel
from .base import BaseRepository, RepositoryError


class WorkRepository(BaseRepository[Work]):
    """Repository for work operations; soft-deleted works are invisible"""

    def __init__(self, session: AsyncSession):
        super().__init__(Work, session)

    async def get_active(self, work_id: uuid.UUID) -> Optional[Work]:
        """Get a work that has not been soft-deleted"""
        try:
            result = await self.session.execute(
                select(Work).where(Work.id == work_id, Work.is_deleted.is_(False))
            )
            return result.scalar_one_or_none()
        except Exception as e:
            raise RepositoryError(f"Error getting work {work_id}: {str(e)}")

    async def get_active_many(self, work_ids: Sequence[uuid.UUID]) -> List[Work]:
        """Get several works, returned in the order the ids were given"""
        if not work_ids:
            return []
        try:
            result = await self.session.execute(
                select(Work).where(Work.id.in_(list(work_ids)), Work.is_deleted.is_(False))
            )
            by_id = {work.id: work for work in result.scalars().all()}
            return [by_id[work_id] for work_id in work_ids if work_id in by_id]
        except Exception as e:
            raise RepositoryError(f"Error getting works: {str(e)}")

    async def list_by_uploader(self, uploader_identity: str) -> List[Work]:
        """All live works uploaded by an identity, oldest first"""
        try:
            result = await self.session.execute(
                select(Work)
                .where(Work.uploader_identity == uploader_identity, Work.is_deleted.is_(False))
                .order_by(Work.created_at)
            )
            return list(result.scalars().all())
        except Exception as e:
            raise RepositoryError(f"Error listing works for {uploader_identity}: {str(e)}")

    async def save_splits(self, work: Work, model: SplitModel) -> Result[Work]:
        """Write a work's split model as one committed row update"""
        try:
            work.apply_split_model(model)
            await self.session.commit()
            await self.session.refresh(work)
            return Result.ok(work)

        except Exception as e:
            await self.session.rollback()
            return Result.err(f"Failed to save splits for work {work.id}: {str(e)}")
