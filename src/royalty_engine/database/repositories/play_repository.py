"""
Play Repositories
Insert-only play records under passes, and the separate preview analytics stream
"""

import uuid
from typing import Dict, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import PlayRecord, PreviewPlay
from ...core.result import Result
from .base import BaseRepository, RepositoryError


class PlayRepository(BaseRepository[PlayRecord]):
    """Repository for paid play records"""

    def __init__(self, session: AsyncSession):
        super().__init__(PlayRecord, session)

    async def insert_play(
        self,
        pass_id: uuid.UUID,
        work_id: uuid.UUID,
        content_category: str,
        credits: int,
        duration_seconds: Optional[int] = None,
        globe_location: Optional[int] = None
    ) -> PlayRecord:
        """Insert a play record; credits are fixed here and never recalculated"""
        return await self.create({
            "pass_id": pass_id,
            "work_id": work_id,
            "content_category": content_category,
            "credits": credits,
            "duration_seconds": duration_seconds,
            "globe_location": globe_location,
        })

    async def count_for_pass(self, pass_id: uuid.UUID) -> int:
        return await self.count({"pass_id": pass_id})

    async def credits_by_work(self, pass_id: uuid.UUID) -> Dict[str, int]:
        """Sum of credits per work for one pass"""
        try:
            result = await self.session.execute(
                select(PlayRecord.work_id, func.sum(PlayRecord.credits))
                .where(PlayRecord.pass_id == pass_id)
                .group_by(PlayRecord.work_id)
            )
            return {str(work_id): int(total) for work_id, total in result.all()}
        except Exception as e:
            raise RepositoryError(f"Error summing credits for pass {pass_id}: {str(e)}")


class PreviewRepository:
    """Repository for preview plays; writes are best-effort"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_preview(
        self,
        work_id: uuid.UUID,
        content_category: str,
        listener_identity: Optional[str] = None,
        globe_location: Optional[int] = None
    ) -> Result[PreviewPlay]:
        """Record a preview play"""
        try:
            preview = PreviewPlay(
                work_id=work_id,
                content_category=content_category,
                listener_identity=listener_identity,
                globe_location=globe_location
            )
            self.session.add(preview)
            await self.session.commit()
            await self.session.refresh(preview)
            return Result.ok(preview)

        except Exception as e:
            await self.session.rollback()
            return Result.err(f"Failed to record preview play: {str(e)}")
