"""
Work Service
Write path for works: every split model is validated before it is persisted
"""

import uuid
from typing import List

from ..core.config import PricingConfig
from ..core.errors import (
    InputValidationError,
    OwnershipError,
    SplitValidationError,
    WorkNotFoundError
)
from ..core.logging import ledger_logger
from ..core.splits import SplitModel, derive_remix_splits
from ..database.models import Work
from ..database.repositories import RepositoryError, WorkRepository
from ..database.schemas import WorkCreate


def parse_work_id(value) -> uuid.UUID:
    """Coerce a work id from the API into a UUID"""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        raise InputValidationError(f"Invalid work id: {value}")


def ensure_valid(model: SplitModel, work_id=None) -> None:
    """Raise SplitValidationError when a model breaks the percentage invariants"""
    validation = model.validate_invariants()
    if not validation.valid:
        ledger_logger.log_split_rejected(
            validation.error_reason,
            work_id=str(work_id) if work_id else None
        )
        raise SplitValidationError(validation.error_reason)


class WorkService:
    """Creates works and replaces their split models"""

    def __init__(self, works: WorkRepository, config: PricingConfig):
        self.works = works
        self.config = config

    async def _load_sources(self, source_work_ids: List[str]) -> List[Work]:
        ids = [parse_work_id(work_id) for work_id in source_work_ids]
        found = await self.works.get_active_many(ids)
        found_ids = {work.id for work in found}
        for work_id in ids:
            if work_id not in found_ids:
                raise WorkNotFoundError(work_id)
        return found

    async def create_work(self, data: WorkCreate) -> Work:
        """
        Create a work with a validated split model.

        A derivative (one or two source works) that arrives without splits
        inherits them from its sources via the remix derivation, and records
        the configured remixer stake unless one is given.
        """
        sources = await self._load_sources(data.source_work_ids)

        if data.is_empty and sources:
            model = derive_remix_splits(*(source.split_model for source in sources))
        else:
            model = data.to_model()
        ensure_valid(model)

        remix_depth = max((source.remix_depth for source in sources), default=-1) + 1
        stake = data.remixer_stake_percentage
        if stake is None:
            stake = self.config.remixer_stake_percent if sources else 0
        stored = model.to_storage()

        return await self.works.create({
            "title": data.title.strip(),
            "content_category": data.content_category,
            "uploader_identity": data.uploader_identity.strip(),
            "is_draft": data.is_draft,
            "source_work_ids": [str(source.id) for source in sources],
            "remix_depth": remix_depth,
            "remixer_stake_percentage": stake,
            "composition_splits": stored["composition"],
            "production_splits": stored["production"],
        })

    async def update_splits(self, work_id, caller_identity: str, model: SplitModel) -> Work:
        """Replace a work's split model; only its uploader may do this"""
        if not caller_identity or not caller_identity.strip():
            raise InputValidationError("caller_identity is required")

        work_id = parse_work_id(work_id)
        work = await self.works.get_active(work_id)
        if work is None:
            raise WorkNotFoundError(work_id)
        if work.uploader_identity != caller_identity.strip():
            raise OwnershipError(f"Only the uploader can change splits of work {work_id}")

        ensure_valid(model, work_id)

        result = await self.works.save_splits(work, model)
        if result.is_err():
            raise RepositoryError(result.error)
        return result.unwrap()
