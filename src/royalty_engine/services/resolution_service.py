"""
Pending Resolution Service
Rewrites pending placeholder payees to a real identity across the caller's works
"""

import uuid
from typing import Dict, List, Sequence

from ..core.errors import InputValidationError
from ..core.logging import ledger_logger
from ..core.payees import looks_like_address
from ..database.repositories import RepositoryError, WorkRepository
from ..database.schemas import PendingPlaceholderSummary, ResolutionOutcome


class ResolutionService:
    """
    Pending placeholder resolution.

    Each work is an independent unit: a work that is missing, not owned by
    the caller, or fails to persist is logged and skipped, and works already
    written stay written. Re-running for a resolved name rewrites nothing.
    """

    def __init__(self, works: WorkRepository):
        self.works = works

    async def resolve_pending(
        self,
        pending_name: str,
        resolved_identity: str,
        work_ids: Sequence[str],
        caller_identities: Sequence[str]
    ) -> ResolutionOutcome:
        """Replace every matching pending slot in the owned works with resolved_identity"""
        pending_name = (pending_name or "").strip()
        resolved_identity = (resolved_identity or "").strip()
        callers = {identity.strip() for identity in caller_identities or [] if identity and identity.strip()}

        if not pending_name:
            raise InputValidationError("pending_name is required")
        if not resolved_identity:
            raise InputValidationError("resolved_identity is required")
        if not looks_like_address(resolved_identity):
            raise InputValidationError(f"resolved_identity is not a payable address: {resolved_identity}")
        if not work_ids:
            raise InputValidationError("work_ids must not be empty")
        if not callers:
            raise InputValidationError("caller_identities must not be empty")

        updated_field_count = 0
        for raw_id in work_ids:
            try:
                work_id = uuid.UUID(str(raw_id).strip())
            except ValueError:
                ledger_logger.log_resolution_skip(str(raw_id), "invalid work id")
                continue

            try:
                work = await self.works.get_active(work_id)
            except RepositoryError as e:
                ledger_logger.log_resolution_skip(str(work_id), "lookup failed", error=str(e))
                continue

            if work is None:
                ledger_logger.log_resolution_skip(str(work_id), "work not found")
                continue
            if work.uploader_identity not in callers:
                ledger_logger.log_resolution_skip(
                    str(work_id), "not owned by caller", uploader=work.uploader_identity
                )
                continue

            model, changed = work.split_model.resolve_pending(pending_name, resolved_identity)
            if not changed:
                continue

            result = await self.works.save_splits(work, model)
            if result.is_err():
                ledger_logger.log_resolution_skip(str(work_id), "save failed", error=result.error)
                continue

            updated_field_count += changed
            ledger_logger.log_resolution_applied(str(work_id), changed)

        outcome = ResolutionOutcome(
            updated_field_count=updated_field_count,
            works_processed=len(work_ids)
        )
        ledger_logger.log_resolution_complete(
            pending_name, outcome.updated_field_count, outcome.works_processed
        )
        return outcome

    async def list_pending(self, uploader_identity: str) -> List[PendingPlaceholderSummary]:
        """Outstanding pending names across an uploader's works"""
        uploader_identity = (uploader_identity or "").strip()
        if not uploader_identity:
            raise InputValidationError("uploader identity is required")

        grouped: Dict[str, PendingPlaceholderSummary] = {}
        for work in await self.works.list_by_uploader(uploader_identity):
            model = work.split_model
            for name in model.pending_names():
                summary = grouped.setdefault(
                    name.casefold(),
                    PendingPlaceholderSummary(name=name, work_ids=[], slot_count=0)
                )
                summary.work_ids.append(str(work.id))
                summary.slot_count += model.count_pending(name)

        return list(grouped.values())
