"""
Payment Service
Prepares the payment breakdown of a recording made from one or two source works
"""

from typing import List

from ..core.config import PricingConfig
from ..core.errors import InputValidationError, WorkNotFoundError
from ..core.logging import ledger_logger
from ..core.payees import ResolvedPayee
from ..core.pricing import (
    RecipientPayment,
    SourceWork,
    block_count,
    calculate_cost,
    distribute_creators_share,
    format_cost_breakdown,
    format_payment_split,
    merge_recipients
)
from ..database.repositories import WorkRepository
from ..database.schemas import (
    CostResponse,
    PreparedPayment,
    RecipientOut,
    SourceWorkOut
)
from .work_service import parse_work_id


class PaymentService:
    """Recording cost and recipient breakdown; persists nothing"""

    def __init__(self, works: WorkRepository, config: PricingConfig):
        self.works = works
        self.config = config

    def calculate_cost(self, bars: int, track_count: int) -> CostResponse:
        breakdown = calculate_cost(bars, track_count, self.config)
        return CostResponse(
            breakdown=breakdown,
            formula=format_cost_breakdown(bars, track_count, self.config),
            split_display=format_payment_split(breakdown.total_cost, self.config),
        )

    async def prepare_recording_payment(self, bars: int, source_work_ids: List[str]) -> PreparedPayment:
        """
        Build the payment for a recording.

        The track count is the number of source works. The platform entry comes
        first, followed by the creators share routed through each source work's
        split model. Pending payees are included and flagged; they never block
        the computation.
        """
        if not 1 <= len(source_work_ids) <= self.config.max_tracks:
            raise InputValidationError(
                f"A recording needs 1 to {self.config.max_tracks} source works, got {len(source_work_ids)}"
            )
        block_count(bars, self.config)

        ids = [parse_work_id(work_id) for work_id in source_work_ids]
        works = await self.works.get_active_many(ids)
        found = {work.id for work in works}
        for work_id in ids:
            if work_id not in found:
                raise WorkNotFoundError(work_id)

        breakdown = calculate_cost(bars, len(works), self.config)
        sources = [
            SourceWork(
                work_id=str(work.id),
                title=work.title,
                generation=work.remix_depth,
                remixer_stake_percentage=work.remixer_stake_percentage,
                splits=work.split_model,
            )
            for work in works
        ]

        platform = RecipientPayment(
            payee=ResolvedPayee(identity=self.config.platform_payee),
            amount=breakdown.split.platform,
            payment_type="platform",
            percentage=self.config.platform_cut_percent,
        )
        recipients = [platform] + merge_recipients(
            distribute_creators_share(sources, breakdown.split.creators)
        )
        pending_count = sum(1 for recipient in recipients if recipient.pending)

        ledger_logger.log_payment_prepared(
            source_work_ids=[source.work_id for source in sources],
            blocks=breakdown.blocks,
            total_cost=str(breakdown.total_cost),
            pending_recipients=pending_count
        )

        return PreparedPayment(
            breakdown=breakdown,
            recipients=[RecipientOut.from_recipient(recipient) for recipient in recipients],
            source_works=[SourceWorkOut.from_source(source) for source in sources],
            pending_recipient_count=pending_count,
            formula=format_cost_breakdown(bars, len(works), self.config),
            split_display=format_payment_split(breakdown.total_cost, self.config),
        )
