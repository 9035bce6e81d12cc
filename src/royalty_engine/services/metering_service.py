"""
Metering Service
Pass issuance, weighted play credits and the preview analytics stream
"""

import uuid
from typing import Optional

from ..core.config import MeteringConfig
from ..core.credits import (
    Clock,
    PassState,
    credit_weight,
    format_time_remaining,
    is_pass_live,
    parse_work_reference,
    pass_expiry,
    remaining_seconds,
    utc_now
)
from ..core.errors import (
    InputValidationError,
    PassAlreadyActiveError,
    PassExpiredError,
    PassNotFoundError
)
from ..core.logging import metering_logger
from ..database.models import AccessPass
from ..database.repositories import PassRepository, PlayRepository, PreviewRepository
from ..database.schemas import PassStatus, PlayReceipt, UsageSummary


def _parse_pass_id(value) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        raise PassNotFoundError(value)


def _parse_work_id(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise InputValidationError(f"Invalid work id: {value}")


class MeteringService:
    """
    Credit metering for time-boxed passes.

    Liveness is always recomputed from expires_at against the injected clock;
    reads never write a status change.
    """

    def __init__(
        self,
        passes: PassRepository,
        plays: PlayRepository,
        previews: PreviewRepository,
        config: MeteringConfig,
        clock: Clock = utc_now
    ):
        self.passes = passes
        self.plays = plays
        self.previews = previews
        self.config = config
        self.clock = clock

    async def _get_pass(self, pass_id) -> AccessPass:
        pass_id = _parse_pass_id(pass_id)
        access_pass = await self.passes.get(pass_id)
        if access_pass is None:
            raise PassNotFoundError(pass_id)
        return access_pass

    async def _status_of(self, access_pass: AccessPass) -> PassStatus:
        now = self.clock()
        remaining = remaining_seconds(access_pass.expires_at, now)
        return PassStatus(
            pass_id=access_pass.id,
            active=is_pass_live(access_pass.status, access_pass.expires_at, now),
            remaining_seconds=remaining,
            time_remaining=format_time_remaining(remaining),
            expires_at=access_pass.expires_at,
            total_plays=await self.plays.count_for_pass(access_pass.id),
        )

    async def issue_pass(self, payer_identity: str, tx_reference: Optional[str] = None) -> AccessPass:
        """Issue a pass expiring pass_duration_hours from now"""
        payer_identity = (payer_identity or "").strip()
        if not payer_identity:
            raise InputValidationError("payer_identity is required")

        now = self.clock()
        existing = await self.passes.get_live_for_payer(payer_identity, now)
        if existing is not None:
            raise PassAlreadyActiveError(payer_identity, existing.expires_at)

        access_pass = await self.passes.create({
            "payer_identity": payer_identity,
            "purchased_at": now,
            "expires_at": pass_expiry(now, self.config),
            "amount": self.config.pass_price,
            "tx_reference": tx_reference,
            "status": PassState.ACTIVE.value,
        })
        metering_logger.log_pass_issued(
            str(access_pass.id), payer_identity, access_pass.expires_at.isoformat()
        )
        return access_pass

    async def log_play(
        self,
        pass_id,
        work_ref: str,
        content_category: str,
        duration_seconds: Optional[int] = None
    ) -> PlayReceipt:
        """Record one completed play; credits are fixed from the weight table"""
        work_ref = (work_ref or "").strip()
        content_category = (content_category or "").strip()
        if not pass_id or not str(pass_id).strip() or not work_ref or not content_category:
            raise InputValidationError("Missing required fields: pass_id, work_id, content_category")
        if duration_seconds is not None and duration_seconds < 0:
            raise InputValidationError("duration_seconds must not be negative")

        work_id, globe_location = parse_work_reference(work_ref)
        work_uuid = _parse_work_id(work_id)

        try:
            access_pass = await self._get_pass(pass_id)
        except PassNotFoundError as e:
            metering_logger.log_play_rejected(str(pass_id), e.reason)
            raise

        if not is_pass_live(access_pass.status, access_pass.expires_at, self.clock()):
            metering_logger.log_play_rejected(str(access_pass.id), "expired")
            raise PassExpiredError(access_pass.id, access_pass.expires_at)

        credits = credit_weight(content_category, self.config)
        play = await self.plays.insert_play(
            pass_id=access_pass.id,
            work_id=work_uuid,
            content_category=content_category,
            credits=credits,
            duration_seconds=duration_seconds,
            globe_location=globe_location
        )
        total_plays = await self.plays.count_for_pass(access_pass.id)

        metering_logger.log_play_accepted(str(access_pass.id), work_id, content_category, credits)
        return PlayReceipt(play_id=play.id, credits=play.credits, total_plays=total_plays)

    async def pass_status(self, pass_id) -> PassStatus:
        return await self._status_of(await self._get_pass(pass_id))

    async def active_pass_for(self, payer_identity: str) -> Optional[PassStatus]:
        """Status of the payer's live pass, or None"""
        payer_identity = (payer_identity or "").strip()
        if not payer_identity:
            raise InputValidationError("payer identity is required")

        access_pass = await self.passes.get_live_for_payer(payer_identity, self.clock())
        if access_pass is None:
            return None
        return await self._status_of(access_pass)

    async def log_preview(
        self,
        work_ref: str,
        content_category: str,
        listener_identity: Optional[str] = None
    ) -> bool:
        """Record a preview play; failures are logged and reported as False"""
        try:
            work_id, globe_location = parse_work_reference(work_ref or "")
            if not work_id or not (content_category or "").strip():
                raise InputValidationError("Missing required fields: work_id, content_category")

            result = await self.previews.insert_preview(
                work_id=_parse_work_id(work_id),
                content_category=content_category.strip(),
                listener_identity=listener_identity,
                globe_location=globe_location
            )
            if result.is_err():
                metering_logger.log_preview_failed(work_id, result.error)
                return False
            return True

        except Exception as e:
            metering_logger.log_preview_failed(str(work_ref), str(e))
            return False

    async def usage_summary(self, pass_id) -> UsageSummary:
        """Aggregate credits of one pass for the distribution job"""
        access_pass = await self._get_pass(pass_id)
        credits_by_work = await self.plays.credits_by_work(access_pass.id)
        return UsageSummary(
            pass_id=access_pass.id,
            total_plays=await self.plays.count_for_pass(access_pass.id),
            total_credits=sum(credits_by_work.values()),
            credits_by_work=credits_by_work,
        )
