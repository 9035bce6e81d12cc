"""
Test suite for pass issuance and credit metering
"""

import pytest
import uuid
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from royalty_engine.core.errors import (
    InputValidationError,
    PassAlreadyActiveError,
    PassExpiredError,
    PassNotFoundError
)
from royalty_engine.services.metering_service import MeteringService

PAYER = "0xlistener"


@pytest.fixture
def service(pass_repo, play_repo, preview_repo, metering_config, clock):
    return MeteringService(pass_repo, play_repo, preview_repo, metering_config, clock)


@pytest.fixture
def work_id():
    return str(uuid.uuid4())


class TestIssuePass:

    @pytest.mark.asyncio
    async def test_issues_24_hour_pass(self, service, clock):
        access_pass = await service.issue_pass(PAYER, tx_reference="0xtx")

        assert access_pass.status == "active"
        assert access_pass.purchased_at == clock.now
        assert access_pass.expires_at == clock.now + timedelta(hours=24)
        assert access_pass.amount == Decimal("1.00")
        assert access_pass.tx_reference == "0xtx"

    @pytest.mark.asyncio
    async def test_second_live_pass_rejected(self, service):
        first = await service.issue_pass(PAYER)

        with pytest.raises(PassAlreadyActiveError) as exc_info:
            await service.issue_pass(PAYER)

        assert exc_info.value.expires_at == first.expires_at
        assert exc_info.value.reason == "You already have an active pass"

    @pytest.mark.asyncio
    async def test_new_pass_after_expiry(self, service, clock):
        first = await service.issue_pass(PAYER)
        clock.advance(hours=24)

        second = await service.issue_pass(PAYER)

        assert second.id != first.id

    @pytest.mark.asyncio
    async def test_blank_payer_rejected(self, service):
        with pytest.raises(InputValidationError):
            await service.issue_pass("  ")


class TestLogPlay:

    @pytest.mark.asyncio
    async def test_weighted_credits(self, service, work_id):
        access_pass = await service.issue_pass(PAYER)

        song = await service.log_play(access_pass.id, work_id, "full_song", duration_seconds=180)
        loop = await service.log_play(str(access_pass.id), work_id, "loop")
        mix = await service.log_play(access_pass.id, work_id, "mix")

        assert (song.credits, song.total_plays) == (5, 1)
        assert (loop.credits, loop.total_plays) == (1, 2)
        assert (mix.credits, mix.total_plays) == (1, 3)

    @pytest.mark.asyncio
    async def test_location_suffix_recorded(self, service, play_repo, work_id):
        access_pass = await service.issue_pass(PAYER)

        await service.log_play(access_pass.id, f"{work_id}-loc-2", "loop")

        play = play_repo.plays[0]
        assert str(play.work_id) == work_id
        assert play.globe_location == 2

    @pytest.mark.asyncio
    async def test_expired_by_time_even_when_stored_active(self, service, clock, pass_repo, play_repo, work_id):
        access_pass = await service.issue_pass(PAYER)
        clock.advance(hours=24)

        with pytest.raises(PassExpiredError) as exc_info:
            await service.log_play(access_pass.id, work_id, "loop")

        assert exc_info.value.expires_at == access_pass.expires_at
        assert pass_repo.passes[access_pass.id].status == "active"
        assert play_repo.plays == []

    @pytest.mark.asyncio
    async def test_distributed_pass_rejected(self, service, work_id):
        access_pass = await service.issue_pass(PAYER)
        access_pass.status = "distributed"

        with pytest.raises(PassExpiredError):
            await service.log_play(access_pass.id, work_id, "loop")

    @pytest.mark.asyncio
    async def test_unknown_pass(self, service, work_id):
        with pytest.raises(PassNotFoundError):
            await service.log_play(uuid.uuid4(), work_id, "loop")
        with pytest.raises(PassNotFoundError):
            await service.log_play("not-a-pass", work_id, "loop")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pass_id,work_ref,category,duration", [
        ("", "w", "loop", None),
        ("p", "", "loop", None),
        ("p", "w", "  ", None),
    ])
    async def test_missing_fields(self, service, pass_id, work_ref, category, duration):
        with pytest.raises(InputValidationError):
            await service.log_play(pass_id, work_ref, category, duration)

    @pytest.mark.asyncio
    async def test_bad_duration_or_work_id(self, service, work_id):
        access_pass = await service.issue_pass(PAYER)
        with pytest.raises(InputValidationError):
            await service.log_play(access_pass.id, work_id, "loop", duration_seconds=-1)
        with pytest.raises(InputValidationError):
            await service.log_play(access_pass.id, "track-42", "loop")

    @pytest.mark.asyncio
    async def test_credits_fixed_at_insert(self, service, play_repo, work_id):
        access_pass = await service.issue_pass(PAYER)
        await service.log_play(access_pass.id, work_id, "full_song")

        service.config = service.config.model_copy(update={"credit_weights": {"full_song": 9}})

        assert play_repo.plays[0].credits == 5


class TestPassStatus:

    @pytest.mark.asyncio
    async def test_fresh_pass(self, service):
        access_pass = await service.issue_pass(PAYER)

        status = await service.pass_status(access_pass.id)

        assert status.active
        assert status.remaining_seconds == 24 * 3600
        assert status.time_remaining == "24:00:00"
        assert status.total_plays == 0

    @pytest.mark.asyncio
    async def test_elapsed_pass_reads_inactive_without_write(self, service, clock, pass_repo):
        access_pass = await service.issue_pass(PAYER)
        clock.advance(hours=25)

        status = await service.pass_status(access_pass.id)

        assert not status.active
        assert status.remaining_seconds == 0
        assert pass_repo.passes[access_pass.id].status == "active"

    @pytest.mark.asyncio
    async def test_remaining_is_floored(self, service, clock):
        access_pass = await service.issue_pass(PAYER)
        clock.advance(hours=23, minutes=59, seconds=30, milliseconds=400)

        status = await service.pass_status(access_pass.id)

        assert status.remaining_seconds == 29
        assert status.active

    @pytest.mark.asyncio
    async def test_unknown_pass(self, service):
        with pytest.raises(PassNotFoundError):
            await service.pass_status(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_active_pass_for_payer(self, service, clock):
        assert await service.active_pass_for(PAYER) is None

        access_pass = await service.issue_pass(PAYER)
        status = await service.active_pass_for(PAYER)
        assert status.pass_id == access_pass.id

        clock.advance(hours=24)
        assert await service.active_pass_for(PAYER) is None


class TestPreviewAndUsage:

    @pytest.mark.asyncio
    async def test_preview_recorded_without_credits(self, service, preview_repo, play_repo, work_id):
        assert await service.log_preview(f"{work_id}-loc-1", "full_song", "0xcurious") is True

        assert len(preview_repo.previews) == 1
        assert preview_repo.previews[0].globe_location == 1
        assert play_repo.plays == []

    @pytest.mark.asyncio
    async def test_preview_failure_is_swallowed(self, service, preview_repo, work_id):
        preview_repo.fail = True

        with patch("royalty_engine.services.metering_service.metering_logger") as mock_logger:
            assert await service.log_preview(work_id, "loop") is False

        mock_logger.log_preview_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_preview_storage_exception_is_swallowed(self, service, preview_repo, work_id):
        preview_repo.insert_preview = AsyncMock(side_effect=RuntimeError("connection lost"))
        assert await service.log_preview(work_id, "loop") is False

    @pytest.mark.asyncio
    async def test_preview_with_bad_input_returns_false(self, service):
        assert await service.log_preview("", "loop") is False
        assert await service.log_preview("track-42", "loop") is False

    @pytest.mark.asyncio
    async def test_usage_summary(self, service):
        access_pass = await service.issue_pass(PAYER)
        song, loop = str(uuid.uuid4()), str(uuid.uuid4())
        await service.log_play(access_pass.id, song, "full_song")
        await service.log_play(access_pass.id, song, "full_song")
        await service.log_play(access_pass.id, loop, "loop")

        summary = await service.usage_summary(access_pass.id)

        assert summary.total_plays == 3
        assert summary.total_credits == 11
        assert summary.credits_by_work == {song: 10, loop: 1}
