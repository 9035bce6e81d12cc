"""
Test suite for the pending resolution service
"""

import pytest
import uuid
from unittest.mock import AsyncMock, patch

from royalty_engine.core.errors import InputValidationError
from royalty_engine.core.payees import PendingPayee, ResolvedPayee
from royalty_engine.core.splits import SplitModel
from royalty_engine.services.resolution_service import ResolutionService

OWNER = "0xowner"
OTHER = "0xother"
JANE = "0x" + "4a" * 20
SOMEONE_ELSE = "0x" + "5b" * 20


@pytest.fixture
def seeded(work_repo, work_factory):
    """Three works mentioning Jane Doe; the third belongs to someone else"""
    w1 = work_repo.add(work_factory(
        uploader=OWNER,
        composition=[("Jane Doe", 50), ("0xabc", 50)],
        production=[("jane doe", 100)],
    ))
    w2 = work_repo.add(work_factory(
        uploader=OWNER,
        composition=[("JANE DOE", 60), ("Sam", 40)],
    ))
    w3 = work_repo.add(work_factory(
        uploader=OTHER,
        composition=[("Jane Doe", 100)],
    ))
    return w1, w2, w3


@pytest.fixture
def service(work_repo):
    return ResolutionService(work_repo)


class TestResolvePending:

    @pytest.mark.asyncio
    async def test_rewrites_only_owned_works(self, service, seeded):
        w1, w2, w3 = seeded

        outcome = await service.resolve_pending(
            "Jane Doe", JANE, [str(w.id) for w in seeded], [OWNER]
        )

        assert outcome.updated_field_count == 3
        assert outcome.works_processed == 3

        m1 = w1.split_model
        assert m1.composition[0].payee == ResolvedPayee(identity=JANE)
        assert m1.composition[1].payee == ResolvedPayee(identity="0xabc")
        assert m1.production[0].payee == ResolvedPayee(identity=JANE)
        assert [s.percentage for s in m1.slots] == [50, 50, 100]

        m2 = w2.split_model
        assert m2.composition[0].payee == ResolvedPayee(identity=JANE)
        assert m2.composition[1].payee == PendingPayee(name="Sam")

        assert w3.split_model.composition[0].payee == PendingPayee(name="Jane Doe")

    @pytest.mark.asyncio
    async def test_rerun_updates_nothing(self, service, seeded, work_repo):
        ids = [str(w.id) for w in seeded]
        await service.resolve_pending("Jane Doe", JANE, ids, [OWNER])
        saves_after_first = len(work_repo.save_calls)

        outcome = await service.resolve_pending("Jane Doe", SOMEONE_ELSE, ids, [OWNER])

        assert outcome.updated_field_count == 0
        assert outcome.works_processed == 3
        assert len(work_repo.save_calls) == saves_after_first

    @pytest.mark.asyncio
    async def test_any_caller_identity_counts_as_owner(self, service, seeded):
        outcome = await service.resolve_pending(
            "jane doe", JANE, [str(w.id) for w in seeded], [OWNER, OTHER]
        )
        assert outcome.updated_field_count == 4

    @pytest.mark.asyncio
    async def test_missing_and_malformed_ids_are_skipped_but_counted(self, service, seeded):
        w1, _, _ = seeded

        with patch("royalty_engine.services.resolution_service.ledger_logger") as mock_logger:
            outcome = await service.resolve_pending(
                "Jane Doe", JANE, [str(uuid.uuid4()), "not-a-uuid", str(w1.id)], [OWNER]
            )

        assert outcome.works_processed == 3
        assert outcome.updated_field_count == 2
        reasons = [call.args[1] for call in mock_logger.log_resolution_skip.call_args_list]
        assert reasons == ["work not found", "invalid work id"]

    @pytest.mark.asyncio
    async def test_not_owned_is_logged(self, service, seeded):
        _, _, w3 = seeded

        with patch("royalty_engine.services.resolution_service.ledger_logger") as mock_logger:
            outcome = await service.resolve_pending("Jane Doe", JANE, [str(w3.id)], [OWNER])

        assert outcome.updated_field_count == 0
        mock_logger.log_resolution_skip.assert_called_once()
        assert mock_logger.log_resolution_skip.call_args.args[1] == "not owned by caller"

    @pytest.mark.asyncio
    async def test_failed_save_skips_work_and_keeps_earlier_writes(self, service, seeded, work_repo):
        w1, w2, _ = seeded
        work_repo.fail_saves.add(w2.id)

        outcome = await service.resolve_pending("Jane Doe", JANE, [str(w1.id), str(w2.id)], [OWNER])

        assert outcome.updated_field_count == 2
        assert outcome.works_processed == 2
        assert w1.split_model.pending_names() == []
        assert w2.split_model.pending_names() == ["JANE DOE", "Sam"]

    @pytest.mark.asyncio
    async def test_deleted_work_is_skipped(self, service, work_repo, work_factory):
        deleted = work_repo.add(work_factory(uploader=OWNER, composition=[("Jane", 100)], is_deleted=True))

        outcome = await service.resolve_pending("Jane", JANE, [str(deleted.id)], [OWNER])

        assert outcome.updated_field_count == 0
        assert outcome.works_processed == 1

    @pytest.mark.asyncio
    async def test_duplicate_ids_count_once(self, service, seeded, work_repo):
        w1, _, _ = seeded

        outcome = await service.resolve_pending("Jane Doe", JANE, [str(w1.id), str(w1.id)], [OWNER])

        assert outcome.updated_field_count == 2
        assert outcome.works_processed == 2
        assert work_repo.save_calls == [w1.id]

    @pytest.mark.asyncio
    async def test_each_call_reads_current_rows(self, service, seeded, work_repo):
        _, w2, _ = seeded
        work_repo.get_active = AsyncMock(side_effect=work_repo.get_active)

        first = await service.resolve_pending("Jane Doe", JANE, [str(w2.id)], [OWNER])
        w2.apply_split_model(SplitModel.from_pairs(
            composition=[(ResolvedPayee(identity=JANE), 60), (PendingPayee(name="jane doe"), 40)]
        ))
        second = await service.resolve_pending("Jane Doe", JANE, [str(w2.id)], [OWNER])

        assert (first.updated_field_count, second.updated_field_count) == (1, 1)
        assert work_repo.get_active.await_count == 2
        assert w2.split_model.pending_names() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,identity,ids,callers", [
        ("", JANE, ["x"], [OWNER]),
        ("  ", JANE, ["x"], [OWNER]),
        ("Jane", "", ["x"], [OWNER]),
        ("Jane", "Jane Smith", ["x"], [OWNER]),
        ("Jane", "0xjane", ["x"], [OWNER]),
        ("Jane", JANE, [], [OWNER]),
        ("Jane", JANE, ["x"], []),
        ("Jane", JANE, ["x"], ["  "]),
    ])
    async def test_missing_input_rejected_before_any_read(self, service, work_repo, name, identity, ids, callers):
        with pytest.raises(InputValidationError):
            await service.resolve_pending(name, identity, ids, callers)
        assert work_repo.save_calls == []


class TestListPending:

    @pytest.mark.asyncio
    async def test_groups_by_name(self, service, seeded):
        w1, w2, _ = seeded

        summaries = await service.list_pending(OWNER)

        by_name = {s.name: s for s in summaries}
        assert set(by_name) == {"Jane Doe", "Sam"}
        assert by_name["Jane Doe"].work_ids == [str(w1.id), str(w2.id)]
        assert by_name["Jane Doe"].slot_count == 3
        assert by_name["Sam"].work_ids == [str(w2.id)]

    @pytest.mark.asyncio
    async def test_nothing_pending_after_resolution(self, service, seeded):
        await service.resolve_pending("Jane Doe", JANE, [str(w.id) for w in seeded], [OWNER])
        summaries = await service.list_pending(OWNER)
        assert [s.name for s in summaries] == ["Sam"]

    @pytest.mark.asyncio
    async def test_blank_uploader_rejected(self, service):
        with pytest.raises(InputValidationError):
            await service.list_pending(" ")
