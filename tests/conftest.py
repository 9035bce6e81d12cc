"""
Royalty Engine Testing Configuration
Pytest fixtures, in-memory repositories and a controllable clock
"""
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add src to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from royalty_engine.core.config import MeteringConfig, PricingConfig  # noqa: E402
from royalty_engine.core.payees import parse_payee  # noqa: E402
from royalty_engine.core.result import Result  # noqa: E402
from royalty_engine.core.splits import SplitModel  # noqa: E402
from royalty_engine.database.models import AccessPass, PlayRecord, PreviewPlay, Work  # noqa: E402


class FrozenClock:
    """Clock that only moves when told to"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeWorkRepository:
    """In-memory stand-in for WorkRepository"""

    def __init__(self):
        self.works: Dict[uuid.UUID, Work] = {}
        self.fail_saves = set()
        self.save_calls: List[uuid.UUID] = []

    def add(self, work: Work) -> Work:
        self.works[work.id] = work
        return work

    async def create(self, obj_in, **kwargs) -> Work:
        data = dict(obj_in)
        data.update(kwargs)
        data.setdefault("is_deleted", False)
        work = Work(id=uuid.uuid4(), **data)
        return self.add(work)

    async def get_active(self, work_id):
        work = self.works.get(work_id)
        if work is None or work.is_deleted:
            return None
        return work

    async def get_active_many(self, work_ids):
        return [
            self.works[work_id] for work_id in work_ids
            if work_id in self.works and not self.works[work_id].is_deleted
        ]

    async def list_by_uploader(self, uploader_identity):
        return [
            work for work in self.works.values()
            if work.uploader_identity == uploader_identity and not work.is_deleted
        ]

    async def save_splits(self, work, model: SplitModel):
        self.save_calls.append(work.id)
        if work.id in self.fail_saves:
            return Result.err(f"Failed to save splits for work {work.id}: connection reset")
        work.apply_split_model(model)
        return Result.ok(work)


class FakePassRepository:
    """In-memory stand-in for PassRepository"""

    def __init__(self):
        self.passes: Dict[uuid.UUID, AccessPass] = {}

    async def create(self, obj_in, **kwargs) -> AccessPass:
        data = dict(obj_in)
        data.update(kwargs)
        access_pass = AccessPass(id=uuid.uuid4(), **data)
        self.passes[access_pass.id] = access_pass
        return access_pass

    async def get(self, pass_id) -> Optional[AccessPass]:
        return self.passes.get(pass_id)

    async def get_live_for_payer(self, payer_identity, now):
        live = [
            p for p in self.passes.values()
            if p.payer_identity == payer_identity and p.status == "active" and p.expires_at > now
        ]
        return max(live, key=lambda p: p.expires_at) if live else None


class FakePlayRepository:
    """In-memory stand-in for PlayRepository"""

    def __init__(self):
        self.plays: List[PlayRecord] = []

    async def insert_play(self, pass_id, work_id, content_category, credits,
                          duration_seconds=None, globe_location=None) -> PlayRecord:
        play = PlayRecord(
            id=uuid.uuid4(),
            pass_id=pass_id,
            work_id=work_id,
            content_category=content_category,
            credits=credits,
            duration_seconds=duration_seconds,
            globe_location=globe_location
        )
        self.plays.append(play)
        return play

    async def count_for_pass(self, pass_id) -> int:
        return sum(1 for play in self.plays if play.pass_id == pass_id)

    async def credits_by_work(self, pass_id) -> Dict[str, int]:
        totals: Dict[str, int] = {}
        for play in self.plays:
            if play.pass_id == pass_id:
                key = str(play.work_id)
                totals[key] = totals.get(key, 0) + play.credits
        return totals


class FakePreviewRepository:
    """In-memory stand-in for PreviewRepository"""

    def __init__(self):
        self.previews: List[PreviewPlay] = []
        self.fail = False

    async def insert_preview(self, work_id, content_category, listener_identity=None, globe_location=None):
        if self.fail:
            return Result.err("Failed to record preview play: table unavailable")
        preview = PreviewPlay(
            id=uuid.uuid4(),
            work_id=work_id,
            content_category=content_category,
            listener_identity=listener_identity,
            globe_location=globe_location
        )
        self.previews.append(preview)
        return Result.ok(preview)


def make_work(
    uploader: str = "0xowner",
    composition=(),
    production=(),
    title: str = "Test Loop",
    content_category: str = "loop",
    remix_depth: int = 0,
    is_deleted: bool = False
) -> Work:
    """Build a detached Work row; payees are given as raw upload-form strings"""
    model = SplitModel.from_pairs(
        composition=[(parse_payee(raw), pct) for raw, pct in composition],
        production=[(parse_payee(raw), pct) for raw, pct in production],
    )
    stored = model.to_storage()
    return Work(
        id=uuid.uuid4(),
        title=title,
        content_category=content_category,
        is_draft=False,
        is_deleted=is_deleted,
        uploader_identity=uploader,
        source_work_ids=[],
        remix_depth=remix_depth,
        remixer_stake_percentage=0,
        composition_splits=stored["composition"],
        production_splits=stored["production"],
    )


@pytest.fixture
def clock():
    """Frozen UTC clock starting at noon"""
    return FrozenClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def pricing_config():
    return PricingConfig()


@pytest.fixture
def metering_config():
    return MeteringConfig()


@pytest.fixture
def work_factory():
    return make_work


@pytest.fixture
def work_repo():
    return FakeWorkRepository()


@pytest.fixture
def pass_repo():
    return FakePassRepository()


@pytest.fixture
def play_repo():
    return FakePlayRepository()


@pytest.fixture
def preview_repo():
    return FakePreviewRepository()


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
