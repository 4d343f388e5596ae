from datetime import datetime
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from campaign_sim.db import create_tables
from campaign_sim.domain.campaign_cycle import (
    PHASE_DURATION_HOURS,
    SECONDS_PER_HOUR,
    initial_cycle_fields,
)
from campaign_sim.models.dc_models import CampaignCreateModel, CampaignPhaseModel
from campaign_sim.models.schema_models import CampaignCycleSchema
from campaign_sim.services.campaign import CampaignService
from campaign_sim.services.campaign_db import CampaignDB
from campaign_sim.services.consequences import ConsequenceApplier
from campaign_sim.services.election import ElectionService
from campaign_sim.services.negative_ads import NegativeAdService
from campaign_sim.services.providers import NeutralDebateScore

START_EPOCH = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = START_EPOCH):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def advance_hours(self, hours: float) -> None:
        self.advance(hours * SECONDS_PER_HOUR)


class RecordingLedger:
    def __init__(self):
        self.credits = []

    async def credit(self, candidate_id, rewards):
        self.credits.append((candidate_id, rewards))


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'campaign.sqlite3'}", poolclass=NullPool
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def Session(engine):
    return async_sessionmaker(autocommit=False, class_=AsyncSession, autoflush=True, bind=engine)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger():
    return RecordingLedger()


@pytest.fixture
def campaign_db(Session):
    return CampaignDB(Session)


@pytest.fixture
def applier(Session, ledger):
    return ConsequenceApplier(Session, ledger)


@pytest.fixture
def campaign_service(campaign_db, applier, clock):
    return CampaignService(campaign_db, applier, clock)


@pytest.fixture
def election_service(campaign_db, applier, clock):
    return ElectionService(campaign_db, applier, NeutralDebateScore(), clock)


@pytest.fixture
def negative_ad_service(campaign_db, applier, clock):
    return NegativeAdService(campaign_db, applier, clock)


@pytest.fixture
def create_campaign(campaign_service):
    async def _create(username, candidate_id, reputation_score=50, seed=None):
        request = CampaignCreateModel(
            candidate_id=candidate_id, seed=seed, reputation_score=reputation_score
        )
        return await campaign_service.create_campaign(username, request)

    return _create


@pytest.fixture
def drive_to_phase(campaign_service, clock):
    """Advance a campaign phase by phase until `target` is active."""

    async def _drive(campaign_id, username, target: CampaignPhaseModel):
        cycle = await campaign_service.read_campaign(campaign_id, username)
        while cycle.active_phase != target:
            clock.advance_hours(PHASE_DURATION_HOURS[cycle.active_phase])
            cycle = await campaign_service.advance_phase(campaign_id, username)
        return cycle

    return _drive


@pytest.fixture
def drive_to_election_night(drive_to_phase, clock):
    """Reach ELECTION and let its countdown expire."""

    async def _drive(campaign_id, username):
        cycle = await drive_to_phase(campaign_id, username, CampaignPhaseModel.ELECTION)
        clock.advance_hours(PHASE_DURATION_HOURS[CampaignPhaseModel.ELECTION])
        return cycle

    return _drive


@pytest.fixture
def make_cycle():
    """Build an in-memory cycle snapshot for the pure domain functions."""

    def _make(now: float = START_EPOCH, **overrides):
        fields = {
            "campaign_id": UUID("00000000-0000-0000-0000-00000000c001"),
            "candidate_id": UUID("00000000-0000-0000-0000-00000000ca01"),
            "owner_username": "alice",
            "seed": "candidate-a",
            "created_at": datetime(2024, 1, 1),
            **initial_cycle_fields(now),
        }
        fields.update(overrides)
        return CampaignCycleSchema(**fields)

    return _make
