"""DB service layer for campaign reads and inserts.

- Routers should not touch DB sessions directly; they call the services.
- This layer owns session/transaction boundaries.
- CampaignCycle rows are only *updated* by services.consequences.
"""

import logging
from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker
from uuid6 import uuid7

from campaign_sim.crud import CreateData, ReadData
from campaign_sim.domain.campaign_cycle import initial_cycle_fields
from campaign_sim.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from campaign_sim.models.dc_models import CampaignCreateModel, ResearchModel
from campaign_sim.models.schema_models import (
    CampaignCycleSchema,
    NegativeAdSchema,
    OppositionResearchSchema,
    PollingSampleSchema,
)


def ensure_owner(cycle: CampaignCycleSchema, username: str | None) -> None:
    """`None` means an internal caller (scheduler) and skips the ownership check."""
    if username is not None and cycle.owner_username != username:
        raise ForbiddenError(f"Campaign {cycle.campaign_id} is not owned by {username}")


class CampaignDB:
    def __init__(self, Session: async_sessionmaker):
        self.Session = Session

    async def create_campaign(
        self, username: str, request: CampaignCreateModel, now: float
    ) -> CampaignCycleSchema:
        """Open cycle 1 for a candidate, starting in ANNOUNCEMENT.

        A candidate has a single campaign row; later cycles come from
        start_next_cycle, so a second create is a ConflictError.
        """
        campaign = CampaignCycleSchema(
            campaign_id=uuid7(),
            candidate_id=request.candidate_id,
            owner_username=username,
            seed=request.seed or str(request.candidate_id),
            created_at=datetime.now(),
            **initial_cycle_fields(now, request.reputation_score),
        )
        message = f"Candidate {request.candidate_id} already has a campaign"
        try:
            async with self.Session() as session:
                async with session.begin():
                    if await ReadData.read_candidate_campaign_data(request.candidate_id, session) is not None:
                        raise ConflictError(message)
                    await CreateData.add_campaign_data(campaign, session)
        except IntegrityError as e:
            logging.info(f"Lost create race for candidate {request.candidate_id}")
            raise ConflictError(message) from e
        logging.info(f"Created campaign {campaign.campaign_id} for candidate {campaign.candidate_id}")
        return campaign

    async def read_campaign(self, campaign_id: UUID) -> CampaignCycleSchema:
        async with self.Session() as session:
            campaign = await ReadData.read_campaign_data(campaign_id, session)
        if campaign is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        return campaign

    async def read_candidate_campaign(self, candidate_id: UUID) -> CampaignCycleSchema:
        async with self.Session() as session:
            campaign = await ReadData.read_candidate_campaign_data(candidate_id, session)
        if campaign is None:
            raise NotFoundError(f"No campaign found for candidate {candidate_id}")
        return campaign

    async def read_recent_polling(self, candidate_id: UUID, limit: int = 5) -> List[PollingSampleSchema]:
        async with self.Session() as session:
            return await ReadData.read_recent_polling_data(candidate_id, session, limit)

    async def append_polling_sample(
        self,
        candidate_id: UUID,
        final_support_percent: float,
        now: float,
        source: str = "snapshot",
    ) -> PollingSampleSchema:
        """Append one immutable polling sample."""
        if not 0 <= final_support_percent <= 100:
            raise ValidationError("finalSupportPercent must be between 0 and 100")
        sample = PollingSampleSchema(
            sample_id=uuid7(),
            candidate_id=candidate_id,
            timestamp_epoch=now,
            final_support_percent=final_support_percent,
            source=source,
        )
        async with self.Session() as session:
            async with session.begin():
                await CreateData.add_polling_sample_data(sample, session)
        return sample

    async def create_research(self, username: str, request: ResearchModel) -> OppositionResearchSchema:
        research = OppositionResearchSchema(
            research_id=uuid7(),
            target_id=request.target_id,
            owner_username=username,
            credibility=request.credibility,
            created_at=datetime.now(),
        )
        async with self.Session() as session:
            async with session.begin():
                await CreateData.add_research_data(research, session)
        return research

    async def read_research(self, research_id: UUID) -> OppositionResearchSchema:
        async with self.Session() as session:
            research = await ReadData.read_research_data(research_id, session)
        if research is None:
            raise NotFoundError(f"Research {research_id} not found")
        return research

    async def read_negative_ad(self, ad_id: UUID) -> NegativeAdSchema:
        async with self.Session() as session:
            ad = await ReadData.read_negative_ad_data(ad_id, session)
        if ad is None:
            raise NotFoundError(f"Negative ad {ad_id} not found")
        return ad

    async def read_negative_ads_by_attacker(self, attacker_id: UUID) -> List[NegativeAdSchema]:
        async with self.Session() as session:
            return await ReadData.read_negative_ads_by_attacker(attacker_id, session)

    async def read_ad_launch_epochs(
        self, attacker_id: UUID, since_epoch: float, target_id: UUID | None = None
    ) -> List[float]:
        async with self.Session() as session:
            return await ReadData.read_ad_launch_epochs(attacker_id, since_epoch, session, target_id)

    async def collect_due_campaign_ids(self, now: float) -> List[UUID]:
        async with self.Session() as session:
            return await ReadData.collect_running_campaign_ids(session, now)
