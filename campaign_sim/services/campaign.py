"""Campaign lifecycle use cases for the request layer.

Reads go through CampaignDB, every CampaignCycle write through
ConsequenceApplier. The clock is injected so phase timers can be tested.
"""

import logging
from typing import List
from uuid import UUID

from campaign_sim.domain import campaign_cycle
from campaign_sim.domain.errors import ConflictError, PreconditionError
from campaign_sim.models.dc_models import (
    ActionValidationModel,
    CampaignActivityModel,
    CampaignCreateModel,
)
from campaign_sim.models.schema_models import CampaignCycleSchema, PollingSampleSchema
from campaign_sim.services.campaign_db import CampaignDB, ensure_owner
from campaign_sim.services.consequences import ConsequenceApplier
from campaign_sim.services.providers import Clock, system_clock


class CampaignService:
    def __init__(
        self,
        campaign_db: CampaignDB,
        applier: ConsequenceApplier,
        clock: Clock = system_clock,
    ):
        self.campaign_db = campaign_db
        self.applier = applier
        self.clock = clock

    async def create_campaign(self, username: str, request: CampaignCreateModel) -> CampaignCycleSchema:
        return await self.campaign_db.create_campaign(username, request, self.clock())

    async def read_campaign(self, campaign_id: UUID, username: str | None) -> CampaignCycleSchema:
        cycle = await self.campaign_db.read_campaign(campaign_id)
        ensure_owner(cycle, username)
        return cycle

    async def advance_phase(self, campaign_id: UUID, username: str | None) -> CampaignCycleSchema:
        return await self.applier.apply_phase_advance(campaign_id, username, self.clock())

    async def pause(self, campaign_id: UUID, username: str | None) -> CampaignCycleSchema:
        return await self.applier.apply_pause(campaign_id, username, self.clock())

    async def resume(self, campaign_id: UUID, username: str | None) -> CampaignCycleSchema:
        return await self.applier.apply_resume(campaign_id, username, self.clock())

    async def withdraw(self, campaign_id: UUID, username: str | None) -> CampaignCycleSchema:
        return await self.applier.apply_withdraw(campaign_id, username, self.clock())

    async def start_next_cycle(self, campaign_id: UUID, username: str | None) -> CampaignCycleSchema:
        return await self.applier.apply_next_cycle(campaign_id, username, self.clock())

    async def record_activity(
        self, campaign_id: UUID, username: str | None, activity: CampaignActivityModel
    ) -> CampaignCycleSchema:
        return await self.applier.apply_activity(campaign_id, username, activity, self.clock())

    async def validate_action(self, campaign_id: UUID, username: str | None, action: str) -> ActionValidationModel:
        cycle = await self.read_campaign(campaign_id, username)
        return campaign_cycle.validate_action(cycle, action)

    async def append_polling_sample(
        self, candidate_id: UUID, username: str | None, final_support_percent: float
    ) -> PollingSampleSchema:
        """Only the owner of the candidate's campaign may report its polling."""
        cycle = await self.campaign_db.read_candidate_campaign(candidate_id)
        ensure_owner(cycle, username)
        return await self.campaign_db.append_polling_sample(
            candidate_id, final_support_percent, self.clock()
        )

    async def list_polling(self, candidate_id: UUID, limit: int = 5) -> List[PollingSampleSchema]:
        return await self.campaign_db.read_recent_polling(candidate_id, limit)

    async def advance_due_campaigns(self) -> List[CampaignCycleSchema]:
        """Advance every running campaign whose phase timer expired.

        Conflicting or no longer legal advances are skipped; the next sweep
        will see the fresh row.

        Returns:
            List[CampaignCycleSchema]: The campaigns that moved to a new phase
        """
        now = self.clock()
        advanced = []
        for campaign_id in await self.campaign_db.collect_due_campaign_ids(now):
            try:
                advanced.append(await self.applier.apply_phase_advance(campaign_id, None, now))
            except (ConflictError, PreconditionError) as e:
                logging.info(f"Skipped phase advance for campaign {campaign_id}: {e.message}")
        return advanced
