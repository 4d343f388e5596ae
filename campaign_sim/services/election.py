"""Election use cases: win probability, resolution and applying its consequences.

Reads go through CampaignDB, the single write goes through ConsequenceApplier.
"""

import logging
from uuid import UUID

from campaign_sim.domain import election_rules
from campaign_sim.domain.win_probability import RECENT_POLL_COUNT, compute_win_probability
from campaign_sim.models.dc_models import (
    ElectionCountdownModel,
    ElectionOutcomeModel,
    WinProbabilityModel,
)
from campaign_sim.models.schema_models import CampaignCycleSchema
from campaign_sim.services.campaign_db import CampaignDB, ensure_owner
from campaign_sim.services.consequences import ConsequenceApplier
from campaign_sim.services.providers import (
    Clock,
    DebatePerformanceSource,
    NeutralDebateScore,
    system_clock,
)


class ElectionService:
    def __init__(
        self,
        campaign_db: CampaignDB,
        applier: ConsequenceApplier,
        debate_source: DebatePerformanceSource | None = None,
        clock: Clock = system_clock,
    ):
        self.campaign_db = campaign_db
        self.applier = applier
        self.debate_source = debate_source or NeutralDebateScore()
        self.clock = clock

    async def win_probability_for(self, cycle: CampaignCycleSchema) -> WinProbabilityModel:
        samples = await self.campaign_db.read_recent_polling(cycle.candidate_id, limit=RECENT_POLL_COUNT)
        debate_score = await self.debate_source.debate_score(cycle.candidate_id)
        return compute_win_probability(
            cycle.candidate_id,
            cycle,
            [sample.final_support_percent for sample in samples],
            debate_score,
        )

    async def compute_win_probability(self, candidate_id: UUID) -> WinProbabilityModel:
        cycle = await self.campaign_db.read_candidate_campaign(candidate_id)
        return await self.win_probability_for(cycle)

    def can_resolve_election(self, cycle: CampaignCycleSchema) -> bool:
        return election_rules.can_resolve_election(cycle, self.clock())

    def get_election_countdown(self, cycle: CampaignCycleSchema) -> ElectionCountdownModel:
        return election_rules.election_countdown(cycle, self.clock())

    async def resolve_election(self, candidate_id: UUID) -> ElectionOutcomeModel:
        """Compute the outcome for the candidate's current cycle. Does not write."""
        cycle = await self.campaign_db.read_candidate_campaign(candidate_id)
        return await self._resolve(cycle)

    async def _resolve(self, cycle: CampaignCycleSchema) -> ElectionOutcomeModel:
        election_rules.ensure_can_resolve(cycle, self.clock())
        probability = await self.win_probability_for(cycle)
        outcome = election_rules.resolve_election(cycle, probability.probability)
        logging.info(
            f"Resolved election for candidate {cycle.candidate_id} cycle {cycle.cycle_sequence}: "
            f"p={outcome.probability:.2f} roll={outcome.roll} tier={outcome.outcome_tier.value}"
        )
        return outcome

    async def apply_election_results(
        self,
        candidate_id: UUID,
        campaign_id: UUID,
        outcome: ElectionOutcomeModel,
        username: str | None,
    ) -> CampaignCycleSchema:
        return await self.applier.apply_election_results(
            candidate_id, campaign_id, outcome, username, self.clock()
        )

    async def resolve_and_apply(
        self, campaign_id: UUID, username: str | None
    ) -> tuple[ElectionOutcomeModel, CampaignCycleSchema]:
        """Resolve the campaign's election and write its consequences."""
        cycle = await self.campaign_db.read_campaign(campaign_id)
        ensure_owner(cycle, username)
        outcome = await self._resolve(cycle)
        updated = await self.apply_election_results(cycle.candidate_id, campaign_id, outcome, username)
        return outcome, updated
