"""Consequence applier: the only writer of CampaignCycle rows.

Every write is optimistic: the row is read, the new values are computed by the
domain layer, and the UPDATE only lands if the row version (plus any extra
guard) is unchanged. Otherwise ConflictError; nothing is retried here.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campaign_sim.crud import ReadData, UpdateData
from campaign_sim.domain import campaign_cycle
from campaign_sim.domain.election_rules import apply_reputation_delta, ensure_can_resolve
from campaign_sim.domain.errors import ConflictError, NotFoundError, ValidationError
from campaign_sim.models.dc_models import (
    CampaignActivityModel,
    CampaignPhaseModel,
    CampaignStatusModel,
    ElectionOutcomeModel,
)
from campaign_sim.models.schema_models import CampaignCycleSchema
from campaign_sim.models.schemas import CampaignCycle
from campaign_sim.services.campaign_db import ensure_owner
from campaign_sim.services.providers import LoggingRewardLedger, RewardLedger


class ConsequenceApplier:
    def __init__(self, Session: async_sessionmaker, ledger: RewardLedger | None = None):
        self.Session = Session
        self.ledger = ledger or LoggingRewardLedger()

    async def _read_owned(self, campaign_id: UUID, username: str | None, session: AsyncSession) -> CampaignCycleSchema:
        cycle = await ReadData.read_campaign_data(campaign_id, session)
        if cycle is None:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        ensure_owner(cycle, username)
        return cycle

    async def stage_fields(
        self,
        cycle: CampaignCycleSchema,
        fields: dict,
        session: AsyncSession,
        *conditions,
    ) -> None:
        """Write `fields` inside the caller's transaction (does NOT commit)."""
        written = await UpdateData.update_campaign_fields(
            cycle.campaign_id, cycle.version, fields, session, *conditions
        )
        if not written:
            logging.info(f"Write conflict on campaign {cycle.campaign_id} (version {cycle.version})")
            raise ConflictError(f"Campaign {cycle.campaign_id} was modified concurrently; re-read and retry")

    async def stage_reputation_delta(self, cycle: CampaignCycleSchema, delta: int, session: AsyncSession) -> int:
        """Apply a negative-ad ethics penalty inside the caller's transaction."""
        reputation = apply_reputation_delta(cycle.reputation_score, delta)
        await self.stage_fields(cycle, {"reputation_score": reputation}, session)
        return reputation

    async def _apply(self, campaign_id: UUID, username: str | None, plan, now: float) -> CampaignCycleSchema:
        """Read, plan with a domain transition, write, then read back."""
        async with self.Session() as session:
            async with session.begin():
                cycle = await self._read_owned(campaign_id, username, session)
                await self.stage_fields(cycle, plan(cycle, now), session)
            return await ReadData.read_campaign_data(campaign_id, session)

    async def apply_election_results(
        self,
        candidate_id: UUID,
        campaign_id: UUID,
        outcome: ElectionOutcomeModel,
        username: str | None,
        now: float,
    ) -> CampaignCycleSchema:
        """Write reputation reward and reset the phase timer, at most once per cycle.

        The write is guarded on phase == ELECTION, status == RUNNING and the
        cycle sequence the outcome was computed for, so two racing resolutions
        cannot both apply rewards.

        Args:
            candidate_id (UUID): Candidate the outcome belongs to
            campaign_id (UUID): Campaign cycle record to mutate
            outcome (ElectionOutcomeModel): Result of resolve_election
            username (str | None): Caller, must own the campaign
            now (float): Current epoch seconds

        Returns:
            CampaignCycleSchema: The campaign after the write
        """
        async with self.Session() as session:
            async with session.begin():
                cycle = await self._read_owned(campaign_id, username, session)
                if cycle.candidate_id != candidate_id or outcome.candidate_id != candidate_id:
                    raise ValidationError("Outcome does not belong to this candidate's campaign")
                if outcome.cycle_sequence != cycle.cycle_sequence:
                    raise ConflictError(
                        f"Outcome was computed for cycle {outcome.cycle_sequence}, "
                        f"campaign is on cycle {cycle.cycle_sequence}"
                    )
                ensure_can_resolve(cycle, now)
                reputation = apply_reputation_delta(cycle.reputation_score, outcome.rewards.reputation)
                await self.stage_fields(
                    cycle,
                    campaign_cycle.complete_election(cycle, reputation, now),
                    session,
                    CampaignCycle.active_phase == CampaignPhaseModel.ELECTION.value,
                    CampaignCycle.status == CampaignStatusModel.RUNNING.value,
                    CampaignCycle.cycle_sequence == outcome.cycle_sequence,
                )
            updated = await ReadData.read_campaign_data(campaign_id, session)

        logging.info(
            f"Applied {outcome.outcome_tier.value} to campaign {campaign_id} "
            f"(cycle {outcome.cycle_sequence}): reputation {cycle.reputation_score} -> {reputation}"
        )
        await self.ledger.credit(candidate_id, outcome.rewards)
        return updated

    async def apply_phase_advance(self, campaign_id: UUID, username: str | None, now: float) -> CampaignCycleSchema:
        updated = await self._apply(campaign_id, username, campaign_cycle.advance_phase, now)
        logging.info(f"Campaign {campaign_id} advanced to {updated.active_phase.value}")
        return updated

    async def apply_pause(self, campaign_id: UUID, username: str | None, now: float) -> CampaignCycleSchema:
        return await self._apply(campaign_id, username, campaign_cycle.pause, now)

    async def apply_resume(self, campaign_id: UUID, username: str | None, now: float) -> CampaignCycleSchema:
        return await self._apply(campaign_id, username, campaign_cycle.resume, now)

    async def apply_withdraw(self, campaign_id: UUID, username: str | None, now: float) -> CampaignCycleSchema:
        updated = await self._apply(campaign_id, username, campaign_cycle.withdraw, now)
        logging.info(f"Campaign {campaign_id} withdrawn")
        return updated

    async def apply_next_cycle(self, campaign_id: UUID, username: str | None, now: float) -> CampaignCycleSchema:
        updated = await self._apply(campaign_id, username, campaign_cycle.start_next_cycle, now)
        logging.info(f"Campaign {campaign_id} started cycle {updated.cycle_sequence}")
        return updated

    async def apply_activity(
        self,
        campaign_id: UUID,
        username: str | None,
        activity: CampaignActivityModel,
        now: float,
    ) -> CampaignCycleSchema:
        return await self._apply(
            campaign_id,
            username,
            lambda cycle, _: campaign_cycle.accumulate_activity(cycle, activity),
            now,
        )
