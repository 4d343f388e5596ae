"""Negative ad use cases: validate, launch, counter.

A launch stores the ad, appends polling samples for attacker and target and
applies the attacker's ethics penalty in one transaction.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from campaign_sim.crud import CreateData, ReadData, UpdateData
from campaign_sim.domain import negative_ads
from campaign_sim.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from campaign_sim.domain.win_probability import DEFAULT_POLLING
from campaign_sim.models.dc_models import (
    CampaignStatusModel,
    CounterAdRequestModel,
    CounterAdResultModel,
    NegativeAdAnalysisModel,
    NegativeAdRequestModel,
    NegativeAdValidationResultModel,
    ResearchModel,
)
from campaign_sim.models.schema_models import (
    NegativeAdSchema,
    OppositionResearchSchema,
    PollingSampleSchema,
)
from campaign_sim.services.campaign_db import CampaignDB, ensure_owner
from campaign_sim.services.consequences import ConsequenceApplier
from campaign_sim.services.providers import Clock, system_clock


class NegativeAdService:
    def __init__(
        self,
        campaign_db: CampaignDB,
        applier: ConsequenceApplier,
        clock: Clock = system_clock,
    ):
        self.campaign_db = campaign_db
        self.applier = applier
        self.clock = clock

    async def validate_negative_ad(
        self,
        research_id: UUID | None,
        amount_spent: float,
        budget: float,
        campaign_phase: str,
    ) -> NegativeAdValidationResultModel:
        """Bounds/budget/phase checks plus existence of the linked research."""
        result = negative_ads.validate_negative_ad(amount_spent, budget, campaign_phase)
        if research_id is not None:
            try:
                await self.campaign_db.read_research(research_id)
            except NotFoundError as e:
                result.errors.append(e.message)
                result.is_valid = False
        return result

    @staticmethod
    async def _support_or_default(candidate_id: UUID, session: AsyncSession) -> float:
        samples = await ReadData.read_recent_polling_data(candidate_id, session, 1)
        return samples[0].final_support_percent if samples else DEFAULT_POLLING

    async def launch_negative_ad(
        self, username: str | None, request: NegativeAdRequestModel
    ) -> tuple[NegativeAdSchema, NegativeAdAnalysisModel]:
        """Launch an attack ad from the caller's candidate against a target.

        Args:
            username (str | None): Caller, must own the attacker's campaign
            request (NegativeAdRequestModel): attacker, target, research, spend and budget

        Returns:
            tuple[NegativeAdSchema, NegativeAdAnalysisModel]: stored ad and the full calculation
        """
        now = self.clock()
        if request.attacker_id == request.target_id:
            raise ValidationError("A candidate cannot attack themselves")

        attacker = await self.campaign_db.read_candidate_campaign(request.attacker_id)
        ensure_owner(attacker, username)
        target = await self.campaign_db.read_candidate_campaign(request.target_id)
        if attacker.status != CampaignStatusModel.RUNNING:
            raise PreconditionError(f"Campaign is {attacker.status.value}, not RUNNING")
        if target.status != CampaignStatusModel.RUNNING:
            raise PreconditionError(f"Target campaign is {target.status.value}, not RUNNING")
        negative_ads.ensure_valid_negative_ad(
            request.amount_spent, request.budget, attacker.active_phase.value
        )

        research_credibility = None
        if request.research_id is not None:
            research = await self.campaign_db.read_research(request.research_id)
            if research.target_id != request.target_id:
                raise ValidationError("Research was not gathered on this target")
            if username is not None and research.owner_username != username:
                raise ForbiddenError(f"Research {research.research_id} is not owned by {username}")
            research_credibility = research.credibility

        window_start = now - negative_ads.TRAILING_WINDOW_DAYS * negative_ads.SECONDS_PER_DAY
        own_epochs = await self.campaign_db.read_ad_launch_epochs(request.attacker_id, window_start)
        incoming_epochs = await self.campaign_db.read_ad_launch_epochs(
            request.target_id, window_start, target_id=request.attacker_id
        )
        previous_count, days_since_last = negative_ads.recent_ad_stats(own_epochs, now)

        ad_id = uuid7()
        analysis = negative_ads.analyze_negative_ad(
            ad_id=ad_id,
            attacker_seed=attacker.seed,
            research_credibility=research_credibility,
            amount_spent=request.amount_spent,
            campaign_phase=attacker.active_phase,
            previous_ad_count=previous_count,
            days_since_last_ad=days_since_last,
            counter_attack=negative_ads.is_counter_attack(incoming_epochs, now),
        )
        ad = NegativeAdSchema(
            ad_id=ad_id,
            attacker_id=request.attacker_id,
            target_id=request.target_id,
            research_id=request.research_id,
            amount_spent=request.amount_spent,
            campaign_phase=attacker.active_phase,
            effectiveness=analysis.effectiveness,
            backfire_occurred=analysis.backfire_occurred,
            ethics_penalty_applied=analysis.ethics_penalty,
            voter_fatigue_impact=analysis.voter_fatigue,
            launched_epoch=now,
        )
        async with self.campaign_db.Session() as session:
            async with session.begin():
                # Both rows are version-checked, so a concurrent ad or counter on
                # either candidate makes this launch a ConflictError.
                await self.applier.stage_reputation_delta(
                    attacker, analysis.attacker_reputation_delta, session
                )
                await self.applier.stage_fields(target, {}, session)
                attacker_sample = PollingSampleSchema(
                    sample_id=uuid7(),
                    candidate_id=request.attacker_id,
                    timestamp_epoch=now,
                    final_support_percent=negative_ads.shifted_support(
                        await self._support_or_default(request.attacker_id, session),
                        analysis.attacker_polling_shift,
                    ),
                    source="negative_ad",
                )
                target_sample = PollingSampleSchema(
                    sample_id=uuid7(),
                    candidate_id=request.target_id,
                    timestamp_epoch=now,
                    final_support_percent=negative_ads.shifted_support(
                        await self._support_or_default(request.target_id, session),
                        analysis.target_polling_shift,
                    ),
                    source="negative_ad",
                )
                await CreateData.add_negative_ad_data(ad, session)
                await CreateData.add_polling_sample_data(attacker_sample, session)
                await CreateData.add_polling_sample_data(target_sample, session)

        logging.info(
            f"Negative ad {ad_id}: {request.attacker_id} -> {request.target_id}, "
            f"effectiveness={analysis.effectiveness:.1f} backfire={analysis.backfire_occurred}"
        )
        return ad, analysis

    async def counter_negative_ad(
        self, username: str | None, ad_id: UUID, request: CounterAdRequestModel
    ) -> CounterAdResultModel:
        """The ad's target answers it once, winning back part of the lost support."""
        now = self.clock()
        ad = await self.campaign_db.read_negative_ad(ad_id)
        target = await self.campaign_db.read_candidate_campaign(ad.target_id)
        ensure_owner(target, username)
        if ad.countered:
            raise ConflictError(f"Negative ad {ad_id} has already been countered")
        negative_ads.ensure_valid_negative_ad(
            request.amount_spent, request.budget, target.active_phase.value
        )

        value = negative_ads.counter_effectiveness(request.amount_spent, ad.effectiveness)
        recovery = negative_ads.counter_recovery(ad.effectiveness, ad.backfire_occurred, value)
        async with self.campaign_db.Session() as session:
            async with session.begin():
                if not await UpdateData.mark_negative_ad_countered(ad_id, value, session):
                    raise ConflictError(f"Negative ad {ad_id} has already been countered")
                await self.applier.stage_fields(target, {}, session)
                sample = PollingSampleSchema(
                    sample_id=uuid7(),
                    candidate_id=ad.target_id,
                    timestamp_epoch=now,
                    final_support_percent=negative_ads.shifted_support(
                        await self._support_or_default(ad.target_id, session), recovery
                    ),
                    source="counter_ad",
                )
                await CreateData.add_polling_sample_data(sample, session)

        logging.info(f"Negative ad {ad_id} countered: effectiveness={value:.1f} recovery={recovery:.2f}")
        return CounterAdResultModel(
            ad_id=ad_id,
            counter_effectiveness=value,
            target_polling_shift=recovery,
        )

    async def create_research(self, username: str, request: ResearchModel) -> OppositionResearchSchema:
        """Register opposition research on a candidate that has a campaign."""
        await self.campaign_db.read_candidate_campaign(request.target_id)
        research = await self.campaign_db.create_research(username, request)
        logging.info(f"Research {research.research_id} on {request.target_id}: credibility={request.credibility}")
        return research

    async def list_negative_ads(self, attacker_id: UUID) -> List[NegativeAdSchema]:
        return await self.campaign_db.read_negative_ads_by_attacker(attacker_id)
