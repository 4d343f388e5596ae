# import database
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc
from sqlalchemy.exc import SQLAlchemyError
from typing import List
from uuid import UUID
import logging

from campaign_sim.models.dc_models import CampaignPhaseModel, CampaignStatusModel
from campaign_sim.models.schema_models import (
    CampaignCycleSchema,
    NegativeAdSchema,
    OppositionResearchSchema,
    PollingSampleSchema,
)
from campaign_sim.models.schemas import (
    CampaignCycle,
    NegativeAd,
    OppositionResearch,
    PollingSample,
)


class UpdateData:
    @staticmethod
    async def update_campaign_fields(
        campaign_id: UUID,
        expected_version: int,
        fields: dict,
        session: AsyncSession,
        *conditions,
    ) -> bool:
        """Conditionally update a campaign cycle row (does NOT commit).

        The row is only written when its version still equals `expected_version`
        and every extra condition holds; the version is bumped on success.

        Args:
            campaign_id (UUID): To identify the campaign cycle
            expected_version (int): Version read before computing `fields`
            fields (dict): Column values to write

        Returns:
            bool: False when another writer got there first
        """
        try:
            stmt = (
                update(CampaignCycle)
                .where(
                    CampaignCycle.campaign_id == campaign_id,
                    CampaignCycle.version == expected_version,
                    *conditions,
                )
                .values(**fields, version=expected_version + 1)
            )
            result = await session.execute(stmt)
            return result.rowcount == 1
        except SQLAlchemyError as e:
            logging.error(f"Failed to update campaign data: {e}")
            raise

    @staticmethod
    async def mark_negative_ad_countered(
        ad_id: UUID, counter_effectiveness: float, session: AsyncSession
    ) -> bool:
        """Set countered/counter_effectiveness once (does NOT commit).

        Returns:
            bool: False when the ad was already countered
        """
        try:
            stmt = (
                update(NegativeAd)
                .where(NegativeAd.ad_id == ad_id, NegativeAd.countered.is_(False))
                .values(countered=True, counter_effectiveness=counter_effectiveness)
            )
            result = await session.execute(stmt)
            return result.rowcount == 1
        except SQLAlchemyError as e:
            logging.error(f"Failed to update negative ad data: {e}")
            raise


class ReadData:
    @staticmethod
    async def read_campaign_data(campaign_id: UUID, session: AsyncSession) -> CampaignCycleSchema | None:
        """Read campaign cycle data from database

        Args:
            campaign_id (UUID): To identify the campaign cycle

        Returns:
            CampaignCycleSchema: Campaign cycle data, None if it does not exist
        """
        try:
            stmt = select(CampaignCycle).where(CampaignCycle.campaign_id == campaign_id)
            result = await session.execute(stmt)
            result = result.scalars().first()

            if result is None:
                return None

            return CampaignCycleSchema.model_validate(result)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read campaign data: {e}")
            raise

    @staticmethod
    async def read_candidate_campaign_data(candidate_id: UUID, session: AsyncSession) -> CampaignCycleSchema | None:
        """Read the campaign of a candidate (one row per candidate)

        Args:
            candidate_id (UUID): To identify the candidate

        Returns:
            CampaignCycleSchema: Campaign cycle data, None if the candidate has none
        """
        try:
            stmt = select(CampaignCycle).where(CampaignCycle.candidate_id == candidate_id)
            result = await session.execute(stmt)
            result = result.scalars().first()

            if result is None:
                return None

            return CampaignCycleSchema.model_validate(result)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read candidate campaign data: {e}")
            raise

    @staticmethod
    async def read_recent_polling_data(
        candidate_id: UUID, session: AsyncSession, limit: int = 5
    ) -> List[PollingSampleSchema]:
        """Read the latest polling samples of a candidate, newest first

        Args:
            candidate_id (UUID): To identify the candidate
            limit (int): Number of samples to read

        Returns:
            List[PollingSampleSchema]: Polling samples ordered newest first
        """
        try:
            stmt = (
                select(PollingSample)
                .where(PollingSample.candidate_id == candidate_id)
                .order_by(desc(PollingSample.timestamp_epoch), desc(PollingSample.sample_id))
                .limit(limit)
            )
            result = await session.execute(stmt)
            return [PollingSampleSchema.model_validate(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logging.error(f"Failed to read polling data: {e}")
            raise

    @staticmethod
    async def read_research_data(research_id: UUID, session: AsyncSession) -> OppositionResearchSchema | None:
        try:
            stmt = select(OppositionResearch).where(OppositionResearch.research_id == research_id)
            result = await session.execute(stmt)
            result = result.scalars().first()

            if result is None:
                return None

            return OppositionResearchSchema.model_validate(result)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read research data: {e}")
            raise

    @staticmethod
    async def read_negative_ad_data(ad_id: UUID, session: AsyncSession) -> NegativeAdSchema | None:
        try:
            stmt = select(NegativeAd).where(NegativeAd.ad_id == ad_id)
            result = await session.execute(stmt)
            result = result.scalars().first()

            if result is None:
                return None

            return NegativeAdSchema.model_validate(result)
        except SQLAlchemyError as e:
            logging.error(f"Failed to read negative ad data: {e}")
            raise

    @staticmethod
    async def read_negative_ads_by_attacker(attacker_id: UUID, session: AsyncSession) -> List[NegativeAdSchema]:
        """Read every ad an attacker launched, newest first"""
        try:
            stmt = (
                select(NegativeAd)
                .where(NegativeAd.attacker_id == attacker_id)
                .order_by(desc(NegativeAd.launched_epoch))
            )
            result = await session.execute(stmt)
            return [NegativeAdSchema.model_validate(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logging.error(f"Failed to read negative ads: {e}")
            raise

    @staticmethod
    async def read_ad_launch_epochs(
        attacker_id: UUID,
        since_epoch: float,
        session: AsyncSession,
        target_id: UUID | None = None,
    ) -> List[float]:
        """Read launch times of an attacker's ads since `since_epoch`

        Args:
            attacker_id (UUID): Candidate who launched the ads
            since_epoch (float): Start of the window (epoch seconds)
            target_id (UUID | None): Only ads aimed at this candidate when given

        Returns:
            List[float]: Launch epochs
        """
        try:
            stmt = select(NegativeAd.launched_epoch).where(
                NegativeAd.attacker_id == attacker_id,
                NegativeAd.launched_epoch >= since_epoch,
            )
            if target_id is not None:
                stmt = stmt.where(NegativeAd.target_id == target_id)
            result = await session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logging.error(f"Failed to read ad launch times: {e}")
            raise

    @staticmethod
    async def collect_running_campaign_ids(session: AsyncSession, before_epoch: float) -> List[UUID]:
        """Collect ids of running campaigns whose phase timer expired before `before_epoch`"""
        try:
            stmt = select(CampaignCycle.campaign_id).where(
                CampaignCycle.status == CampaignStatusModel.RUNNING.value,
                CampaignCycle.active_phase != CampaignPhaseModel.ELECTION.value,
                CampaignCycle.phase_ends_epoch <= before_epoch,
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logging.error(f"Failed to collect campaign ids: {e}")
            raise


class CreateData:
    @staticmethod
    async def add_campaign_data(campaign: CampaignCycleSchema, session: AsyncSession) -> None:
        """Add campaign cycle data (does NOT commit)

        Args:
            campaign (CampaignCycleSchema): New campaign cycle
            session (AsyncSession): AsyncSession object to interact with database
        """
        new_campaign = CampaignCycle(
            campaign_id=campaign.campaign_id,
            candidate_id=campaign.candidate_id,
            owner_username=campaign.owner_username,
            seed=campaign.seed,
            cycle_sequence=campaign.cycle_sequence,
            active_phase=campaign.active_phase.value,
            status=campaign.status.value,
            phase_ends_epoch=campaign.phase_ends_epoch,
            paused_at_epoch=campaign.paused_at_epoch,
            reputation_score=campaign.reputation_score,
            funds_raised_this_cycle=campaign.funds_raised_this_cycle,
            endorsements_acquired=campaign.endorsements_acquired,
            scandals_active=campaign.scandals_active,
            last_resolved_sequence=campaign.last_resolved_sequence,
            version=campaign.version,
            created_at=campaign.created_at,
        )
        session.add(new_campaign)

    @staticmethod
    async def add_polling_sample_data(sample: PollingSampleSchema, session: AsyncSession) -> None:
        """Append a polling sample (does NOT commit). Samples are never updated."""
        new_sample = PollingSample(
            sample_id=sample.sample_id,
            candidate_id=sample.candidate_id,
            timestamp_epoch=sample.timestamp_epoch,
            final_support_percent=sample.final_support_percent,
            source=sample.source,
        )
        session.add(new_sample)

    @staticmethod
    async def add_research_data(research: OppositionResearchSchema, session: AsyncSession) -> None:
        new_research = OppositionResearch(
            research_id=research.research_id,
            target_id=research.target_id,
            owner_username=research.owner_username,
            credibility=research.credibility,
            created_at=research.created_at,
        )
        session.add(new_research)

    @staticmethod
    async def add_negative_ad_data(ad: NegativeAdSchema, session: AsyncSession) -> None:
        """Add a negative ad record (does NOT commit)

        Args:
            ad (NegativeAdSchema): Ad with its derived effectiveness and penalties
        """
        new_ad = NegativeAd(
            ad_id=ad.ad_id,
            attacker_id=ad.attacker_id,
            target_id=ad.target_id,
            research_id=ad.research_id,
            amount_spent=ad.amount_spent,
            campaign_phase=ad.campaign_phase.value,
            effectiveness=ad.effectiveness,
            backfire_occurred=ad.backfire_occurred,
            ethics_penalty_applied=ad.ethics_penalty_applied,
            voter_fatigue_impact=ad.voter_fatigue_impact,
            countered=ad.countered,
            counter_effectiveness=ad.counter_effectiveness,
            launched_epoch=ad.launched_epoch,
        )
        session.add(new_ad)
