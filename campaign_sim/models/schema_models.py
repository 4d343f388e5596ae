from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime

from campaign_sim.models.dc_models import CampaignPhaseModel, CampaignStatusModel


class CampaignCycleSchema(BaseModel):
    campaign_id: UUID
    candidate_id: UUID
    owner_username: str
    seed: str
    cycle_sequence: int
    active_phase: CampaignPhaseModel
    status: CampaignStatusModel
    phase_ends_epoch: float
    paused_at_epoch: Optional[float] = None
    reputation_score: int
    funds_raised_this_cycle: float
    endorsements_acquired: int
    scandals_active: int
    last_resolved_sequence: Optional[int] = None
    version: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class PollingSampleSchema(BaseModel):
    sample_id: UUID
    candidate_id: UUID
    timestamp_epoch: float
    final_support_percent: float
    source: str

    class Config:
        from_attributes = True


class OppositionResearchSchema(BaseModel):
    research_id: UUID
    target_id: UUID
    owner_username: str
    credibility: float
    created_at: datetime

    class Config:
        from_attributes = True


class NegativeAdSchema(BaseModel):
    ad_id: UUID
    attacker_id: UUID
    target_id: UUID
    research_id: UUID | None
    amount_spent: float
    campaign_phase: CampaignPhaseModel
    effectiveness: float
    backfire_occurred: bool
    ethics_penalty_applied: float
    voter_fatigue_impact: float
    countered: bool = False
    counter_effectiveness: float | None = None
    launched_epoch: float

    class Config:
        from_attributes = True
