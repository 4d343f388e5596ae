from pydantic import BaseModel, Field
from enum import Enum
from uuid import UUID
from typing import Optional, List


class CampaignPhaseModel(str, Enum):
    ANNOUNCEMENT = "ANNOUNCEMENT"
    FUNDRAISING = "FUNDRAISING"
    ACTIVE = "ACTIVE"
    RESOLUTION = "RESOLUTION"
    ELECTION = "ELECTION"  # countdown to election night, resolution happens here


class CampaignStatusModel(str, Enum):
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    WITHDRAWN = "WITHDRAWN"
    COMPLETED = "COMPLETED"


class OutcomeTierModel(str, Enum):
    LANDSLIDE = "LANDSLIDE"
    COMFORTABLE = "COMFORTABLE"
    NARROW = "NARROW"
    LOSS = "LOSS"


# ==== Requests ================================================================


class CampaignCreateModel(BaseModel):
    candidate_id: UUID
    seed: Optional[str] = None
    reputation_score: int = Field(default=50, ge=0, le=100)


class CampaignActivityModel(BaseModel):
    action: str
    funds_raised: float = Field(default=0.0, ge=0)
    endorsements: int = Field(default=0, ge=0)
    scandals: int = Field(default=0, ge=0)


class PollingSampleModel(BaseModel):
    final_support_percent: float


class ResearchModel(BaseModel):
    target_id: UUID
    credibility: float = Field(ge=0, le=100)


class NegativeAdValidationModel(BaseModel):
    research_id: Optional[UUID] = None
    amount_spent: float
    budget: float
    campaign_phase: str


class NegativeAdRequestModel(BaseModel):
    attacker_id: UUID
    target_id: UUID
    research_id: Optional[UUID] = None
    amount_spent: float
    budget: float


class CounterAdRequestModel(BaseModel):
    amount_spent: float
    budget: float


# ==== Results =================================================================


class FactorScoresModel(BaseModel):
    polling: float
    reputation: float
    funds: float
    endorsements: float
    debates: float


class WinProbabilityModel(BaseModel):
    candidate_id: UUID
    probability: float
    factors: FactorScoresModel


class RewardsModel(BaseModel):
    funds: int
    reputation: int
    influence_points: int


class ElectionOutcomeModel(BaseModel):
    candidate_id: UUID
    campaign_id: UUID
    cycle_sequence: int
    probability: float
    roll: int
    won: bool
    outcome_tier: OutcomeTierModel
    final_vote_percent: float
    rewards: RewardsModel


class ElectionCountdownModel(BaseModel):
    hours_remaining: int
    minutes_remaining: int
    can_resolve: bool


class ActionValidationModel(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    allowed_actions: List[str] = []


class NegativeAdValidationResultModel(BaseModel):
    is_valid: bool
    errors: List[str] = []


class NegativeAdAnalysisModel(BaseModel):
    credibility: float
    is_counter_attack: bool
    previous_negative_ad_count: int
    ethics_penalty: float
    voter_fatigue: float
    effectiveness: float
    effectiveness_tier: str
    spending_tier: str
    backfire_probability: float
    backfire_occurred: bool
    target_polling_shift: float
    attacker_polling_shift: float
    attacker_reputation_delta: int


class CounterAdResultModel(BaseModel):
    ad_id: UUID
    counter_effectiveness: float
    target_polling_shift: float


class CampaignStateModel(BaseModel):
    """Campaign cycle as sent to the client, countdown included."""

    campaign_id: UUID
    candidate_id: UUID
    cycle_sequence: int
    active_phase: CampaignPhaseModel
    status: CampaignStatusModel
    phase_ends_epoch: float
    reputation_score: int
    funds_raised_this_cycle: float
    endorsements_acquired: int
    scandals_active: int
    resolved_this_cycle: bool
    countdown: ElectionCountdownModel


class ElectionResolutionModel(BaseModel):
    outcome: ElectionOutcomeModel
    campaign: CampaignStateModel


class NegativeAdLaunchResultModel(BaseModel):
    ad_id: UUID
    analysis: NegativeAdAnalysisModel
