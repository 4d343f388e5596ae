"""Election resolution rules that are independent from HTTP and DB.

Rule of thumb:
- OK: probability + hash roll -> outcome, tiering, reward lookup, countdown math.
- Not OK: touching DB sessions, Redis, FastAPI, datetime.now(), random.
"""

import math

from campaign_sim.domain.errors import PreconditionError
from campaign_sim.domain.hash_source import (
    derive_seed,
    fnv1a_32,
    roll_percent,
    variance_points,
)
from campaign_sim.domain.win_probability import clamp
from campaign_sim.models.dc_models import (
    CampaignPhaseModel,
    CampaignStatusModel,
    ElectionCountdownModel,
    ElectionOutcomeModel,
    OutcomeTierModel,
    RewardsModel,
)
from campaign_sim.models.schema_models import CampaignCycleSchema

LANDSLIDE_THRESHOLD = 60.0
COMFORTABLE_THRESHOLD = 55.0

REWARD_TABLE = {
    OutcomeTierModel.LANDSLIDE: RewardsModel(funds=10000, reputation=15, influence_points=500),
    OutcomeTierModel.COMFORTABLE: RewardsModel(funds=7500, reputation=10, influence_points=350),
    OutcomeTierModel.NARROW: RewardsModel(funds=5000, reputation=5, influence_points=200),
    OutcomeTierModel.LOSS: RewardsModel(funds=0, reputation=-10, influence_points=0),
}


def election_seed(cycle: CampaignCycleSchema) -> str:
    return derive_seed(cycle.seed, "election", cycle.cycle_sequence)


def is_win(probability: float, roll: int) -> bool:
    """Ties go to the house: the candidate wins only when probability beats the roll."""
    return probability > roll


def outcome_tier(won: bool, final_vote_percent: float) -> OutcomeTierModel:
    if not won:
        return OutcomeTierModel.LOSS
    if final_vote_percent >= LANDSLIDE_THRESHOLD:
        return OutcomeTierModel.LANDSLIDE
    if final_vote_percent >= COMFORTABLE_THRESHOLD:
        return OutcomeTierModel.COMFORTABLE
    return OutcomeTierModel.NARROW


def rewards_for(tier: OutcomeTierModel) -> RewardsModel:
    return REWARD_TABLE[tier].model_copy()


def outcome_from_hash(probability: float, h: int) -> tuple[int, bool, float, OutcomeTierModel]:
    """Turn a probability and a hash value into (roll, won, final vote %, tier)."""
    probability = clamp(probability)
    roll = roll_percent(h)
    won = is_win(probability, roll)
    final_vote_percent = clamp(probability + variance_points(h))
    return roll, won, final_vote_percent, outcome_tier(won, final_vote_percent)


def resolve_election(cycle: CampaignCycleSchema, probability: float) -> ElectionOutcomeModel:
    """Deterministically resolve the election for the given cycle.

    The roll is derived from "{seed}-election-{cycle_sequence}", so the same
    stored cycle and probability always produce the same outcome.

    Args:
        cycle (CampaignCycleSchema): The cycle being resolved
        probability (float): Output of the win-probability model

    Returns:
        ElectionOutcomeModel: won/tier/final vote share and the reward entry
    """
    h = fnv1a_32(election_seed(cycle))
    roll, won, final_vote_percent, tier = outcome_from_hash(probability, h)
    return ElectionOutcomeModel(
        candidate_id=cycle.candidate_id,
        campaign_id=cycle.campaign_id,
        cycle_sequence=cycle.cycle_sequence,
        probability=clamp(probability),
        roll=roll,
        won=won,
        outcome_tier=tier,
        final_vote_percent=final_vote_percent,
        rewards=rewards_for(tier),
    )


def resolved_this_cycle(cycle: CampaignCycleSchema) -> bool:
    return cycle.last_resolved_sequence == cycle.cycle_sequence


def can_resolve_election(cycle: CampaignCycleSchema, now: float) -> bool:
    return (
        cycle.active_phase == CampaignPhaseModel.ELECTION
        and cycle.status == CampaignStatusModel.RUNNING
        and now >= cycle.phase_ends_epoch
        and not resolved_this_cycle(cycle)
    )


def ensure_can_resolve(cycle: CampaignCycleSchema, now: float) -> None:
    """Raise PreconditionError with the first reason resolution is not legal."""
    if cycle.active_phase != CampaignPhaseModel.ELECTION:
        raise PreconditionError(
            f"Election can only be resolved in ELECTION phase, not {cycle.active_phase.value}"
        )
    if resolved_this_cycle(cycle):
        raise PreconditionError(f"Cycle {cycle.cycle_sequence} has already been resolved")
    if cycle.status != CampaignStatusModel.RUNNING:
        raise PreconditionError(f"Campaign is {cycle.status.value}, not RUNNING")
    if now < cycle.phase_ends_epoch:
        raise PreconditionError("Election countdown has not expired yet")


def election_countdown(cycle: CampaignCycleSchema, now: float) -> ElectionCountdownModel:
    remaining = max(0.0, cycle.phase_ends_epoch - now)
    total_minutes = math.ceil(remaining / 60)
    return ElectionCountdownModel(
        hours_remaining=total_minutes // 60,
        minutes_remaining=total_minutes % 60,
        can_resolve=can_resolve_election(cycle, now),
    )


def apply_reputation_delta(reputation_score: int, delta: int) -> int:
    return int(clamp(reputation_score + delta))
