"""Campaign cycle phase machine.

ANNOUNCEMENT -> FUNDRAISING -> ACTIVE -> RESOLUTION -> ELECTION, never backwards
within a cycle. Each transition function validates the current snapshot and
returns a dict of column updates; writing them is the consequence applier's job.
"""

from campaign_sim.domain.errors import PreconditionError
from campaign_sim.domain.election_rules import resolved_this_cycle
from campaign_sim.models.dc_models import (
    ActionValidationModel,
    CampaignActivityModel,
    CampaignPhaseModel,
    CampaignStatusModel,
)
from campaign_sim.models.schema_models import CampaignCycleSchema

SECONDS_PER_HOUR = 3600
STARTING_REPUTATION = 50

PHASE_ORDER = [
    CampaignPhaseModel.ANNOUNCEMENT,
    CampaignPhaseModel.FUNDRAISING,
    CampaignPhaseModel.ACTIVE,
    CampaignPhaseModel.RESOLUTION,
    CampaignPhaseModel.ELECTION,
]

PHASE_DURATION_HOURS = {
    CampaignPhaseModel.ANNOUNCEMENT: 4,
    CampaignPhaseModel.FUNDRAISING: 8,
    CampaignPhaseModel.ACTIVE: 10,
    CampaignPhaseModel.RESOLUTION: 4,
    CampaignPhaseModel.ELECTION: 4,
}

PHASE_GATED_ACTIONS = {
    CampaignPhaseModel.ANNOUNCEMENT: [
        "declare_candidacy",
        "build_exploratory_committee",
        "gather_petition_signatures",
        "initial_donor_outreach",
    ],
    CampaignPhaseModel.FUNDRAISING: [
        "host_fundraising_event",
        "donor_outreach",
        "pac_formation",
        "campaign_finance_filing",
        "build_campaign_infrastructure",
    ],
    CampaignPhaseModel.ACTIVE: [
        "purchase_advertising",
        "schedule_debate",
        "conduct_rally",
        "release_policy_position",
        "commission_polling",
        "voter_outreach",
        "media_appearances",
    ],
    CampaignPhaseModel.RESOLUTION: [
        "final_advertising_push",
        "gotv_operations",
        "last_minute_events",
        "monitor_early_voting",
    ],
    CampaignPhaseModel.ELECTION: [
        "monitor_returns",
        "prepare_concession_victory_speech",
    ],
}


def phase_index(phase: CampaignPhaseModel) -> int:
    return PHASE_ORDER.index(phase)


def next_phase(phase: CampaignPhaseModel) -> CampaignPhaseModel | None:
    index = phase_index(phase)
    if index + 1 >= len(PHASE_ORDER):
        return None
    return PHASE_ORDER[index + 1]


def phase_duration_seconds(phase: CampaignPhaseModel) -> float:
    return float(PHASE_DURATION_HOURS[phase] * SECONDS_PER_HOUR)


def initial_cycle_fields(now: float, reputation_score: int = STARTING_REPUTATION) -> dict:
    """Column values for a brand new campaign (cycle 1, ANNOUNCEMENT)."""
    return {
        "cycle_sequence": 1,
        "active_phase": CampaignPhaseModel.ANNOUNCEMENT.value,
        "status": CampaignStatusModel.RUNNING.value,
        "phase_ends_epoch": now + phase_duration_seconds(CampaignPhaseModel.ANNOUNCEMENT),
        "paused_at_epoch": None,
        "reputation_score": reputation_score,
        "funds_raised_this_cycle": 0.0,
        "endorsements_acquired": 0,
        "scandals_active": 0,
        "last_resolved_sequence": None,
        "version": 0,
    }


def advance_phase(cycle: CampaignCycleSchema, now: float) -> dict:
    """Move exactly one phase forward once the current phase timer has expired."""
    if cycle.status != CampaignStatusModel.RUNNING:
        raise PreconditionError(f"Cannot advance: campaign is {cycle.status.value}")
    upcoming = next_phase(cycle.active_phase)
    if upcoming is None:
        raise PreconditionError("ELECTION is the last phase; resolve the election instead")
    if now < cycle.phase_ends_epoch:
        raise PreconditionError(f"{cycle.active_phase.value} phase has not ended yet")
    return {
        "active_phase": upcoming.value,
        "phase_ends_epoch": now + phase_duration_seconds(upcoming),
    }


def pause(cycle: CampaignCycleSchema, now: float) -> dict:
    if cycle.status != CampaignStatusModel.RUNNING:
        raise PreconditionError(f"Cannot pause campaign with status: {cycle.status.value}")
    return {"status": CampaignStatusModel.PAUSED.value, "paused_at_epoch": now}


def resume(cycle: CampaignCycleSchema, now: float) -> dict:
    """Resume and push the phase timer back by the time spent paused."""
    if cycle.status != CampaignStatusModel.PAUSED or cycle.paused_at_epoch is None:
        raise PreconditionError(f"Cannot resume campaign with status: {cycle.status.value}")
    paused_for = max(0.0, now - cycle.paused_at_epoch)
    return {
        "status": CampaignStatusModel.RUNNING.value,
        "paused_at_epoch": None,
        "phase_ends_epoch": cycle.phase_ends_epoch + paused_for,
    }


def withdraw(cycle: CampaignCycleSchema, now: float) -> dict:
    if cycle.status in (CampaignStatusModel.COMPLETED, CampaignStatusModel.WITHDRAWN):
        raise PreconditionError(f"Cannot withdraw campaign with status: {cycle.status.value}")
    if phase_index(cycle.active_phase) >= phase_index(CampaignPhaseModel.RESOLUTION):
        raise PreconditionError(f"Cannot withdraw during {cycle.active_phase.value} phase")
    return {
        "status": CampaignStatusModel.WITHDRAWN.value,
        "paused_at_epoch": None,
        "phase_ends_epoch": now,
    }


def complete_election(cycle: CampaignCycleSchema, reputation_score: int, now: float) -> dict:
    """Column updates written together with the election rewards."""
    return {
        "reputation_score": reputation_score,
        "phase_ends_epoch": now,
        "status": CampaignStatusModel.COMPLETED.value,
        "last_resolved_sequence": cycle.cycle_sequence,
    }


def can_start_next_cycle(cycle: CampaignCycleSchema) -> bool:
    if cycle.status == CampaignStatusModel.WITHDRAWN:
        return True
    return cycle.status == CampaignStatusModel.COMPLETED and resolved_this_cycle(cycle)


def start_next_cycle(cycle: CampaignCycleSchema, now: float) -> dict:
    """Open cycle N+1. Reputation carries over; per-cycle accumulators reset."""
    if not can_start_next_cycle(cycle):
        raise PreconditionError("Current cycle must be resolved or withdrawn first")
    return {
        "cycle_sequence": cycle.cycle_sequence + 1,
        "active_phase": CampaignPhaseModel.ANNOUNCEMENT.value,
        "status": CampaignStatusModel.RUNNING.value,
        "phase_ends_epoch": now + phase_duration_seconds(CampaignPhaseModel.ANNOUNCEMENT),
        "paused_at_epoch": None,
        "funds_raised_this_cycle": 0.0,
        "endorsements_acquired": 0,
        "scandals_active": 0,
    }


def validate_action(cycle: CampaignCycleSchema, action: str) -> ActionValidationModel:
    if cycle.status != CampaignStatusModel.RUNNING:
        return ActionValidationModel(
            allowed=False,
            reason=f"Campaign is {cycle.status.value}, not running",
        )
    allowed_actions = PHASE_GATED_ACTIONS[cycle.active_phase]
    if action in allowed_actions:
        return ActionValidationModel(allowed=True, allowed_actions=allowed_actions)
    return ActionValidationModel(
        allowed=False,
        reason=f"Action '{action}' not permitted during {cycle.active_phase.value} phase",
        allowed_actions=allowed_actions,
    )


def accumulate_activity(cycle: CampaignCycleSchema, activity: CampaignActivityModel) -> dict:
    """Add an allowed activity's funds/endorsements/scandals to the cycle counters."""
    validation = validate_action(cycle, activity.action)
    if not validation.allowed:
        raise PreconditionError(validation.reason)
    return {
        "funds_raised_this_cycle": cycle.funds_raised_this_cycle + activity.funds_raised,
        "endorsements_acquired": cycle.endorsements_acquired + activity.endorsements,
        "scandals_active": cycle.scandals_active + activity.scandals,
    }
