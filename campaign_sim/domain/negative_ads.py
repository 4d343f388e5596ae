"""Negative campaigning sub-model (attack ads).

Pure calculation chain run once per ad launch:
validate -> credibility -> ethics penalty -> voter fatigue -> effectiveness
-> backfire probability/roll -> polling shifts.

The backfire roll is hash-derived from "{attacker_seed}-negative-ad-{ad_id}",
so a stored ad record always replays to the same backfire decision.
"""

import math
from typing import Sequence
from uuid import UUID

from campaign_sim.domain.errors import ValidationError
from campaign_sim.domain.hash_source import derive_seed, fnv1a_32, unit_interval
from campaign_sim.domain.win_probability import clamp
from campaign_sim.models.dc_models import (
    CampaignPhaseModel,
    NegativeAdAnalysisModel,
    NegativeAdValidationResultModel,
)

AD_SPEND_MIN = 25000.0
AD_SPEND_MAX = 250000.0
TRAILING_WINDOW_DAYS = 14
SECONDS_PER_DAY = 86400

DEFAULT_CREDIBILITY = 50.0
UNRESEARCHED_CEILING = 60.0
BASE_EFFECTIVENESS = 60.0
POLLING_SCALE = 0.1
ATTACKER_SELF_HARM = 0.1
BACKFIRE_TARGET_SYMPATHY = 0.25
BACKFIRE_ATTACKER_AMPLIFIER = 1.5
BACKFIRE_REPUTATION_HIT = 5
MAX_BACKFIRE_PROBABILITY = 0.95

LEGAL_AD_PHASES = (
    CampaignPhaseModel.ANNOUNCEMENT,
    CampaignPhaseModel.FUNDRAISING,
    CampaignPhaseModel.ACTIVE,
    CampaignPhaseModel.RESOLUTION,
)

PHASE_EFFECTIVENESS = {
    CampaignPhaseModel.ANNOUNCEMENT: 0.5,
    CampaignPhaseModel.FUNDRAISING: 0.8,
    CampaignPhaseModel.ACTIVE: 1.2,
    CampaignPhaseModel.RESOLUTION: 1.0,
}

# (minimum spend, name, nominal multiplier), highest first.
SPENDING_TIERS = [
    (250000, "Saturation", 1.5),
    (100000, "Major Campaign", 1.3),
    (50000, "Standard Attack", 1.0),
    (25000, "Minimal Ad", 0.7),
]


# ==============================================================================
# ==== Validation ==============================================================
# ==============================================================================


def validate_negative_ad(
    amount_spent: float,
    budget: float,
    campaign_phase: str,
) -> NegativeAdValidationResultModel:
    """Collect every reason the launch request is invalid (empty list when valid)."""
    errors = []
    if not AD_SPEND_MIN <= amount_spent <= AD_SPEND_MAX:
        errors.append(
            f"Ad spend must be between ${AD_SPEND_MIN:,.0f} and ${AD_SPEND_MAX:,.0f}"
        )
    if not amount_spent <= budget:
        errors.append("Insufficient budget for this ad spend")
    if campaign_phase not in [phase.value for phase in LEGAL_AD_PHASES]:
        errors.append(f"Negative ads cannot be launched during phase: {campaign_phase}")
    return NegativeAdValidationResultModel(is_valid=not errors, errors=errors)


def ensure_valid_negative_ad(amount_spent: float, budget: float, campaign_phase: str) -> None:
    result = validate_negative_ad(amount_spent, budget, campaign_phase)
    if not result.is_valid:
        raise ValidationError("; ".join(result.errors), result.errors)


# ==============================================================================
# ==== Factors =================================================================
# ==============================================================================


def resolve_credibility(research_credibility: float | None) -> float:
    if research_credibility is None:
        return DEFAULT_CREDIBILITY
    return clamp(research_credibility)


def recent_ad_stats(launched_epochs: Sequence[float], now: float) -> tuple[int, float | None]:
    """Count ads inside the trailing window and the days since the latest one."""
    window_start = now - TRAILING_WINDOW_DAYS * SECONDS_PER_DAY
    recent = [epoch for epoch in launched_epochs if window_start <= epoch <= now]
    if not recent:
        return 0, None
    return len(recent), (now - max(recent)) / SECONDS_PER_DAY


def is_counter_attack(incoming_epochs: Sequence[float], now: float) -> bool:
    """True when the target attacked us inside the trailing window."""
    count, _ = recent_ad_stats(incoming_epochs, now)
    return count > 0


def ethics_penalty(credibility: float, previous_ad_count: int, counter_attack: bool) -> float:
    """Low credibility and repeated attacks raise the penalty; counters halve it."""
    penalty = (100 - clamp(credibility)) * 0.4 + min(40, previous_ad_count * 8)
    if counter_attack:
        penalty *= 0.5
    return clamp(penalty)


def voter_fatigue(previous_ad_count: int, days_since_last_ad: float | None) -> float:
    frequency = min(60, previous_ad_count * 12)
    recency = 0.0
    if previous_ad_count > 0 and days_since_last_ad is not None:
        recency = max(0.0, 40 - days_since_last_ad * (40 / TRAILING_WINDOW_DAYS))
    return clamp(frequency + recency)


def spend_multiplier(amount_spent: float) -> float:
    """0.7x at the floor, 1.5x at the ceiling, logarithmic in between."""
    amount = min(max(amount_spent, AD_SPEND_MIN), AD_SPEND_MAX)
    span = math.log10(AD_SPEND_MAX / AD_SPEND_MIN)
    return 0.7 + 0.8 * math.log10(amount / AD_SPEND_MIN) / span


def spending_tier(amount_spent: float) -> str:
    for minimum, name, _ in SPENDING_TIERS:
        if amount_spent >= minimum:
            return name
    return SPENDING_TIERS[-1][1]


def effectiveness(
    research_credibility: float | None,
    amount_spent: float,
    campaign_phase: CampaignPhaseModel,
    ethics: float,
    fatigue: float,
) -> float:
    """Attack effectiveness 0..100.

    Unresearched ads use average quality and cannot exceed 60.
    """
    if research_credibility is None:
        quality, ceiling = DEFAULT_CREDIBILITY / 100, UNRESEARCHED_CEILING
    else:
        quality, ceiling = clamp(research_credibility) / 100, 100.0
    raw = (
        BASE_EFFECTIVENESS
        * quality
        * spend_multiplier(amount_spent)
        * PHASE_EFFECTIVENESS.get(campaign_phase, 0.0)
    )
    return clamp(raw - ethics * 0.3 - fatigue * 0.4, 0.0, ceiling)


def effectiveness_tier(value: float) -> str:
    if value >= 75:
        return "Devastating"
    if value >= 50:
        return "Strong"
    if value >= 25:
        return "Moderate"
    return "Weak"


def backfire_probability(credibility: float, ethics: float, countered: bool = False) -> float:
    probability = 0.05 + (100 - clamp(credibility)) / 100 * 0.35 + clamp(ethics) / 100 * 0.3
    if countered:
        probability *= 0.5
    return clamp(probability, 0.0, MAX_BACKFIRE_PROBABILITY)


def backfire_seed(attacker_seed: str, ad_id: UUID) -> str:
    return derive_seed(attacker_seed, "negative-ad", ad_id)


def roll_backfire(probability: float, seed: str) -> bool:
    return unit_interval(fnv1a_32(seed)) < probability


def polling_impact(effectiveness_value: float, backfired: bool) -> tuple[float, float]:
    """Return (target shift, attacker shift) in percentage points."""
    base = effectiveness_value * POLLING_SCALE
    if backfired:
        return base * BACKFIRE_TARGET_SYMPATHY, -base * BACKFIRE_ATTACKER_AMPLIFIER
    return -base, -base * ATTACKER_SELF_HARM


def reputation_delta(ethics: float, backfired: bool) -> int:
    delta = -round(ethics / 10)
    if backfired:
        delta -= BACKFIRE_REPUTATION_HIT
    return delta


def shifted_support(base_support: float, shift: float) -> float:
    return clamp(base_support + shift)


# ==============================================================================
# ==== Launch / counter ========================================================
# ==============================================================================


def analyze_negative_ad(
    *,
    ad_id: UUID,
    attacker_seed: str,
    research_credibility: float | None,
    amount_spent: float,
    campaign_phase: CampaignPhaseModel,
    previous_ad_count: int,
    days_since_last_ad: float | None,
    counter_attack: bool,
) -> NegativeAdAnalysisModel:
    """Run the whole calculation chain for a launch that already passed validation."""
    credibility = resolve_credibility(research_credibility)
    ethics = ethics_penalty(credibility, previous_ad_count, counter_attack)
    fatigue = voter_fatigue(previous_ad_count, days_since_last_ad)
    effect = effectiveness(research_credibility, amount_spent, campaign_phase, ethics, fatigue)
    probability = backfire_probability(credibility, ethics)
    backfired = roll_backfire(probability, backfire_seed(attacker_seed, ad_id))
    target_shift, attacker_shift = polling_impact(effect, backfired)
    return NegativeAdAnalysisModel(
        credibility=credibility,
        is_counter_attack=counter_attack,
        previous_negative_ad_count=previous_ad_count,
        ethics_penalty=ethics,
        voter_fatigue=fatigue,
        effectiveness=effect,
        effectiveness_tier=effectiveness_tier(effect),
        spending_tier=spending_tier(amount_spent),
        backfire_probability=probability,
        backfire_occurred=backfired,
        target_polling_shift=target_shift,
        attacker_polling_shift=attacker_shift,
        attacker_reputation_delta=reputation_delta(ethics, backfired),
    )


def counter_effectiveness(amount_spent: float, original_effectiveness: float) -> float:
    """Weak attacks are easier to rebut; spend scales the response like an ad."""
    return clamp(40 * spend_multiplier(amount_spent) + (100 - clamp(original_effectiveness)) * 0.2)


def counter_recovery(original_effectiveness: float, original_backfired: bool, counter_value: float) -> float:
    """Polling points the target wins back by answering the ad (none after a backfire)."""
    target_shift, _ = polling_impact(original_effectiveness, original_backfired)
    return max(0.0, -target_shift) * counter_value / 100
