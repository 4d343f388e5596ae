"""Multi-factor win-probability model.

Five factor scores (each 0..100) are combined with fixed weights into a single
0..100 probability. Pure read: the caller supplies the cycle snapshot, the
recent polling support values and the debate score.
"""

from typing import Sequence
from uuid import UUID

import numpy as np

from campaign_sim.models.dc_models import FactorScoresModel, WinProbabilityModel
from campaign_sim.models.schema_models import CampaignCycleSchema

RECENT_POLL_COUNT = 5
DEFAULT_POLLING = 50.0
DEFAULT_DEBATE_SCORE = 50.0
FUNDS_FOR_FULL_SCORE = 10000.0
POINTS_PER_ENDORSEMENT = 10.0

# Order matters: it must match factor_vector().
FACTOR_NAMES = ("polling", "reputation", "funds", "endorsements", "debates")
FACTOR_WEIGHTS = np.array([0.50, 0.20, 0.15, 0.10, 0.05])


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp to [low, high]; NaN degrades to `low`."""
    if value is None or np.isnan(value):
        return low
    return float(np.clip(value, low, high))


def average_polling(recent_support: Sequence[float]) -> float:
    """Average of the most recent samples (newest first); 50 when none exist."""
    window = list(recent_support)[:RECENT_POLL_COUNT]
    if not window:
        return DEFAULT_POLLING
    return float(np.mean(window))


def factor_scores(
    cycle: CampaignCycleSchema,
    recent_support: Sequence[float],
    debate_score: float | None = None,
) -> FactorScoresModel:
    if debate_score is None:
        debate_score = DEFAULT_DEBATE_SCORE
    return FactorScoresModel(
        polling=clamp(average_polling(recent_support)),
        reputation=clamp(cycle.reputation_score),
        funds=clamp(min(100.0, cycle.funds_raised_this_cycle / FUNDS_FOR_FULL_SCORE * 100)),
        endorsements=clamp(min(100.0, cycle.endorsements_acquired * POINTS_PER_ENDORSEMENT)),
        debates=clamp(debate_score),
    )


def factor_vector(factors: FactorScoresModel) -> np.ndarray:
    return np.array([getattr(factors, name) for name in FACTOR_NAMES], dtype=np.float64)


def compute_win_probability(
    candidate_id: UUID,
    cycle: CampaignCycleSchema,
    recent_support: Sequence[float],
    debate_score: float | None = None,
) -> WinProbabilityModel:
    """Weighted sum of the five factors, clamped to [0, 100].

    Args:
        candidate_id (UUID): Candidate being evaluated
        cycle (CampaignCycleSchema): Current campaign cycle snapshot
        recent_support (Sequence[float]): finalSupportPercent values, newest first
        debate_score (float | None): Debate performance, 50 when unknown

    Returns:
        WinProbabilityModel: probability and the factor breakdown
    """
    factors = factor_scores(cycle, recent_support, debate_score)
    probability = clamp(float(np.dot(FACTOR_WEIGHTS, factor_vector(factors))))
    return WinProbabilityModel(
        candidate_id=candidate_id,
        probability=probability,
        factors=factors,
    )
