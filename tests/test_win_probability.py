"""Tests for the multi-factor win probability model."""

import math
from uuid import uuid4

import pytest

from campaign_sim.domain.win_probability import (
    DEFAULT_POLLING,
    average_polling,
    clamp,
    compute_win_probability,
    factor_scores,
)


class TestClamp:
    def test_bounds(self):
        assert clamp(-3) == 0.0
        assert clamp(130) == 100.0
        assert clamp(42.5) == 42.5

    def test_nan_and_none_degrade_to_low(self):
        assert clamp(math.nan) == 0.0
        assert clamp(None) == 0.0


class TestAveragePolling:
    def test_defaults_to_fifty_without_samples(self):
        assert average_polling([]) == DEFAULT_POLLING

    def test_uses_only_five_newest(self):
        # newest first; the sixth sample must be ignored
        assert average_polling([60, 60, 60, 60, 60, 0]) == pytest.approx(60.0)


class TestComputeWinProbability:
    def test_worked_example(self, make_cycle):
        cycle = make_cycle(reputation_score=80, funds_raised_this_cycle=20000, endorsements_acquired=8)
        result = compute_win_probability(cycle.candidate_id, cycle, [62, 62, 62], 50)

        assert result.probability == pytest.approx(72.5)
        assert result.factors.funds == 100.0
        assert result.factors.endorsements == 80.0
        assert result.factors.polling == pytest.approx(62.0)

    def test_debate_score_defaults_to_fifty(self, make_cycle):
        cycle = make_cycle()
        assert factor_scores(cycle, [], None).debates == 50.0

    def test_idempotent(self, make_cycle):
        cycle = make_cycle(reputation_score=65, funds_raised_this_cycle=1234, endorsements_acquired=3)
        first = compute_win_probability(cycle.candidate_id, cycle, [48, 51], 70)
        second = compute_win_probability(cycle.candidate_id, cycle, [48, 51], 70)
        assert first == second

    @pytest.mark.parametrize(
        "field, low, high",
        [
            ("funds_raised_this_cycle", 0, 9000),
            ("reputation_score", 10, 90),
            ("endorsements_acquired", 0, 5),
        ],
    )
    def test_monotonic_in_campaign_factors(self, make_cycle, field, low, high):
        candidate_id = uuid4()
        weaker = compute_win_probability(candidate_id, make_cycle(**{field: low}), [50], 50)
        stronger = compute_win_probability(candidate_id, make_cycle(**{field: high}), [50], 50)
        assert stronger.probability >= weaker.probability

    def test_probability_stays_in_bounds(self, make_cycle):
        extreme = make_cycle(reputation_score=100, funds_raised_this_cycle=1e9, endorsements_acquired=1000)
        top = compute_win_probability(extreme.candidate_id, extreme, [100] * 5, 100)
        bottom = compute_win_probability(extreme.candidate_id, make_cycle(reputation_score=0), [0] * 5, 0)
        assert top.probability == pytest.approx(100.0)
        assert bottom.probability == pytest.approx(0.0)
