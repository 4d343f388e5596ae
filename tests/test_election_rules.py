"""Tests for election resolution, tiers, rewards and the countdown."""

import pytest

from campaign_sim.domain.election_rules import (
    apply_reputation_delta,
    can_resolve_election,
    election_countdown,
    ensure_can_resolve,
    is_win,
    outcome_from_hash,
    outcome_tier,
    resolve_election,
    rewards_for,
)
from campaign_sim.domain.errors import PreconditionError
from campaign_sim.models.dc_models import (
    CampaignPhaseModel,
    CampaignStatusModel,
    OutcomeTierModel,
    RewardsModel,
)

from conftest import START_EPOCH


class TestOutcomeFromHash:
    def test_winning_roll_gives_landslide(self):
        # roll = 1340 % 100 = 40, variance = 0.34 * 10 - 5 = -1.6
        roll, won, final, tier = outcome_from_hash(72.5, 1340)
        assert roll == 40
        assert won is True
        assert final == pytest.approx(70.9)
        assert tier == OutcomeTierModel.LANDSLIDE
        assert rewards_for(tier) == RewardsModel(funds=10000, reputation=15, influence_points=500)

    def test_losing_roll_is_loss_regardless_of_vote_share(self):
        roll, won, final, tier = outcome_from_hash(72.5, 1390)
        assert roll == 90
        assert won is False
        assert final > 60
        assert tier == OutcomeTierModel.LOSS
        assert rewards_for(tier) == RewardsModel(funds=0, reputation=-10, influence_points=0)

    def test_final_vote_is_clamped(self):
        _, _, high, _ = outcome_from_hash(99.0, 999)
        _, _, low, _ = outcome_from_hash(1.0, 0)
        assert high == 100.0
        assert low == 0.0


class TestTiers:
    def test_tie_goes_against_the_candidate(self):
        assert is_win(40.0, 40) is False
        assert is_win(40.01, 40) is True

    @pytest.mark.parametrize(
        "final, expected",
        [
            (60.0, OutcomeTierModel.LANDSLIDE),
            (59.99, OutcomeTierModel.COMFORTABLE),
            (55.0, OutcomeTierModel.COMFORTABLE),
            (54.99, OutcomeTierModel.NARROW),
            (20.0, OutcomeTierModel.NARROW),
        ],
    )
    def test_thresholds_for_wins(self, final, expected):
        assert outcome_tier(True, final) == expected

    def test_loss_ignores_vote_share(self):
        assert outcome_tier(False, 80.0) == OutcomeTierModel.LOSS

    def test_rewards_are_copies(self):
        rewards = rewards_for(OutcomeTierModel.NARROW)
        rewards.funds = 1
        assert rewards_for(OutcomeTierModel.NARROW).funds == 5000


class TestResolveElection:
    def test_deterministic_for_same_cycle(self, make_cycle):
        cycle = make_cycle(active_phase="ELECTION", cycle_sequence=3)
        assert resolve_election(cycle, 55.0) == resolve_election(cycle, 55.0)

    def test_won_outcomes_never_loss_and_losses_pay_nothing(self, make_cycle):
        for sequence in range(1, 40):
            outcome = resolve_election(make_cycle(cycle_sequence=sequence), 50.0)
            if outcome.won:
                assert outcome.outcome_tier != OutcomeTierModel.LOSS
            else:
                assert outcome.outcome_tier == OutcomeTierModel.LOSS
                assert outcome.rewards.funds == 0
                assert outcome.rewards.influence_points == 0
            assert 0.0 <= outcome.final_vote_percent <= 100.0

    def test_sequence_changes_the_roll_source(self, make_cycle):
        rolls = {resolve_election(make_cycle(cycle_sequence=n), 50.0).roll for n in range(1, 20)}
        assert len(rolls) > 1


class TestResolutionGate:
    def test_requires_election_phase(self, make_cycle):
        cycle = make_cycle(active_phase="RESOLUTION", phase_ends_epoch=START_EPOCH)
        assert can_resolve_election(cycle, START_EPOCH) is False
        with pytest.raises(PreconditionError):
            ensure_can_resolve(cycle, START_EPOCH)

    def test_requires_expired_countdown(self, make_cycle):
        cycle = make_cycle(active_phase="ELECTION", phase_ends_epoch=START_EPOCH + 60)
        assert can_resolve_election(cycle, START_EPOCH) is False
        assert can_resolve_election(cycle, START_EPOCH + 60) is True

    def test_rejects_already_resolved_cycle(self, make_cycle):
        cycle = make_cycle(
            active_phase="ELECTION",
            phase_ends_epoch=START_EPOCH,
            status=CampaignStatusModel.COMPLETED,
            last_resolved_sequence=1,
        )
        with pytest.raises(PreconditionError, match="already been resolved"):
            ensure_can_resolve(cycle, START_EPOCH)

    def test_rejects_paused_campaign(self, make_cycle):
        cycle = make_cycle(active_phase="ELECTION", phase_ends_epoch=START_EPOCH, status="PAUSED")
        with pytest.raises(PreconditionError):
            ensure_can_resolve(cycle, START_EPOCH)


class TestCountdown:
    def test_rounds_up_to_the_minute(self, make_cycle):
        cycle = make_cycle(active_phase=CampaignPhaseModel.ELECTION, phase_ends_epoch=START_EPOCH + 91 * 60 - 30)
        countdown = election_countdown(cycle, START_EPOCH)
        assert (countdown.hours_remaining, countdown.minutes_remaining) == (1, 31)
        assert countdown.can_resolve is False

    def test_expired(self, make_cycle):
        cycle = make_cycle(active_phase=CampaignPhaseModel.ELECTION, phase_ends_epoch=START_EPOCH - 10)
        countdown = election_countdown(cycle, START_EPOCH)
        assert (countdown.hours_remaining, countdown.minutes_remaining) == (0, 0)
        assert countdown.can_resolve is True


class TestReputation:
    @pytest.mark.parametrize(
        "start, delta, expected",
        [(50, 15, 65), (95, 15, 100), (3, -10, 0), (0, -10, 0), (100, 0, 100)],
    )
    def test_clamped(self, start, delta, expected):
        assert apply_reputation_delta(start, delta) == expected
