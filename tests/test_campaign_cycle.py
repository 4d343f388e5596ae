"""Tests for the campaign phase machine."""

import pytest

from campaign_sim.domain import campaign_cycle
from campaign_sim.domain.errors import PreconditionError
from campaign_sim.models.dc_models import (
    CampaignActivityModel,
    CampaignPhaseModel,
    CampaignStatusModel,
)

from conftest import START_EPOCH

HOUR = 3600


class TestPhaseOrder:
    def test_next_phase(self):
        assert campaign_cycle.next_phase(CampaignPhaseModel.ANNOUNCEMENT) == CampaignPhaseModel.FUNDRAISING
        assert campaign_cycle.next_phase(CampaignPhaseModel.RESOLUTION) == CampaignPhaseModel.ELECTION
        assert campaign_cycle.next_phase(CampaignPhaseModel.ELECTION) is None

    def test_initial_fields(self):
        fields = campaign_cycle.initial_cycle_fields(START_EPOCH, 70)
        assert fields["cycle_sequence"] == 1
        assert fields["active_phase"] == "ANNOUNCEMENT"
        assert fields["phase_ends_epoch"] == START_EPOCH + 4 * HOUR
        assert fields["reputation_score"] == 70


class TestAdvance:
    def test_timer_must_expire(self, make_cycle):
        cycle = make_cycle()
        with pytest.raises(PreconditionError):
            campaign_cycle.advance_phase(cycle, START_EPOCH + 4 * HOUR - 1)

    def test_moves_exactly_one_phase(self, make_cycle):
        cycle = make_cycle()
        now = START_EPOCH + 5 * HOUR
        fields = campaign_cycle.advance_phase(cycle, now)
        assert fields == {"active_phase": "FUNDRAISING", "phase_ends_epoch": now + 8 * HOUR}

    def test_election_is_terminal(self, make_cycle):
        cycle = make_cycle(active_phase="ELECTION", phase_ends_epoch=START_EPOCH)
        with pytest.raises(PreconditionError):
            campaign_cycle.advance_phase(cycle, START_EPOCH + HOUR)

    def test_paused_campaign_does_not_advance(self, make_cycle):
        cycle = make_cycle(status="PAUSED", phase_ends_epoch=START_EPOCH)
        with pytest.raises(PreconditionError):
            campaign_cycle.advance_phase(cycle, START_EPOCH + HOUR)


class TestPauseResumeWithdraw:
    def test_resume_shifts_the_timer_by_the_pause(self, make_cycle):
        cycle = make_cycle()
        paused = make_cycle(**campaign_cycle.pause(cycle, START_EPOCH + 600))
        assert paused.status == CampaignStatusModel.PAUSED

        fields = campaign_cycle.resume(paused, START_EPOCH + 1800)
        assert fields["status"] == "RUNNING"
        assert fields["phase_ends_epoch"] == cycle.phase_ends_epoch + 1200

    def test_cannot_resume_running(self, make_cycle):
        with pytest.raises(PreconditionError):
            campaign_cycle.resume(make_cycle(), START_EPOCH)

    def test_withdraw_before_resolution(self, make_cycle):
        fields = campaign_cycle.withdraw(make_cycle(active_phase="ACTIVE"), START_EPOCH)
        assert fields["status"] == "WITHDRAWN"

    @pytest.mark.parametrize("phase", ["RESOLUTION", "ELECTION"])
    def test_withdraw_blocked_late(self, make_cycle, phase):
        with pytest.raises(PreconditionError):
            campaign_cycle.withdraw(make_cycle(active_phase=phase), START_EPOCH)


class TestNextCycle:
    def test_requires_resolution(self, make_cycle):
        with pytest.raises(PreconditionError):
            campaign_cycle.start_next_cycle(make_cycle(active_phase="ELECTION"), START_EPOCH)

    def test_after_resolution(self, make_cycle):
        cycle = make_cycle(
            active_phase="ELECTION",
            status="COMPLETED",
            last_resolved_sequence=1,
            funds_raised_this_cycle=5000,
            endorsements_acquired=4,
            scandals_active=1,
            reputation_score=77,
        )
        fields = campaign_cycle.start_next_cycle(cycle, START_EPOCH)
        assert fields["cycle_sequence"] == 2
        assert fields["active_phase"] == "ANNOUNCEMENT"
        assert fields["status"] == "RUNNING"
        assert fields["funds_raised_this_cycle"] == 0.0
        assert fields["endorsements_acquired"] == 0
        assert fields["scandals_active"] == 0
        assert "reputation_score" not in fields

    def test_after_withdrawal(self, make_cycle):
        cycle = make_cycle(status="WITHDRAWN")
        assert campaign_cycle.can_start_next_cycle(cycle) is True


class TestActions:
    def test_allowed_action(self, make_cycle):
        result = campaign_cycle.validate_action(make_cycle(), "declare_candidacy")
        assert result.allowed is True
        assert "initial_donor_outreach" in result.allowed_actions

    def test_action_from_another_phase(self, make_cycle):
        result = campaign_cycle.validate_action(make_cycle(), "conduct_rally")
        assert result.allowed is False
        assert "ANNOUNCEMENT" in result.reason

    def test_not_running(self, make_cycle):
        result = campaign_cycle.validate_action(make_cycle(status="WITHDRAWN"), "declare_candidacy")
        assert result.allowed is False

    def test_activity_accumulates(self, make_cycle):
        cycle = make_cycle(active_phase="FUNDRAISING", funds_raised_this_cycle=1000, endorsements_acquired=1)
        activity = CampaignActivityModel(action="host_fundraising_event", funds_raised=2500, endorsements=2)
        fields = campaign_cycle.accumulate_activity(cycle, activity)
        assert fields["funds_raised_this_cycle"] == 3500
        assert fields["endorsements_acquired"] == 3
        assert fields["scandals_active"] == 0

    def test_disallowed_activity(self, make_cycle):
        activity = CampaignActivityModel(action="gotv_operations", funds_raised=100)
        with pytest.raises(PreconditionError):
            campaign_cycle.accumulate_activity(make_cycle(), activity)
