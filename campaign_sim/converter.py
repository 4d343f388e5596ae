from campaign_sim.domain.election_rules import election_countdown, resolved_this_cycle
from campaign_sim.models.dc_models import CampaignStateModel
from campaign_sim.models.schema_models import CampaignCycleSchema


class DataConverter:
    """This class is used to convert stored rows into client models."""

    def convert_campaignschema_to_statemodel(self, cycle: CampaignCycleSchema, now: float) -> CampaignStateModel:
        """Convert the CampaignCycleSchema to the CampaignStateModel to send client

        Args:
            cycle (CampaignCycleSchema): The campaign cycle as stored
            now (float): Current epoch seconds, used for the countdown

        Returns:
            CampaignStateModel: Campaign state without owner/seed/version internals
        """
        return CampaignStateModel(
            campaign_id=cycle.campaign_id,
            candidate_id=cycle.candidate_id,
            cycle_sequence=cycle.cycle_sequence,
            active_phase=cycle.active_phase,
            status=cycle.status,
            phase_ends_epoch=cycle.phase_ends_epoch,
            reputation_score=cycle.reputation_score,
            funds_raised_this_cycle=cycle.funds_raised_this_cycle,
            endorsements_acquired=cycle.endorsements_acquired,
            scandals_active=cycle.scandals_active,
            resolved_this_cycle=resolved_this_cycle(cycle),
            countdown=election_countdown(cycle, now),
        )
