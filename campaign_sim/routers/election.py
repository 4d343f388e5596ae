from uuid import UUID

from fastapi import APIRouter, Depends

from campaign_sim.authentication.basic_authentication import basic_auth
from campaign_sim.converter import DataConverter
from campaign_sim.models.basic_authentication_models import UserModel
from campaign_sim.models.dc_models import ElectionResolutionModel
from campaign_sim.publisher import CampaignPublisher, get_publisher
from campaign_sim.routers.dependencies import domain_errors, get_election_service
from campaign_sim.services.election import ElectionService

election_router = APIRouter()
data_converter = DataConverter()


class ElectionAPI:

    @election_router.post("/elections/{campaign_id}/resolve", response_model=ElectionResolutionModel)
    async def resolve_election(
        campaign_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: ElectionService = Depends(get_election_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        """Resolve the campaign's election night and apply rewards, once per cycle.

        A second call for the same cycle answers 409.
        """
        with domain_errors():
            outcome, cycle = await service.resolve_and_apply(campaign_id, user_data.username)
        await publisher.publish(cycle.candidate_id, "election_resolved")
        return ElectionResolutionModel(
            outcome=outcome,
            campaign=data_converter.convert_campaignschema_to_statemodel(cycle, service.clock()),
        )
