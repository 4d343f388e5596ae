import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from campaign_sim.authentication.basic_authentication import basic_auth
from campaign_sim.converter import DataConverter
from campaign_sim.models.basic_authentication_models import UserModel
from campaign_sim.models.dc_models import (
    ActionValidationModel,
    CampaignActivityModel,
    CampaignCreateModel,
    CampaignStateModel,
    ElectionCountdownModel,
    PollingSampleModel,
    WinProbabilityModel,
)
from campaign_sim.models.schema_models import CampaignCycleSchema, PollingSampleSchema
from campaign_sim.publisher import CampaignPublisher, get_publisher
from campaign_sim.routers.dependencies import (
    domain_errors,
    get_campaign_service,
    get_election_service,
)
from campaign_sim.services.campaign import CampaignService
from campaign_sim.services.election import ElectionService

campaign_router = APIRouter()
data_converter = DataConverter()


def to_state(service: CampaignService, cycle: CampaignCycleSchema) -> CampaignStateModel:
    return data_converter.convert_campaignschema_to_statemodel(cycle, service.clock())


class CampaignAPI:

    @campaign_router.post("/campaigns", response_model=CampaignStateModel, status_code=status.HTTP_201_CREATED)
    async def create_campaign(
        request: CampaignCreateModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        with domain_errors():
            cycle = await service.create_campaign(user_data.username, request)
        await publisher.publish(cycle.candidate_id, "campaign_created")
        return to_state(service, cycle)

    @campaign_router.get("/campaigns/{campaign_id}", response_model=CampaignStateModel)
    async def get_campaign(
        campaign_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
    ):
        with domain_errors():
            cycle = await service.read_campaign(campaign_id, user_data.username)
        return to_state(service, cycle)

    @campaign_router.post("/campaigns/{campaign_id}/advance", response_model=CampaignStateModel)
    async def advance_phase(
        campaign_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        with domain_errors():
            cycle = await service.advance_phase(campaign_id, user_data.username)
        await publisher.publish(cycle.candidate_id, "phase_changed")
        return to_state(service, cycle)

    @campaign_router.post("/campaigns/{campaign_id}/pause", response_model=CampaignStateModel)
    async def pause_campaign(
        campaign_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        with domain_errors():
            cycle = await service.pause(campaign_id, user_data.username)
        await publisher.publish(cycle.candidate_id, "paused")
        return to_state(service, cycle)

    @campaign_router.post("/campaigns/{campaign_id}/resume", response_model=CampaignStateModel)
    async def resume_campaign(
        campaign_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        with domain_errors():
            cycle = await service.resume(campaign_id, user_data.username)
        await publisher.publish(cycle.candidate_id, "resumed")
        return to_state(service, cycle)

    @campaign_router.post("/campaigns/{campaign_id}/withdraw", response_model=CampaignStateModel)
    async def withdraw_campaign(
        campaign_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        with domain_errors():
            cycle = await service.withdraw(campaign_id, user_data.username)
        await publisher.publish(cycle.candidate_id, "withdrawn")
        return to_state(service, cycle)

    @campaign_router.post("/campaigns/{campaign_id}/next-cycle", response_model=CampaignStateModel)
    async def start_next_cycle(
        campaign_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        with domain_errors():
            cycle = await service.start_next_cycle(campaign_id, user_data.username)
        await publisher.publish(cycle.candidate_id, "cycle_started")
        return to_state(service, cycle)

    @campaign_router.post("/campaigns/{campaign_id}/activity", response_model=CampaignStateModel)
    async def record_activity(
        campaign_id: UUID,
        activity: CampaignActivityModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
    ):
        with domain_errors():
            cycle = await service.record_activity(campaign_id, user_data.username, activity)
        return to_state(service, cycle)

    @campaign_router.get("/campaigns/{campaign_id}/validate-action", response_model=ActionValidationModel)
    async def validate_action(
        campaign_id: UUID,
        action: str,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
    ):
        with domain_errors():
            return await service.validate_action(campaign_id, user_data.username, action)


class CandidateAPI:

    @campaign_router.post(
        "/candidates/{candidate_id}/polling",
        response_model=PollingSampleSchema,
        status_code=status.HTTP_201_CREATED,
    )
    async def add_polling_sample(
        candidate_id: UUID,
        sample: PollingSampleModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
    ):
        with domain_errors():
            stored = await service.append_polling_sample(
                candidate_id, user_data.username, sample.final_support_percent
            )
        logging.info(f"Polling sample for {candidate_id}: {stored.final_support_percent:.1f}%")
        return stored

    @campaign_router.get("/candidates/{candidate_id}/polling", response_model=List[PollingSampleSchema])
    async def get_polling(
        candidate_id: UUID,
        limit: int = 5,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: CampaignService = Depends(get_campaign_service),
    ):
        return await service.list_polling(candidate_id, limit)

    @campaign_router.get("/candidates/{candidate_id}/win-probability", response_model=WinProbabilityModel)
    async def get_win_probability(
        candidate_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: ElectionService = Depends(get_election_service),
    ):
        with domain_errors():
            return await service.compute_win_probability(candidate_id)

    @campaign_router.get("/candidates/{candidate_id}/countdown", response_model=ElectionCountdownModel)
    async def get_election_countdown(
        candidate_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: ElectionService = Depends(get_election_service),
    ):
        with domain_errors():
            cycle = await service.campaign_db.read_candidate_campaign(candidate_id)
        return service.get_election_countdown(cycle)
