from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from campaign_sim.authentication.basic_authentication import basic_auth
from campaign_sim.models.basic_authentication_models import UserModel
from campaign_sim.models.dc_models import (
    CounterAdRequestModel,
    CounterAdResultModel,
    NegativeAdLaunchResultModel,
    NegativeAdRequestModel,
    NegativeAdValidationModel,
    NegativeAdValidationResultModel,
    ResearchModel,
)
from campaign_sim.models.schema_models import NegativeAdSchema, OppositionResearchSchema
from campaign_sim.publisher import CampaignPublisher, get_publisher
from campaign_sim.routers.dependencies import domain_errors, get_negative_ad_service
from campaign_sim.services.negative_ads import NegativeAdService

negative_ad_router = APIRouter()


class NegativeAdAPI:

    @negative_ad_router.post("/negative-ads/validate", response_model=NegativeAdValidationResultModel)
    async def validate_negative_ad(
        request: NegativeAdValidationModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: NegativeAdService = Depends(get_negative_ad_service),
    ):
        return await service.validate_negative_ad(
            request.research_id, request.amount_spent, request.budget, request.campaign_phase
        )

    @negative_ad_router.post(
        "/negative-ads",
        response_model=NegativeAdLaunchResultModel,
        status_code=status.HTTP_201_CREATED,
    )
    async def launch_negative_ad(
        request: NegativeAdRequestModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: NegativeAdService = Depends(get_negative_ad_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        with domain_errors():
            ad, analysis = await service.launch_negative_ad(user_data.username, request)
        await publisher.publish(ad.attacker_id, "negative_ad_launched")
        await publisher.publish(ad.target_id, "negative_ad_received")
        return NegativeAdLaunchResultModel(ad_id=ad.ad_id, analysis=analysis)

    @negative_ad_router.post("/negative-ads/{ad_id}/counter", response_model=CounterAdResultModel)
    async def counter_negative_ad(
        ad_id: UUID,
        request: CounterAdRequestModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: NegativeAdService = Depends(get_negative_ad_service),
        publisher: CampaignPublisher = Depends(get_publisher),
    ):
        with domain_errors():
            result = await service.counter_negative_ad(user_data.username, ad_id, request)
            ad = await service.campaign_db.read_negative_ad(ad_id)
        await publisher.publish(ad.target_id, "negative_ad_countered")
        await publisher.publish(ad.attacker_id, "negative_ad_countered")
        return result

    @negative_ad_router.get("/negative-ads", response_model=List[NegativeAdSchema])
    async def list_negative_ads(
        attacker_id: UUID,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: NegativeAdService = Depends(get_negative_ad_service),
    ):
        return await service.list_negative_ads(attacker_id)


class ResearchAPI:

    @negative_ad_router.post(
        "/research",
        response_model=OppositionResearchSchema,
        status_code=status.HTTP_201_CREATED,
    )
    async def create_research(
        request: ResearchModel,
        user_data: UserModel = Depends(basic_auth.check_user_data),
        service: NegativeAdService = Depends(get_negative_ad_service),
    ):
        with domain_errors():
            return await service.create_research(user_data.username, request)
