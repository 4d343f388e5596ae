"""Service wiring and error translation shared by the routers.

Tests replace the `get_*` providers through `app.dependency_overrides`.
"""

from contextlib import contextmanager

from fastapi import HTTPException, status

from campaign_sim.db import Session
from campaign_sim.domain.errors import (
    CampaignEngineError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from campaign_sim.services.campaign import CampaignService
from campaign_sim.services.campaign_db import CampaignDB
from campaign_sim.services.consequences import ConsequenceApplier
from campaign_sim.services.election import ElectionService
from campaign_sim.services.negative_ads import NegativeAdService

ERROR_STATUS = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PreconditionError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
}

campaign_db = CampaignDB(Session)
applier = ConsequenceApplier(Session)


def to_http_exception(error: CampaignEngineError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status_code, detail=error.errors)
    return HTTPException(status_code=status_code, detail=error.message)


@contextmanager
def domain_errors():
    """Re-raise engine errors as HTTPException inside a route body."""
    try:
        yield
    except CampaignEngineError as e:
        raise to_http_exception(e) from e


def get_campaign_service() -> CampaignService:
    return CampaignService(campaign_db, applier)


def get_election_service() -> ElectionService:
    return ElectionService(campaign_db, applier)


def get_negative_ad_service() -> NegativeAdService:
    return NegativeAdService(campaign_db, applier)
