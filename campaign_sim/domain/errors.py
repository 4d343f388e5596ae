"""Error taxonomy shared by the domain and service layers.

All of them are recoverable by the caller (re-fetch state and retry, or show
the message to the player). Routers translate them to HTTP statuses.
"""


class CampaignEngineError(Exception):
    """Base class for every error raised by the campaign engine."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or [message]


class ValidationError(CampaignEngineError):
    """Malformed or out-of-bounds input (ad spend, phase name, percentages...)."""


class PreconditionError(CampaignEngineError):
    """The campaign is not in a state that allows the operation."""


class NotFoundError(CampaignEngineError):
    """Unknown candidate, campaign, ad or research record."""


class ForbiddenError(CampaignEngineError):
    """The caller does not own the campaign record."""


class ConflictError(CampaignEngineError):
    """Concurrent mutation detected at write time, or a one-shot action repeated."""
