"""Collaborators the engine depends on but does not own.

Debate performance and the account ledger live in other game modules; the
engine only talks to them through these small interfaces so they can be
swapped or stubbed.
"""

import logging
import time
from typing import Callable, Protocol
from uuid import UUID

from campaign_sim.models.dc_models import RewardsModel

Clock = Callable[[], float]


def system_clock() -> float:
    return time.time()


class DebatePerformanceSource(Protocol):
    async def debate_score(self, candidate_id: UUID) -> float | None:
        """0..100 debate performance, None when the candidate has no debates."""


class RewardLedger(Protocol):
    async def credit(self, candidate_id: UUID, rewards: RewardsModel) -> None:
        """Hand election funds/influence to the account ledger."""


class NeutralDebateScore:
    """Used until a debate aggregator is wired in: every candidate scores `score`."""

    def __init__(self, score: float | None = None):
        self.score = score

    async def debate_score(self, candidate_id: UUID) -> float | None:
        return self.score


class LoggingRewardLedger:
    async def credit(self, candidate_id: UUID, rewards: RewardsModel) -> None:
        logging.info(
            f"Reward credit for candidate {candidate_id}: "
            f"funds={rewards.funds} influence={rewards.influence_points}"
        )
