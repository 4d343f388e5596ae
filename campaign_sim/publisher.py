import logging
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

from campaign_sim.load_secrets import redis_host, redis_port


def campaign_channel(candidate_id: UUID) -> str:
    return f"campaign:{candidate_id}"


class CampaignPublisher:
    """Publishes committed campaign changes so clients can re-read their state."""

    def __init__(self, redis: Redis):
        self.redis = redis

    async def publish(self, candidate_id: UUID, event: str) -> None:
        """Send `event` on the candidate's channel.

        Called after the change is committed, so a Redis outage is logged
        and does not fail the request.
        """
        channel = campaign_channel(candidate_id)
        try:
            await self.redis.publish(channel, event)
        except RedisError as e:
            logging.error(f"Failed to publish {event} on {channel}: {e}")


redis = Redis(host=redis_host, port=redis_port, decode_responses=True, health_check_interval=30)
publisher = CampaignPublisher(redis)


def get_publisher() -> CampaignPublisher:
    return publisher
