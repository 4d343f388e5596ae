from apscheduler.schedulers.asyncio import AsyncIOScheduler
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from campaign_sim.authentication.basic_authentication import basic_auth
from campaign_sim.db import create_tables
from campaign_sim.publisher import get_publisher
from campaign_sim.routers import campaign, election, negative_ads
from campaign_sim.routers.dependencies import get_campaign_service

scheduler = AsyncIOScheduler()
logging.basicConfig(level=logging.INFO)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


async def advance_due_phases() -> None:
    """Scheduled sweep: move every expired RUNNING phase one step forward."""
    publisher = get_publisher()
    for cycle in await get_campaign_service().advance_due_campaigns():
        await publisher.publish(cycle.candidate_id, "phase_changed")


@asynccontextmanager
async def lifespan(app):
    """Create the campaign and user tables, then start the phase sweep.
    This function is called to start the server.
    """
    await create_tables()
    await basic_auth.create_table()

    scheduler.add_job(
        advance_due_phases,
        "interval",
        minutes=1,
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(campaign.campaign_router)
app.include_router(election.election_router)
app.include_router(negative_ads.negative_ad_router)
