from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column, Index
from sqlalchemy.types import Integer, String, Uuid, Float, DateTime, Boolean
from uuid6 import uuid7
from datetime import datetime


class Base(DeclarativeBase):
    pass


class CampaignCycle(Base):
    __tablename__ = "campaign_cycle"
    campaign_id = Column(Uuid, primary_key=True, default=uuid7)
    # One row per candidate; later cycles reuse it through cycle_sequence.
    candidate_id = Column(Uuid, nullable=False, unique=True, index=True)
    owner_username = Column(String, nullable=False)
    seed = Column(String, nullable=False)
    cycle_sequence = Column(Integer, nullable=False, default=1)
    active_phase = Column(String, nullable=False)
    status = Column(String, nullable=False)
    phase_ends_epoch = Column(Float, nullable=False)
    paused_at_epoch = Column(Float, nullable=True)
    reputation_score = Column(Integer, nullable=False, default=50)
    funds_raised_this_cycle = Column(Float, nullable=False, default=0.0)
    endorsements_acquired = Column(Integer, nullable=False, default=0)
    scandals_active = Column(Integer, nullable=False, default=0)
    last_resolved_sequence = Column(Integer, nullable=True)
    # Bumped on every write; updates are conditional on the version that was read.
    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now)


class PollingSample(Base):
    __tablename__ = "polling_sample"
    sample_id = Column(Uuid, primary_key=True, default=uuid7)
    candidate_id = Column(Uuid, nullable=False)
    timestamp_epoch = Column(Float, nullable=False)
    final_support_percent = Column(Float, nullable=False)
    source = Column(String, nullable=False, default="snapshot")

    __table_args__ = (
        Index("ix_polling_sample_candidate_time", "candidate_id", "timestamp_epoch"),
    )


class OppositionResearch(Base):
    __tablename__ = "opposition_research"
    research_id = Column(Uuid, primary_key=True, default=uuid7)
    target_id = Column(Uuid, nullable=False)
    owner_username = Column(String, nullable=False)
    credibility = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.now)


class NegativeAd(Base):
    __tablename__ = "negative_ad"
    ad_id = Column(Uuid, primary_key=True, default=uuid7)
    attacker_id = Column(Uuid, nullable=False, index=True)
    target_id = Column(Uuid, nullable=False, index=True)
    research_id = Column(Uuid, nullable=True)
    amount_spent = Column(Float, nullable=False)
    campaign_phase = Column(String, nullable=False)
    effectiveness = Column(Float, nullable=False)
    backfire_occurred = Column(Boolean, nullable=False, default=False)
    ethics_penalty_applied = Column(Float, nullable=False)
    voter_fatigue_impact = Column(Float, nullable=False)
    countered = Column(Boolean, nullable=False, default=False)
    counter_effectiveness = Column(Float, nullable=True)
    launched_epoch = Column(Float, nullable=False)
