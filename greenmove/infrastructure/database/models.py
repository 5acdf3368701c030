"""SQLAlchemy ORM models -- ledger schema definition.

Portable column types only, so the same schema runs on PostgreSQL and SQLite.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Text, JSON,
    ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow():
    return datetime.now(timezone.utc)


def _new_uuid():
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(120), unique=True, nullable=False)
    total_points = Column(Integer, nullable=False, default=0)
    total_carbon_saved = Column(Float, nullable=False, default=0.0)  # kg CO2
    level = Column(Integer, nullable=False, default=1)
    avatar_url = Column(Text, nullable=True)
    # Optimistic concurrency counter, bumped on every ledger commit.
    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Activities (append-only)
# ---------------------------------------------------------------------------

class ActivityModel(Base):
    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, default=_new_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    category = Column(String(50), nullable=False)
    activity_type = Column(String(80), nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String(20), nullable=False)
    carbon_saved = Column(Float, nullable=False)
    points_earned = Column(Integer, nullable=False)
    location = Column(JSON, nullable=True)  # {"lat", "lng", "name"}
    notes = Column(Text, nullable=True)
    activity_date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Rewards (one per user per milestone)
# ---------------------------------------------------------------------------

class RewardModel(Base):
    __tablename__ = "rewards"
    __table_args__ = (
        UniqueConstraint("user_id", "milestone_key", name="uq_rewards_user_milestone"),
        UniqueConstraint("user_id", "title", name="uq_rewards_user_title"),
    )

    id = Column(String(36), primary_key=True, default=_new_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    milestone_key = Column(String(50), nullable=False)
    reward_type = Column(String(20), nullable=False)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    icon_name = Column(String(30), nullable=False)
    points_awarded = Column(Integer, nullable=False)
    unlocked_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
