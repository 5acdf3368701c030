"""
Shared pytest fixtures for the GreenMove test suite.

Strategy:
- Domain tests: pure in-memory, zero I/O.
- Application tests: UserLedger over the in-memory LedgerRepository.
- SQL repository tests: in-memory SQLite.
- API tests: FastAPI TestClient over a fresh in-memory ledger per test.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest

# Ensure no real database is touched during the test run
os.environ.pop("DATABASE_URL", None)

from greenmove.application.ledger import UserLedger
from greenmove.application.record_activity import submit_activity
from greenmove.domain.enums import RewardType
from greenmove.domain.reward import Reward
from greenmove.domain.user import User
from greenmove.infrastructure.repositories.ledger_repository import LedgerRepository

DEFAULT_USER = "default-user"
BASE_DATE = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Domain helpers (reusable across many test modules)
# ---------------------------------------------------------------------------

def make_user(username="eco", email="eco@greenmove.test", **kwargs) -> User:
    return User(username=username, email=email, **kwargs)


def make_reward(user_id=DEFAULT_USER, key="first_steps", title="First Steps", points=25) -> Reward:
    return Reward(
        user_id=user_id,
        milestone_key=key,
        reward_type=RewardType.ACHIEVEMENT,
        title=title,
        description="desc",
        icon_name="Leaf",
        points_awarded=points,
    )


def make_ledger(repository=None) -> UserLedger:
    return UserLedger(repository or LedgerRepository(), default_user_id=DEFAULT_USER)


def log_activity(ledger, category="Transport", activity_type="Bike", quantity=1.0,
                 unit="miles", user_id=DEFAULT_USER, day=0, **kwargs):
    """Submit one activity, dated ``day`` days after BASE_DATE."""
    return submit_activity(
        ledger,
        user_id,
        category=category,
        activity_type=activity_type,
        quantity=quantity,
        unit=unit,
        activity_date=BASE_DATE + timedelta(days=day),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# pytest fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def repo():
    return LedgerRepository()


@pytest.fixture
def ledger(repo):
    return make_ledger(repo)


@pytest.fixture
def client(ledger):
    """TestClient over an app wired to a fresh in-memory ledger, audit off."""
    from fastapi import FastAPI
    from fastapi.testclient import TestClient
    from greenmove.api.routes.ledger_routes import router, init_routes

    app = FastAPI()
    init_routes(ledger, audit=False)
    app.include_router(router)
    return TestClient(app)
