"""Use case: record an activity and fold it into the user's ledger."""
import logging
from datetime import datetime
from typing import NamedTuple

from greenmove.application.ledger import UserLedger
from greenmove.application.reward_issuer import RewardIssuer
from greenmove.domain.activity import Activity, Location
from greenmove.domain.errors import NotFoundError
from greenmove.domain.invariant import validate_activity_input
from greenmove.domain.milestones import evaluate_milestones
from greenmove.domain.rates import ActivityValuator
from greenmove.domain.user import User

log = logging.getLogger("greenmove.activity")


class Submission(NamedTuple):
    activity: Activity
    user: User
    rewards: list  # issued by this submission, in issue order


def submit_activity(
    ledger: UserLedger,
    user_id: str,
    category: str,
    activity_type: str,
    quantity: float,
    unit: str,
    activity_date: datetime,
    notes: str | None = None,
    location: Location | dict | None = None,
    issuer: RewardIssuer | None = None,
) -> Submission:
    """
    Valuate the activity, credit the ledger, settle level-ups, then issue
    every milestone the new state qualifies for. All of it commits as one
    unit; a failure anywhere leaves the ledger untouched.
    """
    validate_activity_input(category, activity_type, quantity, unit)
    if isinstance(location, dict):
        location = Location.from_dict(location)
    issuer = issuer or RewardIssuer()

    valuation = ActivityValuator.valuate(category, activity_type, quantity)
    if valuation.used_fallback:
        log.warning(
            "No rate for %s/%s, using fallback conversion (quantity=%s)",
            category, activity_type, quantity,
        )

    with ledger.session(user_id) as session:
        activity = Activity(
            user_id=session.user.id,
            category=category,
            activity_type=activity_type,
            quantity=quantity,
            unit=unit,
            carbon_saved=valuation.carbon_saved,
            points_earned=valuation.points_earned,
            activity_date=activity_date,
            location=location,
            notes=notes,
        )
        session.add_activity(activity)
        session.apply_delta(valuation.points_earned, valuation.carbon_saved)

        issued = issuer.settle_levels(session)
        for spec in evaluate_milestones(
            session.activities, session.rewards, session.user.total_carbon_saved
        ):
            issued.extend(issuer.issue(session, spec))

    log.info(
        "User %s logged %s/%s: %.2f kg CO2, %s points, %s rewards",
        user_id, category, activity_type,
        activity.carbon_saved, activity.points_earned, len(issued),
    )
    return Submission(activity=activity, user=session.user, rewards=issued)


def record_activity(
    ledger: UserLedger,
    user_id: str,
    category: str,
    activity_type: str,
    quantity: float,
    unit: str,
    activity_date: datetime,
    notes: str | None = None,
    location: Location | dict | None = None,
) -> Activity:
    return submit_activity(
        ledger, user_id, category, activity_type, quantity, unit,
        activity_date, notes=notes, location=location,
    ).activity


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------

def get_ledger_state(ledger: UserLedger, user_id: str) -> User:
    return ledger.get(user_id)


def list_activities(ledger: UserLedger, user_id: str) -> list:
    ledger.get(user_id)
    return ledger.repository.list_activities(user_id)


def recent_activities(ledger: UserLedger, user_id: str, limit: int = 5) -> list:
    return list_activities(ledger, user_id)[:limit]


def get_activity(ledger: UserLedger, activity_id: str) -> Activity:
    activity = ledger.repository.get_activity(activity_id)
    if activity is None:
        raise NotFoundError(f"Activity {activity_id} not found")
    return activity


def list_rewards(ledger: UserLedger, user_id: str) -> list:
    ledger.get(user_id)
    return ledger.repository.list_rewards(user_id)


def recent_rewards(ledger: UserLedger, user_id: str, limit: int = 3) -> list:
    return list_rewards(ledger, user_id)[:limit]


def get_reward(ledger: UserLedger, reward_id: str):
    reward = ledger.repository.get_reward(reward_id)
    if reward is None:
        raise NotFoundError(f"Reward {reward_id} not found")
    return reward
