"""Ledger API routes -- user, activities, rewards, progress, catalog."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from greenmove.application import record_activity as uc
from greenmove.application.progress import get_progress, summarize_impact
from greenmove.domain.errors import ConflictError, NotFoundError, ValidationError
from greenmove.domain.rates import ActivityValuator
from greenmove.infrastructure.audit import log_submission

log = logging.getLogger("greenmove.api")

router = APIRouter(prefix="/api", tags=["ledger"])


class LocationPayload(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    name: Optional[str] = Field(None, max_length=200)


class RecordActivityRequest(BaseModel):
    category: str = Field(..., min_length=1, max_length=50)
    activity_type: str = Field(..., min_length=1, max_length=80)
    quantity: float = Field(..., gt=0)
    unit: str = Field(..., min_length=1, max_length=20)
    activity_date: datetime
    notes: Optional[str] = Field(None, max_length=1000)
    location: Optional[LocationPayload] = None


class CreateUserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=120)
    avatar_url: Optional[str] = None


_ledger = None
_audit = True


def init_routes(ledger, audit: bool = True):
    global _ledger, _audit
    _ledger = ledger
    _audit = audit


def _user_id() -> str:
    """Single implicit user until authentication exists."""
    return _ledger.default_user_id


def _raise_http(exc: Exception):
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=400, detail=str(exc))
    raise exc


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------

@router.get("/user")
def api_get_user():
    """Current ledger state of the implicit user."""
    return uc.get_ledger_state(_ledger, _user_id()).to_dict()


@router.post("/users", status_code=201)
def api_create_user(req: CreateUserRequest):
    try:
        user = _ledger.create_user(req.username, req.email, avatar_url=req.avatar_url)
    except ValidationError as e:
        _raise_http(e)
    return user.to_dict()


@router.get("/progress")
def api_get_progress():
    return get_progress(_ledger, _user_id())


@router.get("/impact")
def api_get_impact():
    return summarize_impact(_ledger, _user_id())


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------

@router.get("/activities")
def api_list_activities():
    return [a.to_dict() for a in uc.list_activities(_ledger, _user_id())]


@router.get("/activities/recent")
def api_recent_activities(limit: int = 5):
    if limit < 1 or limit > 50:
        raise HTTPException(status_code=400, detail="limit must be between 1 and 50")
    return [a.to_dict() for a in uc.recent_activities(_ledger, _user_id(), limit)]


@router.get("/activities/{activity_id}")
def api_get_activity(activity_id: str):
    try:
        return uc.get_activity(_ledger, activity_id).to_dict()
    except NotFoundError as e:
        _raise_http(e)


@router.post("/activities", status_code=201)
def api_record_activity(req: RecordActivityRequest):
    """Log an activity. Response carries the activity, new rewards and user state."""
    try:
        submission = uc.submit_activity(
            _ledger,
            _user_id(),
            category=req.category,
            activity_type=req.activity_type,
            quantity=req.quantity,
            unit=req.unit,
            activity_date=req.activity_date,
            notes=req.notes,
            location=req.location.model_dump() if req.location else None,
        )
    except (ValidationError, NotFoundError, ConflictError) as e:
        _raise_http(e)

    if _audit:
        try:
            log_submission(submission)
        except OSError as exc:
            log.error("Audit trail write failed: %s", exc)

    return {
        "activity": submission.activity.to_dict(),
        "rewards": [r.to_dict() for r in submission.rewards],
        "user": submission.user.to_dict(),
    }


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------

@router.get("/rewards")
def api_list_rewards():
    return [r.to_dict() for r in uc.list_rewards(_ledger, _user_id())]


@router.get("/rewards/recent")
def api_recent_rewards(limit: int = 3):
    if limit < 1 or limit > 50:
        raise HTTPException(status_code=400, detail="limit must be between 1 and 50")
    return [r.to_dict() for r in uc.recent_rewards(_ledger, _user_id(), limit)]


@router.get("/rewards/{reward_id}")
def api_get_reward(reward_id: str):
    try:
        return uc.get_reward(_ledger, reward_id).to_dict()
    except NotFoundError as e:
        _raise_http(e)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@router.get("/catalog")
def api_get_catalog():
    """Categories and activity types with their conversion rates."""
    return ActivityValuator.catalog()
