"""Reward entity -- a one-time grant of bonus points. Immutable."""
from datetime import datetime, timezone
from uuid import uuid4

from greenmove.domain.activity import as_utc
from greenmove.domain.enums import RewardType


class Reward:
    """Unique per user by ``milestone_key`` and by ``title``."""

    def __init__(
        self,
        user_id: str,
        milestone_key: str,
        reward_type: RewardType,
        title: str,
        description: str,
        icon_name: str,
        points_awarded: int,
        reward_id: str | None = None,
        unlocked_at: datetime | None = None,
    ):
        if points_awarded < 0:
            raise ValueError("Reward points cannot be negative")
        self._id = reward_id or str(uuid4())
        self._user_id = user_id
        self._milestone_key = milestone_key
        self._reward_type = reward_type
        self._title = title
        self._description = description
        self._icon_name = icon_name
        self._points_awarded = points_awarded
        self._unlocked_at = as_utc(unlocked_at) if unlocked_at else datetime.now(timezone.utc)

    @property
    def id(self) -> str:
        return self._id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def milestone_key(self) -> str:
        return self._milestone_key

    @property
    def reward_type(self) -> RewardType:
        return self._reward_type

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> str:
        return self._description

    @property
    def icon_name(self) -> str:
        return self._icon_name

    @property
    def points_awarded(self) -> int:
        return self._points_awarded

    @property
    def unlocked_at(self) -> datetime:
        return self._unlocked_at

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "user_id": self._user_id,
            "milestone_key": self._milestone_key,
            "reward_type": self._reward_type.value,
            "title": self._title,
            "description": self._description,
            "icon_name": self._icon_name,
            "points_awarded": self._points_awarded,
            "unlocked_at": self._unlocked_at.isoformat(),
        }

    @staticmethod
    def from_dict(data: dict) -> "Reward":
        return Reward(
            user_id=data["user_id"],
            milestone_key=data["milestone_key"],
            reward_type=RewardType(data["reward_type"]),
            title=data["title"],
            description=data["description"],
            icon_name=data["icon_name"],
            points_awarded=data["points_awarded"],
            reward_id=data["id"],
            unlocked_at=datetime.fromisoformat(data["unlocked_at"]),
        )
