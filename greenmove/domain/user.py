"""User entity -- cumulative sustainability ledger state."""
from datetime import datetime, timezone
from uuid import uuid4

from greenmove.domain.errors import ValidationError


class User:
    """
    Cumulative per-user state. Mutated only through ledger operations.
    Totals never go negative and the level never decreases.
    """

    def __init__(
        self,
        username: str,
        email: str,
        user_id: str | None = None,
        total_points: int = 0,
        total_carbon_saved: float = 0.0,
        level: int = 1,
        avatar_url: str | None = None,
        created_at: datetime | None = None,
        version: int = 0,
    ):
        if not username or not username.strip():
            raise ValidationError("Username cannot be empty")
        if total_points < 0 or total_carbon_saved < 0:
            raise ValidationError("Ledger totals cannot be negative")
        if level < 1:
            raise ValidationError("Level must be a positive integer")

        self._id = user_id or str(uuid4())
        self._username = username.strip()
        self._email = email.lower().strip()
        self._total_points = total_points
        self._total_carbon_saved = total_carbon_saved
        self._level = level
        self._avatar_url = avatar_url
        self._created_at = created_at or datetime.now(timezone.utc)
        self._version = version

    @property
    def id(self) -> str:
        return self._id

    @property
    def username(self) -> str:
        return self._username

    @property
    def email(self) -> str:
        return self._email

    @property
    def total_points(self) -> int:
        return self._total_points

    @property
    def total_carbon_saved(self) -> float:
        return self._total_carbon_saved

    @property
    def level(self) -> int:
        return self._level

    @property
    def avatar_url(self) -> str | None:
        return self._avatar_url

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def version(self) -> int:
        """Commit counter used for optimistic concurrency."""
        return self._version

    # --- Ledger mutations ---

    def apply_delta(self, points_delta: int = 0, carbon_delta: float = 0.0) -> None:
        points = self._total_points + points_delta
        carbon = self._total_carbon_saved + carbon_delta
        if points < 0 or carbon < 0:
            raise ValidationError(
                f"Delta ({points_delta}, {carbon_delta}) would make totals negative"
            )
        self._total_points = points
        self._total_carbon_saved = carbon

    def advance_level(self, new_level: int) -> None:
        if new_level < self._level:
            raise ValidationError(
                f"Level cannot decrease (current {self._level}, requested {new_level})"
            )
        self._level = new_level

    def bump_version(self) -> None:
        self._version += 1

    def copy(self) -> "User":
        return User.from_dict(self.to_dict())

    # --- Serialization ---

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "username": self._username,
            "email": self._email,
            "total_points": self._total_points,
            "total_carbon_saved": self._total_carbon_saved,
            "level": self._level,
            "avatar_url": self._avatar_url,
            "created_at": self._created_at.isoformat(),
            "version": self._version,
        }

    @staticmethod
    def from_dict(data: dict) -> "User":
        return User(
            username=data["username"],
            email=data["email"],
            user_id=data["id"],
            total_points=data["total_points"],
            total_carbon_saved=data["total_carbon_saved"],
            level=data["level"],
            avatar_url=data.get("avatar_url"),
            created_at=datetime.fromisoformat(data["created_at"]),
            version=data.get("version", 0),
        )
