"""Activity entity -- one logged eco-friendly action. Immutable."""
from datetime import datetime, timezone
from typing import NamedTuple
from uuid import uuid4


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Location(NamedTuple):
    lat: float
    lng: float
    name: str | None = None

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng, "name": self.name}

    @staticmethod
    def from_dict(data: dict | None) -> "Location | None":
        if not data:
            return None
        return Location(lat=data["lat"], lng=data["lng"], name=data.get("name"))


class Activity:
    """
    Carbon saved and points earned are fixed at creation and never
    recomputed, even if the rate table changes later.
    """

    def __init__(
        self,
        user_id: str,
        category: str,
        activity_type: str,
        quantity: float,
        unit: str,
        carbon_saved: float,
        points_earned: int,
        activity_date: datetime,
        activity_id: str | None = None,
        location: Location | None = None,
        notes: str | None = None,
        created_at: datetime | None = None,
    ):
        self._id = activity_id or str(uuid4())
        self._user_id = user_id
        self._category = category
        self._activity_type = activity_type
        self._quantity = quantity
        self._unit = unit
        self._carbon_saved = carbon_saved
        self._points_earned = points_earned
        self._location = location
        self._notes = notes
        self._activity_date = as_utc(activity_date)
        self._created_at = as_utc(created_at) if created_at else datetime.now(timezone.utc)

    @property
    def id(self) -> str:
        return self._id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def category(self) -> str:
        return self._category

    @property
    def activity_type(self) -> str:
        return self._activity_type

    @property
    def quantity(self) -> float:
        return self._quantity

    @property
    def unit(self) -> str:
        return self._unit

    @property
    def carbon_saved(self) -> float:
        return self._carbon_saved

    @property
    def points_earned(self) -> int:
        return self._points_earned

    @property
    def location(self) -> Location | None:
        return self._location

    @property
    def notes(self) -> str | None:
        return self._notes

    @property
    def activity_date(self) -> datetime:
        return self._activity_date

    @property
    def created_at(self) -> datetime:
        return self._created_at

    def to_dict(self) -> dict:
        return {
            "id": self._id,
            "user_id": self._user_id,
            "category": self._category,
            "activity_type": self._activity_type,
            "quantity": self._quantity,
            "unit": self._unit,
            "carbon_saved": self._carbon_saved,
            "points_earned": self._points_earned,
            "location": self._location.to_dict() if self._location else None,
            "notes": self._notes,
            "activity_date": self._activity_date.isoformat(),
            "created_at": self._created_at.isoformat(),
        }

    @staticmethod
    def from_dict(data: dict) -> "Activity":
        return Activity(
            user_id=data["user_id"],
            category=data["category"],
            activity_type=data["activity_type"],
            quantity=data["quantity"],
            unit=data["unit"],
            carbon_saved=data["carbon_saved"],
            points_earned=data["points_earned"],
            activity_date=datetime.fromisoformat(data["activity_date"]),
            activity_id=data["id"],
            location=Location.from_dict(data.get("location")),
            notes=data.get("notes"),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
