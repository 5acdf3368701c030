"""Rate table and activity valuation."""
import math
from typing import NamedTuple

from greenmove.domain.enums import ActivityCategory


class ActivityRate(NamedTuple):
    """Conversion factors for one activity type."""

    name: str
    unit: str
    carbon_per_unit: float  # kg CO2 saved per unit
    points_per_unit: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "unit": self.unit,
            "carbon_per_unit": self.carbon_per_unit,
            "points_per_unit": self.points_per_unit,
        }


CATEGORY_ICONS = {
    ActivityCategory.TRANSPORT: "Bike",
    ActivityCategory.ENERGY: "Zap",
    ActivityCategory.WASTE: "Trash",
    ActivityCategory.WATER: "Droplet",
    ActivityCategory.FOOD: "Apple",
}

RATE_TABLE = {
    ActivityCategory.TRANSPORT: (
        ActivityRate("Bike", "miles", 0.9, 10),
        ActivityRate("Walk", "miles", 0.9, 8),
        ActivityRate("Public Transit", "miles", 0.6, 6),
        ActivityRate("Carpool", "miles", 0.4, 5),
        ActivityRate("Electric Vehicle", "miles", 0.3, 4),
    ),
    ActivityCategory.ENERGY: (
        ActivityRate("Solar Power Used", "kWh", 0.5, 12),
        ActivityRate("LED Bulbs", "count", 0.1, 3),
        ActivityRate("Unplugged Devices", "hours", 0.05, 2),
        ActivityRate("Energy Efficient Appliance", "kWh", 0.3, 8),
    ),
    ActivityCategory.WASTE: (
        ActivityRate("Recycled", "lbs", 1.2, 7),
        ActivityRate("Composted", "lbs", 0.8, 6),
        ActivityRate("Reusable Bag Used", "count", 0.02, 2),
        ActivityRate("Avoided Plastic", "items", 0.05, 3),
    ),
    ActivityCategory.WATER: (
        ActivityRate("Shower Shortened", "minutes", 0.15, 4),
        ActivityRate("Dishwasher Eco Mode", "loads", 0.3, 5),
        ActivityRate("Rainwater Collected", "gallons", 0.01, 3),
    ),
    ActivityCategory.FOOD: (
        ActivityRate("Plant-based Meal", "meals", 2.5, 15),
        ActivityRate("Local Produce", "lbs", 0.5, 5),
        ActivityRate("Food Waste Prevented", "lbs", 1.0, 8),
    ),
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positives."""
    return int(math.floor(value + 0.5))


class Valuation(NamedTuple):
    carbon_saved: float
    points_earned: int
    used_fallback: bool


class ActivityValuator:
    """Turns (category, activity type, quantity) into carbon and points.

    Pure. An unknown category/type pair never fails: it is valued with the
    fallback rates and flagged so the caller can log it.
    """

    FALLBACK_CARBON_PER_UNIT = 0.5
    FALLBACK_POINTS_PER_UNIT = 5

    @staticmethod
    def lookup(category: str, activity_type: str) -> ActivityRate | None:
        try:
            rates = RATE_TABLE[ActivityCategory(category)]
        except ValueError:
            return None
        for rate in rates:
            if rate.name == activity_type:
                return rate
        return None

    @staticmethod
    def valuate(category: str, activity_type: str, quantity: float) -> Valuation:
        rate = ActivityValuator.lookup(category, activity_type)
        if rate is None:
            return Valuation(
                carbon_saved=quantity * ActivityValuator.FALLBACK_CARBON_PER_UNIT,
                points_earned=round_half_up(quantity * ActivityValuator.FALLBACK_POINTS_PER_UNIT),
                used_fallback=True,
            )
        return Valuation(
            carbon_saved=quantity * rate.carbon_per_unit,
            points_earned=round_half_up(quantity * rate.points_per_unit),
            used_fallback=False,
        )

    @staticmethod
    def catalog() -> list:
        """Categories with their icon and activity types, for input forms."""
        return [
            {
                "category": category.value,
                "icon": CATEGORY_ICONS[category],
                "types": [rate.to_dict() for rate in rates],
            }
            for category, rates in RATE_TABLE.items()
        ]
