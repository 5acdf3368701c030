"""Enums used across the domain."""
from enum import Enum


class ActivityCategory(str, Enum):
    TRANSPORT = "Transport"
    ENERGY = "Energy"
    WASTE = "Waste"
    WATER = "Water"
    FOOD = "Food"

    @staticmethod
    def values() -> list:
        return [c.value for c in ActivityCategory]


class RewardType(str, Enum):
    ACHIEVEMENT = "Achievement"
    MILESTONE = "Milestone"
    BONUS = "Bonus"


class MilestoneId(str, Enum):
    """Stable identity of a one-time award, independent of its display title."""

    FIRST_STEPS = "first_steps"
    GREEN_WARRIOR = "green_warrior"
    ECO_CHAMPION = "eco_champion"
    DEDICATED_GREEN = "dedicated_green"
    LEVEL_UP = "level"

    def key(self, level: int | None = None) -> str:
        """Dedup key stored on the reward. Level-ups are keyed per level."""
        if self is MilestoneId.LEVEL_UP:
            if level is None:
                raise ValueError("Level-up milestone key requires a level")
            return f"{self.value}_{level}"
        return self.value
