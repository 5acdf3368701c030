"""Level thresholds: a user at level N needs N * 100 total points to advance."""
from typing import NamedTuple

POINTS_PER_LEVEL = 100


class LevelCheck(NamedTuple):
    level_up: bool
    new_level: int
    required: int


def required_for_next_level(level: int) -> int:
    return level * POINTS_PER_LEVEL


def evaluate(level: int, total_points: int) -> LevelCheck:
    """Single-step check. Callers loop until ``level_up`` is False."""
    required = required_for_next_level(level)
    if total_points >= required:
        return LevelCheck(level_up=True, new_level=level + 1, required=required)
    return LevelCheck(level_up=False, new_level=level, required=required)


def progress(level: int, total_points: int) -> dict:
    """Progress toward the next level as shown on the rewards page.

    Measured from the threshold that unlocked the current level, so
    ``points_in_current_level + points_to_next_level`` spans one level.
    """
    required = required_for_next_level(level)
    floor = required_for_next_level(level - 1)
    span = required - floor
    into_level = min(max(total_points - floor, 0), span)
    return {
        "level": level,
        "total_points": total_points,
        "required_for_next_level": required,
        "points_to_next_level": max(required - total_points, 0),
        "points_in_current_level": into_level,
        "progress_percent": round(into_level / span * 100, 1),
    }
