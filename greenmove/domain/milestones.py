"""Milestone rules and evaluation.

Every rule is checked against the post-update state on each submission,
so a single activity can unlock several tiers at once. Rules already held
by the user (by key or by title) never fire again.
"""
from typing import Callable, NamedTuple

from greenmove.domain.enums import MilestoneId, RewardType

LEVEL_UP_POINTS = 50


class MilestoneSpec(NamedTuple):
    """What a reward will look like once issued."""

    milestone_id: MilestoneId
    key: str
    reward_type: RewardType
    title: str
    description: str
    icon_name: str
    points: int


class MilestoneRule(NamedTuple):
    spec: MilestoneSpec
    # (activity_count, total_carbon_saved) -> qualifies
    condition: Callable[[int, float], bool]


def _spec(milestone_id, reward_type, title, description, icon_name, points) -> MilestoneSpec:
    return MilestoneSpec(
        milestone_id=milestone_id,
        key=milestone_id.key(),
        reward_type=reward_type,
        title=title,
        description=description,
        icon_name=icon_name,
        points=points,
    )


MILESTONE_RULES = (
    MilestoneRule(
        _spec(MilestoneId.FIRST_STEPS, RewardType.ACHIEVEMENT, "First Steps",
              "Logged your first eco-friendly activity!", "Leaf", 25),
        lambda count, carbon: count == 1,
    ),
    MilestoneRule(
        _spec(MilestoneId.GREEN_WARRIOR, RewardType.MILESTONE, "Green Warrior",
              "Saved 10 kg of CO₂! You're making a real impact!", "Award", 50),
        lambda count, carbon: carbon >= 10,
    ),
    MilestoneRule(
        _spec(MilestoneId.ECO_CHAMPION, RewardType.MILESTONE, "Eco Champion",
              "Saved 50 kg of CO₂! Amazing dedication!", "Trophy", 100),
        lambda count, carbon: carbon >= 50,
    ),
    MilestoneRule(
        _spec(MilestoneId.DEDICATED_GREEN, RewardType.ACHIEVEMENT, "Dedicated Green",
              "Logged 10 eco-friendly activities!", "Activity", 30),
        lambda count, carbon: count == 10,
    ),
)


def level_reward(level: int) -> MilestoneSpec:
    """Reward for reaching ``level``. One per level."""
    return MilestoneSpec(
        milestone_id=MilestoneId.LEVEL_UP,
        key=MilestoneId.LEVEL_UP.key(level),
        reward_type=RewardType.MILESTONE,
        title=f"Level {level} Reached!",
        description=f"You've reached level {level}! Keep up the great work!",
        icon_name="Trophy",
        points=LEVEL_UP_POINTS,
    )


def is_held(spec: MilestoneSpec, rewards: list) -> bool:
    return any(r.milestone_key == spec.key or r.title == spec.title for r in rewards)


def evaluate_milestones(activities: list, rewards: list, total_carbon_saved: float) -> list:
    """Return specs for every rule that qualifies now and is not yet held."""
    count = len(activities)
    return [
        rule.spec
        for rule in MILESTONE_RULES
        if rule.condition(count, total_carbon_saved) and not is_held(rule.spec, rewards)
    ]
