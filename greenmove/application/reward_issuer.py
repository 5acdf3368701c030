"""Reward issuance and level settlement inside a ledger session."""
import logging

from greenmove.application.ledger import LedgerSession
from greenmove.domain import leveling
from greenmove.domain.milestones import MilestoneSpec, is_held, level_reward
from greenmove.domain.reward import Reward

log = logging.getLogger("greenmove.rewards")


class RewardIssuer:
    """
    Turns qualifying milestones into Reward records and credits their
    points. Every credit is followed by a level check, so bonus points
    can carry the user across further thresholds.
    """

    def issue(self, session: LedgerSession, spec: MilestoneSpec) -> list:
        """Issue ``spec`` plus any level-ups its points trigger.

        Returns the rewards created, empty if ``spec`` was already held.
        """
        reward = self._grant(session, spec)
        if reward is None:
            return []
        return [reward] + self.settle_levels(session)

    def settle_levels(self, session: LedgerSession) -> list:
        """Advance one level at a time until the user's points no longer qualify."""
        issued = []
        while True:
            check = leveling.evaluate(session.user.level, session.user.total_points)
            if not check.level_up:
                return issued
            session.advance_level(check.new_level)
            log.info("User %s reached level %s", session.user.id, check.new_level)
            reward = self._grant(session, level_reward(check.new_level))
            if reward is not None:
                issued.append(reward)

    def _grant(self, session: LedgerSession, spec: MilestoneSpec) -> Reward | None:
        if is_held(spec, session.rewards):
            log.debug("User %s already holds %r", session.user.id, spec.title)
            return None
        reward = Reward(
            user_id=session.user.id,
            milestone_key=spec.key,
            reward_type=spec.reward_type,
            title=spec.title,
            description=spec.description,
            icon_name=spec.icon_name,
            points_awarded=spec.points,
        )
        session.add_reward(reward)
        session.apply_delta(points_delta=spec.points)
        log.info("User %s unlocked %r (+%s points)", session.user.id, spec.title, spec.points)
        return reward
