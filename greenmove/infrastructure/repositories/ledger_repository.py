"""Ledger persistence (in-memory, optionally mirrored to a JSON file).

Records are held as plain dicts, so every read hands out a fresh entity
and callers can never mutate stored state behind the repository's back.
"""
import json
import logging
import os
import threading

from greenmove.domain.activity import Activity
from greenmove.domain.errors import ConflictError, ValidationError
from greenmove.domain.reward import Reward
from greenmove.domain.user import User

log = logging.getLogger("greenmove.ledger")


class LedgerRepository:
    """Dict-backed ledger storage. Pass ``data_path`` to persist to disk."""

    def __init__(self, data_path: str | None = None):
        self._data_path = data_path
        self._users: dict = {}
        self._activities: dict = {}
        self._rewards: dict = {}
        self._lock = threading.Lock()
        self._load()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> User | None:
        with self._lock:
            data = self._users.get(user_id)
            return User.from_dict(data) if data else None

    def get_user_by_username(self, username: str) -> User | None:
        with self._lock:
            for data in self._users.values():
                if data["username"] == username:
                    return User.from_dict(data)
        return None

    def add_user(self, user: User) -> None:
        with self._lock:
            for data in self._users.values():
                if data["id"] == user.id:
                    raise ValidationError(f"User {user.id} already exists")
                if data["username"] == user.username:
                    raise ValidationError(f"Username {user.username!r} is taken")
                if data["email"] == user.email:
                    raise ValidationError(f"Email {user.email!r} is already registered")
            self._users[user.id] = user.to_dict()
            self._persist()

    # ------------------------------------------------------------------
    # Activities and rewards
    # ------------------------------------------------------------------

    def get_activity(self, activity_id: str) -> Activity | None:
        with self._lock:
            data = self._activities.get(activity_id)
            return Activity.from_dict(data) if data else None

    def list_activities(self, user_id: str) -> list:
        """Activities of one user, most recent activity date first."""
        with self._lock:
            rows = [Activity.from_dict(a) for a in self._activities.values() if a["user_id"] == user_id]
        return sorted(rows, key=lambda a: a.activity_date, reverse=True)

    def get_reward(self, reward_id: str) -> Reward | None:
        with self._lock:
            data = self._rewards.get(reward_id)
            return Reward.from_dict(data) if data else None

    def list_rewards(self, user_id: str) -> list:
        """Rewards of one user, most recently unlocked first."""
        with self._lock:
            rows = [Reward.from_dict(r) for r in self._rewards.values() if r["user_id"] == user_id]
        return sorted(rows, key=lambda r: r.unlocked_at, reverse=True)

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def commit(self, user: User, activities: list, rewards: list, expected_version: int) -> None:
        """Write a user's new state with its new records, all or nothing."""
        with self._lock:
            stored = self._users.get(user.id)
            if stored is None:
                raise ConflictError(f"User {user.id} vanished before commit")
            if stored.get("version", 0) != expected_version:
                log.warning(
                    "Stale commit for user %s: expected version %s, found %s",
                    user.id, expected_version, stored.get("version", 0),
                )
                raise ConflictError(f"User {user.id} was modified concurrently")

            held = [r for r in self._rewards.values() if r["user_id"] == user.id]
            held_keys = {r["milestone_key"] for r in held}
            held_titles = {r["title"] for r in held}
            for reward in rewards:
                if reward.milestone_key in held_keys or reward.title in held_titles:
                    raise ConflictError(f"Reward {reward.title!r} already held by {user.id}")
                held_keys.add(reward.milestone_key)
                held_titles.add(reward.title)

            self._users[user.id] = user.to_dict()
            for activity in activities:
                self._activities[activity.id] = activity.to_dict()
            for reward in rewards:
                self._rewards[reward.id] = reward.to_dict()
            self._persist()

    # ------------------------------------------------------------------
    # File mirror
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        """Write the whole ledger to the JSON file, if one is configured."""
        if not self._data_path:
            return
        directory = os.path.dirname(self._data_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        data = {
            "users": self._users,
            "activities": self._activities,
            "rewards": self._rewards,
        }
        # Write to a temp file then replace, so readers never see half a ledger.
        tmp_path = f"{self._data_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self._data_path)

    def _load(self) -> None:
        if not self._data_path or not os.path.exists(self._data_path):
            return
        try:
            with open(self._data_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            log.error("Ledger file %s is not valid JSON: %s", self._data_path, exc)
            raise
        self._users = data.get("users", {})
        self._activities = data.get("activities", {})
        self._rewards = data.get("rewards", {})
