"""User ledger -- serialized per-user units of work over a repository.

A ``LedgerSession`` holds the user's lock for its whole lifetime, works on a
private copy of the user, and commits every buffered change with a single
repository call. If the block raises, nothing is written.

Any repository providing ``get_user``, ``get_user_by_username``,
``add_user``, ``list_activities``, ``list_rewards`` and ``commit`` can back
the ledger.
"""
import logging
import threading
from contextlib import contextmanager

from greenmove.domain.activity import Activity
from greenmove.domain.errors import NotFoundError, ValidationError
from greenmove.domain.invariant import validate_email
from greenmove.domain.reward import Reward
from greenmove.domain.user import User

log = logging.getLogger("greenmove.ledger")

DEFAULT_USER_ID = "default-user"


class LedgerSession:
    """Buffered changes for one user within one logical operation."""

    def __init__(self, user: User, activities: list, rewards: list):
        self._user = user
        self._expected_version = user.version
        self._history = activities
        self._held = rewards
        self._new_activities: list = []
        self._new_rewards: list = []
        self._dirty = False

    @property
    def user(self) -> User:
        return self._user

    @property
    def activities(self) -> list:
        """Full activity history including ones added in this session."""
        return list(reversed(self._new_activities)) + list(self._history)

    @property
    def rewards(self) -> list:
        """All rewards held including ones issued in this session."""
        return list(reversed(self._new_rewards)) + list(self._held)

    @property
    def new_activities(self) -> list:
        return list(self._new_activities)

    @property
    def new_rewards(self) -> list:
        return list(self._new_rewards)

    @property
    def expected_version(self) -> int:
        return self._expected_version

    @property
    def dirty(self) -> bool:
        return self._dirty

    def apply_delta(self, points_delta: int = 0, carbon_delta: float = 0.0) -> User:
        self._user.apply_delta(points_delta, carbon_delta)
        self._dirty = True
        return self._user

    def advance_level(self, new_level: int) -> None:
        self._user.advance_level(new_level)
        self._dirty = True

    def add_activity(self, activity: Activity) -> None:
        if activity.user_id != self._user.id:
            raise ValidationError("Activity belongs to another user")
        self._new_activities.append(activity)
        self._dirty = True

    def add_reward(self, reward: Reward) -> None:
        if reward.user_id != self._user.id:
            raise ValidationError("Reward belongs to another user")
        self._new_rewards.append(reward)
        self._dirty = True


class UserLedger:
    """Owns cumulative user state. Writers for one user are serialized."""

    DEFAULT_USERNAME = "EcoWarrior"
    DEFAULT_EMAIL = "warrior@greenmove.eco"

    def __init__(self, repository, default_user_id: str = DEFAULT_USER_ID):
        self._repo = repository
        self._default_user_id = default_user_id
        self._locks: dict = {}
        self._locks_guard = threading.Lock()

    @property
    def repository(self):
        return self._repo

    @property
    def default_user_id(self) -> str:
        return self._default_user_id

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    def _load(self, user_id: str) -> User:
        """Fetch a user, creating the implicit default user on first access."""
        user = self._repo.get_user(user_id)
        if user is not None:
            return user
        if user_id != self._default_user_id:
            raise NotFoundError(f"User {user_id} not found")
        user = User(
            username=self.DEFAULT_USERNAME,
            email=self.DEFAULT_EMAIL,
            user_id=user_id,
        )
        self._repo.add_user(user)
        log.info("Created default user %s", user_id)
        return user

    # --- Reads ---

    def get(self, user_id: str) -> User:
        with self._lock_for(user_id):
            return self._load(user_id)

    def get_by_username(self, username: str) -> User:
        user = self._repo.get_user_by_username(username)
        if user is None:
            raise NotFoundError(f"User {username!r} not found")
        return user

    # --- Writes ---

    def create_user(self, username: str, email: str, avatar_url: str | None = None) -> User:
        validate_email(email)
        # The implicit default user is created lazily under these values.
        if username.strip() == self.DEFAULT_USERNAME:
            raise ValidationError(f"Username {username!r} is reserved")
        if email.lower().strip() == self.DEFAULT_EMAIL:
            raise ValidationError(f"Email {email!r} is reserved")
        user = User(username=username, email=email, avatar_url=avatar_url)
        self._repo.add_user(user)
        log.info("Created user %s (%s)", user.id, user.username)
        return user

    @contextmanager
    def session(self, user_id: str):
        """Serialized unit of work for one user. Commits once on clean exit."""
        with self._lock_for(user_id):
            user = self._load(user_id)
            session = LedgerSession(
                user=user,
                activities=self._repo.list_activities(user_id),
                rewards=self._repo.list_rewards(user_id),
            )
            yield session
            if session.dirty:
                session.user.bump_version()
                self._repo.commit(
                    session.user,
                    session.new_activities,
                    session.new_rewards,
                    expected_version=session.expected_version,
                )

    def apply_delta(self, user_id: str, points_delta: int = 0, carbon_delta: float = 0.0) -> User:
        """Add deltas to a user's totals as one atomic step."""
        with self.session(user_id) as session:
            session.apply_delta(points_delta, carbon_delta)
        return session.user
