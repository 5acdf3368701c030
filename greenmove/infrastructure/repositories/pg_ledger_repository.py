"""SQL-backed ledger repository (PostgreSQL in production, SQLite in tests)."""
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from greenmove.domain.activity import Activity, Location
from greenmove.domain.enums import RewardType
from greenmove.domain.errors import ConflictError, ValidationError
from greenmove.domain.reward import Reward
from greenmove.domain.user import User
from greenmove.infrastructure.database.models import ActivityModel, RewardModel, UserModel

log = logging.getLogger("greenmove.db")


class PgLedgerRepository:
    """Ledger persistence via SQLAlchemy. One transaction per commit."""

    def __init__(self, session_factory):
        self._sf = session_factory

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        with self._sf() as session:
            row = session.get(UserModel, user_id)
            return self._user_to_domain(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._sf() as session:
            row = session.query(UserModel).filter(UserModel.username == username).first()
            return self._user_to_domain(row) if row else None

    def add_user(self, user: User) -> None:
        with self._sf() as session:
            session.add(UserModel(
                id=user.id,
                username=user.username,
                email=user.email,
                total_points=user.total_points,
                total_carbon_saved=user.total_carbon_saved,
                level=user.level,
                avatar_url=user.avatar_url,
                version=user.version,
                created_at=user.created_at,
            ))
            try:
                session.commit()
            except IntegrityError as exc:
                raise ValidationError(
                    f"User {user.username!r} conflicts with an existing account"
                ) from exc

    # ------------------------------------------------------------------
    # Activities and rewards
    # ------------------------------------------------------------------

    def get_activity(self, activity_id: str) -> Optional[Activity]:
        with self._sf() as session:
            row = session.get(ActivityModel, activity_id)
            return self._activity_to_domain(row) if row else None

    def list_activities(self, user_id: str) -> List[Activity]:
        with self._sf() as session:
            rows = (
                session.query(ActivityModel)
                .filter(ActivityModel.user_id == user_id)
                .order_by(ActivityModel.activity_date.desc())
                .all()
            )
            return [self._activity_to_domain(r) for r in rows]

    def get_reward(self, reward_id: str) -> Optional[Reward]:
        with self._sf() as session:
            row = session.get(RewardModel, reward_id)
            return self._reward_to_domain(row) if row else None

    def list_rewards(self, user_id: str) -> List[Reward]:
        with self._sf() as session:
            rows = (
                session.query(RewardModel)
                .filter(RewardModel.user_id == user_id)
                .order_by(RewardModel.unlocked_at.desc())
                .all()
            )
            return [self._reward_to_domain(r) for r in rows]

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def commit(self, user: User, activities: list, rewards: list, expected_version: int) -> None:
        """Compare-and-swap the user row and insert new records in one transaction."""
        with self._sf() as session:
            result = session.execute(
                update(UserModel)
                .where(UserModel.id == user.id, UserModel.version == expected_version)
                .values(
                    total_points=user.total_points,
                    total_carbon_saved=user.total_carbon_saved,
                    level=user.level,
                    version=user.version,
                )
            )
            if result.rowcount != 1:
                session.rollback()
                log.warning("Stale commit for user %s at version %s", user.id, expected_version)
                raise ConflictError(f"User {user.id} was modified concurrently")

            for a in activities:
                session.add(ActivityModel(
                    id=a.id,
                    user_id=a.user_id,
                    category=a.category,
                    activity_type=a.activity_type,
                    quantity=a.quantity,
                    unit=a.unit,
                    carbon_saved=a.carbon_saved,
                    points_earned=a.points_earned,
                    location=a.location.to_dict() if a.location else None,
                    notes=a.notes,
                    activity_date=a.activity_date,
                    created_at=a.created_at,
                ))
            for r in rewards:
                session.add(RewardModel(
                    id=r.id,
                    user_id=r.user_id,
                    milestone_key=r.milestone_key,
                    reward_type=r.reward_type.value,
                    title=r.title,
                    description=r.description,
                    icon_name=r.icon_name,
                    points_awarded=r.points_awarded,
                    unlocked_at=r.unlocked_at,
                ))
            try:
                session.commit()
            except IntegrityError as exc:
                raise ConflictError(f"Reward already held by user {user.id}") from exc

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _user_to_domain(row: UserModel) -> User:
        return User(
            username=row.username,
            email=row.email,
            user_id=row.id,
            total_points=row.total_points,
            total_carbon_saved=row.total_carbon_saved,
            level=row.level,
            avatar_url=row.avatar_url,
            created_at=row.created_at,
            version=row.version,
        )

    @staticmethod
    def _activity_to_domain(row: ActivityModel) -> Activity:
        return Activity(
            user_id=row.user_id,
            category=row.category,
            activity_type=row.activity_type,
            quantity=row.quantity,
            unit=row.unit,
            carbon_saved=row.carbon_saved,
            points_earned=row.points_earned,
            activity_date=row.activity_date,
            activity_id=row.id,
            location=Location.from_dict(row.location),
            notes=row.notes,
            created_at=row.created_at,
        )

    @staticmethod
    def _reward_to_domain(row: RewardModel) -> Reward:
        return Reward(
            user_id=row.user_id,
            milestone_key=row.milestone_key,
            reward_type=RewardType(row.reward_type),
            title=row.title,
            description=row.description,
            icon_name=row.icon_name,
            points_awarded=row.points_awarded,
            reward_id=row.id,
            unlocked_at=row.unlocked_at,
        )
