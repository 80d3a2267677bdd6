"""
Session Store - Database operations for sessions, plans and user settings.
"""
import uuid
from typing import Dict, Iterable, List, Optional, Sequence, Type

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from motioncore.core.logging import get_logger
from motioncore.models import SESSION_MODELS, TrainingPlan, UserSettings
from motioncore.models.session import CoreSessionMixin
from motioncore.models.types import WorkoutType
from motioncore.models.user_settings import SETTINGS_ROW_ID

logger = get_logger(__name__)


class SessionStore:
    """
    Database store for workout sessions.

    The store only flushes; the surrounding request (or caller) owns the
    transaction and commits or rolls back.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def model_for(kind: WorkoutType) -> Type[CoreSessionMixin]:
        return SESSION_MODELS[WorkoutType(kind)]

    async def list(self, kind: WorkoutType, newest_first: bool = True) -> List[CoreSessionMixin]:
        """
        Fetch all sessions of a kind sorted by date.

        Args:
            kind: Session kind
            newest_first: Sort descending (default) or ascending by date

        Returns:
            List of sessions
        """
        model = self.model_for(kind)
        order = model.date.desc() if newest_first else model.date.asc()
        result = await self.db.execute(select(model).order_by(order))
        return list(result.scalars().all())

    async def list_all(self) -> Dict[WorkoutType, List[CoreSessionMixin]]:
        """Fetch the sessions of every kind, newest first."""
        return {kind: await self.list(kind) for kind in WorkoutType}

    async def get(self, kind: WorkoutType, session_id: uuid.UUID) -> Optional[CoreSessionMixin]:
        model = self.model_for(kind)
        result = await self.db.execute(select(model).where(model.id == session_id))
        return result.scalar_one_or_none()

    async def count(self, kind: WorkoutType) -> int:
        model = self.model_for(kind)
        result = await self.db.execute(select(func.count()).select_from(model))
        return result.scalar_one()

    async def add(self, session: CoreSessionMixin) -> CoreSessionMixin:
        self.db.add(session)
        await self.db.flush()
        await self.db.refresh(session)

        logger.debug(
            "Session stored",
            session_id=str(session.id),
            kind=session.kind.value,
        )
        return session

    async def add_all(self, sessions: Sequence[CoreSessionMixin]) -> int:
        """Insert many sessions in the current transaction."""
        self.db.add_all(sessions)
        await self.db.flush()
        return len(sessions)

    async def delete(self, session: CoreSessionMixin) -> None:
        await self.db.delete(session)
        await self.db.flush()

        logger.debug("Session deleted", session_id=str(session.id), kind=session.kind.value)

    async def delete_many(self, items: Iterable[object]) -> int:
        """Delete ORM objects one by one so relationship cascades apply."""
        count = 0
        for item in items:
            await self.db.delete(item)
            count += 1
        await self.db.flush()
        return count

    # ========================================
    # Training plans
    # ========================================

    async def list_plans(self) -> List[TrainingPlan]:
        result = await self.db.execute(
            select(TrainingPlan).order_by(TrainingPlan.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_plan(self, plan_id: uuid.UUID) -> Optional[TrainingPlan]:
        result = await self.db.execute(select(TrainingPlan).where(TrainingPlan.id == plan_id))
        return result.scalar_one_or_none()

    async def add_plan(self, plan: TrainingPlan) -> TrainingPlan:
        self.db.add(plan)
        await self.db.flush()
        await self.db.refresh(plan)
        return plan

    # ========================================
    # User settings
    # ========================================

    async def get_user_settings(self) -> UserSettings:
        """Load the settings row, creating it with defaults on first access."""
        settings = await self.db.get(UserSettings, SETTINGS_ROW_ID)
        if settings is None:
            settings = UserSettings()
            self.db.add(settings)
            await self.db.flush()
            logger.info("Created default user settings")
        return settings
