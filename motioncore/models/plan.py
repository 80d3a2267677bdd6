"""
Training Plan database model.
"""
import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import Boolean, Date, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from motioncore.core.database import Base
from motioncore.models.types import PlanType, decode_enum

if TYPE_CHECKING:
    from motioncore.models.exercise_set import ExerciseSet
    from motioncore.models.session import StrengthSession


class TrainingPlan(Base):
    """Training plan stored in database."""

    __tablename__ = "training_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.now,
        onupdate=datetime.now,
    )
    title: Mapped[str] = mapped_column(String(200), default="")
    plan_description: Mapped[str] = mapped_column(Text, default="")
    start_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    plan_type_raw: Mapped[str] = mapped_column(String(16), default=PlanType.MIXED.value)

    template_sets: Mapped[List["ExerciseSet"]] = relationship(
        back_populates="training_plan",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ExerciseSet.sort_order",
    )
    # No delete cascade: removing a plan only clears the link on its sessions
    generated_sessions: Mapped[List["StrengthSession"]] = relationship(
        back_populates="source_training_plan",
        lazy="selectin",
    )

    def __init__(self, **kwargs: Any):
        values: Dict[str, Any] = {
            "id": uuid.uuid4(),
            "created_at": datetime.now(),
            "title": "",
            "plan_description": "",
            "start_date": date.today(),
            "is_active": True,
            "plan_type_raw": PlanType.MIXED.value,
        }
        values.update(kwargs)
        super().__init__(**values)

    @property
    def plan_type(self) -> PlanType:
        return decode_enum(PlanType, self.plan_type_raw).or_default(PlanType.MIXED)

    @plan_type.setter
    def plan_type(self, value: PlanType) -> None:
        self.plan_type_raw = PlanType(value).value

    def is_expired(self, today: Optional[date] = None) -> bool:
        if self.end_date is None:
            return False
        return self.end_date < (today or date.today())

    @property
    def duration_in_days(self) -> Optional[int]:
        if self.end_date is None:
            return None
        return (self.end_date - self.start_date).days

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "id": str(self.id),
            "createdAt": int(self.created_at.timestamp() * 1000),
            "title": self.title,
            "planDescription": self.plan_description,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "isActive": self.is_active,
            "planType": self.plan_type.value,
            "durationInDays": self.duration_in_days,
            "templateSets": [s.to_dict() for s in self.template_sets],
        }
