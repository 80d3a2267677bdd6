"""
Exercise set database model.

A set belongs either to a strength session (performed set) or to a
training plan (template set).
"""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from motioncore.core.database import Base
from motioncore.models.session import non_negative
from motioncore.models.types import SetKind, decode_enum

if TYPE_CHECKING:
    from motioncore.models.plan import TrainingPlan
    from motioncore.models.session import StrengthSession


DEFAULT_REST_SECONDS = 90
DEFAULT_TARGET_RIR = 2


class ExerciseSet(Base):
    """Single set of an exercise."""

    __tablename__ = "exercise_sets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    exercise_name: Mapped[str] = mapped_column(String(200), default="")
    # Snapshots taken when the set was created, stable if the library changes
    exercise_name_snapshot: Mapped[str] = mapped_column(String(200), default="")
    exercise_uuid_snapshot: Mapped[str] = mapped_column(String(64), default="")
    exercise_media_asset_name: Mapped[str] = mapped_column(String(200), default="")
    is_unilateral_snapshot: Mapped[bool] = mapped_column(Boolean, default=False)

    set_number: Mapped[int] = mapped_column(Integer, default=1)
    weight: Mapped[float] = mapped_column(Float, default=0.0)  # kg
    weight_per_side: Mapped[float] = mapped_column(Float, default=0.0)  # kg, unilateral
    reps: Mapped[int] = mapped_column(Integer, default=0)
    duration: Mapped[int] = mapped_column(Integer, default=0)  # seconds (planks etc.)
    distance: Mapped[float] = mapped_column(Float, default=0.0)  # meters (farmer's walk)
    rest_seconds: Mapped[int] = mapped_column(Integer, default=DEFAULT_REST_SECONDS)

    # Targets
    target_reps_min: Mapped[int] = mapped_column(Integer, default=0)
    target_reps_max: Mapped[int] = mapped_column(Integer, default=0)
    target_rir: Mapped[int] = mapped_column(Integer, default=DEFAULT_TARGET_RIR)

    group_id: Mapped[str] = mapped_column(String(64), default="")  # supersets
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    set_kind_raw: Mapped[str] = mapped_column(String(16), default=SetKind.WORK.value)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=True)
    rpe: Mapped[int] = mapped_column(Integer, default=0)  # 0-10
    notes: Mapped[str] = mapped_column(Text, default="")

    session_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("strength_sessions.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    training_plan_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("training_plans.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    session: Mapped[Optional["StrengthSession"]] = relationship(back_populates="exercise_sets")
    training_plan: Mapped[Optional["TrainingPlan"]] = relationship(back_populates="template_sets")

    def __init__(self, **kwargs: Any):
        values: Dict[str, Any] = {
            "id": uuid.uuid4(),
            "exercise_name": "",
            "exercise_name_snapshot": "",
            "exercise_uuid_snapshot": "",
            "exercise_media_asset_name": "",
            "is_unilateral_snapshot": False,
            "set_number": 1,
            "weight": 0.0,
            "weight_per_side": 0.0,
            "reps": 0,
            "duration": 0,
            "distance": 0.0,
            "rest_seconds": DEFAULT_REST_SECONDS,
            "target_reps_min": 0,
            "target_reps_max": 0,
            "target_rir": DEFAULT_TARGET_RIR,
            "group_id": "",
            "sort_order": 0,
            "set_kind_raw": SetKind.WORK.value,
            "is_completed": True,
            "rpe": 0,
            "notes": "",
        }
        values.update(kwargs)
        super().__init__(**values)

    @validates("weight", "weight_per_side", "reps", "duration", "distance", "rest_seconds")
    def _validate_non_negative(self, key: str, value: Any) -> Any:
        return non_negative(value)

    @validates("rpe")
    def _validate_rpe(self, key: str, value: int) -> int:
        return min(max(value or 0, 0), 10)

    @property
    def set_kind(self) -> SetKind:
        return decode_enum(SetKind, self.set_kind_raw).or_default(SetKind.WORK)

    @set_kind.setter
    def set_kind(self, value: SetKind) -> None:
        self.set_kind_raw = SetKind(value).value

    @property
    def is_warmup(self) -> bool:
        return self.set_kind == SetKind.WARMUP

    @property
    def is_template(self) -> bool:
        return self.training_plan_id is not None and self.session_id is None

    @property
    def volume(self) -> float:
        return self.weight * self.reps

    @property
    def effective_weight(self) -> float:
        """Total load, doubling the per-side weight for unilateral exercises."""
        return self.weight_per_side * 2 if self.weight_per_side > 0 else self.weight

    @property
    def calculated_rir(self) -> int:
        """Reps in reserve derived from RPE."""
        return max(0, 10 - self.rpe)

    @property
    def is_in_target_range(self) -> bool:
        if self.target_reps_min <= 0 or self.target_reps_max <= 0:
            return True
        return self.target_reps_min <= self.reps <= self.target_reps_max

    @property
    def progression_hint(self) -> str:
        """Weight recommendation for the next workout."""
        if self.target_reps_min <= 0 or self.target_reps_max <= 0:
            return ""
        if self.reps < self.target_reps_min:
            return "Gewicht reduzieren"
        if self.reps > self.target_reps_max:
            return "Gewicht erhöhen"
        return "Im Zielbereich"

    @property
    def group_key(self) -> str:
        """Stable key for grouping sets of the same exercise."""
        return self.exercise_uuid_snapshot or self.exercise_name_snapshot or self.exercise_name

    def clone_for_session(self) -> "ExerciseSet":
        """
        Create a fresh, unlinked set for a new session from a template set.

        The copy starts uncompleted with a neutral RPE.
        """
        return ExerciseSet(
            exercise_name=self.exercise_name,
            exercise_name_snapshot=self.exercise_name_snapshot,
            exercise_uuid_snapshot=self.exercise_uuid_snapshot,
            exercise_media_asset_name=self.exercise_media_asset_name,
            is_unilateral_snapshot=self.is_unilateral_snapshot,
            set_number=self.set_number,
            weight=self.weight,
            weight_per_side=self.weight_per_side,
            reps=self.reps,
            duration=self.duration,
            distance=self.distance,
            rest_seconds=self.rest_seconds,
            set_kind_raw=self.set_kind_raw,
            is_completed=False,
            rpe=0,
            notes=self.notes,
            target_reps_min=self.target_reps_min,
            target_reps_max=self.target_reps_max,
            target_rir=self.target_rir,
            group_id=self.group_id,
            sort_order=self.sort_order,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "id": str(self.id),
            "exerciseName": self.exercise_name,
            "setNumber": self.set_number,
            "weight": self.weight,
            "weightPerSide": self.weight_per_side,
            "reps": self.reps,
            "duration": self.duration,
            "distance": self.distance,
            "restSeconds": self.rest_seconds,
            "setKind": self.set_kind.value,
            "isCompleted": self.is_completed,
            "rpe": self.rpe,
            "notes": self.notes,
            "targetRepsMin": self.target_reps_min,
            "targetRepsMax": self.target_reps_max,
            "targetRIR": self.target_rir,
            "groupId": self.group_id,
            "volume": self.volume,
        }
