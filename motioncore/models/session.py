"""
Workout session database models.

Three session kinds share the core session columns through
`CoreSessionMixin`:
- CardioSession: indoor machine workouts (crosstrainer, ergometer)
- StrengthSession: gym workouts made of exercise sets
- OutdoorSession: cycling, running, hiking, ...

Enum-typed attributes are stored as raw values (`*_raw` columns) and exposed
through properties that decode with a documented fallback member.
"""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from motioncore.core.database import Base
from motioncore.models.types import (
    CardioDevice,
    Intensity,
    OutdoorActivity,
    StrengthWorkoutType,
    TrainingProgram,
    WeatherCondition,
    WorkoutType,
    decode_enum,
)

if TYPE_CHECKING:
    from motioncore.models.exercise_set import ExerciseSet
    from motioncore.models.plan import TrainingPlan


DIFFICULTY_MIN = 1
DIFFICULTY_MAX = 25


def non_negative(value: Optional[float]) -> Optional[float]:
    """Clamp a numeric value to >= 0, passing None through."""
    if value is None:
        return None
    return max(value, 0)


def clamp_difficulty(value: Optional[int]) -> int:
    if value is None:
        return DIFFICULTY_MIN
    return min(max(value, DIFFICULTY_MIN), DIFFICULTY_MAX)


def format_minutes(minutes: int) -> str:
    """Format a duration like "45 Min", "2 Std" or "1:30 Std"."""
    if minutes < 60:
        return f"{minutes} Min"
    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return f"{hours} Std"
    return f"{hours}:{rest:02d} Std"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class CoreSessionMixin:
    """Columns and behaviour shared by every session kind."""

    kind: ClassVar[WorkoutType]

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_uuid: Mapped[uuid.UUID] = mapped_column(Uuid, default=uuid.uuid4)

    # Core data
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)
    duration: Mapped[int] = mapped_column(Integer, default=0)  # minutes
    calories: Mapped[int] = mapped_column(Integer, default=0)
    heart_rate: Mapped[int] = mapped_column(Integer, default=0)  # 0 = unknown
    max_heart_rate: Mapped[int] = mapped_column(Integer, default=0)
    body_weight: Mapped[float] = mapped_column(Float, default=0.0)  # kg
    notes: Mapped[str] = mapped_column(Text, default="")
    intensity_raw: Mapped[int] = mapped_column(Integer, default=0)

    # Session status
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    is_live_session: Mapped[bool] = mapped_column(Boolean, default=False)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Subjective rating
    perceived_exertion: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # RPE 1-10
    energy_level_before: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 1-5

    # Health integration
    health_kit_workout_uuid: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    device_source: Mapped[str] = mapped_column(String(32), default="manual")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    def __init__(self, **kwargs: Any):
        # Column defaults only apply on INSERT; in-memory sessions need them too.
        # Defaults go first so typed properties (intensity=...) win over *_raw defaults.
        values = self.field_defaults()
        values.update(kwargs)
        super().__init__(**values)

    @classmethod
    def field_defaults(cls) -> Dict[str, Any]:
        return {
            "id": uuid.uuid4(),
            "session_uuid": uuid.uuid4(),
            "date": datetime.now(),
            "duration": 0,
            "calories": 0,
            "heart_rate": 0,
            "max_heart_rate": 0,
            "body_weight": 0.0,
            "notes": "",
            "intensity_raw": Intensity.NONE.value,
            "is_completed": False,
            "is_live_session": False,
            "device_source": "manual",
        }

    # ---- typed enum access ----

    @property
    def intensity(self) -> Intensity:
        return decode_enum(Intensity, self.intensity_raw).or_default(Intensity.NONE)

    @intensity.setter
    def intensity(self, value: Intensity) -> None:
        self.intensity_raw = Intensity(value).value

    # ---- derived values ----

    @property
    def mets(self) -> float:
        """Metabolic equivalent: kcal per hour per kg body weight."""
        if self.body_weight <= 0 or self.duration <= 0:
            return 0.0
        return (self.calories / (self.duration / 60.0)) / self.body_weight

    @property
    def actual_duration(self) -> Optional[int]:
        """Whole minutes between start and completion, if both are known."""
        if self.started_at is None or self.completed_at is None:
            return None
        return int((self.completed_at - self.started_at).total_seconds() / 60)

    @property
    def is_active(self) -> bool:
        return self.started_at is not None and not self.is_completed

    @property
    def formatted_duration(self) -> str:
        return format_minutes(self.duration)

    @property
    def has_heart_rate_data(self) -> bool:
        return self.heart_rate > 0 or self.max_heart_rate > 0

    @property
    def is_linked_to_health_kit(self) -> bool:
        return self.health_kit_workout_uuid is not None

    @property
    def has_subjective_rating(self) -> bool:
        return self.perceived_exertion is not None or self.energy_level_before is not None

    # ---- live session control ----

    def start(self, now: Optional[datetime] = None) -> None:
        """Start a live session."""
        self.started_at = now or datetime.now()
        self.is_completed = False
        self.is_live_session = True

    def complete(self, now: Optional[datetime] = None) -> None:
        """Finish the session and store the measured duration."""
        self.completed_at = now or datetime.now()
        self.is_completed = True
        minutes = self.actual_duration
        if minutes is not None:
            self.duration = minutes

    def core_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "kind": self.kind.value,
            "date": _iso(self.date),
            "duration": self.duration,
            "calories": self.calories,
            "heartRate": self.heart_rate,
            "maxHeartRate": self.max_heart_rate,
            "bodyWeight": self.body_weight,
            "notes": self.notes,
            "intensity": self.intensity.value,
            "isCompleted": self.is_completed,
            "isLiveSession": self.is_live_session,
            "startedAt": _iso(self.started_at),
            "completedAt": _iso(self.completed_at),
            "perceivedExertion": self.perceived_exertion,
            "energyLevelBefore": self.energy_level_before,
            "healthKitWorkoutUUID": (
                str(self.health_kit_workout_uuid) if self.health_kit_workout_uuid else None
            ),
            "deviceSource": self.device_source,
            "mets": round(self.mets, 2),
        }


class CardioSession(CoreSessionMixin, Base):
    """Indoor cardio machine workout."""

    __tablename__ = "cardio_sessions"

    kind = WorkoutType.CARDIO

    distance: Mapped[float] = mapped_column(Float, default=0.0)  # km
    difficulty: Mapped[int] = mapped_column(Integer, default=DIFFICULTY_MIN)  # 1-25
    cardio_device_raw: Mapped[int] = mapped_column(Integer, default=0)
    training_program_raw: Mapped[str] = mapped_column(String(32), default=TrainingProgram.RANDOM.value)

    @classmethod
    def field_defaults(cls) -> Dict[str, Any]:
        defaults = super().field_defaults()
        defaults.update(
            distance=0.0,
            difficulty=DIFFICULTY_MIN,
            cardio_device_raw=CardioDevice.NONE.value,
            training_program_raw=TrainingProgram.RANDOM.value,
        )
        return defaults

    @validates("duration", "calories", "distance", "heart_rate", "max_heart_rate", "body_weight")
    def _validate_non_negative(self, key: str, value: Any) -> Any:
        return non_negative(value)

    @validates("difficulty")
    def _validate_difficulty(self, key: str, value: Optional[int]) -> int:
        return clamp_difficulty(value)

    @property
    def cardio_device(self) -> CardioDevice:
        return decode_enum(CardioDevice, self.cardio_device_raw).or_default(CardioDevice.NONE)

    @cardio_device.setter
    def cardio_device(self, value: CardioDevice) -> None:
        self.cardio_device_raw = CardioDevice(value).value

    @property
    def training_program(self) -> TrainingProgram:
        return decode_enum(TrainingProgram, self.training_program_raw).or_default(TrainingProgram.RANDOM)

    @training_program.setter
    def training_program(self, value: TrainingProgram) -> None:
        self.training_program_raw = TrainingProgram(value).value

    @property
    def average_speed(self) -> float:
        """Average speed in meters per minute."""
        if self.duration <= 0:
            return 0.0
        return (self.distance * 1000.0) / self.duration

    @property
    def relative_caloric_density(self) -> float:
        """kcal burned per minute per kg body weight."""
        if self.duration <= 0 or self.body_weight <= 0:
            return 0.0
        return self.calories / self.duration / self.body_weight

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        data = self.core_dict()
        data.update(
            distance=self.distance,
            difficulty=self.difficulty,
            cardioDevice=self.cardio_device.value,
            trainingProgram=self.training_program.value,
            averageSpeed=round(self.average_speed, 2),
        )
        return data


class StrengthSession(CoreSessionMixin, Base):
    """Gym workout made of exercise sets."""

    __tablename__ = "strength_sessions"

    kind = WorkoutType.STRENGTH

    workout_type_raw: Mapped[str] = mapped_column(String(32), default=StrengthWorkoutType.FULL_BODY.value)

    # Link to the plan this session was generated from
    source_training_plan_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("training_plans.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    exercise_sets: Mapped[List["ExerciseSet"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ExerciseSet.set_number",
    )
    source_training_plan: Mapped[Optional["TrainingPlan"]] = relationship(
        back_populates="generated_sessions",
        lazy="selectin",
    )

    @classmethod
    def field_defaults(cls) -> Dict[str, Any]:
        defaults = super().field_defaults()
        defaults["workout_type_raw"] = StrengthWorkoutType.FULL_BODY.value
        return defaults

    @validates("duration", "calories", "heart_rate", "max_heart_rate", "body_weight")
    def _validate_non_negative(self, key: str, value: Any) -> Any:
        return non_negative(value)

    @property
    def workout_type(self) -> StrengthWorkoutType:
        return decode_enum(StrengthWorkoutType, self.workout_type_raw).or_default(
            StrengthWorkoutType.FULL_BODY
        )

    @workout_type.setter
    def workout_type(self, value: StrengthWorkoutType) -> None:
        self.workout_type_raw = StrengthWorkoutType(value).value

    @property
    def total_sets(self) -> int:
        return len(self.exercise_sets)

    @property
    def exercises_performed(self) -> int:
        return len({s.exercise_name for s in self.exercise_sets})

    @property
    def total_volume(self) -> float:
        """Sum of weight x reps over all sets."""
        return sum(s.volume for s in self.exercise_sets)

    @property
    def completed_sets(self) -> int:
        return sum(1 for s in self.exercise_sets if s.is_completed)

    @property
    def progress(self) -> float:
        """Share of completed sets (0.0 - 1.0)."""
        if not self.exercise_sets:
            return 0.0
        return self.completed_sets / self.total_sets

    @property
    def all_sets_completed(self) -> bool:
        return bool(self.exercise_sets) and all(s.is_completed for s in self.exercise_sets)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        data = self.core_dict()
        data.update(
            workoutType=self.workout_type.value,
            sourceTrainingPlanId=(
                str(self.source_training_plan_id) if self.source_training_plan_id else None
            ),
            totalSets=self.total_sets,
            completedSets=self.completed_sets,
            totalVolume=self.total_volume,
            exerciseSets=[s.to_dict() for s in self.exercise_sets],
        )
        return data


class OutdoorSession(CoreSessionMixin, Base):
    """Outdoor activity (cycling, running, hiking, ...)."""

    __tablename__ = "outdoor_sessions"

    kind = WorkoutType.OUTDOOR

    distance: Mapped[float] = mapped_column(Float, default=0.0)  # km
    elevation_gain: Mapped[float] = mapped_column(Float, default=0.0)  # m
    average_speed: Mapped[float] = mapped_column(Float, default=0.0)  # km/h, recorded
    max_speed: Mapped[float] = mapped_column(Float, default=0.0)  # km/h

    # Route
    route_name: Mapped[str] = mapped_column(String(200), default="")
    start_location: Mapped[str] = mapped_column(String(200), default="")
    end_location: Mapped[str] = mapped_column(String(200), default="")

    # Weather
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # °C
    weather_condition_raw: Mapped[str] = mapped_column(String(32), default=WeatherCondition.UNKNOWN.value)

    outdoor_activity_raw: Mapped[str] = mapped_column(String(32), default=OutdoorActivity.CYCLING.value)

    @classmethod
    def field_defaults(cls) -> Dict[str, Any]:
        defaults = super().field_defaults()
        defaults.update(
            distance=0.0,
            elevation_gain=0.0,
            average_speed=0.0,
            max_speed=0.0,
            route_name="",
            start_location="",
            end_location="",
            weather_condition_raw=WeatherCondition.UNKNOWN.value,
            outdoor_activity_raw=OutdoorActivity.CYCLING.value,
        )
        return defaults

    @validates(
        "duration", "calories", "distance", "elevation_gain", "average_speed",
        "max_speed", "heart_rate", "max_heart_rate", "body_weight",
    )
    def _validate_non_negative(self, key: str, value: Any) -> Any:
        return non_negative(value)

    @property
    def outdoor_activity(self) -> OutdoorActivity:
        return decode_enum(OutdoorActivity, self.outdoor_activity_raw).or_default(OutdoorActivity.CYCLING)

    @outdoor_activity.setter
    def outdoor_activity(self, value: OutdoorActivity) -> None:
        self.outdoor_activity_raw = OutdoorActivity(value).value

    @property
    def weather_condition(self) -> WeatherCondition:
        return decode_enum(WeatherCondition, self.weather_condition_raw).or_default(WeatherCondition.UNKNOWN)

    @weather_condition.setter
    def weather_condition(self, value: WeatherCondition) -> None:
        self.weather_condition_raw = WeatherCondition(value).value

    @property
    def pace_per_km(self) -> float:
        """Pace in minutes per km."""
        if self.distance <= 0 or self.duration <= 0:
            return 0.0
        return self.duration / self.distance

    @property
    def average_speed_meters_per_minute(self) -> float:
        if self.duration <= 0:
            return 0.0
        return (self.distance * 1000.0) / self.duration

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        data = self.core_dict()
        data.update(
            distance=self.distance,
            elevationGain=self.elevation_gain,
            averageSpeed=self.average_speed,
            maxSpeed=self.max_speed,
            routeName=self.route_name,
            startLocation=self.start_location,
            endLocation=self.end_location,
            temperature=self.temperature,
            weatherCondition=self.weather_condition.value,
            outdoorActivity=self.outdoor_activity.value,
            pacePerKm=round(self.pace_per_km, 2),
        )
        return data


SESSION_MODELS = {
    WorkoutType.CARDIO: CardioSession,
    WorkoutType.STRENGTH: StrengthSession,
    WorkoutType.OUTDOOR: OutdoorSession,
}
