"""
User settings database model.

Single-row table holding the body data used by the health metrics and the
defaults prefilled into new workout forms. Loaded per request and passed
explicitly to whatever needs it.
"""
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from motioncore.core.database import Base
from motioncore.models.session import clamp_difficulty, non_negative
from motioncore.models.types import (
    CardioDevice,
    Gender,
    TrainingProgram,
    UserActivityLevel,
    decode_enum,
)

SETTINGS_ROW_ID = 1


class UserSettings(Base):
    """Persisted user settings (one row)."""

    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SETTINGS_ROW_ID)

    # Body data
    body_height_cm: Mapped[int] = mapped_column(Integer, default=0)  # 0 = unknown
    birthday: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    gender_raw: Mapped[str] = mapped_column(String(16), default=Gender.MALE.value)
    activity_level_raw: Mapped[str] = mapped_column(
        String(32),
        default=UserActivityLevel.MODERATELY_ACTIVE.value,
    )

    # Daily goals
    daily_active_calorie_goal: Mapped[int] = mapped_column(Integer, default=0)
    daily_steps_goal: Mapped[int] = mapped_column(Integer, default=0)

    # Workout form defaults
    default_device_raw: Mapped[int] = mapped_column(Integer, default=CardioDevice.NONE.value)
    default_program_raw: Mapped[str] = mapped_column(String(32), default=TrainingProgram.MANUAL.value)
    default_duration: Mapped[int] = mapped_column(Integer, default=0)
    default_difficulty: Mapped[int] = mapped_column(Integer, default=1)
    show_empty_fields: Mapped[bool] = mapped_column(Boolean, default=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.now,
        onupdate=datetime.now,
    )

    def __init__(self, **kwargs: Any):
        values: Dict[str, Any] = {
            "id": SETTINGS_ROW_ID,
            "body_height_cm": 0,
            "gender_raw": Gender.MALE.value,
            "activity_level_raw": UserActivityLevel.MODERATELY_ACTIVE.value,
            "daily_active_calorie_goal": 0,
            "daily_steps_goal": 0,
            "default_device_raw": CardioDevice.NONE.value,
            "default_program_raw": TrainingProgram.MANUAL.value,
            "default_duration": 0,
            "default_difficulty": 1,
            "show_empty_fields": False,
        }
        values.update(kwargs)
        super().__init__(**values)

    @validates("body_height_cm", "daily_active_calorie_goal", "daily_steps_goal", "default_duration")
    def _validate_non_negative(self, key: str, value: Any) -> Any:
        return non_negative(value)

    @validates("default_difficulty")
    def _validate_difficulty(self, key: str, value: Optional[int]) -> int:
        return clamp_difficulty(value)

    @property
    def gender(self) -> Gender:
        return decode_enum(Gender, self.gender_raw).or_default(Gender.MALE)

    @gender.setter
    def gender(self, value: Gender) -> None:
        self.gender_raw = Gender(value).value

    @property
    def activity_level(self) -> UserActivityLevel:
        return decode_enum(UserActivityLevel, self.activity_level_raw).or_default(
            UserActivityLevel.MODERATELY_ACTIVE
        )

    @activity_level.setter
    def activity_level(self, value: UserActivityLevel) -> None:
        self.activity_level_raw = UserActivityLevel(value).value

    @property
    def default_device(self) -> CardioDevice:
        return decode_enum(CardioDevice, self.default_device_raw).or_default(CardioDevice.NONE)

    @default_device.setter
    def default_device(self, value: CardioDevice) -> None:
        self.default_device_raw = CardioDevice(value).value

    @property
    def default_program(self) -> TrainingProgram:
        return decode_enum(TrainingProgram, self.default_program_raw).or_default(TrainingProgram.MANUAL)

    @default_program.setter
    def default_program(self, value: TrainingProgram) -> None:
        self.default_program_raw = TrainingProgram(value).value

    def age(self, today: Optional[date] = None) -> int:
        """Full years since birthday, 0 when unknown."""
        if self.birthday is None:
            return 0
        today = today or date.today()
        years = today.year - self.birthday.year
        if (today.month, today.day) < (self.birthday.month, self.birthday.day):
            years -= 1
        return max(years, 0)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "bodyHeightCm": self.body_height_cm,
            "birthday": self.birthday.isoformat() if self.birthday else None,
            "age": self.age(),
            "gender": self.gender.value,
            "activityLevel": self.activity_level.value,
            "dailyActiveCalorieGoal": self.daily_active_calorie_goal,
            "dailyStepsGoal": self.daily_steps_goal,
            "defaultDevice": self.default_device.value,
            "defaultProgram": self.default_program.value,
            "defaultDuration": self.default_duration,
            "defaultDifficulty": self.default_difficulty,
            "showEmptyFields": self.show_empty_fields,
        }
