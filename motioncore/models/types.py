"""
Enumerations used by the workout models, and raw-value decoding.

Enum values are persisted as their raw value (int or str). Reading a raw
value back goes through `decode_enum`, which never raises: it returns either
`Known(member)` or `UnknownVariant(raw)` and leaves the fallback decision to
the caller.
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Generic, Type, TypeVar, Union

E = TypeVar("E", bound=Enum)


class Intensity(IntEnum):
    """Perceived load of a session (0 = not rated)."""
    NONE = 0
    VERY_EASY = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    VERY_HARD = 5


class CardioDevice(IntEnum):
    """Indoor cardio machine."""
    NONE = 0
    CROSSTRAINER = 1
    ERGOMETER = 2


class TrainingProgram(str, Enum):
    """Program selected on the cardio machine."""
    MANUAL = "manual"
    FAT_BURN = "fatBurn"
    CARDIO = "cardio"
    HILL = "hill"
    RANDOM = "random"
    FIT_TEST = "fitTest"

    @property
    def label(self) -> str:
        return {
            TrainingProgram.MANUAL: "Manuell",
            TrainingProgram.FAT_BURN: "Fettabbau",
            TrainingProgram.CARDIO: "Cardio",
            TrainingProgram.HILL: "Hügel",
            TrainingProgram.RANDOM: "Zufall",
            TrainingProgram.FIT_TEST: "Fit Test",
        }[self]


class OutdoorActivity(str, Enum):
    CYCLING = "cycling"
    ROAD_BIKE = "roadBike"
    MOUNTAIN_BIKE = "mountainBike"
    RUNNING = "running"
    TRAIL_RUNNING = "trailRunning"
    HIKING = "hiking"
    WALKING = "walking"
    OTHER = "other"


class WeatherCondition(str, Enum):
    UNKNOWN = "unknown"
    SUNNY = "sunny"
    PARTLY_CLOUDY = "partlyCloudy"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    WINDY = "windy"
    COLD = "cold"
    HOT = "hot"
    SNOW = "snow"


class StrengthWorkoutType(str, Enum):
    FULL_BODY = "fullBody"
    UPPER = "upper"
    LOWER = "lower"
    PUSH = "push"
    PULL = "pull"
    LEGS = "legs"
    CORE = "core"
    CUSTOM = "custom"


class SetKind(str, Enum):
    WORK = "work"
    WARMUP = "warmup"
    DROP = "drop"
    AMRAP = "amrap"


class PlanType(str, Enum):
    CARDIO = "cardio"
    STRENGTH = "strength"
    OUTDOOR = "outdoor"
    MIXED = "mixed"


class WorkoutType(str, Enum):
    """Session kind, also used as the URL segment of the sessions API."""
    CARDIO = "cardio"
    STRENGTH = "strength"
    OUTDOOR = "outdoor"

    @property
    def label(self) -> str:
        return {
            WorkoutType.CARDIO: "Cardio",
            WorkoutType.STRENGTH: "Kraft",
            WorkoutType.OUTDOOR: "Outdoor",
        }[self]


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class UserActivityLevel(str, Enum):
    """Activity level with its TDEE multiplier."""
    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTRA_ACTIVE = "extra_active"

    @property
    def factor(self) -> float:
        return _ACTIVITY_FACTORS[self]


_ACTIVITY_FACTORS = {
    UserActivityLevel.SEDENTARY: 1.2,
    UserActivityLevel.LIGHTLY_ACTIVE: 1.375,
    UserActivityLevel.MODERATELY_ACTIVE: 1.55,
    UserActivityLevel.VERY_ACTIVE: 1.725,
    UserActivityLevel.EXTRA_ACTIVE: 1.9,
}


# ========================================
# Raw value decoding
# ========================================

@dataclass(frozen=True)
class Known(Generic[E]):
    """A raw value that maps to an enum member."""
    value: E

    @property
    def is_known(self) -> bool:
        return True

    def or_default(self, default: E) -> E:
        return self.value


@dataclass(frozen=True)
class UnknownVariant:
    """A raw value with no matching enum member."""
    raw: Any

    @property
    def is_known(self) -> bool:
        return False

    def or_default(self, default: E) -> E:
        return default


EnumDecoding = Union[Known, UnknownVariant]


def decode_enum(enum_cls: Type[E], raw: Any) -> EnumDecoding:
    """
    Decode a persisted raw value into an enum member.

    Args:
        enum_cls: Target enum class
        raw: Stored raw value (int for IntEnum, str for str enums)

    Returns:
        Known(member) or UnknownVariant(raw)
    """
    if isinstance(raw, enum_cls):
        return Known(raw)
    # bool is an int subclass; True must not decode to member 1
    if isinstance(raw, bool):
        return UnknownVariant(raw)
    try:
        return Known(enum_cls(raw))
    except (ValueError, TypeError):
        return UnknownVariant(raw)
