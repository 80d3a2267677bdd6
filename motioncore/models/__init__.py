from motioncore.models.session import (
    CardioSession,
    CoreSessionMixin,
    OutdoorSession,
    SESSION_MODELS,
    StrengthSession,
)
from motioncore.models.exercise_set import ExerciseSet
from motioncore.models.plan import TrainingPlan
from motioncore.models.user_settings import UserSettings

__all__ = [
    "CardioSession",
    "CoreSessionMixin",
    "OutdoorSession",
    "SESSION_MODELS",
    "StrengthSession",
    "ExerciseSet",
    "TrainingPlan",
    "UserSettings",
]
