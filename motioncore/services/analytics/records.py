"""
Personal records engine for cardio sessions.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from motioncore.models.session import CardioSession
from motioncore.models.types import CardioDevice
from motioncore.services.analytics.calculator import SessionCalcEngine


def _session_dict(session: Optional[CardioSession]) -> Optional[Dict[str, Any]]:
    return session.to_dict() if session is not None else None


class RecordCalcEngine:
    """Best values over a set of cardio sessions. Every record is None when no session qualifies."""

    def __init__(self, cardio_sessions: Iterable[CardioSession], now: Optional[datetime] = None):
        self.core: SessionCalcEngine[CardioSession] = SessionCalcEngine(cardio_sessions, now=now)

    def _device(self, device: CardioDevice) -> SessionCalcEngine[CardioSession]:
        return self.core.filtered(lambda s: s.cardio_device == device)

    @property
    def best_ergometer_workout(self) -> Optional[CardioSession]:
        return self._device(CardioDevice.ERGOMETER).max_by(lambda s: s.distance)

    @property
    def best_crosstrainer_workout(self) -> Optional[CardioSession]:
        return self._device(CardioDevice.CROSSTRAINER).max_by(lambda s: s.distance)

    def fastest_for_device(self, device: CardioDevice) -> Optional[CardioSession]:
        return (
            self._device(device)
            .filtered(lambda s: s.average_speed > 0)
            .max_by(lambda s: s.average_speed)
        )

    @property
    def longest_distance_workout(self) -> Optional[CardioSession]:
        return self.core.max_by(lambda s: s.distance)

    @property
    def longest_duration_workout(self) -> Optional[CardioSession]:
        return self.core.longest_duration_session

    @property
    def highest_burned_calories_workout(self) -> Optional[CardioSession]:
        return self.core.highest_calories_session

    @property
    def lowest_body_weight(self) -> Optional[CardioSession]:
        return self.core.lowest_body_weight_session

    @property
    def highest_body_weight(self) -> Optional[CardioSession]:
        return self.core.highest_body_weight_session

    @property
    def highest_max_heart_rate_workout(self) -> Optional[CardioSession]:
        return self.core.highest_heart_rate_session

    @property
    def highest_average_heart_rate_workout(self) -> Optional[CardioSession]:
        return self.core.highest_average_heart_rate_session

    # ---- time windows ----

    @property
    def this_week_records(self) -> "RecordCalcEngine":
        return RecordCalcEngine(self.core.this_week.sessions, now=self.core.now)

    @property
    def this_month_records(self) -> "RecordCalcEngine":
        return RecordCalcEngine(self.core.this_month.sessions, now=self.core.now)

    @property
    def this_year_records(self) -> "RecordCalcEngine":
        return RecordCalcEngine(self.core.this_year.sessions, now=self.core.now)

    def records_last_days(self, days: int) -> "RecordCalcEngine":
        return RecordCalcEngine(self.core.last_days(days).sessions, now=self.core.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "bestErgometerWorkout": _session_dict(self.best_ergometer_workout),
            "bestCrosstrainerWorkout": _session_dict(self.best_crosstrainer_workout),
            "fastestErgometerWorkout": _session_dict(self.fastest_for_device(CardioDevice.ERGOMETER)),
            "fastestCrosstrainerWorkout": _session_dict(
                self.fastest_for_device(CardioDevice.CROSSTRAINER)
            ),
            "longestDistanceWorkout": _session_dict(self.longest_distance_workout),
            "longestDurationWorkout": _session_dict(self.longest_duration_workout),
            "highestBurnedCaloriesWorkout": _session_dict(self.highest_burned_calories_workout),
            "lowestBodyWeight": _session_dict(self.lowest_body_weight),
            "highestBodyWeight": _session_dict(self.highest_body_weight),
            "highestMaxHeartRateWorkout": _session_dict(self.highest_max_heart_rate_workout),
            "highestAverageHeartRateWorkout": _session_dict(self.highest_average_heart_rate_workout),
        }
