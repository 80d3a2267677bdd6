"""
Cardio statistics engine.

Builds on `SessionCalcEngine` with the cardio-only values: distance,
METs, caloric density, device and training program breakdowns.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from motioncore.models.session import CardioSession
from motioncore.models.types import CardioDevice, Intensity, TrainingProgram
from motioncore.services.analytics.calculator import (
    DonutChartData,
    SessionCalcEngine,
    TrendPoint,
)


@dataclass(frozen=True)
class IntensitySummary:
    intensity: Intensity
    count: int
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return {"intensity": self.intensity.value, "count": self.count, "total": self.total}


@dataclass(frozen=True)
class ProgramSummary:
    program: TrainingProgram
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"program": self.program.value, "count": self.count}


class StatisticCalcEngine:
    """
    Statistics over cardio sessions.

    Usage:
        stats = StatisticCalcEngine(cardio_sessions)
        stats.total_distance
        stats.program_distribution
    """

    def __init__(self, cardio_sessions: Iterable[CardioSession], now: Optional[datetime] = None):
        self.core: SessionCalcEngine[CardioSession] = SessionCalcEngine(cardio_sessions, now=now)

    @property
    def sessions(self) -> Tuple[CardioSession, ...]:
        return self.core.sessions

    # ---- core delegations ----

    @property
    def total_workouts(self) -> int:
        return self.core.total_sessions

    @property
    def total_calories(self) -> int:
        return self.core.total_calories

    @property
    def average_heart_rate(self) -> int:
        return self.core.average_heart_rate

    @property
    def average_duration(self) -> int:
        return self.core.average_duration

    @property
    def average_intensity(self) -> float:
        return self.core.average_intensity

    @property
    def trend_heart_rate(self) -> List[TrendPoint]:
        return self.core.heart_rate_trend

    @property
    def trend_calories(self) -> List[TrendPoint]:
        return self.core.calories_trend

    # ---- cardio values ----

    @property
    def total_distance(self) -> float:
        return self.core.total(lambda s: s.distance)

    @property
    def average_mets(self) -> float:
        return self.core.average(lambda s: s.mets, lambda s: s.mets > 0)

    @property
    def average_caloric_density(self) -> float:
        """Mean relative caloric density over all sessions, zeros included."""
        return self.core.average(lambda s: s.relative_caloric_density)

    def workout_count_device(self, device: CardioDevice) -> int:
        return self.core.count_where(lambda s: s.cardio_device == device)

    def intensity_count(self, intensity: Intensity) -> int:
        return self.core.intensity_count(intensity)

    def intensity_summary(self, intensity: Intensity) -> IntensitySummary:
        return IntensitySummary(
            intensity=intensity,
            count=self.core.intensity_count(intensity),
            total=self.core.total_sessions,
        )

    @property
    def trend_distance(self) -> List[TrendPoint]:
        return self.core.trend(lambda s: s.distance, lambda s: s.distance > 0)

    def trend_distance_device(self, device: CardioDevice) -> List[TrendPoint]:
        return self.core.trend(
            lambda s: s.distance,
            lambda s: s.cardio_device == device and s.distance > 0,
        )

    @property
    def trend_caloric_density(self) -> List[TrendPoint]:
        return self.core.trend(lambda s: s.relative_caloric_density)

    @property
    def program_distribution(self) -> List[ProgramSummary]:
        """Sessions per training program, most used first."""
        counts = self.core.group_by(lambda s: s.training_program)
        summaries = [ProgramSummary(program=p, count=c) for p, c in counts.items()]
        return sorted(summaries, key=lambda summary: summary.count, reverse=True)

    @property
    def program_data(self) -> List[DonutChartData]:
        return [
            DonutChartData(label=summary.program.label, value=summary.count)
            for summary in self.program_distribution
        ]

    # ---- time windows ----

    @property
    def this_week(self) -> SessionCalcEngine[CardioSession]:
        return self.core.this_week

    @property
    def this_month(self) -> SessionCalcEngine[CardioSession]:
        return self.core.this_month

    @property
    def this_year(self) -> SessionCalcEngine[CardioSession]:
        return self.core.this_year

    def last_days(self, days: int) -> SessionCalcEngine[CardioSession]:
        return self.core.last_days(days)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            **self.core.summary(),
            "totalWorkouts": self.total_workouts,
            "totalDistance": round(self.total_distance, 2),
            "averageMets": round(self.average_mets, 2),
            "averageCaloricDensity": round(self.average_caloric_density, 4),
            "workoutCountDevice": {
                device.name.lower(): self.workout_count_device(device) for device in CardioDevice
            },
            "intensitySummary": [self.intensity_summary(i).to_dict() for i in Intensity],
            "programDistribution": [p.to_dict() for p in self.program_distribution],
            "programData": [d.to_dict() for d in self.program_data],
            "trendDistance": [p.to_dict() for p in self.trend_distance],
            "trendHeartRate": [p.to_dict() for p in self.trend_heart_rate],
            "trendCalories": [p.to_dict() for p in self.trend_calories],
        }
