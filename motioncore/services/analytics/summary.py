"""
Cross-type summary engine (cardio + strength + outdoor).
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from motioncore.models.session import (
    CardioSession,
    CoreSessionMixin,
    OutdoorSession,
    StrengthSession,
    format_minutes,
)
from motioncore.models.types import WorkoutType
from motioncore.services.analytics.calculator import DonutChartData, SessionCalcEngine


@dataclass(frozen=True)
class WorkoutTypeSummary:
    workout_type: WorkoutType
    count: int
    calories: int
    duration: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workoutType": self.workout_type.value,
            "count": self.count,
            "calories": self.calories,
            "duration": self.duration,
            "percentage": round(self.percentage, 1),
        }


@dataclass(frozen=True)
class TypedSession:
    """A session together with its kind."""
    session: CoreSessionMixin
    workout_type: WorkoutType

    def to_dict(self) -> Dict[str, Any]:
        return {"workoutType": self.workout_type.value, "session": self.session.to_dict()}


class SummaryCalcEngine:
    """
    Totals and distributions across all session kinds.

    Args:
        cardio: Cardio sessions
        strength: Strength sessions
        outdoor: Outdoor sessions
        now: Reference time for windows and streaks
    """

    def __init__(
        self,
        cardio: Iterable[CardioSession] = (),
        strength: Iterable[StrengthSession] = (),
        outdoor: Iterable[OutdoorSession] = (),
        now: Optional[datetime] = None,
    ):
        self._now = now
        self.cardio_calc: SessionCalcEngine[CardioSession] = SessionCalcEngine(cardio, now=now)
        self.strength_calc: SessionCalcEngine[StrengthSession] = SessionCalcEngine(strength, now=now)
        self.outdoor_calc: SessionCalcEngine[OutdoorSession] = SessionCalcEngine(outdoor, now=now)

    @property
    def now(self) -> datetime:
        return self._now or datetime.now()

    def _calcs(self) -> List[Tuple[WorkoutType, SessionCalcEngine]]:
        return [
            (WorkoutType.CARDIO, self.cardio_calc),
            (WorkoutType.STRENGTH, self.strength_calc),
            (WorkoutType.OUTDOOR, self.outdoor_calc),
        ]

    # ---- totals ----

    @property
    def total_workouts(self) -> int:
        return sum(calc.total_sessions for _, calc in self._calcs())

    @property
    def total_calories(self) -> int:
        return sum(calc.total_calories for _, calc in self._calcs())

    @property
    def total_duration(self) -> int:
        return sum(calc.total_duration for _, calc in self._calcs())

    @property
    def formatted_total_duration(self) -> str:
        return format_minutes(self.total_duration)

    # ---- averages ----

    @property
    def average_heart_rate(self) -> int:
        """Per-kind average heart rates weighted by sessions with heart rate data."""
        weighted_sum = 0
        total_count = 0
        for _, calc in self._calcs():
            count = calc.count_where(lambda s: s.heart_rate > 0)
            weighted_sum += calc.average_heart_rate * count
            total_count += count
        if total_count == 0:
            return 0
        return weighted_sum // total_count

    @property
    def average_duration(self) -> int:
        if self.total_workouts == 0:
            return 0
        return self.total_duration // self.total_workouts

    @property
    def average_calories(self) -> int:
        if self.total_workouts == 0:
            return 0
        return self.total_calories // self.total_workouts

    # ---- distribution ----

    @property
    def workout_type_distribution(self) -> List[WorkoutTypeSummary]:
        """Count, calories, duration and share per kind. Kinds without sessions are left out."""
        total = self.total_workouts
        if total == 0:
            return []
        return [
            WorkoutTypeSummary(
                workout_type=workout_type,
                count=calc.total_sessions,
                calories=calc.total_calories,
                duration=calc.total_duration,
                percentage=calc.total_sessions / total * 100,
            )
            for workout_type, calc in self._calcs()
            if calc.total_sessions > 0
        ]

    @property
    def workout_type_chart_data(self) -> List[DonutChartData]:
        return [
            DonutChartData(label=summary.workout_type.label, value=summary.count)
            for summary in self.workout_type_distribution
        ]

    # ---- records across kinds ----

    def _best_across(self, attr: str) -> Optional[TypedSession]:
        best: Optional[TypedSession] = None
        for workout_type, calc in self._calcs():
            candidate = calc.max_by(lambda s: getattr(s, attr))
            if candidate is None:
                continue
            if best is None or getattr(best.session, attr) < getattr(candidate, attr):
                best = TypedSession(session=candidate, workout_type=workout_type)
        return best

    @property
    def highest_calories_burn(self) -> Optional[TypedSession]:
        return self._best_across("calories")

    @property
    def longest_workout(self) -> Optional[TypedSession]:
        return self._best_across("duration")

    # ---- streaks ----

    @property
    def training_days(self) -> List[date]:
        """Distinct training days, most recent first."""
        days = {s.date.date() for _, calc in self._calcs() for s in calc.sessions}
        return sorted(days, reverse=True)

    @property
    def current_streak(self) -> int:
        """Consecutive training days ending today or yesterday."""
        days = self.training_days
        if not days:
            return 0
        today = self.now.date()
        if days[0] not in (today, today - timedelta(days=1)):
            return 0
        streak = 0
        expected = days[0]
        for day in days:
            if day != expected:
                break
            streak += 1
            expected = day - timedelta(days=1)
        return streak

    @property
    def longest_streak(self) -> int:
        days = sorted(self.training_days)
        if not days:
            return 0
        longest = current = 1
        for previous, day in zip(days, days[1:]):
            if (day - previous).days == 1:
                current += 1
                longest = max(longest, current)
            else:
                current = 1
        return longest

    @property
    def average_workouts_per_week(self) -> float:
        """Workouts of the last 28 days divided by four."""
        return self.last_days(28).total_workouts / 4.0

    @property
    def workouts_this_week(self) -> int:
        return self.this_week.total_workouts

    @property
    def last_workout_date(self) -> Optional[date]:
        days = self.training_days
        return days[0] if days else None

    @property
    def days_since_last_workout(self) -> Optional[int]:
        last = self.last_workout_date
        if last is None:
            return None
        return (self.now.date() - last).days

    # ---- time windows ----

    def _window(
        self,
        cardio: SessionCalcEngine,
        strength: SessionCalcEngine,
        outdoor: SessionCalcEngine,
    ) -> "SummaryCalcEngine":
        return SummaryCalcEngine(
            cardio=cardio.sessions,
            strength=strength.sessions,
            outdoor=outdoor.sessions,
            now=self._now,
        )

    @property
    def this_week(self) -> "SummaryCalcEngine":
        return self._window(self.cardio_calc.this_week, self.strength_calc.this_week, self.outdoor_calc.this_week)

    @property
    def this_month(self) -> "SummaryCalcEngine":
        return self._window(
            self.cardio_calc.this_month, self.strength_calc.this_month, self.outdoor_calc.this_month
        )

    @property
    def this_year(self) -> "SummaryCalcEngine":
        return self._window(self.cardio_calc.this_year, self.strength_calc.this_year, self.outdoor_calc.this_year)

    def last_days(self, days: int) -> "SummaryCalcEngine":
        return self._window(
            self.cardio_calc.last_days(days),
            self.strength_calc.last_days(days),
            self.outdoor_calc.last_days(days),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        highest = self.highest_calories_burn
        longest = self.longest_workout
        last = self.last_workout_date
        return {
            "totalWorkouts": self.total_workouts,
            "totalCalories": self.total_calories,
            "totalDuration": self.total_duration,
            "formattedTotalDuration": self.formatted_total_duration,
            "averageHeartRate": self.average_heart_rate,
            "averageDuration": self.average_duration,
            "averageCalories": self.average_calories,
            "workoutTypeDistribution": [s.to_dict() for s in self.workout_type_distribution],
            "workoutTypeChartData": [d.to_dict() for d in self.workout_type_chart_data],
            "highestCaloriesBurn": highest.to_dict() if highest else None,
            "longestWorkout": longest.to_dict() if longest else None,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "averageWorkoutsPerWeek": self.average_workouts_per_week,
            "workoutsThisWeek": self.workouts_this_week,
            "lastWorkoutDate": last.isoformat() if last else None,
            "daysSinceLastWorkout": self.days_since_last_workout,
        }
