"""
Session Calculator - Core aggregation engine over workout sessions.

`SessionCalcEngine` is an immutable query object built from an already
fetched list of sessions (any kind sharing the core session fields).
Every statistic is recomputed on access; nothing is cached. All
operations are total: an empty collection yields 0, None or an empty
collection, never an exception.

Usage:
    engine = SessionCalcEngine(sessions)
    engine.total_calories
    engine.this_month.average_duration
    engine.trend(lambda s: s.heart_rate, lambda s: s.heart_rate > 0)
"""
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Hashable,
    Iterable,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from motioncore.models.session import CoreSessionMixin, format_minutes
from motioncore.models.types import Intensity

S = TypeVar("S", bound=CoreSessionMixin)
K = TypeVar("K", bound=Hashable)

Number = Union[int, float]
Projection = Callable[[Any], Number]
Predicate = Callable[[Any], bool]


@dataclass(frozen=True)
class TrendPoint:
    """One point of a line chart."""
    date: datetime
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "value": self.value}


@dataclass(frozen=True)
class DonutChartData:
    """One slice of a donut/pie chart."""
    label: str
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "value": self.value}


# ========================================
# Time windows
# ========================================

def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def week_bounds(now: datetime) -> Tuple[datetime, datetime]:
    """Monday 00:00 of the current week and the Monday after."""
    start = start_of_day(now) - timedelta(days=now.weekday())
    return start, start + timedelta(days=7)


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    start = start_of_day(now).replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def year_bounds(now: datetime) -> Tuple[datetime, datetime]:
    start = start_of_day(now).replace(month=1, day=1)
    return start, start.replace(year=start.year + 1)


def last_days_cutoff(now: datetime, days: int) -> datetime:
    """Start of today minus `days` days."""
    return start_of_day(now) - timedelta(days=days)


def _int_average(values: List[int]) -> int:
    # Integer truncation over strictly positive values
    valid = [v for v in values if v > 0]
    if not valid:
        return 0
    return int(sum(valid) // len(valid))


def _float_average(values: List[float]) -> float:
    valid = [v for v in values if v > 0]
    if not valid:
        return 0.0
    return sum(valid) / len(valid)


class SessionCalcEngine(Generic[S]):
    """
    Aggregation engine over a collection of sessions.

    Args:
        sessions: Sessions to aggregate (left untouched)
        now: Reference time for the time windows (defaults to the current time)
    """

    def __init__(self, sessions: Iterable[S], now: Optional[datetime] = None):
        self._sessions: Tuple[S, ...] = tuple(sessions)
        self._now = now

    @property
    def sessions(self) -> Tuple[S, ...]:
        return self._sessions

    @property
    def now(self) -> datetime:
        return self._now or datetime.now()

    def __len__(self) -> int:
        return len(self._sessions)

    def _derive(self, sessions: Iterable[S]) -> "SessionCalcEngine[S]":
        return SessionCalcEngine(sessions, now=self._now)

    # ========================================
    # Primitive operations
    # ========================================

    def total(self, f: Projection) -> Number:
        """Sum of a numeric projection over all sessions."""
        return sum(f(s) for s in self._sessions)

    def average(self, f: Projection, predicate: Optional[Predicate] = None) -> float:
        """
        Mean of `f` over the sessions matching `predicate`.

        Returns:
            0 when no session matches
        """
        matching = [s for s in self._sessions if predicate is None or predicate(s)]
        if not matching:
            return 0
        return sum(f(s) for s in matching) / len(matching)

    def count_where(self, predicate: Predicate) -> int:
        return sum(1 for s in self._sessions if predicate(s))

    def max_by(self, f: Projection) -> Optional[S]:
        """Session with the largest `f`; the first one wins on ties. None when empty."""
        best: Optional[S] = None
        for session in self._sessions:
            if best is None or f(best) < f(session):
                best = session
        return best

    def min_by(self, f: Projection) -> Optional[S]:
        """Session with the smallest `f`; the first one wins on ties. None when empty."""
        best: Optional[S] = None
        for session in self._sessions:
            if best is None or f(session) < f(best):
                best = session
        return best

    def trend(self, f: Projection, predicate: Optional[Predicate] = None) -> List[TrendPoint]:
        """
        Matching sessions sorted ascending by date, projected to chart points.

        One point per session: several sessions on one day give several points.
        """
        matching = [s for s in self._sessions if predicate is None or predicate(s)]
        matching.sort(key=lambda s: s.date)
        return [TrendPoint(date=s.date, value=float(f(s))) for s in matching]

    def group_by(self, key: Callable[[S], K]) -> Dict[K, int]:
        """Session count per key."""
        return dict(Counter(key(s) for s in self._sessions))

    def filtered(self, predicate: Predicate) -> "SessionCalcEngine[S]":
        return self._derive(s for s in self._sessions if predicate(s))

    # ========================================
    # Time windows
    # ========================================

    def _between(self, bounds: Tuple[datetime, datetime]) -> "SessionCalcEngine[S]":
        start, end = bounds
        return self.filtered(lambda s: start <= s.date < end)

    @property
    def this_week(self) -> "SessionCalcEngine[S]":
        return self._between(week_bounds(self.now))

    @property
    def this_month(self) -> "SessionCalcEngine[S]":
        return self._between(month_bounds(self.now))

    @property
    def this_year(self) -> "SessionCalcEngine[S]":
        return self._between(year_bounds(self.now))

    def last_days(self, days: int) -> "SessionCalcEngine[S]":
        cutoff = last_days_cutoff(self.now, days)
        return self.filtered(lambda s: s.date >= cutoff)

    # ========================================
    # Totals
    # ========================================

    @property
    def total_sessions(self) -> int:
        return len(self._sessions)

    @property
    def total_calories(self) -> int:
        return self.total(lambda s: s.calories)

    @property
    def total_duration(self) -> int:
        return self.total(lambda s: s.duration)

    @property
    def formatted_total_duration(self) -> str:
        return format_minutes(self.total_duration)

    # ========================================
    # Averages
    # ========================================

    @property
    def average_heart_rate(self) -> int:
        return _int_average([s.heart_rate for s in self._sessions])

    @property
    def average_max_heart_rate(self) -> int:
        return _int_average([s.max_heart_rate for s in self._sessions])

    @property
    def average_duration(self) -> int:
        return _int_average([s.duration for s in self._sessions])

    @property
    def average_calories(self) -> int:
        return _int_average([s.calories for s in self._sessions])

    @property
    def average_intensity(self) -> float:
        """Mean intensity over rated sessions."""
        return _float_average([s.intensity.value for s in self._sessions])

    @property
    def average_body_weight(self) -> float:
        return _float_average([s.body_weight for s in self._sessions])

    # ========================================
    # Records
    # ========================================

    @property
    def lowest_body_weight_session(self) -> Optional[S]:
        return self.filtered(lambda s: s.body_weight > 0).min_by(lambda s: s.body_weight)

    @property
    def highest_body_weight_session(self) -> Optional[S]:
        return self.filtered(lambda s: s.body_weight > 0).max_by(lambda s: s.body_weight)

    @property
    def highest_calories_session(self) -> Optional[S]:
        return self.max_by(lambda s: s.calories)

    @property
    def longest_duration_session(self) -> Optional[S]:
        return self.max_by(lambda s: s.duration)

    @property
    def highest_heart_rate_session(self) -> Optional[S]:
        """Session with the highest max heart rate."""
        return self.filtered(lambda s: s.max_heart_rate > 0).max_by(lambda s: s.max_heart_rate)

    @property
    def highest_average_heart_rate_session(self) -> Optional[S]:
        return self.filtered(lambda s: s.heart_rate > 0).max_by(lambda s: s.heart_rate)

    # ========================================
    # Intensity
    # ========================================

    def intensity_count(self, intensity: Intensity) -> int:
        return self.count_where(lambda s: s.intensity == intensity)

    @property
    def intensity_distribution(self) -> Dict[Intensity, int]:
        return self.group_by(lambda s: s.intensity)

    # ========================================
    # Trends
    # ========================================

    @property
    def heart_rate_trend(self) -> List[TrendPoint]:
        return self.trend(lambda s: s.heart_rate, lambda s: s.heart_rate > 0)

    @property
    def calories_trend(self) -> List[TrendPoint]:
        return self.trend(lambda s: s.calories, lambda s: s.calories > 0)

    @property
    def body_weight_trend(self) -> List[TrendPoint]:
        return self.trend(lambda s: s.body_weight, lambda s: s.body_weight > 0)

    @property
    def duration_trend(self) -> List[TrendPoint]:
        return self.trend(lambda s: s.duration, lambda s: s.duration > 0)

    # ========================================
    # Data sources
    # ========================================

    @property
    def device_source_counts(self) -> Dict[str, int]:
        return self.group_by(lambda s: s.device_source)

    @property
    def live_session_count(self) -> int:
        return self.count_where(lambda s: s.is_live_session)

    @property
    def manual_session_count(self) -> int:
        return self.count_where(lambda s: not s.is_live_session)

    @property
    def live_session_percentage(self) -> float:
        if not self._sessions:
            return 0.0
        return self.live_session_count / len(self._sessions) * 100

    @property
    def health_kit_linked_percentage(self) -> float:
        if not self._sessions:
            return 0.0
        linked = self.count_where(lambda s: s.is_linked_to_health_kit)
        return linked / len(self._sessions) * 100

    def summary(self) -> Dict[str, Any]:
        """Headline numbers for API responses."""
        return {
            "totalSessions": self.total_sessions,
            "totalCalories": self.total_calories,
            "totalDuration": self.total_duration,
            "formattedTotalDuration": self.formatted_total_duration,
            "averageHeartRate": self.average_heart_rate,
            "averageMaxHeartRate": self.average_max_heart_rate,
            "averageDuration": self.average_duration,
            "averageCalories": self.average_calories,
            "averageIntensity": round(self.average_intensity, 2),
            "averageBodyWeight": round(self.average_body_weight, 2),
            "liveSessionCount": self.live_session_count,
            "manualSessionCount": self.manual_session_count,
            "liveSessionPercentage": round(self.live_session_percentage, 1),
            "healthKitLinkedPercentage": round(self.health_kit_linked_percentage, 1),
            "deviceSourceCounts": self.device_source_counts,
        }
