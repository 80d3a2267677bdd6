"""Tests for the core aggregation engine."""
from datetime import datetime

import pytest

from motioncore.models import CardioSession
from motioncore.models.types import Intensity
from motioncore.services.analytics import SessionCalcEngine
from motioncore.services.analytics.calculator import month_bounds, week_bounds


def _cardio(day: datetime, **fields) -> CardioSession:
    return CardioSession(date=day, **fields)


class TestExampleScenario:
    """Three sessions, one of them without duration or calories."""

    @pytest.fixture
    def engine(self):
        sessions = [
            _cardio(datetime(2025, 3, 1), calories=200, duration=30),
            _cardio(datetime(2025, 3, 2), calories=0, duration=0),
            _cardio(datetime(2025, 3, 3), calories=450, duration=45),
        ]
        return SessionCalcEngine(sessions)

    def test_total_calories(self, engine):
        assert engine.total_calories == 650

    def test_average_duration_truncates_and_skips_zero(self, engine):
        assert engine.average_duration == 37

    def test_zero_session_counted(self, engine):
        assert engine.total_sessions == 3


class TestPrimitives:

    def test_average_times_count_matches_total(self):
        sessions = [_cardio(datetime(2025, 3, d), calories=c) for d, c in [(1, 120), (2, 0), (3, 333)]]
        engine = SessionCalcEngine(sessions)
        positive = lambda s: s.calories > 0  # noqa: E731
        average = engine.average(lambda s: s.calories, positive)
        matching = engine.filtered(positive)
        assert average * len(matching) == pytest.approx(matching.total(lambda s: s.calories))

    def test_average_without_match_is_zero(self):
        engine = SessionCalcEngine([_cardio(datetime(2025, 3, 1))])
        assert engine.average(lambda s: s.calories, lambda s: s.calories > 0) == 0

    def test_empty_engine_is_total(self):
        engine = SessionCalcEngine([])
        assert engine.total_calories == 0
        assert engine.average_heart_rate == 0
        assert engine.max_by(lambda s: s.calories) is None
        assert engine.min_by(lambda s: s.calories) is None
        assert engine.trend(lambda s: s.calories) == []
        assert engine.group_by(lambda s: s.intensity) == {}
        assert engine.live_session_percentage == 0.0

    def test_max_by_first_wins_on_tie(self):
        first = _cardio(datetime(2025, 3, 1), calories=500)
        second = _cardio(datetime(2025, 3, 2), calories=500)
        engine = SessionCalcEngine([first, second])
        assert engine.max_by(lambda s: s.calories) is first
        assert engine.min_by(lambda s: s.calories) is first

    def test_trend_sorted_with_same_day_points(self):
        sessions = [
            _cardio(datetime(2025, 3, 5, 18), heart_rate=140),
            _cardio(datetime(2025, 3, 1, 8), heart_rate=120),
            _cardio(datetime(2025, 3, 5, 7), heart_rate=130),
            _cardio(datetime(2025, 3, 3, 7), heart_rate=0),
        ]
        points = SessionCalcEngine(sessions).heart_rate_trend
        assert [p.date for p in points] == sorted(p.date for p in points)
        assert [p.value for p in points] == [120.0, 130.0, 140.0]

    def test_group_by(self):
        sessions = [
            _cardio(datetime(2025, 3, 1), intensity=Intensity.EASY),
            _cardio(datetime(2025, 3, 2), intensity=Intensity.EASY),
            _cardio(datetime(2025, 3, 3), intensity=Intensity.HARD),
        ]
        engine = SessionCalcEngine(sessions)
        assert engine.intensity_distribution == {Intensity.EASY: 2, Intensity.HARD: 1}
        assert engine.intensity_count(Intensity.EASY) == 2

    def test_input_not_mutated(self):
        sessions = [_cardio(datetime(2025, 3, 3)), _cardio(datetime(2025, 3, 1))]
        original = list(sessions)
        SessionCalcEngine(sessions).heart_rate_trend
        assert sessions == original


class TestTimeWindows:

    @pytest.fixture
    def engine(self, now):
        sessions = [
            _cardio(datetime(2024, 12, 31, 23, 0), calories=100),
            _cardio(datetime(2025, 2, 28, 9, 0), calories=200),
            _cardio(datetime(2025, 3, 5, 0, 0), calories=300),
            _cardio(datetime(2025, 3, 9, 20, 0), calories=400),  # Sunday
            _cardio(datetime(2025, 3, 10, 0, 0), calories=500),  # Monday
            _cardio(datetime(2025, 3, 12, 8, 0), calories=600),
        ]
        return SessionCalcEngine(sessions, now=now)

    def test_week_starts_monday(self, now):
        start, end = week_bounds(now)
        assert start == datetime(2025, 3, 10)
        assert end == datetime(2025, 3, 17)

    def test_december_month_bounds(self):
        assert month_bounds(datetime(2024, 12, 15)) == (datetime(2024, 12, 1), datetime(2025, 1, 1))

    def test_this_week(self, engine):
        assert engine.this_week.total_calories == 1100

    def test_this_month(self, engine):
        assert engine.this_month.total_calories == 1800

    def test_this_year(self, engine):
        assert engine.this_year.total_sessions == 5

    def test_last_days_counts_from_start_of_today(self, engine):
        # Cutoff 2025-03-05 00:00
        assert engine.last_days(7).total_calories == 1800

    def test_windows_compose(self, engine):
        assert engine.this_month.last_days(2).total_calories == 1100


class TestRecordsAndSources:

    def test_body_weight_records_ignore_zero(self):
        sessions = [
            _cardio(datetime(2025, 3, 1), body_weight=0.0),
            _cardio(datetime(2025, 3, 2), body_weight=82.5),
            _cardio(datetime(2025, 3, 3), body_weight=80.1),
        ]
        engine = SessionCalcEngine(sessions)
        assert engine.lowest_body_weight_session.body_weight == 80.1
        assert engine.highest_body_weight_session.body_weight == 82.5
        assert engine.average_body_weight == pytest.approx(81.3)

    def test_live_and_health_kit_shares(self):
        import uuid

        sessions = [
            _cardio(datetime(2025, 3, 1), is_live_session=True, health_kit_workout_uuid=uuid.uuid4()),
            _cardio(datetime(2025, 3, 2)),
            _cardio(datetime(2025, 3, 3), device_source="watch"),
            _cardio(datetime(2025, 3, 4), device_source="watch"),
        ]
        engine = SessionCalcEngine(sessions)
        assert engine.live_session_count == 1
        assert engine.manual_session_count == 3
        assert engine.live_session_percentage == 25.0
        assert engine.health_kit_linked_percentage == 25.0
        assert engine.device_source_counts == {"manual": 2, "watch": 2}

    def test_summary_keys(self):
        summary = SessionCalcEngine([_cardio(datetime(2025, 3, 1), duration=90)]).summary()
        assert summary["totalSessions"] == 1
        assert summary["formattedTotalDuration"] == "1:30 Std"
