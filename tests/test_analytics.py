"""Tests for the statistics, records, summary and health metric engines."""
from datetime import date, datetime

import pytest

from motioncore.models import CardioSession, OutdoorSession, StrengthSession, UserSettings
from motioncore.models.types import (
    CardioDevice,
    Gender,
    Intensity,
    TrainingProgram,
    UserActivityLevel,
    WorkoutType,
)
from motioncore.services.analytics import (
    HealthMetricCalcEngine,
    RecordCalcEngine,
    StatisticCalcEngine,
    SummaryCalcEngine,
)
from motioncore.services.analytics.health import round_half_up


@pytest.fixture
def cardio_sessions():
    return [
        CardioSession(
            date=datetime(2025, 3, 1, 9),
            duration=30,
            distance=6.0,
            calories=300,
            body_weight=80.0,
            heart_rate=130,
            max_heart_rate=160,
            cardio_device=CardioDevice.ERGOMETER,
            training_program=TrainingProgram.HILL,
            intensity=Intensity.MEDIUM,
        ),
        CardioSession(
            date=datetime(2025, 3, 8, 9),
            duration=60,
            distance=15.0,
            calories=600,
            body_weight=79.0,
            heart_rate=140,
            max_heart_rate=175,
            cardio_device=CardioDevice.ERGOMETER,
            training_program=TrainingProgram.HILL,
            intensity=Intensity.HARD,
        ),
        CardioSession(
            date=datetime(2025, 3, 11, 9),
            duration=40,
            distance=5.0,
            calories=0,
            cardio_device=CardioDevice.CROSSTRAINER,
            training_program=TrainingProgram.FAT_BURN,
        ),
    ]


class TestStatisticCalcEngine:

    def test_totals(self, cardio_sessions):
        stats = StatisticCalcEngine(cardio_sessions)
        assert stats.total_workouts == 3
        assert stats.total_distance == 26.0
        assert stats.total_calories == 900
        assert stats.average_heart_rate == 135

    def test_average_mets_skips_zero(self, cardio_sessions):
        # 300 kcal / 0.5 h / 80 kg = 7.5 and 600 / 1 / 79
        stats = StatisticCalcEngine(cardio_sessions)
        assert stats.average_mets == pytest.approx((7.5 + 600 / 79) / 2)

    def test_average_caloric_density_includes_zero(self, cardio_sessions):
        stats = StatisticCalcEngine(cardio_sessions)
        expected = (300 / 30 / 80 + 600 / 60 / 79 + 0.0) / 3
        assert stats.average_caloric_density == pytest.approx(expected)

    def test_device_counts(self, cardio_sessions):
        stats = StatisticCalcEngine(cardio_sessions)
        assert stats.workout_count_device(CardioDevice.ERGOMETER) == 2
        assert stats.workout_count_device(CardioDevice.NONE) == 0

    def test_program_distribution_sorted(self, cardio_sessions):
        stats = StatisticCalcEngine(cardio_sessions)
        assert [(p.program, p.count) for p in stats.program_distribution] == [
            (TrainingProgram.HILL, 2),
            (TrainingProgram.FAT_BURN, 1),
        ]
        assert [d.label for d in stats.program_data] == ["Hügel", "Fettabbau"]

    def test_intensity_summary(self, cardio_sessions):
        summary = StatisticCalcEngine(cardio_sessions).intensity_summary(Intensity.HARD)
        assert summary.count == 1
        assert summary.total == 3

    def test_trend_distance_device(self, cardio_sessions):
        points = StatisticCalcEngine(cardio_sessions).trend_distance_device(CardioDevice.ERGOMETER)
        assert [p.value for p in points] == [6.0, 15.0]

    def test_to_dict(self, cardio_sessions):
        data = StatisticCalcEngine(cardio_sessions).to_dict()
        assert data["totalDistance"] == 26.0
        assert data["workoutCountDevice"]["crosstrainer"] == 1

    def test_empty(self):
        stats = StatisticCalcEngine([])
        assert stats.average_mets == 0
        assert stats.program_distribution == []
        assert stats.to_dict()["totalWorkouts"] == 0


class TestRecordCalcEngine:

    def test_best_per_device(self, cardio_sessions):
        records = RecordCalcEngine(cardio_sessions)
        assert records.best_ergometer_workout.distance == 15.0
        assert records.best_crosstrainer_workout.distance == 5.0

    def test_fastest_for_device(self, cardio_sessions):
        # 15 km in 60 min beats 6 km in 30 min
        fastest = RecordCalcEngine(cardio_sessions).fastest_for_device(CardioDevice.ERGOMETER)
        assert fastest.distance == 15.0

    def test_heart_rate_and_weight_records(self, cardio_sessions):
        records = RecordCalcEngine(cardio_sessions)
        assert records.highest_max_heart_rate_workout.max_heart_rate == 175
        assert records.highest_average_heart_rate_workout.heart_rate == 140
        assert records.lowest_body_weight.body_weight == 79.0
        assert records.highest_body_weight.body_weight == 80.0

    def test_windowed_records(self, cardio_sessions, now):
        records = RecordCalcEngine(cardio_sessions, now=now)
        assert records.this_week_records.longest_distance_workout.distance == 5.0
        assert records.records_last_days(5).best_ergometer_workout.distance == 15.0
        assert records.this_year_records.highest_burned_calories_workout.calories == 600

    def test_empty_records_are_none(self):
        records = RecordCalcEngine([])
        assert records.best_ergometer_workout is None
        assert records.fastest_for_device(CardioDevice.CROSSTRAINER) is None
        assert all(value is None for value in records.to_dict().values())


class TestSummaryCalcEngine:

    @pytest.fixture
    def summary(self, now):
        return SummaryCalcEngine(
            cardio=[
                CardioSession(date=datetime(2025, 3, 12, 7), duration=30, calories=300, heart_rate=120),
                CardioSession(date=datetime(2025, 3, 5, 7), duration=30, calories=250, heart_rate=0),
            ],
            strength=[
                StrengthSession(date=datetime(2025, 3, 11, 18), duration=60, calories=400, heart_rate=100),
                StrengthSession(date=datetime(2025, 3, 4, 18), duration=60, calories=350),
            ],
            outdoor=[
                OutdoorSession(date=datetime(2025, 3, 10, 10), duration=120, calories=900, heart_rate=150),
            ],
            now=now,
        )

    def test_totals(self, summary):
        assert summary.total_workouts == 5
        assert summary.total_calories == 2200
        assert summary.total_duration == 300
        assert summary.formatted_total_duration == "5 Std"
        assert summary.average_duration == 60
        assert summary.average_calories == 440

    def test_weighted_average_heart_rate(self, summary):
        assert summary.average_heart_rate == (120 + 100 + 150) // 3

    def test_distribution_skips_empty_kinds(self, now):
        summary = SummaryCalcEngine(cardio=[CardioSession(date=now)], now=now)
        distribution = summary.workout_type_distribution
        assert [d.workout_type for d in distribution] == [WorkoutType.CARDIO]
        assert distribution[0].percentage == 100.0
        assert [d.label for d in summary.workout_type_chart_data] == ["Cardio"]

    def test_cross_kind_records(self, summary):
        assert summary.highest_calories_burn.workout_type == WorkoutType.OUTDOOR
        assert summary.longest_workout.session.duration == 120

    def test_streaks(self, summary):
        assert summary.current_streak == 3
        assert summary.longest_streak == 3
        assert summary.last_workout_date == date(2025, 3, 12)
        assert summary.days_since_last_workout == 0

    def test_weekly_values(self, summary):
        assert summary.workouts_this_week == 3
        assert summary.average_workouts_per_week == 1.25
        assert summary.this_week.total_calories == 1600

    def test_streak_broken(self):
        summary = SummaryCalcEngine(
            cardio=[CardioSession(date=datetime(2025, 3, 1))],
            now=datetime(2025, 3, 12),
        )
        assert summary.current_streak == 0
        assert summary.longest_streak == 1
        assert summary.days_since_last_workout == 11

    def test_empty(self):
        summary = SummaryCalcEngine()
        assert summary.total_workouts == 0
        assert summary.average_heart_rate == 0
        assert summary.workout_type_distribution == []
        assert summary.highest_calories_burn is None
        assert summary.current_streak == 0
        assert summary.last_workout_date is None


class TestHealthMetricCalcEngine:

    @pytest.fixture
    def user_settings(self):
        return UserSettings(
            body_height_cm=180,
            birthday=date(1990, 1, 1),
            gender=Gender.MALE,
            activity_level=UserActivityLevel.SEDENTARY,
        )

    @pytest.fixture
    def sessions(self):
        return [
            CardioSession(date=datetime(2025, 1, 1), body_weight=85.0),
            StrengthSession(date=datetime(2025, 3, 1), body_weight=81.0),
            CardioSession(date=datetime(2025, 3, 5), body_weight=0.0),
        ]

    def test_latest_body_weight(self, sessions, user_settings):
        health = HealthMetricCalcEngine(sessions, user_settings, today=date(2025, 3, 12))
        assert health.user_body_weight == 81.0

    def test_bmi(self, sessions, user_settings):
        health = HealthMetricCalcEngine(sessions, user_settings, today=date(2025, 3, 12))
        assert health.user_body_mass_index == 25.0

    def test_bmr_and_tdee(self, sessions, user_settings):
        health = HealthMetricCalcEngine(sessions, user_settings, today=date(2025, 3, 12))
        # 10 * 81 + 6.25 * 180 - 5 * 35 + 5
        assert health.user_basal_metabolic_rate == 1765.0
        assert health.user_total_daily_energy_expenditure == pytest.approx(1765.0 * 1.2)

    def test_bmr_female(self, sessions, user_settings):
        user_settings.gender = Gender.FEMALE
        health = HealthMetricCalcEngine(sessions, user_settings, today=date(2025, 3, 12))
        assert health.user_basal_metabolic_rate == 1599.0

    def test_missing_data(self, user_settings):
        health = HealthMetricCalcEngine([], user_settings)
        assert health.user_body_weight is None
        assert health.user_body_mass_index is None
        assert health.user_basal_metabolic_rate is None
        assert health.user_total_daily_energy_expenditure is None

    def test_calorie_balance(self):
        balance = HealthMetricCalcEngine.calorie_balance(consumed=2000, basal=1700, active=600)
        assert balance.total_burned == 2300
        assert balance.balance == 300
        assert balance.is_deficit
        assert balance.balance_formatted == "+300 kcal"
        assert HealthMetricCalcEngine.calorie_balance(None, 1700, 600) is None

    def test_round_half_up(self):
        assert round_half_up(12.345, 2) == 12.35
        assert round_half_up(2.5) == 3.0
