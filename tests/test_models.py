"""Tests for the session, exercise set, plan and settings models."""
from datetime import date, datetime

from motioncore.models import (
    CardioSession,
    ExerciseSet,
    OutdoorSession,
    StrengthSession,
    TrainingPlan,
    UserSettings,
)
from motioncore.models.session import format_minutes
from motioncore.models.types import (
    CardioDevice,
    Gender,
    Intensity,
    OutdoorActivity,
    SetKind,
    TrainingProgram,
    WeatherCondition,
)


class TestSessionDefaults:

    def test_cardio_defaults(self):
        session = CardioSession()
        assert session.id is not None
        assert session.duration == 0
        assert session.distance == 0.0
        assert session.difficulty == 1
        assert session.intensity == Intensity.NONE
        assert session.cardio_device == CardioDevice.NONE
        assert session.training_program == TrainingProgram.RANDOM
        assert session.device_source == "manual"

    def test_typed_kwargs_override_raw_defaults(self):
        session = CardioSession(intensity=Intensity.HARD, cardio_device=CardioDevice.ERGOMETER)
        assert session.intensity_raw == 4
        assert session.cardio_device_raw == 2

    def test_outdoor_defaults(self):
        session = OutdoorSession()
        assert session.outdoor_activity == OutdoorActivity.CYCLING
        assert session.weather_condition == WeatherCondition.UNKNOWN
        assert session.temperature is None


class TestClamping:

    def test_difficulty_clamped(self):
        assert CardioSession(difficulty=40).difficulty == 25
        assert CardioSession(difficulty=0).difficulty == 1
        assert CardioSession(difficulty=None).difficulty == 1

    def test_negative_values_clamped(self):
        session = CardioSession(duration=-5, calories=-100, distance=-1.5, heart_rate=-1)
        assert session.duration == 0
        assert session.calories == 0
        assert session.distance == 0
        assert session.heart_rate == 0

    def test_clamped_on_assignment(self):
        session = OutdoorSession()
        session.elevation_gain = -30
        assert session.elevation_gain == 0

    def test_unknown_intensity_raw_decodes_to_none(self):
        assert CardioSession(intensity_raw=9).intensity == Intensity.NONE

    def test_rpe_clamped(self):
        assert ExerciseSet(rpe=12).rpe == 10
        assert ExerciseSet(rpe=-1).rpe == 0


class TestDerivedValues:

    def test_mets(self):
        session = CardioSession(calories=600, duration=60, body_weight=75.0)
        assert session.mets == 8.0

    def test_mets_without_weight(self):
        assert CardioSession(calories=600, duration=60).mets == 0.0

    def test_cardio_average_speed_in_meters_per_minute(self):
        assert CardioSession(distance=6.0, duration=30).average_speed == 200.0

    def test_relative_caloric_density(self):
        session = CardioSession(calories=300, duration=30, body_weight=80.0)
        assert session.relative_caloric_density == 0.125

    def test_pace_per_km(self):
        assert OutdoorSession(distance=10.0, duration=50).pace_per_km == 5.0

    def test_formatted_duration(self):
        assert format_minutes(45) == "45 Min"
        assert format_minutes(120) == "2 Std"
        assert format_minutes(90) == "1:30 Std"


class TestLiveSession:

    def test_start_and_complete(self):
        session = StrengthSession(duration=10)
        session.start(datetime(2025, 3, 12, 10, 0))
        assert session.is_active
        assert session.is_live_session

        session.complete(datetime(2025, 3, 12, 10, 45))
        assert session.is_completed
        assert not session.is_active
        assert session.actual_duration == 45
        assert session.duration == 45

    def test_complete_without_start_keeps_duration(self):
        session = CardioSession(duration=30)
        session.complete(datetime(2025, 3, 12, 10, 45))
        assert session.is_completed
        assert session.duration == 30


class TestExerciseSet:

    def test_volume_and_effective_weight(self):
        exercise_set = ExerciseSet(exercise_name="Bankdrücken", weight=80.0, reps=10)
        assert exercise_set.volume == 800.0
        assert exercise_set.effective_weight == 80.0
        assert ExerciseSet(weight_per_side=20.0).effective_weight == 40.0

    def test_progression_hint(self):
        base = dict(target_reps_min=8, target_reps_max=12)
        assert ExerciseSet(reps=6, **base).progression_hint == "Gewicht reduzieren"
        assert ExerciseSet(reps=14, **base).progression_hint == "Gewicht erhöhen"
        assert ExerciseSet(reps=10, **base).progression_hint == "Im Zielbereich"
        assert ExerciseSet(reps=10).progression_hint == ""

    def test_group_key_prefers_snapshot_uuid(self):
        exercise_set = ExerciseSet(exercise_name="Squat", exercise_uuid_snapshot="abc")
        assert exercise_set.group_key == "abc"
        assert ExerciseSet(exercise_name="Squat").group_key == "Squat"

    def test_clone_for_session(self):
        template = ExerciseSet(
            exercise_name="Kreuzheben",
            weight=100.0,
            reps=5,
            rpe=8,
            set_kind=SetKind.WARMUP,
            sort_order=3,
        )
        clone = template.clone_for_session()
        assert clone.id != template.id
        assert clone.exercise_name == "Kreuzheben"
        assert clone.weight == 100.0
        assert clone.set_kind == SetKind.WARMUP
        assert clone.sort_order == 3
        assert clone.is_completed is False
        assert clone.rpe == 0

    def test_strength_session_aggregates(self):
        session = StrengthSession()
        session.exercise_sets = [
            ExerciseSet(exercise_name="Squat", set_number=1, weight=100.0, reps=5),
            ExerciseSet(exercise_name="Squat", set_number=2, weight=100.0, reps=5, is_completed=False),
            ExerciseSet(exercise_name="Row", set_number=3, weight=60.0, reps=10),
        ]
        assert session.total_sets == 3
        assert session.exercises_performed == 2
        assert session.total_volume == 1600.0
        assert session.completed_sets == 2
        assert not session.all_sets_completed


class TestTrainingPlan:

    def test_duration_and_expiry(self):
        plan = TrainingPlan(title="Block A", start_date=date(2025, 1, 1), end_date=date(2025, 1, 29))
        assert plan.duration_in_days == 28
        assert plan.is_expired(date(2025, 2, 1))
        assert not plan.is_expired(date(2025, 1, 15))

    def test_open_ended_plan(self):
        plan = TrainingPlan(title="Dauerplan")
        assert plan.duration_in_days is None
        assert not plan.is_expired()


class TestUserSettings:

    def test_defaults(self):
        user_settings = UserSettings()
        assert user_settings.gender == Gender.MALE
        assert user_settings.default_program == TrainingProgram.MANUAL
        assert user_settings.age() == 0

    def test_age_before_birthday(self):
        user_settings = UserSettings(birthday=date(1990, 6, 15))
        assert user_settings.age(date(2025, 6, 14)) == 34
        assert user_settings.age(date(2025, 6, 15)) == 35

    def test_default_difficulty_clamped(self):
        assert UserSettings(default_difficulty=30).default_difficulty == 25
