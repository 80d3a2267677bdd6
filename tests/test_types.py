"""Tests for enum raw value decoding."""
from motioncore.models.types import (
    CardioDevice,
    Intensity,
    OutdoorActivity,
    TrainingProgram,
    UserActivityLevel,
    WorkoutType,
    decode_enum,
)


class TestDecodeEnum:

    def test_known_int_value(self):
        decoded = decode_enum(Intensity, 3)
        assert decoded.is_known
        assert decoded.or_default(Intensity.NONE) == Intensity.MEDIUM

    def test_known_str_value(self):
        decoded = decode_enum(OutdoorActivity, "hiking")
        assert decoded.is_known
        assert decoded.or_default(OutdoorActivity.CYCLING) == OutdoorActivity.HIKING

    def test_member_passes_through(self):
        assert decode_enum(CardioDevice, CardioDevice.ERGOMETER).or_default(CardioDevice.NONE) == (
            CardioDevice.ERGOMETER
        )

    def test_unknown_value_keeps_raw(self):
        decoded = decode_enum(OutdoorActivity, "skydiving")
        assert not decoded.is_known
        assert decoded.raw == "skydiving"
        assert decoded.or_default(OutdoorActivity.CYCLING) == OutdoorActivity.CYCLING

    def test_out_of_range_int(self):
        assert decode_enum(Intensity, 9).or_default(Intensity.NONE) == Intensity.NONE

    def test_bool_is_not_an_int_member(self):
        assert not decode_enum(Intensity, True).is_known

    def test_wrong_type(self):
        assert not decode_enum(Intensity, "3").is_known
        assert not decode_enum(TrainingProgram, None).is_known


class TestLabels:

    def test_training_program_labels(self):
        assert TrainingProgram.HILL.label == "Hügel"
        assert TrainingProgram.FIT_TEST.label == "Fit Test"

    def test_workout_type_labels(self):
        assert WorkoutType.STRENGTH.label == "Kraft"

    def test_activity_factor(self):
        assert UserActivityLevel.SEDENTARY.factor == 1.2
        assert UserActivityLevel.EXTRA_ACTIVE.factor == 1.9
