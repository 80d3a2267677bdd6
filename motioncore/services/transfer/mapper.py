"""
Export Mappers - Conversion between ORM entities and export items.

Export collapses "empty" values (0, 0.0, "", the default enum member) to
None; import expands them back to the same defaults. The round trip is
therefore lossless except that an empty value always comes back as its
default.

Import never fails on an unknown enum value or an unparseable date: the
documented fallback is used and a `DecodeWarning` is recorded so the
caller can surface it.
"""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from motioncore.models import CardioSession, ExerciseSet, OutdoorSession, StrengthSession, TrainingPlan
from motioncore.models.session import CoreSessionMixin
from motioncore.models.types import (
    CardioDevice,
    Intensity,
    OutdoorActivity,
    PlanType,
    SetKind,
    StrengthWorkoutType,
    TrainingProgram,
    WeatherCondition,
    decode_enum,
)
from motioncore.services.transfer.schemas import (
    CardioExportItem,
    CardioExportPackage,
    ExerciseSetExportItem,
    ExportEnvelope,
    OutdoorExportItem,
    OutdoorExportPackage,
    StrengthExportItem,
    StrengthExportPackage,
    TrainingPlanExportItem,
    TrainingPlanExportPackage,
)

E = TypeVar("E", bound=Enum)
EntityT = TypeVar("EntityT")
ItemT = TypeVar("ItemT", bound=BaseModel)


class TransferKind(str, Enum):
    """Data kinds that can be exported and imported."""
    CARDIO = "cardio"
    STRENGTH = "strength"
    OUTDOOR = "outdoor"
    PLANS = "plans"

    @property
    def file_label(self) -> str:
        """Label used in the export filename."""
        return {
            TransferKind.CARDIO: "Export",
            TransferKind.STRENGTH: "Strength",
            TransferKind.OUTDOOR: "Outdoor",
            TransferKind.PLANS: "TrainingPlans",
        }[self]


# ========================================
# Dates
# ========================================

def format_iso(value: datetime) -> str:
    """
    Format a stored (naive, local) timestamp as ISO-8601 UTC.

    Example: 2025-03-01T08:15:00Z
    """
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into a naive local datetime.

    Returns:
        None for a missing or unparseable value
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_iso_date(value: date) -> str:
    return format_iso(datetime.combine(value, time()))


def _none_if_empty(value: Any, empty: Any = 0) -> Any:
    return None if value == empty else value


def _positive_or_none(value: Optional[float]) -> Optional[float]:
    return value if value is not None and value > 0 else None


def _true_or_none(value: bool) -> Optional[bool]:
    return True if value else None


# ========================================
# Decode warnings
# ========================================

@dataclass(frozen=True)
class DecodeWarning:
    """A value that could not be decoded and was replaced by a fallback."""
    item_index: int
    field: str
    raw_value: Any
    fallback: Any

    @property
    def message(self) -> str:
        return (
            f"item {self.item_index}: {self.field}={self.raw_value!r} "
            f"replaced by {self.fallback!r}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemIndex": self.item_index,
            "field": self.field,
            "rawValue": self.raw_value,
            "fallback": self.fallback,
        }


@dataclass
class ImportDecoder:
    """Resolves raw values of one package and collects the fallbacks used."""
    now: datetime = field(default_factory=datetime.now)
    warnings: List[DecodeWarning] = field(default_factory=list)

    def warn(self, index: int, field_name: str, raw: Any, fallback: Any) -> None:
        if isinstance(fallback, Enum):
            fallback = fallback.value
        elif isinstance(fallback, datetime):
            fallback = format_iso(fallback)
        self.warnings.append(DecodeWarning(index, field_name, raw, fallback))

    def enum(self, index: int, field_name: str, enum_cls: Type[E], raw: Any, default: E) -> E:
        """Decode an optional enum raw value; absent values use the default silently."""
        if raw is None:
            return default
        decoded = decode_enum(enum_cls, raw)
        if not decoded.is_known:
            self.warn(index, field_name, raw, default)
        return decoded.or_default(default)

    def primary_date(self, index: int, field_name: str, raw: Optional[str]) -> datetime:
        """Decode the primary date, falling back to the import time."""
        parsed = parse_iso(raw)
        if parsed is None:
            self.warn(index, field_name, raw, self.now)
            return self.now
        return parsed

    def optional_date(self, index: int, field_name: str, raw: Optional[str]) -> Optional[datetime]:
        if raw is None:
            return None
        parsed = parse_iso(raw)
        if parsed is None:
            self.warn(index, field_name, raw, None)
        return parsed

    def optional_uuid(self, index: int, field_name: str, raw: Optional[str]) -> Optional[uuid.UUID]:
        if raw is None:
            return None
        try:
            return uuid.UUID(raw)
        except ValueError:
            self.warn(index, field_name, raw, None)
            return None


# ========================================
# Core session fields
# ========================================

def _core_export_fields(session: CoreSessionMixin) -> Dict[str, Any]:
    return {
        "isLiveSession": _true_or_none(session.is_live_session),
        "startedAt": format_iso(session.started_at) if session.started_at else None,
        "completedAt": format_iso(session.completed_at) if session.completed_at else None,
        "perceivedExertion": session.perceived_exertion,
        "energyLevelBefore": session.energy_level_before,
        "healthKitWorkoutUUID": (
            str(session.health_kit_workout_uuid).upper() if session.health_kit_workout_uuid else None
        ),
        "deviceSource": _none_if_empty(session.device_source, "manual"),
    }


def _core_import_fields(item: Any, decoder: ImportDecoder, index: int) -> Dict[str, Any]:
    return {
        "date": decoder.primary_date(index, "date", item.date),
        "duration": item.duration or 0,
        "calories": item.calories or 0,
        "heart_rate": item.heartRate or 0,
        "max_heart_rate": item.maxHeartRate or 0,
        "body_weight": item.bodyWeight or 0.0,
        "notes": item.notes or "",
        "intensity": decoder.enum(index, "intensity", Intensity, item.intensity, Intensity.NONE),
        "is_live_session": item.isLiveSession or False,
        "started_at": decoder.optional_date(index, "startedAt", item.startedAt),
        "completed_at": decoder.optional_date(index, "completedAt", item.completedAt),
        "perceived_exertion": item.perceivedExertion,
        "energy_level_before": item.energyLevelBefore,
        "health_kit_workout_uuid": decoder.optional_uuid(
            index, "healthKitWorkoutUUID", item.healthKitWorkoutUUID
        ),
        "device_source": item.deviceSource or "manual",
    }


# ========================================
# Exercise sets
# ========================================

def exercise_set_to_item(exercise_set: ExerciseSet) -> ExerciseSetExportItem:
    return ExerciseSetExportItem(
        exerciseName=exercise_set.exercise_name,
        exerciseNameSnapshot=_none_if_empty(exercise_set.exercise_name_snapshot, ""),
        exerciseUUIDSnapshot=_none_if_empty(exercise_set.exercise_uuid_snapshot, ""),
        exerciseMediaAssetName=_none_if_empty(exercise_set.exercise_media_asset_name, ""),
        isUnilateralSnapshot=_true_or_none(exercise_set.is_unilateral_snapshot),
        setNumber=exercise_set.set_number,
        weight=_positive_or_none(exercise_set.weight),
        weightPerSide=_positive_or_none(exercise_set.weight_per_side),
        reps=_positive_or_none(exercise_set.reps),
        duration=_positive_or_none(exercise_set.duration),
        distance=_positive_or_none(exercise_set.distance),
        restSeconds=_none_if_empty(exercise_set.rest_seconds, 90),
        setKind=exercise_set.set_kind_raw,
        isCompleted=exercise_set.is_completed,
        rpe=_positive_or_none(exercise_set.rpe),
        notes=_none_if_empty(exercise_set.notes, ""),
        targetRepsMin=_positive_or_none(exercise_set.target_reps_min),
        targetRepsMax=_positive_or_none(exercise_set.target_reps_max),
        targetRIR=_none_if_empty(exercise_set.target_rir, 2),
        groupId=_none_if_empty(exercise_set.group_id, ""),
    )


def exercise_set_from_item(
    item: ExerciseSetExportItem,
    decoder: ImportDecoder,
    index: int,
) -> ExerciseSet:
    # Older exports carry isWarmup instead of setKind
    fallback_kind = SetKind.WARMUP if item.isWarmup else SetKind.WORK
    set_kind = decoder.enum(index, "exerciseSets.setKind", SetKind, item.setKind, fallback_kind)

    return ExerciseSet(
        exercise_name=item.exerciseName,
        exercise_name_snapshot=item.exerciseNameSnapshot or item.exerciseName,
        exercise_uuid_snapshot=item.exerciseUUIDSnapshot or item.exerciseId or "",
        exercise_media_asset_name=item.exerciseMediaAssetName or "",
        is_unilateral_snapshot=item.isUnilateralSnapshot or False,
        set_number=item.setNumber,
        weight=item.weight or 0.0,
        weight_per_side=item.weightPerSide or 0.0,
        reps=item.reps or 0,
        duration=item.duration or 0,
        distance=item.distance or 0.0,
        rest_seconds=90 if item.restSeconds is None else item.restSeconds,
        set_kind=set_kind,
        is_completed=item.isCompleted,
        rpe=item.rpe or 0,
        notes=item.notes or "",
        target_reps_min=item.targetRepsMin or 0,
        target_reps_max=item.targetRepsMax or 0,
        target_rir=2 if item.targetRIR is None else item.targetRIR,
        group_id=item.groupId or "",
    )


# ========================================
# Mappers
# ========================================

class ExportMapper(ABC, Generic[EntityT, ItemT]):
    """
    Abstract base class for entity <-> export item conversion.

    Subclasses implement the field mapping for one transfer kind.
    """

    kind: TransferKind
    package_class: Type[ExportEnvelope]

    @abstractmethod
    def to_item(self, entity: EntityT) -> ItemT:
        """Convert an entity to its export item."""
        pass

    @abstractmethod
    def from_item(self, item: ItemT, decoder: ImportDecoder, index: int) -> EntityT:
        """Build a new, unsaved entity from an export item."""
        pass

    def build_package(self, entities: List[EntityT], version: int, exported_at: datetime) -> ExportEnvelope:
        return self.package_class(
            version=version,
            exportedAt=format_iso(exported_at),
            items=[self.to_item(entity) for entity in entities],
        )

    def from_package(self, package: ExportEnvelope, decoder: ImportDecoder) -> List[EntityT]:
        return [self.from_item(item, decoder, index) for index, item in enumerate(package.items)]


class CardioMapper(ExportMapper[CardioSession, CardioExportItem]):
    kind = TransferKind.CARDIO
    package_class = CardioExportPackage

    def to_item(self, entity: CardioSession) -> CardioExportItem:
        return CardioExportItem(
            date=format_iso(entity.date),
            duration=_positive_or_none(entity.duration),
            distance=_positive_or_none(entity.distance),
            calories=_positive_or_none(entity.calories),
            difficulty=entity.difficulty if entity.difficulty > 1 else None,
            heartRate=_positive_or_none(entity.heart_rate),
            maxHeartRate=_positive_or_none(entity.max_heart_rate),
            bodyWeight=_positive_or_none(entity.body_weight),
            notes=_none_if_empty(entity.notes, ""),
            intensity=_none_if_empty(entity.intensity.value, Intensity.NONE.value),
            trainingProgram=_none_if_empty(entity.training_program.value, TrainingProgram.MANUAL.value),
            cardioDevice=_none_if_empty(entity.cardio_device.value, CardioDevice.NONE.value),
            isCompleted=_true_or_none(entity.is_completed),
            **_core_export_fields(entity),
        )

    def from_item(self, item: CardioExportItem, decoder: ImportDecoder, index: int) -> CardioSession:
        return CardioSession(
            **_core_import_fields(item, decoder, index),
            distance=item.distance or 0.0,
            difficulty=item.difficulty or 1,
            is_completed=item.isCompleted or False,
            training_program=decoder.enum(
                index, "trainingProgram", TrainingProgram, item.trainingProgram, TrainingProgram.MANUAL
            ),
            cardio_device=decoder.enum(
                index, "cardioDevice", CardioDevice, item.cardioDevice, CardioDevice.NONE
            ),
        )


class StrengthMapper(ExportMapper[StrengthSession, StrengthExportItem]):
    kind = TransferKind.STRENGTH
    package_class = StrengthExportPackage

    def to_item(self, entity: StrengthSession) -> StrengthExportItem:
        return StrengthExportItem(
            date=format_iso(entity.date),
            duration=_positive_or_none(entity.duration),
            calories=_positive_or_none(entity.calories),
            notes=_none_if_empty(entity.notes, ""),
            bodyWeight=_positive_or_none(entity.body_weight),
            heartRate=_positive_or_none(entity.heart_rate),
            maxHeartRate=_positive_or_none(entity.max_heart_rate),
            workoutType=entity.workout_type_raw,
            intensity=_none_if_empty(entity.intensity.value, Intensity.NONE.value),
            isCompleted=entity.is_completed,
            exerciseSets=[exercise_set_to_item(s) for s in entity.exercise_sets],
            **_core_export_fields(entity),
        )

    def from_item(self, item: StrengthExportItem, decoder: ImportDecoder, index: int) -> StrengthSession:
        session = StrengthSession(
            **_core_import_fields(item, decoder, index),
            is_completed=item.isCompleted,
            workout_type=decoder.enum(
                index, "workoutType", StrengthWorkoutType, item.workoutType, StrengthWorkoutType.FULL_BODY
            ),
        )
        session.exercise_sets = [
            exercise_set_from_item(set_item, decoder, index) for set_item in item.exerciseSets
        ]
        return session


class OutdoorMapper(ExportMapper[OutdoorSession, OutdoorExportItem]):
    kind = TransferKind.OUTDOOR
    package_class = OutdoorExportPackage

    def to_item(self, entity: OutdoorSession) -> OutdoorExportItem:
        return OutdoorExportItem(
            date=format_iso(entity.date),
            duration=_positive_or_none(entity.duration),
            distance=_positive_or_none(entity.distance),
            calories=_positive_or_none(entity.calories),
            elevationGain=_positive_or_none(entity.elevation_gain),
            averageSpeed=_positive_or_none(entity.average_speed),
            maxSpeed=_positive_or_none(entity.max_speed),
            heartRate=_positive_or_none(entity.heart_rate),
            maxHeartRate=_positive_or_none(entity.max_heart_rate),
            bodyWeight=_positive_or_none(entity.body_weight),
            routeName=_none_if_empty(entity.route_name, ""),
            startLocation=_none_if_empty(entity.start_location, ""),
            endLocation=_none_if_empty(entity.end_location, ""),
            notes=_none_if_empty(entity.notes, ""),
            temperature=entity.temperature,
            weatherCondition=_none_if_empty(entity.weather_condition_raw, WeatherCondition.UNKNOWN.value),
            outdoorActivity=entity.outdoor_activity_raw,
            intensity=_none_if_empty(entity.intensity.value, Intensity.NONE.value),
            isCompleted=_true_or_none(entity.is_completed),
            **_core_export_fields(entity),
        )

    def from_item(self, item: OutdoorExportItem, decoder: ImportDecoder, index: int) -> OutdoorSession:
        return OutdoorSession(
            **_core_import_fields(item, decoder, index),
            distance=item.distance or 0.0,
            elevation_gain=item.elevationGain or 0.0,
            average_speed=item.averageSpeed or 0.0,
            max_speed=item.maxSpeed or 0.0,
            route_name=item.routeName or "",
            start_location=item.startLocation or "",
            end_location=item.endLocation or "",
            temperature=item.temperature,
            is_completed=item.isCompleted or False,
            weather_condition=decoder.enum(
                index, "weatherCondition", WeatherCondition, item.weatherCondition, WeatherCondition.UNKNOWN
            ),
            outdoor_activity=decoder.enum(
                index, "outdoorActivity", OutdoorActivity, item.outdoorActivity, OutdoorActivity.CYCLING
            ),
        )


class TrainingPlanMapper(ExportMapper[TrainingPlan, TrainingPlanExportItem]):
    kind = TransferKind.PLANS
    package_class = TrainingPlanExportPackage

    def to_item(self, entity: TrainingPlan) -> TrainingPlanExportItem:
        return TrainingPlanExportItem(
            title=entity.title,
            planDescription=_none_if_empty(entity.plan_description, ""),
            startDate=format_iso_date(entity.start_date),
            endDate=format_iso_date(entity.end_date) if entity.end_date else None,
            isActive=entity.is_active,
            createdAt=format_iso(entity.created_at),
            planType=entity.plan_type_raw,
            templateSets=[exercise_set_to_item(s) for s in entity.template_sets],
        )

    def from_item(self, item: TrainingPlanExportItem, decoder: ImportDecoder, index: int) -> TrainingPlan:
        end_date = decoder.optional_date(index, "endDate", item.endDate)
        plan = TrainingPlan(
            title=item.title,
            plan_description=item.planDescription or "",
            start_date=decoder.primary_date(index, "startDate", item.startDate).date(),
            end_date=end_date.date() if end_date else None,
            is_active=item.isActive,
            plan_type=decoder.enum(index, "planType", PlanType, item.planType, PlanType.MIXED),
        )
        created_at = parse_iso(item.createdAt)
        if created_at is not None:
            plan.created_at = created_at
        plan.template_sets = [
            exercise_set_from_item(set_item, decoder, index) for set_item in item.templateSets
        ]
        return plan


_MAPPERS: Dict[TransferKind, ExportMapper] = {
    TransferKind.CARDIO: CardioMapper(),
    TransferKind.STRENGTH: StrengthMapper(),
    TransferKind.OUTDOOR: OutdoorMapper(),
    TransferKind.PLANS: TrainingPlanMapper(),
}


def get_mapper(kind: TransferKind) -> ExportMapper:
    """
    Get the mapper for a transfer kind.

    Args:
        kind: Transfer kind (cardio, strength, outdoor, plans)

    Returns:
        ExportMapper instance
    """
    return _MAPPERS[TransferKind(kind)]
