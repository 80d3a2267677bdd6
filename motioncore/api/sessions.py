"""
Workout Sessions API endpoints.
"""
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from motioncore.core.database import get_db
from motioncore.core.logging import get_logger
from motioncore.models import ExerciseSet
from motioncore.models.session import CoreSessionMixin
from motioncore.models.types import (
    CardioDevice,
    Intensity,
    OutdoorActivity,
    SetKind,
    StrengthWorkoutType,
    TrainingProgram,
    WeatherCondition,
    WorkoutType,
)
from motioncore.services.store import SessionStore

logger = get_logger(__name__)
router = APIRouter()


# ========================================
# Request/Response Schemas
# ========================================

class ExerciseSetPayload(BaseModel):
    """Exercise set of a strength session or plan template."""
    exerciseName: str = Field(..., min_length=1)
    setNumber: int = Field(1, ge=1)
    weight: float = 0.0
    weightPerSide: float = 0.0
    reps: int = 0
    duration: int = 0
    distance: float = 0.0
    restSeconds: int = 90
    setKind: SetKind = SetKind.WORK
    isCompleted: bool = True
    rpe: int = 0
    notes: str = ""
    targetRepsMin: int = 0
    targetRepsMax: int = 0
    targetRIR: int = 2
    groupId: str = ""
    sortOrder: int = 0

    def to_model(self) -> ExerciseSet:
        return ExerciseSet(
            exercise_name=self.exerciseName,
            exercise_name_snapshot=self.exerciseName,
            set_number=self.setNumber,
            weight=self.weight,
            weight_per_side=self.weightPerSide,
            reps=self.reps,
            duration=self.duration,
            distance=self.distance,
            rest_seconds=self.restSeconds,
            set_kind=self.setKind,
            is_completed=self.isCompleted,
            rpe=self.rpe,
            notes=self.notes,
            target_reps_min=self.targetRepsMin,
            target_reps_max=self.targetRepsMax,
            target_rir=self.targetRIR,
            group_id=self.groupId,
            sort_order=self.sortOrder,
        )


class SessionPayload(BaseModel):
    """
    Create/update payload for any session kind.

    Fields that do not belong to the addressed kind are ignored.
    """
    date: Optional[datetime] = None
    duration: Optional[int] = None
    calories: Optional[int] = None
    heartRate: Optional[int] = None
    maxHeartRate: Optional[int] = None
    bodyWeight: Optional[float] = None
    notes: Optional[str] = None
    intensity: Optional[Intensity] = None
    isCompleted: Optional[bool] = None
    perceivedExertion: Optional[int] = Field(None, ge=1, le=10)
    energyLevelBefore: Optional[int] = Field(None, ge=1, le=5)
    deviceSource: Optional[str] = None
    # Cardio
    distance: Optional[float] = None
    difficulty: Optional[int] = None
    cardioDevice: Optional[CardioDevice] = None
    trainingProgram: Optional[TrainingProgram] = None
    # Strength
    workoutType: Optional[StrengthWorkoutType] = None
    exerciseSets: Optional[list[ExerciseSetPayload]] = None
    # Outdoor
    elevationGain: Optional[float] = None
    averageSpeed: Optional[float] = None
    maxSpeed: Optional[float] = None
    routeName: Optional[str] = None
    startLocation: Optional[str] = None
    endLocation: Optional[str] = None
    temperature: Optional[float] = None
    weatherCondition: Optional[WeatherCondition] = None
    outdoorActivity: Optional[OutdoorActivity] = None


class LiveSessionRequest(BaseModel):
    """Optional explicit timestamp for start/complete."""
    at: Optional[datetime] = None


# camelCase payload field -> model attribute
_CORE_FIELDS = {
    "date": "date",
    "duration": "duration",
    "calories": "calories",
    "heartRate": "heart_rate",
    "maxHeartRate": "max_heart_rate",
    "bodyWeight": "body_weight",
    "notes": "notes",
    "intensity": "intensity",
    "isCompleted": "is_completed",
    "perceivedExertion": "perceived_exertion",
    "energyLevelBefore": "energy_level_before",
    "deviceSource": "device_source",
}

# Attributes a client may clear with an explicit null
_NULLABLE = {"perceived_exertion", "energy_level_before", "temperature"}

_KIND_FIELDS = {
    WorkoutType.CARDIO: {
        "distance": "distance",
        "difficulty": "difficulty",
        "cardioDevice": "cardio_device",
        "trainingProgram": "training_program",
    },
    WorkoutType.STRENGTH: {
        "workoutType": "workout_type",
    },
    WorkoutType.OUTDOOR: {
        "distance": "distance",
        "elevationGain": "elevation_gain",
        "averageSpeed": "average_speed",
        "maxSpeed": "max_speed",
        "routeName": "route_name",
        "startLocation": "start_location",
        "endLocation": "end_location",
        "temperature": "temperature",
        "weatherCondition": "weather_condition",
        "outdoorActivity": "outdoor_activity",
    },
}


def _local(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive local time."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def apply_payload(session: CoreSessionMixin, payload: SessionPayload) -> CoreSessionMixin:
    """Copy the explicitly set payload fields onto a session."""
    fields = {**_CORE_FIELDS, **_KIND_FIELDS[session.kind]}
    values: dict[str, Any] = payload.model_dump(exclude_unset=True, exclude={"exerciseSets"})
    for name, value in values.items():
        attr = fields.get(name)
        if attr is None:
            continue
        if value is None and attr not in _NULLABLE:
            continue
        if name == "date":
            value = _local(value)
        setattr(session, attr, value)

    if payload.exerciseSets is not None and session.kind == WorkoutType.STRENGTH:
        session.exercise_sets = [s.to_model() for s in payload.exerciseSets]
    return session


async def _get_or_404(store: SessionStore, kind: WorkoutType, session_id: UUID) -> CoreSessionMixin:
    session = await store.get(kind, session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Workout nicht gefunden")
    return session


# ========================================
# API Endpoints
# ========================================

@router.get("/{kind}")
async def list_sessions(
    kind: WorkoutType,
    db: AsyncSession = Depends(get_db),
):
    """
    Get all sessions of a kind, newest first.
    """
    sessions = await SessionStore(db).list(kind)
    return [s.to_dict() for s in sessions]


@router.post("/{kind}", status_code=201)
async def create_session(
    kind: WorkoutType,
    request: SessionPayload,
    db: AsyncSession = Depends(get_db),
):
    """
    Log a new session.
    """
    store = SessionStore(db)
    session = apply_payload(store.model_for(kind)(), request)
    await store.add(session)

    logger.info("Session created", session_id=str(session.id), kind=kind.value)
    return session.to_dict()


@router.get("/{kind}/{session_id}")
async def get_session(
    kind: WorkoutType,
    session_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a specific session by ID.
    """
    session = await _get_or_404(SessionStore(db), kind, session_id)
    return session.to_dict()


@router.put("/{kind}/{session_id}")
async def update_session(
    kind: WorkoutType,
    session_id: UUID,
    request: SessionPayload,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a session. Only fields present in the request are changed.
    """
    store = SessionStore(db)
    session = apply_payload(await _get_or_404(store, kind, session_id), request)
    await db.flush()

    logger.info("Session updated", session_id=str(session_id), kind=kind.value)
    return session.to_dict()


@router.delete("/{kind}/{session_id}")
async def delete_session(
    kind: WorkoutType,
    session_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a session (and its exercise sets).
    """
    store = SessionStore(db)
    session = await _get_or_404(store, kind, session_id)
    await store.delete(session)

    logger.info("Session deleted", session_id=str(session_id), kind=kind.value)
    return {"message": "Workout gelöscht"}


@router.post("/{kind}/{session_id}/start")
async def start_session(
    kind: WorkoutType,
    session_id: UUID,
    request: Optional[LiveSessionRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Start a live session.
    """
    session = await _get_or_404(SessionStore(db), kind, session_id)
    session.start(_local(request.at) if request else None)
    await db.flush()
    return session.to_dict()


@router.post("/{kind}/{session_id}/complete")
async def complete_session(
    kind: WorkoutType,
    session_id: UUID,
    request: Optional[LiveSessionRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Complete a session; a started session gets its measured duration.
    """
    session = await _get_or_404(SessionStore(db), kind, session_id)
    session.complete(_local(request.at) if request else None)
    await db.flush()

    logger.info(
        "Session completed",
        session_id=str(session_id),
        kind=kind.value,
        duration=session.duration,
    )
    return session.to_dict()
