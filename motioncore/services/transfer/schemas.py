"""
Export file schemas.

Field names are the camelCase keys of the JSON backup files. Enum fields
carry raw values (int or str) so unknown values survive validation and
are resolved by the mappers with a recorded fallback.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, StrictInt


# ========================================
# Envelope
# ========================================

class ExportEnvelope(BaseModel):
    """Fields shared by every export package."""
    version: StrictInt = Field(..., description="Export format version")
    exportedAt: str = Field(..., description="ISO-8601 export timestamp")


# ========================================
# Exercise sets
# ========================================

class ExerciseSetExportItem(BaseModel):
    exerciseName: str
    exerciseNameSnapshot: Optional[str] = None
    exerciseUUIDSnapshot: Optional[str] = None
    exerciseMediaAssetName: Optional[str] = None
    isUnilateralSnapshot: Optional[bool] = None
    setNumber: int
    weight: Optional[float] = None
    weightPerSide: Optional[float] = None
    reps: Optional[int] = None
    duration: Optional[int] = None
    distance: Optional[float] = None
    restSeconds: Optional[int] = None
    setKind: Optional[str] = None
    isCompleted: bool
    rpe: Optional[int] = None
    notes: Optional[str] = None
    targetRepsMin: Optional[int] = None
    targetRepsMax: Optional[int] = None
    targetRIR: Optional[int] = None
    groupId: Optional[str] = None
    # Legacy fields of older exports, read but never written
    exerciseId: Optional[str] = None
    isWarmup: Optional[bool] = None


# ========================================
# Session items
# ========================================

class CoreSessionExportFields(BaseModel):
    """Status, rating and health fields present on every session item."""
    isLiveSession: Optional[bool] = None
    startedAt: Optional[str] = None
    completedAt: Optional[str] = None
    perceivedExertion: Optional[int] = None
    energyLevelBefore: Optional[int] = None
    healthKitWorkoutUUID: Optional[str] = None
    deviceSource: Optional[str] = None


class CardioExportItem(CoreSessionExportFields):
    date: Optional[str] = None
    duration: Optional[int] = None
    distance: Optional[float] = None
    calories: Optional[int] = None
    difficulty: Optional[int] = None
    heartRate: Optional[int] = None
    maxHeartRate: Optional[int] = None
    bodyWeight: Optional[float] = None
    notes: Optional[str] = None
    intensity: Optional[int] = None
    trainingProgram: Optional[str] = None
    cardioDevice: Optional[int] = None
    isCompleted: Optional[bool] = None


class StrengthExportItem(CoreSessionExportFields):
    date: str
    duration: Optional[int] = None
    calories: Optional[int] = None
    notes: Optional[str] = None
    bodyWeight: Optional[float] = None
    heartRate: Optional[int] = None
    maxHeartRate: Optional[int] = None
    workoutType: str
    intensity: Optional[int] = None
    isCompleted: bool
    exerciseSets: List[ExerciseSetExportItem] = Field(default_factory=list)


class OutdoorExportItem(CoreSessionExportFields):
    date: str
    duration: Optional[int] = None
    distance: Optional[float] = None
    calories: Optional[int] = None
    elevationGain: Optional[float] = None
    averageSpeed: Optional[float] = None
    maxSpeed: Optional[float] = None
    heartRate: Optional[int] = None
    maxHeartRate: Optional[int] = None
    bodyWeight: Optional[float] = None
    routeName: Optional[str] = None
    startLocation: Optional[str] = None
    endLocation: Optional[str] = None
    notes: Optional[str] = None
    temperature: Optional[float] = None
    weatherCondition: Optional[str] = None
    outdoorActivity: str
    intensity: Optional[int] = None
    isCompleted: Optional[bool] = None


class TrainingPlanExportItem(BaseModel):
    title: str
    planDescription: Optional[str] = None
    startDate: str
    endDate: Optional[str] = None
    isActive: bool
    createdAt: str
    planType: str
    templateSets: List[ExerciseSetExportItem] = Field(default_factory=list)


# ========================================
# Packages
# ========================================

class CardioExportPackage(ExportEnvelope):
    items: List[CardioExportItem]


class StrengthExportPackage(ExportEnvelope):
    items: List[StrengthExportItem]


class OutdoorExportPackage(ExportEnvelope):
    items: List[OutdoorExportItem]


class TrainingPlanExportPackage(ExportEnvelope):
    items: List[TrainingPlanExportItem]
