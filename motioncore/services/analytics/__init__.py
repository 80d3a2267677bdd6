"""
Analytics module - Workout statistics and records.

This module provides:
- Core aggregation engine over any session kind
- Cardio statistics and personal records
- Cross-type summary (cardio, strength, outdoor)
- Health metrics (BMI, BMR, TDEE)
"""
from motioncore.services.analytics.calculator import (
    DonutChartData,
    SessionCalcEngine,
    TrendPoint,
)
from motioncore.services.analytics.health import CalorieBalance, HealthMetricCalcEngine
from motioncore.services.analytics.records import RecordCalcEngine
from motioncore.services.analytics.statistics import (
    IntensitySummary,
    ProgramSummary,
    StatisticCalcEngine,
)
from motioncore.services.analytics.summary import (
    SummaryCalcEngine,
    TypedSession,
    WorkoutTypeSummary,
)

__all__ = [
    # Data structures
    "DonutChartData",
    "TrendPoint",
    "IntensitySummary",
    "ProgramSummary",
    "WorkoutTypeSummary",
    "TypedSession",
    "CalorieBalance",
    # Engines
    "SessionCalcEngine",
    "StatisticCalcEngine",
    "RecordCalcEngine",
    "SummaryCalcEngine",
    "HealthMetricCalcEngine",
]
