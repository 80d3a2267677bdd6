"""
Statistics, Records and Health Metrics API endpoints.
"""
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from motioncore.core.database import get_db
from motioncore.core.logging import get_logger
from motioncore.models.types import WorkoutType
from motioncore.services.analytics import (
    HealthMetricCalcEngine,
    RecordCalcEngine,
    SessionCalcEngine,
    StatisticCalcEngine,
    SummaryCalcEngine,
)
from motioncore.services.store import SessionStore

logger = get_logger(__name__)
router = APIRouter()


class StatsWindow(str, Enum):
    """Time window applied before aggregating."""
    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def _windowed(calc: SessionCalcEngine, window: StatsWindow, days: Optional[int]) -> SessionCalcEngine:
    """Apply the calendar window, then the optional trailing-days cutoff."""
    if window == StatsWindow.WEEK:
        calc = calc.this_week
    elif window == StatsWindow.MONTH:
        calc = calc.this_month
    elif window == StatsWindow.YEAR:
        calc = calc.this_year
    if days is not None:
        calc = calc.last_days(days)
    return calc


# ========================================
# API Endpoints
# ========================================

@router.get("/statistics/cardio")
async def cardio_statistics(
    window: StatsWindow = StatsWindow.ALL,
    days: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """
    Aggregated cardio statistics, trends and distributions.
    """
    sessions = await SessionStore(db).list(WorkoutType.CARDIO)
    calc = _windowed(SessionCalcEngine(sessions), window, days)
    return StatisticCalcEngine(calc.sessions).to_dict()


@router.get("/statistics/summary")
async def summary_statistics(
    window: StatsWindow = StatsWindow.ALL,
    days: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """
    Cross-type summary over cardio, strength and outdoor sessions.
    """
    by_kind = await SessionStore(db).list_all()
    summary = SummaryCalcEngine(
        cardio=_windowed(SessionCalcEngine(by_kind[WorkoutType.CARDIO]), window, days).sessions,
        strength=_windowed(SessionCalcEngine(by_kind[WorkoutType.STRENGTH]), window, days).sessions,
        outdoor=_windowed(SessionCalcEngine(by_kind[WorkoutType.OUTDOOR]), window, days).sessions,
    )
    return summary.to_dict()


@router.get("/statistics/health")
async def health_metrics(
    window: StatsWindow = StatsWindow.ALL,
    days: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """
    Body metrics (BMI, BMR, TDEE) from the latest weight in the window and user settings.
    """
    store = SessionStore(db)
    by_kind = await store.list_all()
    sessions = [s for kind_sessions in by_kind.values() for s in kind_sessions]
    calc = _windowed(SessionCalcEngine(sessions), window, days)
    user_settings = await store.get_user_settings()
    return HealthMetricCalcEngine(calc.sessions, user_settings).to_dict()


@router.get("/records/cardio")
async def cardio_records(
    window: StatsWindow = StatsWindow.ALL,
    days: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """
    Personal cardio records.
    """
    sessions = await SessionStore(db).list(WorkoutType.CARDIO)
    calc = _windowed(SessionCalcEngine(sessions), window, days)
    return RecordCalcEngine(calc.sessions).to_dict()
