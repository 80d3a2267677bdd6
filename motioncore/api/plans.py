"""
Training Plans API endpoints.
"""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from motioncore.api.sessions import ExerciseSetPayload
from motioncore.core.database import get_db
from motioncore.core.logging import get_logger
from motioncore.models import StrengthSession, TrainingPlan
from motioncore.models.types import PlanType
from motioncore.services.store import SessionStore

logger = get_logger(__name__)
router = APIRouter()


# ========================================
# Request/Response Schemas
# ========================================

class CreatePlanRequest(BaseModel):
    """Request to create a training plan."""
    title: str = Field(..., min_length=1, max_length=200)
    planDescription: str = ""
    startDate: date = Field(default_factory=date.today)
    endDate: Optional[date] = None
    isActive: bool = True
    planType: PlanType = PlanType.MIXED
    templateSets: list[ExerciseSetPayload] = Field(default_factory=list)


async def _get_plan_or_404(store: SessionStore, plan_id: UUID) -> TrainingPlan:
    plan = await store.get_plan(plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Trainingsplan nicht gefunden")
    return plan


# ========================================
# API Endpoints
# ========================================

@router.post("", status_code=201)
async def create_plan(
    request: CreatePlanRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a training plan with its template sets.
    """
    if request.endDate is not None and request.endDate < request.startDate:
        raise HTTPException(status_code=400, detail="Enddatum liegt vor dem Startdatum")

    plan = TrainingPlan(
        title=request.title,
        plan_description=request.planDescription,
        start_date=request.startDate,
        end_date=request.endDate,
        is_active=request.isActive,
        plan_type=request.planType,
    )
    plan.template_sets = [s.to_model() for s in request.templateSets]
    plan = await SessionStore(db).add_plan(plan)

    logger.info("Plan created", plan_id=str(plan.id), template_sets=len(plan.template_sets))
    return plan.to_dict()


@router.get("")
async def list_plans(
    db: AsyncSession = Depends(get_db),
):
    """
    Get all training plans.
    """
    plans = await SessionStore(db).list_plans()
    return [plan.to_dict() for plan in plans]


@router.get("/{plan_id}")
async def get_plan(
    plan_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a specific training plan by ID.
    """
    plan = await _get_plan_or_404(SessionStore(db), plan_id)
    return plan.to_dict()


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a training plan. Sessions generated from it are kept.
    """
    store = SessionStore(db)
    plan = await _get_plan_or_404(store, plan_id)
    await store.delete_many([plan])

    logger.info("Plan deleted", plan_id=str(plan_id))
    return {"message": "Trainingsplan gelöscht"}


@router.post("/{plan_id}/sessions", status_code=201)
async def start_session_from_plan(
    plan_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a strength session prefilled with the plan's template sets.
    """
    store = SessionStore(db)
    plan = await _get_plan_or_404(store, plan_id)

    session = StrengthSession(date=datetime.now(), source_training_plan=plan)
    session.exercise_sets = [s.clone_for_session() for s in plan.template_sets]
    await store.add(session)

    logger.info(
        "Session generated from plan",
        plan_id=str(plan_id),
        session_id=str(session.id),
        sets=len(session.exercise_sets),
    )
    return session.to_dict()
