"""
User Settings API endpoints.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from motioncore.core.database import get_db
from motioncore.core.logging import get_logger
from motioncore.models.types import CardioDevice, Gender, TrainingProgram, UserActivityLevel
from motioncore.services.store import SessionStore

logger = get_logger(__name__)
router = APIRouter()


class UpdateSettingsRequest(BaseModel):
    """Partial settings update; omitted fields stay unchanged."""
    bodyHeightCm: Optional[int] = Field(None, ge=0)
    birthday: Optional[date] = None
    gender: Optional[Gender] = None
    activityLevel: Optional[UserActivityLevel] = None
    dailyActiveCalorieGoal: Optional[int] = Field(None, ge=0)
    dailyStepsGoal: Optional[int] = Field(None, ge=0)
    defaultDevice: Optional[CardioDevice] = None
    defaultProgram: Optional[TrainingProgram] = None
    defaultDuration: Optional[int] = Field(None, ge=0)
    defaultDifficulty: Optional[int] = None
    showEmptyFields: Optional[bool] = None


_FIELDS = {
    "bodyHeightCm": "body_height_cm",
    "birthday": "birthday",
    "gender": "gender",
    "activityLevel": "activity_level",
    "dailyActiveCalorieGoal": "daily_active_calorie_goal",
    "dailyStepsGoal": "daily_steps_goal",
    "defaultDevice": "default_device",
    "defaultProgram": "default_program",
    "defaultDuration": "default_duration",
    "defaultDifficulty": "default_difficulty",
    "showEmptyFields": "show_empty_fields",
}


@router.get("")
async def get_settings(
    db: AsyncSession = Depends(get_db),
):
    """
    Get the user settings (created with defaults on first access).
    """
    user_settings = await SessionStore(db).get_user_settings()
    return user_settings.to_dict()


@router.put("")
async def update_settings(
    request: UpdateSettingsRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Update the user settings.
    """
    user_settings = await SessionStore(db).get_user_settings()
    values = request.model_dump(exclude_unset=True)
    for name, value in values.items():
        if value is None and name != "birthday":
            continue
        setattr(user_settings, _FIELDS[name], value)
    await db.flush()

    logger.info("User settings updated", fields=sorted(values))
    return user_settings.to_dict()
