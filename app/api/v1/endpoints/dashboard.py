"""Dashboard: who is signed in and a glance at recent training."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.security import AuthUser, get_current_user
from app.db.session import get_db
from app.schemas.auth import DashboardRead, UserRead
from app.schemas.workout import WorkoutRead
from app.services import workouts as workout_service

router = APIRouter()


@router.get("", response_model=DashboardRead)
async def dashboard(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    total, completed = await workout_service.count_workouts(db, user.id)
    recent = await workout_service.list_workouts(db, user.id, limit=settings.recent_workouts_limit)
    return DashboardRead(
        user=UserRead(id=user.id, email=user.email),
        total_workouts=total,
        completed_workouts=completed,
        recent_workouts=[WorkoutRead.model_validate(w) for w in recent],
    )
