"""Stats view: per-date progression of one lift type over a time range."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import TimeRange
from app.core.security import AuthUser, get_current_user
from app.db.session import get_db
from app.models.lift_type import LiftType
from app.schemas.lift_type import LiftTypeRead
from app.schemas.stats import DailyLiftStatsRead, LiftTypeStats, StatsOverviewRead
from app.services import workouts as workout_service
from app.services.progression import stats_overview, summarize_by_date, time_range_start

router = APIRouter()


@router.get("/stats", response_model=LiftTypeStats)
async def lift_type_stats(
    lift_type_id: uuid.UUID,
    time_range: TimeRange = TimeRange.MONTH,
    completed_only: bool = False,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    One row per workout date (newest first): max weight, total volume, set count, average reps.
    Recomputed from raw sets on every request.
    """
    result = await db.execute(select(LiftType).where(LiftType.id == lift_type_id))
    lift_type = result.scalar_one_or_none()
    if not lift_type:
        raise HTTPException(status_code=404, detail="Lift type not found")

    since = time_range_start(time_range, datetime.now(timezone.utc))
    records = await workout_service.load_lift_records(db, lift_type_id, user.id, since=since)
    rows = summarize_by_date(records, completed_only=completed_only, descending=True)
    overview = stats_overview(rows)
    return LiftTypeStats(
        lift_type=LiftTypeRead.model_validate(lift_type),
        time_range=time_range,
        rows=[DailyLiftStatsRead.model_validate(row, from_attributes=True) for row in rows],
        overview=StatsOverviewRead.model_validate(overview, from_attributes=True),
    )
