"""Lift type catalog: search, create, and the per-lift progress page."""

from __future__ import annotations

import logging
import uuid
from typing import Iterable

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.security import AuthUser, get_current_user
from app.db.session import get_db
from app.models.lift_type import LiftType
from app.schemas.lift_type import LiftTypeCreate, LiftTypeRead
from app.schemas.stats import DailyLiftStatsRead, LiftProgress
from app.schemas.workout import ExerciseRead, WorkoutDetail, WorkoutRead
from app.services import workouts as workout_service
from app.services.progression import summarize_by_date, summarize_lift

logger = logging.getLogger(__name__)
router = APIRouter()


def filter_lift_types(lift_types: Iterable[LiftType], term: str | None) -> list[LiftType]:
    """Lift types whose name contains ``term``, ignoring case. Blank term keeps everything."""
    if not term:
        return list(lift_types)
    needle = term.lower()
    return [lt for lt in lift_types if needle in lt.name.lower()]


async def _get_lift_type(db: AsyncSession, lift_type_id: uuid.UUID) -> LiftType:
    result = await db.execute(select(LiftType).where(LiftType.id == lift_type_id))
    lift_type = result.scalar_one_or_none()
    if not lift_type:
        raise HTTPException(status_code=404, detail="Lift type not found")
    return lift_type


@router.get("", response_model=list[LiftTypeRead])
async def list_lift_types(
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    """All lift types by name; ``search`` keeps names containing the term (case-insensitive)."""
    result = await db.execute(select(LiftType).order_by(LiftType.name))
    return filter_lift_types(result.scalars().all(), search.strip() if search else None)


@router.post("", response_model=LiftTypeRead, status_code=201)
async def create_lift_type(
    payload: LiftTypeCreate,
    db: AsyncSession = Depends(get_db),
):
    """Add a lift type to the shared catalog."""
    existing = await db.execute(select(LiftType).where(LiftType.name == payload.name))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail=f"Lift type '{payload.name}' already exists")
    lift_type = LiftType(name=payload.name)
    db.add(lift_type)
    try:
        await db.flush()
    except IntegrityError:
        # Concurrent insert of the same name
        raise HTTPException(status_code=409, detail=f"Lift type '{payload.name}' already exists")
    await db.refresh(lift_type)
    logger.info(f"Created lift type {lift_type.name!r}")
    return lift_type


@router.get("/{lift_type_id}", response_model=LiftTypeRead)
async def get_lift_type(
    lift_type_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await _get_lift_type(db, lift_type_id)


@router.get("/{lift_type_id}/progress", response_model=LiftProgress)
async def lift_progress(
    lift_type_id: uuid.UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Progress for one lift:
    - chart rows per workout date (oldest first), completed sets only
    - personal record, number of workouts, average weight
    - most recent workouts with this lift (only this lift's exercises)
    """
    lift_type = await _get_lift_type(db, lift_type_id)
    records = await workout_service.load_lift_records(db, lift_type_id, user.id)
    chart = summarize_by_date(records, completed_only=True)
    summary = summarize_lift(records, completed_only=True)

    recent = await workout_service.recent_workouts_for_lift(
        db, lift_type_id, user.id, settings.recent_workouts_limit
    )
    recent_workouts = [
        WorkoutDetail(
            **WorkoutRead.model_validate(w).model_dump(),
            exercises=[ExerciseRead.model_validate(e) for e in exercises],
        )
        for w, exercises in recent
    ]
    return LiftProgress(
        lift_type=LiftTypeRead.model_validate(lift_type),
        personal_record=summary.personal_record,
        total_workouts=summary.total_workouts,
        average_weight=summary.average_weight,
        chart=[DailyLiftStatsRead.model_validate(row, from_attributes=True) for row in chart],
        recent_workouts=recent_workouts,
    )
