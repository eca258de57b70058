"""Workout CRUD endpoints, including nested exercises/sets and debounced auto-save."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_debouncer
from app.core.constants import AUTOSAVE_FIELDS
from app.core.exceptions import (
    IncompleteSetsError,
    LastSetError,
    LiftTypeNotFoundError,
    WorkoutNotFoundError,
)
from app.core.security import AuthUser, get_current_user
from app.db.session import get_db
from app.models.workout import Workout
from app.schemas.workout import (
    AutosaveAccepted,
    AutosavePayload,
    AutosaveStatus,
    ExerciseCreate,
    ExerciseRead,
    FieldSaveStatus,
    SetCreate,
    SetRead,
    SetUpdate,
    WorkoutCreate,
    WorkoutDetail,
    WorkoutRead,
    WorkoutUpdate,
)
from app.services import workouts as workout_service
from app.services.autosave import Debouncer

logger = logging.getLogger(__name__)
router = APIRouter()


async def _owned(
    db: AsyncSession,
    workout_id: uuid.UUID,
    user: AuthUser,
    detail: bool = False,
) -> Workout:
    try:
        return await workout_service.get_owned_workout(db, workout_id, user.id, detail=detail)
    except WorkoutNotFoundError:
        raise HTTPException(
            status_code=404,
            detail="Workout not found or you don't have permission to view it",
        )


@router.get("", response_model=list[WorkoutRead])
async def list_workouts(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The user's workouts, newest first."""
    return await workout_service.list_workouts(db, user.id)


@router.get("/history", response_model=list[WorkoutRead])
async def workout_history(
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """History is the workout list."""
    return await workout_service.list_workouts(db, user.id)


@router.post("", response_model=WorkoutDetail, status_code=201)
async def create_workout(
    payload: WorkoutCreate,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Save a new workout together with its exercises and sets."""
    try:
        return await workout_service.create_workout(db, user.id, payload)
    except LiftTypeNotFoundError as e:
        raise HTTPException(status_code=422, detail=f"Unknown lift type: {e}")


@router.get("/{workout_id}", response_model=WorkoutDetail)
async def get_workout(
    workout_id: uuid.UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Workout with exercises (and their lift type names) and sets."""
    return await _owned(db, workout_id, user, detail=True)


@router.patch("/{workout_id}", response_model=WorkoutRead)
async def update_workout(
    workout_id: uuid.UUID,
    payload: WorkoutUpdate,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Immediate partial update (name, date, notes, completed)."""
    workout = await _owned(db, workout_id, user)
    data = payload.model_dump(exclude_unset=True)
    for field_name in ("date", "completed"):
        if field_name in data and data[field_name] is None:
            raise HTTPException(status_code=422, detail=f"Workout {field_name} cannot be cleared")
    for k, v in data.items():
        setattr(workout, k, v)
    await db.flush()
    await db.refresh(workout)
    return workout


@router.post("/{workout_id}/complete", response_model=WorkoutRead)
async def complete_workout(
    workout_id: uuid.UUID,
    force: bool = False,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark the workout completed. Pass force=true to complete with open sets."""
    workout = await _owned(db, workout_id, user)
    try:
        return await workout_service.complete_workout(db, workout, force=force)
    except IncompleteSetsError as e:
        raise HTTPException(
            status_code=409,
            detail=f"Not all sets are marked as completed ({e.incomplete} open). Complete anyway with force=true.",
        )


@router.delete("/{workout_id}", status_code=204)
async def delete_workout(
    workout_id: uuid.UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a workout with its exercises and sets (all or nothing)."""
    await _owned(db, workout_id, user)
    await workout_service.delete_workout_cascade(db, workout_id)
    return None


@router.post("/{workout_id}/exercises", response_model=ExerciseRead, status_code=201)
async def add_exercise(
    workout_id: uuid.UUID,
    payload: ExerciseCreate,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Add an exercise; it starts with one empty set when none are given."""
    workout = await _owned(db, workout_id, user)
    try:
        return await workout_service.add_exercise(db, workout, payload)
    except LiftTypeNotFoundError as e:
        raise HTTPException(status_code=422, detail=f"Unknown lift type: {e}")


@router.delete("/{workout_id}/exercises/{exercise_id}", status_code=204)
async def delete_exercise(
    workout_id: uuid.UUID,
    exercise_id: uuid.UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _owned(db, workout_id, user)
    try:
        await workout_service.delete_exercise(db, workout_id, exercise_id)
    except WorkoutNotFoundError:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return None


@router.post("/{workout_id}/exercises/{exercise_id}/sets", response_model=SetRead, status_code=201)
async def add_set(
    workout_id: uuid.UUID,
    exercise_id: uuid.UUID,
    payload: SetCreate,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _owned(db, workout_id, user)
    try:
        exercise = await workout_service.get_exercise(db, workout_id, exercise_id)
    except WorkoutNotFoundError:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return await workout_service.add_set(db, exercise, payload)


@router.patch("/{workout_id}/sets/{set_id}", response_model=SetRead)
async def update_set(
    workout_id: uuid.UUID,
    set_id: uuid.UUID,
    payload: SetUpdate,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update weight, reps or the completed checkbox of one set."""
    await _owned(db, workout_id, user)
    try:
        set_ = await workout_service.get_set(db, workout_id, set_id)
    except WorkoutNotFoundError:
        raise HTTPException(status_code=404, detail="Set not found")
    for k, v in payload.model_dump(exclude_unset=True).items():
        if v is None:
            continue
        setattr(set_, k, v)
    await db.flush()
    await db.refresh(set_)
    return set_


@router.delete("/{workout_id}/sets/{set_id}", status_code=204)
async def delete_set(
    workout_id: uuid.UUID,
    set_id: uuid.UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a set. The last remaining set of an exercise cannot be removed."""
    await _owned(db, workout_id, user)
    try:
        await workout_service.delete_set(db, workout_id, set_id)
    except WorkoutNotFoundError:
        raise HTTPException(status_code=404, detail="Set not found")
    except LastSetError:
        raise HTTPException(status_code=409, detail="An exercise must keep at least one set")
    return None


@router.patch("/{workout_id}/autosave", response_model=AutosaveAccepted, status_code=202)
async def autosave_workout(
    workout_id: uuid.UUID,
    payload: AutosavePayload,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    debouncer: Debouncer = Depends(get_debouncer),
):
    """Queue debounced writes for edited form fields; only the last edit per field is saved."""
    await _owned(db, workout_id, user)
    data = payload.model_dump(exclude_unset=True)
    if "date" in data and data["date"] is None:
        raise HTTPException(status_code=422, detail="Workout date cannot be cleared")
    for field_name, value in data.items():
        debouncer.schedule((workout_id, field_name), value)
    return AutosaveAccepted(
        workout_id=workout_id,
        pending=list(data),
        delay_seconds=debouncer.delay,
    )


@router.get("/{workout_id}/autosave", response_model=AutosaveStatus)
async def autosave_status(
    workout_id: uuid.UUID,
    user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    debouncer: Debouncer = Depends(get_debouncer),
):
    """Per-field save status; finished statuses expire after a few seconds."""
    await _owned(db, workout_id, user)
    fields = []
    for field_name in AUTOSAVE_FIELDS:
        status = debouncer.status((workout_id, field_name))
        if status is None:
            continue
        fields.append(
            FieldSaveStatus(
                field=field_name,
                state=status.state,
                message=status.message,
                updated_at=status.updated_at,
            )
        )
    return AutosaveStatus(workout_id=workout_id, fields=fields)
