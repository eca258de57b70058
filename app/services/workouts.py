"""Workout persistence helpers shared by the workout, stats and lift endpoints.

Every function takes the request's session and never commits: the caller's transaction
(``get_db``) decides whether the whole unit of work lands or rolls back.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import (
    IncompleteSetsError,
    LastSetError,
    LiftTypeNotFoundError,
    WorkoutNotFoundError,
)
from app.models.lift_type import LiftType
from app.models.workout import Exercise, Workout, WorkoutSet
from app.schemas.workout import ExerciseCreate, SetCreate, WorkoutCreate
from app.services.progression import SetRecord

logger = logging.getLogger(__name__)


def _workout_detail_query():
    return select(Workout).options(
        selectinload(Workout.exercises).selectinload(Exercise.sets),
        selectinload(Workout.exercises).selectinload(Exercise.lift_type),
    )


async def get_owned_workout(
    db: AsyncSession,
    workout_id: uuid.UUID,
    user_id: uuid.UUID,
    detail: bool = False,
) -> Workout:
    """Load a workout of this user. Other users' workouts look exactly like missing ones."""
    stmt = _workout_detail_query() if detail else select(Workout)
    stmt = stmt.where(Workout.id == workout_id, Workout.user_id == user_id)
    if detail:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    workout = result.scalar_one_or_none()
    if workout is None:
        raise WorkoutNotFoundError(str(workout_id))
    return workout


async def list_workouts(
    db: AsyncSession,
    user_id: uuid.UUID,
    limit: int | None = None,
) -> list[Workout]:
    stmt = select(Workout).where(Workout.user_id == user_id).order_by(Workout.date.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_workouts(db: AsyncSession, user_id: uuid.UUID) -> tuple[int, int]:
    """(total, completed) for the dashboard."""
    result = await db.execute(
        select(
            func.count(Workout.id).label("total"),
            func.sum(case((Workout.completed.is_(True), 1), else_=0)).label("completed"),
        ).where(Workout.user_id == user_id)
    )
    row = result.one()
    return int(row.total or 0), int(row.completed or 0)


async def ensure_lift_types_exist(db: AsyncSession, lift_type_ids: set[uuid.UUID]) -> None:
    if not lift_type_ids:
        return
    result = await db.execute(select(LiftType.id).where(LiftType.id.in_(lift_type_ids)))
    missing = lift_type_ids - set(result.scalars().all())
    if missing:
        raise LiftTypeNotFoundError(", ".join(sorted(str(m) for m in missing)))


def _build_sets(sets: list[SetCreate]) -> list[WorkoutSet]:
    # An exercise always starts with at least one (empty) set
    sets = sets or [SetCreate()]
    return [WorkoutSet(weight=s.weight, reps=s.reps, completed=s.completed) for s in sets]


def _build_exercise(payload: ExerciseCreate) -> Exercise:
    return Exercise(
        name=payload.name,
        lift_type_id=payload.lift_type_id,
        sets=_build_sets(payload.sets),
    )


async def create_workout(db: AsyncSession, user_id: uuid.UUID, payload: WorkoutCreate) -> Workout:
    """Insert the workout, its exercises and their sets as one unit."""
    await ensure_lift_types_exist(
        db, {e.lift_type_id for e in payload.exercises if e.lift_type_id is not None}
    )
    workout = Workout(
        user_id=user_id,
        name=payload.name,
        date=payload.date or datetime.now(timezone.utc),
        notes=payload.notes,
        completed=False,
        exercises=[_build_exercise(e) for e in payload.exercises],
    )
    db.add(workout)
    await db.flush()
    logger.info(f"Created workout {workout.id} with {len(payload.exercises)} exercise(s)")
    return await get_owned_workout(db, workout.id, user_id, detail=True)


async def delete_workout_cascade(db: AsyncSession, workout_id: uuid.UUID) -> None:
    """Delete sets, then exercises, then the workout, inside the caller's transaction.

    If any statement fails the caller rolls back and nothing is removed.
    """
    exercise_ids = select(Exercise.id).where(Exercise.workout_id == workout_id)
    await db.execute(
        delete(WorkoutSet)
        .where(WorkoutSet.exercise_id.in_(exercise_ids))
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Exercise)
        .where(Exercise.workout_id == workout_id)
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Workout)
        .where(Workout.id == workout_id)
        .execution_options(synchronize_session=False)
    )
    logger.info(f"Deleted workout {workout_id} with its exercises and sets")


async def add_exercise(db: AsyncSession, workout: Workout, payload: ExerciseCreate) -> Exercise:
    if payload.lift_type_id is not None:
        await ensure_lift_types_exist(db, {payload.lift_type_id})
    exercise = _build_exercise(payload)
    exercise.workout_id = workout.id
    db.add(exercise)
    await db.flush()
    return await get_exercise(db, workout.id, exercise.id)


async def get_exercise(db: AsyncSession, workout_id: uuid.UUID, exercise_id: uuid.UUID) -> Exercise:
    result = await db.execute(
        select(Exercise)
        .where(Exercise.id == exercise_id, Exercise.workout_id == workout_id)
        .options(selectinload(Exercise.sets), selectinload(Exercise.lift_type))
        .execution_options(populate_existing=True)
    )
    exercise = result.scalar_one_or_none()
    if exercise is None:
        raise WorkoutNotFoundError(f"exercise {exercise_id}")
    return exercise


async def delete_exercise(db: AsyncSession, workout_id: uuid.UUID, exercise_id: uuid.UUID) -> None:
    await get_exercise(db, workout_id, exercise_id)
    await db.execute(
        delete(WorkoutSet)
        .where(WorkoutSet.exercise_id == exercise_id)
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Exercise)
        .where(Exercise.id == exercise_id)
        .execution_options(synchronize_session=False)
    )


async def get_set(db: AsyncSession, workout_id: uuid.UUID, set_id: uuid.UUID) -> WorkoutSet:
    result = await db.execute(
        select(WorkoutSet)
        .join(Exercise, Exercise.id == WorkoutSet.exercise_id)
        .where(WorkoutSet.id == set_id, Exercise.workout_id == workout_id)
    )
    set_ = result.scalar_one_or_none()
    if set_ is None:
        raise WorkoutNotFoundError(f"set {set_id}")
    return set_


async def add_set(db: AsyncSession, exercise: Exercise, payload: SetCreate) -> WorkoutSet:
    set_ = WorkoutSet(exercise_id=exercise.id, **payload.model_dump())
    db.add(set_)
    await db.flush()
    await db.refresh(set_)
    return set_


async def delete_set(db: AsyncSession, workout_id: uuid.UUID, set_id: uuid.UUID) -> None:
    set_ = await get_set(db, workout_id, set_id)
    remaining = await db.execute(
        select(func.count(WorkoutSet.id)).where(WorkoutSet.exercise_id == set_.exercise_id)
    )
    if int(remaining.scalar() or 0) <= 1:
        raise LastSetError(str(set_.exercise_id))
    await db.delete(set_)


async def complete_workout(db: AsyncSession, workout: Workout, force: bool = False) -> Workout:
    """Mark completed. Refuses while sets are still open unless ``force``."""
    result = await db.execute(
        select(func.count(WorkoutSet.id))
        .join(Exercise, Exercise.id == WorkoutSet.exercise_id)
        .where(Exercise.workout_id == workout.id, WorkoutSet.completed.is_(False))
    )
    incomplete = int(result.scalar() or 0)
    if incomplete and not force:
        raise IncompleteSetsError(incomplete)
    workout.completed = True
    await db.flush()
    return workout


async def load_lift_records(
    db: AsyncSession,
    lift_type_id: uuid.UUID,
    user_id: uuid.UUID,
    since: datetime | None = None,
) -> list[SetRecord]:
    """All of the user's sets logged under a lift type, joined with their workout dates."""
    stmt = (
        select(Workout.id, Workout.date, WorkoutSet.weight, WorkoutSet.reps, WorkoutSet.completed)
        .join(Exercise, Exercise.workout_id == Workout.id)
        .join(WorkoutSet, WorkoutSet.exercise_id == Exercise.id)
        .where(Exercise.lift_type_id == lift_type_id, Workout.user_id == user_id)
        .order_by(Workout.date, WorkoutSet.created_at)
    )
    if since is not None:
        stmt = stmt.where(Workout.date >= since)
    result = await db.execute(stmt)
    return [
        SetRecord(
            workout_id=row.id,
            workout_date=row.date,
            weight=float(row.weight or 0),
            reps=int(row.reps or 0),
            completed=bool(row.completed),
        )
        for row in result.all()
    ]


async def recent_workouts_for_lift(
    db: AsyncSession,
    lift_type_id: uuid.UUID,
    user_id: uuid.UUID,
    limit: int,
) -> list[tuple[Workout, list[Exercise]]]:
    """Most recent workouts containing the lift, each with only that lift's exercises."""
    ids_result = await db.execute(
        select(Workout.id)
        .join(Exercise, Exercise.workout_id == Workout.id)
        .where(Exercise.lift_type_id == lift_type_id, Workout.user_id == user_id)
        .group_by(Workout.id, Workout.date)
        .order_by(Workout.date.desc())
        .limit(limit)
    )
    workout_ids = list(ids_result.scalars().all())
    if not workout_ids:
        return []

    workouts_result = await db.execute(
        select(Workout).where(Workout.id.in_(workout_ids)).order_by(Workout.date.desc())
    )
    exercises_result = await db.execute(
        select(Exercise)
        .where(Exercise.workout_id.in_(workout_ids), Exercise.lift_type_id == lift_type_id)
        .options(selectinload(Exercise.sets), selectinload(Exercise.lift_type))
        .order_by(Exercise.created_at)
    )
    by_workout: dict[uuid.UUID, list[Exercise]] = {}
    for exercise in exercises_result.scalars().all():
        by_workout.setdefault(exercise.workout_id, []).append(exercise)
    return [(w, by_workout.get(w.id, [])) for w in workouts_result.scalars().all()]
