"""Workout, Exercise and WorkoutSet models (Workout owns Exercises owns Sets)."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Workout(Base):
    """One training session belonging to a Supabase Auth user."""

    __tablename__ = "workouts"
    __table_args__ = (Index("ix_workouts_user_date", "user_id", "date"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    exercises: Mapped[list["Exercise"]] = relationship(
        "Exercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="Exercise.created_at",
    )

    @property
    def display_name(self) -> str:
        """Name shown in lists; unnamed workouts are labelled by their date."""
        if self.name and self.name.strip():
            return self.name
        return f"Workout {self.date.date().isoformat()}"


class Exercise(Base):
    """An instance of a lift within a workout."""

    __tablename__ = "exercises"
    __table_args__ = (
        Index("ix_exercises_workout_id", "workout_id"),
        Index("ix_exercises_lift_type_id", "lift_type_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workout_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False
    )
    lift_type_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("lift_types.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    workout: Mapped["Workout"] = relationship("Workout", back_populates="exercises")
    lift_type: Mapped["LiftType | None"] = relationship("LiftType", back_populates="exercises")
    sets: Mapped[list["WorkoutSet"]] = relationship(
        "WorkoutSet",
        back_populates="exercise",
        cascade="all, delete-orphan",
        order_by="WorkoutSet.created_at",
    )

    @property
    def lift_type_name(self) -> str | None:
        return self.lift_type.name if self.lift_type is not None else None


class WorkoutSet(Base):
    """One logged attempt: weight x reps, with a completed flag."""

    __tablename__ = "sets"
    __table_args__ = (Index("ix_sets_exercise_id", "exercise_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    exercise_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    weight: Mapped[float] = mapped_column(Numeric(8, 2, asdecimal=False), default=0, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    exercise: Mapped["Exercise"] = relationship("Exercise", back_populates="sets")
