"""ORM models - import all so Base.metadata is complete for migrations."""

from app.models.lift_type import LiftType
from app.models.workout import Exercise, Workout, WorkoutSet

__all__ = [
    "Exercise",
    "LiftType",
    "Workout",
    "WorkoutSet",
]
