"""Auth / dashboard schemas."""

from uuid import UUID

from pydantic import BaseModel

from app.schemas.workout import WorkoutRead


class UserRead(BaseModel):
    id: UUID
    email: str | None = None


class DashboardRead(BaseModel):
    user: UserRead
    total_workouts: int
    completed_workouts: int
    recent_workouts: list[WorkoutRead] = []
