"""Workout, Exercise and Set schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import SaveState


class SetBase(BaseModel):
    weight: float = Field(default=0, ge=0)
    reps: int = Field(default=0, ge=0)
    completed: bool = False


class SetCreate(SetBase):
    pass


class SetUpdate(BaseModel):
    weight: float | None = Field(None, ge=0)
    reps: int | None = Field(None, ge=0)
    completed: bool | None = None


class SetRead(SetBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    exercise_id: UUID


class ExerciseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    lift_type_id: UUID | None = None
    sets: list[SetCreate] = []

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Exercise name must not be blank")
        return v


class ExerciseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    workout_id: UUID
    name: str
    lift_type_id: UUID | None = None
    lift_type_name: str | None = None
    sets: list[SetRead] = []


class WorkoutCreate(BaseModel):
    """New workout with its exercises and their sets, saved in one go."""

    name: str = Field(..., max_length=255)
    date: datetime | None = None
    notes: str | None = None
    exercises: list[ExerciseCreate] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter a workout name")
        return v


class WorkoutUpdate(BaseModel):
    name: str | None = Field(None, max_length=255)
    date: datetime | None = None
    notes: str | None = None
    completed: bool | None = None


class WorkoutRead(BaseModel):
    """List row (no exercises)."""

    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str | None = None
    display_name: str
    date: datetime
    completed: bool
    notes: str | None = None
    created_at: datetime | None = None


class WorkoutDetail(WorkoutRead):
    exercises: list[ExerciseRead] = []


class AutosavePayload(BaseModel):
    """Fields edited in the workout form; only those present are scheduled."""

    name: str | None = Field(None, max_length=255)
    date: datetime | None = None
    notes: str | None = None


class AutosaveAccepted(BaseModel):
    workout_id: UUID
    pending: list[str]
    delay_seconds: float


class FieldSaveStatus(BaseModel):
    field: str
    state: SaveState
    message: str | None = None
    updated_at: datetime | None = None


class AutosaveStatus(BaseModel):
    workout_id: UUID
    fields: list[FieldSaveStatus] = []
