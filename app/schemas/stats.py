"""Progression / stats response schemas."""

from datetime import date

from pydantic import BaseModel

from app.core.enums import TimeRange
from app.schemas.lift_type import LiftTypeRead
from app.schemas.workout import WorkoutDetail


class DailyLiftStatsRead(BaseModel):
    date: date
    max_weight: float
    total_volume: float
    total_sets: int
    average_reps: float


class StatsOverviewRead(BaseModel):
    max_weight: float | None = None
    progress: float | None = None  # last max - first max, None with fewer than two days
    average_volume: float | None = None


class LiftTypeStats(BaseModel):
    """Stats view: table rows newest first."""

    lift_type: LiftTypeRead
    time_range: TimeRange
    rows: list[DailyLiftStatsRead] = []
    overview: StatsOverviewRead


class LiftProgress(BaseModel):
    """Per-lift progress page: chart rows oldest first plus headline numbers."""

    lift_type: LiftTypeRead
    personal_record: float
    total_workouts: int
    average_weight: float
    chart: list[DailyLiftStatsRead] = []
    recent_workouts: list[WorkoutDetail] = []
