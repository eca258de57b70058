"""Progression aggregation: per-date max weight, volume, set count and average reps.

Pure functions over rows that were already fetched for one lift type. Nothing is cached;
callers recompute whenever the lift type or the time range changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from dateutil.relativedelta import relativedelta

from app.core.constants import AVERAGE_WEIGHT_DIGITS
from app.core.enums import TimeRange


@dataclass(frozen=True)
class SetRecord:
    """One set joined with the workout it was logged in."""

    workout_id: object
    workout_date: datetime | date
    weight: float
    reps: int
    completed: bool = True


@dataclass(frozen=True)
class DailyLiftStats:
    date: date
    max_weight: float
    total_volume: float
    total_sets: int
    average_reps: float


@dataclass(frozen=True)
class LiftSummary:
    personal_record: float
    total_workouts: int
    average_weight: float


@dataclass(frozen=True)
class StatsOverview:
    max_weight: float | None
    progress: float | None
    average_volume: float | None


def _round_half_up(value: float, digits: int) -> float:
    # Half up: 142.5 -> 143
    return float(Decimal(str(value)).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP))


def _as_date(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _counted(records: Iterable[SetRecord], completed_only: bool) -> list[SetRecord]:
    # Placeholder sets (weight 0) carry no load and would drag averages down
    return [
        r for r in records
        if r.weight is not None and float(r.weight) > 0 and (r.completed or not completed_only)
    ]


def time_range_start(time_range: TimeRange | str, now: datetime) -> datetime | None:
    """First instant included by a time range; None means no lower bound."""
    time_range = TimeRange(time_range)
    if time_range == TimeRange.WEEK:
        return now - timedelta(days=7)
    if time_range == TimeRange.MONTH:
        return now - relativedelta(months=1)
    if time_range == TimeRange.YEAR:
        return now - relativedelta(years=1)
    return None


def summarize_by_date(
    records: Iterable[SetRecord],
    completed_only: bool = False,
    descending: bool = False,
) -> list[DailyLiftStats]:
    """One row per workout date.

    Ascending order feeds charts, descending order feeds the stats table.
    """
    by_date: dict[date, list[SetRecord]] = {}
    for r in _counted(records, completed_only):
        by_date.setdefault(_as_date(r.workout_date), []).append(r)

    rows = []
    for d, day_sets in by_date.items():
        weights = [float(s.weight) for s in day_sets]
        reps = [int(s.reps or 0) for s in day_sets]
        rows.append(
            DailyLiftStats(
                date=d,
                max_weight=max(weights),
                total_volume=sum(w * r for w, r in zip(weights, reps)),
                total_sets=len(day_sets),
                average_reps=sum(reps) / len(day_sets),
            )
        )
    rows.sort(key=lambda row: row.date, reverse=descending)
    return rows


def summarize_lift(records: Iterable[SetRecord], completed_only: bool = True) -> LiftSummary:
    """Headline numbers for the lift progress page."""
    records = list(records)
    counted = _counted(records, completed_only)
    if not counted:
        return LiftSummary(
            personal_record=0.0,
            total_workouts=len({r.workout_id for r in records}),
            average_weight=0.0,
        )
    weights = [float(r.weight) for r in counted]
    return LiftSummary(
        personal_record=max(weights),
        # Every workout the lift appears in, even if nothing was completed there
        total_workouts=len({r.workout_id for r in records}),
        average_weight=_round_half_up(sum(weights) / len(weights), AVERAGE_WEIGHT_DIGITS),
    )


def stats_overview(rows: list[DailyLiftStats]) -> StatsOverview:
    """Totals under the stats table. Order of ``rows`` does not matter."""
    if not rows:
        return StatsOverview(max_weight=None, progress=None, average_volume=None)
    ordered = sorted(rows, key=lambda row: row.date)
    progress = None
    if len(ordered) > 1:
        progress = ordered[-1].max_weight - ordered[0].max_weight
    return StatsOverview(
        max_weight=max(row.max_weight for row in ordered),
        progress=progress,
        average_volume=sum(row.total_volume for row in ordered) / len(ordered),
    )
