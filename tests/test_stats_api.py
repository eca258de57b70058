"""Tests for the stats view, the dashboard and the readiness probe."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.services.autosave import Debouncer, workout_field_saver
from tests.conftest import OTHER_USER_ID

STATS = "/api/v1/workouts/stats"


@pytest.fixture
async def bench_history(lift_types, make_workout):
    bench = lift_types["Bench Press"]
    now = datetime.now(timezone.utc)
    await make_workout([("Bench", bench, [(100, 5, True)])], date=now - timedelta(days=60))
    await make_workout([("Bench", bench, [(135, 5, True), (145, 5, True), (155, 3, True)])], date=now - timedelta(days=10))
    await make_workout([("Bench", bench, [(160, 3, True), (170, 2, False)])], date=now - timedelta(days=3))
    await make_workout([("Bench", bench, [(500, 1, True)])], user_id=OTHER_USER_ID, date=now - timedelta(days=2))
    return bench


async def test_stats_rows_newest_first(client, bench_history):
    response = await client.get(STATS, params={"lift_type_id": str(bench_history)})

    assert response.status_code == 200
    body = response.json()
    assert body["time_range"] == "month"
    rows = body["rows"]
    assert [r["max_weight"] for r in rows] == [170, 155]
    assert rows[1]["total_volume"] == 1865
    assert rows[1]["total_sets"] == 3
    assert rows[1]["average_reps"] == pytest.approx(13 / 3)
    assert body["overview"]["max_weight"] == 170
    assert body["overview"]["progress"] == 15
    assert body["overview"]["average_volume"] == pytest.approx((1865 + 820) / 2)


async def test_stats_completed_only_and_all_time(client, bench_history):
    completed = await client.get(
        STATS, params={"lift_type_id": str(bench_history), "completed_only": "true"}
    )
    all_time = await client.get(STATS, params={"lift_type_id": str(bench_history), "time_range": "all"})

    assert [r["max_weight"] for r in completed.json()["rows"]] == [160, 155]
    assert [r["max_weight"] for r in all_time.json()["rows"]] == [170, 155, 100]
    assert all_time.json()["overview"]["progress"] == 70


async def test_stats_empty_and_unknown_lift(client, lift_types):
    empty = await client.get(STATS, params={"lift_type_id": str(lift_types["Squat"]), "time_range": "week"})
    unknown = await client.get(STATS, params={"lift_type_id": str(uuid.uuid4())})
    bad_range = await client.get(STATS, params={"lift_type_id": str(lift_types["Squat"]), "time_range": "decade"})

    assert empty.status_code == 200
    assert empty.json()["rows"] == []
    assert empty.json()["overview"] == {"max_weight": None, "progress": None, "average_volume": None}
    assert unknown.status_code == 404
    assert bad_range.status_code == 422


async def test_dashboard(client, make_workout):
    now = datetime.now(timezone.utc)
    for days in range(7):
        await make_workout([("Bench", None, [(100, 5, True)])], date=now - timedelta(days=days + 1), completed=days < 2)
    await make_workout([("Bench", None, [(100, 5, True)])], user_id=OTHER_USER_ID)

    response = await client.get("/api/v1/dashboard")

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "lifter@example.com"
    assert body["total_workouts"] == 7
    assert body["completed_workouts"] == 2
    assert len(body["recent_workouts"]) == 5
    dates = [w["date"] for w in body["recent_workouts"]]
    assert dates == sorted(dates, reverse=True)


async def test_readiness_reports_pending_autosaves(app, client, session_maker, make_workout):
    app.state.debouncer = Debouncer(delay=60, save=workout_field_saver(session_maker))
    workout_id = await make_workout([("Bench", None, [(100, 5, True)])])
    await client.patch(f"/api/v1/workouts/{workout_id}/autosave", json={"name": "A", "notes": "B"})

    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "connected", "pending_autosaves": 2}
