"""Tests for the lift type catalog and the per-lift progress page."""

import uuid
from datetime import datetime, timedelta, timezone

from app.api.v1.endpoints.lift_types import filter_lift_types
from app.models import LiftType
from tests.conftest import OTHER_USER_ID

API = "/api/v1/lift-types"


def test_filter_lift_types_ignores_case():
    rows = [LiftType(name="Bench Press"), LiftType(name="Overhead Press"), LiftType(name="Squat")]

    assert [lt.name for lt in filter_lift_types(rows, "PRESS")] == ["Bench Press", "Overhead Press"]
    assert [lt.name for lt in filter_lift_types(rows, "sq")] == ["Squat"]
    assert filter_lift_types(rows, "") == rows
    assert filter_lift_types(rows, None) == rows
    assert filter_lift_types(rows, "deadlift") == []


async def test_list_and_search(client, lift_types):
    everything = await client.get(API)
    presses = await client.get(API, params={"search": "PRESS"})

    assert everything.status_code == 200
    assert [lt["name"] for lt in everything.json()] == ["Bench Press", "Overhead Press", "Squat"]
    assert [lt["name"] for lt in presses.json()] == ["Bench Press", "Overhead Press"]


async def test_create_lift_type(client, lift_types):
    created = await client.post(API, json={"name": "  Deadlift "})
    duplicate = await client.post(API, json={"name": "Squat"})
    blank = await client.post(API, json={"name": "   "})

    assert created.status_code == 201
    assert created.json()["name"] == "Deadlift"
    assert duplicate.status_code == 409
    assert blank.status_code == 422


async def test_get_lift_type(client, lift_types):
    found = await client.get(f"{API}/{lift_types['Squat']}")
    missing = await client.get(f"{API}/{uuid.uuid4()}")

    assert found.json()["name"] == "Squat"
    assert missing.status_code == 404


async def test_progress(client, lift_types, make_workout):
    bench = lift_types["Bench Press"]
    now = datetime.now(timezone.utc)
    first = await make_workout(
        [("Bench", bench, [(135, 5, True), (145, 5, True)]), ("Squat", lift_types["Squat"], [(225, 5, True)])],
        date=now - timedelta(days=10),
    )
    second = await make_workout(
        [("Bench", bench, [(150, 3, True), (185, 1, False)])],
        date=now - timedelta(days=3),
    )
    await make_workout([("Bench", bench, [(400, 1, True)])], user_id=OTHER_USER_ID)

    response = await client.get(f"{API}/{bench}/progress")

    assert response.status_code == 200
    body = response.json()
    assert body["lift_type"]["name"] == "Bench Press"
    # the unfinished 185 set does not count as a record
    assert body["personal_record"] == 150
    assert body["total_workouts"] == 2
    assert body["average_weight"] == round((135 + 145 + 150) / 3)
    assert [row["max_weight"] for row in body["chart"]] == [145, 150]
    assert [w["id"] for w in body["recent_workouts"]] == [str(second), str(first)]
    # only the bench exercises of each workout
    assert [e["name"] for e in body["recent_workouts"][1]["exercises"]] == ["Bench"]


async def test_progress_without_history(client, lift_types):
    response = await client.get(f"{API}/{lift_types['Squat']}/progress")

    assert response.status_code == 200
    body = response.json()
    assert body["personal_record"] == 0
    assert body["total_workouts"] == 0
    assert body["chart"] == []
    assert body["recent_workouts"] == []
