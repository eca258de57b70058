"""Pytest configuration and fixtures: in-memory SQLite database and an authenticated test client."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.security import AuthUser, get_current_user
from app.db.base import Base
from app.db.session import build_session_maker, get_db
from app.main import create_application
from app.models import Exercise, LiftType, Workout, WorkoutSet
from app.services.autosave import Debouncer, workout_field_saver

TEST_USER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
OTHER_USER_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")
TEST_DEBOUNCE_SECONDS = 0.05


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def override_db(session_maker):
    async def _get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _get_db


@pytest.fixture
async def app(session_maker, override_db):
    """App with the test database and a signed-in test user."""
    app = create_application()
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_current_user] = lambda: AuthUser(id=TEST_USER_ID, email="lifter@example.com")
    app.state.debouncer = Debouncer(
        delay=TEST_DEBOUNCE_SECONDS,
        save=workout_field_saver(session_maker),
        status_ttl=60,
    )
    yield app
    await app.state.debouncer.cancel_all()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def lift_types(session_maker):
    """Bench Press, Overhead Press, Squat."""
    async with session_maker() as session:
        rows = [LiftType(name=n) for n in ("Bench Press", "Overhead Press", "Squat")]
        session.add_all(rows)
        await session.commit()
    return {lt.name: lt.id for lt in rows}


@pytest.fixture
def make_workout(session_maker):
    """Insert a workout directly. ``exercises`` is a list of (name, lift_type_id, [(weight, reps, completed), ...])."""

    async def _make(
        exercises,
        user_id=TEST_USER_ID,
        name="Push day",
        date=None,
        completed=False,
    ):
        async with session_maker() as session:
            workout = Workout(
                user_id=user_id,
                name=name,
                date=date or datetime.now(timezone.utc) - timedelta(days=1),
                completed=completed,
                exercises=[
                    Exercise(
                        name=ex_name,
                        lift_type_id=lift_type_id,
                        sets=[WorkoutSet(weight=w, reps=r, completed=c) for w, r, c in sets],
                    )
                    for ex_name, lift_type_id, sets in exercises
                ],
            )
            session.add(workout)
            await session.commit()
            return workout.id

    return _make
