"""API v1 router aggregation."""

from fastapi import APIRouter, Depends

from app.api.v1.endpoints import (
    auth,
    dashboard,
    health,
    lift_types,
    stats,
    workouts,
)
from app.core.security import get_current_user

api_router = APIRouter()

# Router-level auth runs before any endpoint dependency, so no DB session is opened
# for a request without a valid session.
authenticated = [Depends(get_current_user)]

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"], dependencies=authenticated)
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"], dependencies=authenticated)
# stats before workouts: "/workouts/stats" must not be captured by "/workouts/{workout_id}"
api_router.include_router(stats.router, prefix="/workouts", tags=["stats"], dependencies=authenticated)
api_router.include_router(workouts.router, prefix="/workouts", tags=["workouts"], dependencies=authenticated)
api_router.include_router(lift_types.router, prefix="/lift-types", tags=["lift-types"], dependencies=authenticated)
