"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import api_router
from app.core.config import get_settings
from app.core.exceptions import NotAuthenticatedError
from app.core.logging import configure_logging
from app.db.session import async_session_maker, engine
from app.services.autosave import Debouncer, workout_field_saver

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: nothing to prepare (schema is managed by Alembic); shutdown: finish pending auto-saves."""
    yield
    await app.state.debouncer.flush()
    await engine.dispose()


async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError) -> JSONResponse:
    """Send the client to the login page instead of showing data."""
    logger.debug(f"Unauthenticated request to {request.url.path}: {exc}")
    return JSONResponse(
        status_code=401,
        content={"detail": "Not authenticated", "login_url": settings.login_path},
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_application() -> FastAPI:
    configure_logging(settings)
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.debouncer = Debouncer(
        delay=settings.autosave_delay_seconds,
        save=workout_field_saver(async_session_maker),
        status_ttl=settings.autosave_status_ttl_seconds,
    )
    app.add_exception_handler(NotAuthenticatedError, not_authenticated_handler)

    # CORS: allow localhost in dev; in production use CORS_ORIGINS env (comma-separated)
    if settings.debug:
        cors_origins = ["*"]
    elif settings.environment == "development":
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {"status": "ok", "message": settings.app_name}

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
