"""Liveness and readiness probes. Mounted without authentication."""

import logging
import os

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_debouncer
from app.db.session import get_db
from app.services.autosave import Debouncer

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health():
    """Liveness. Includes built_at if BACKEND_BUILT_AT is set."""
    payload: dict = {"status": "ok"}
    built_at = os.environ.get("BACKEND_BUILT_AT")
    if built_at:
        payload["built_at"] = built_at
    return payload


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_db),
    debouncer: Debouncer = Depends(get_debouncer),
):
    """Database reachable; also reports auto-save writes still waiting for their timer."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "database": "unreachable"},
        )
    return {"status": "ok", "database": "connected", "pending_autosaves": debouncer.pending_count}
