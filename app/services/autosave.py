"""Debounced auto-save of workout form fields.

Each edit restarts a timer for its key; only the last value seen before the timer elapses is
written. Keys are independent, so writes to different fields may land in any order, but a
single field is always last-write-wins. Outcomes are kept as a short-lived status and
failures are not retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Hashable

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.enums import SaveState
from app.core.exceptions import WorkoutNotFoundError
from app.models.workout import Workout

logger = logging.getLogger(__name__)

SaveFn = Callable[[Hashable, Any], Awaitable[None]]


@dataclass
class SaveStatus:
    state: SaveState
    message: str | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # monotonic timestamp used for expiry
    stamp: float = 0.0


class Debouncer:
    """Per-key trailing-edge debounce of async writes."""

    def __init__(
        self,
        delay: float,
        save: SaveFn,
        status_ttl: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.delay = delay
        self.status_ttl = status_ttl
        self._save = save
        self._clock = clock
        self._pending: dict[Hashable, asyncio.Task] = {}
        self._tasks: set[asyncio.Task] = set()
        self._status: dict[Hashable, SaveStatus] = {}
        self._expiry: dict[Hashable, asyncio.TimerHandle] = {}

    def schedule(self, key: Hashable, value: Any) -> None:
        """Record an edit. Restarts the timer for ``key``."""
        previous = self._pending.pop(key, None)
        if previous is not None:
            previous.cancel()
        self._set_status(key, SaveState.PENDING)
        task = asyncio.get_running_loop().create_task(self._fire(key, value))
        self._pending[key] = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def tracked_count(self) -> int:
        """Keys that currently have a status (pending or not yet expired)."""
        return len(self._status)

    def status(self, key: Hashable) -> SaveStatus | None:
        """Current status for ``key``; finished statuses disappear after ``status_ttl``."""
        status = self._status.get(key)
        if status is None:
            return None
        if status.state != SaveState.PENDING and self._clock() - status.stamp > self.status_ttl:
            del self._status[key]
            return None
        return status

    async def flush(self) -> None:
        """Wait until every scheduled write has run (or been superseded)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        """Drop every queued write. Their fields lose the pending status."""
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._pending.clear()
        # Includes writes cancelled mid-save, which never reach _finish
        for key in [k for k, s in self._status.items() if s.state == SaveState.PENDING]:
            del self._status[key]

    async def _fire(self, key: Hashable, value: Any) -> None:
        await asyncio.sleep(self.delay)
        # From here on the write runs even if a newer edit arrives; that edit gets its own timer
        if self._pending.get(key) is asyncio.current_task():
            del self._pending[key]
        try:
            await self._save(key, value)
        except Exception as e:
            logger.warning(f"Auto-save failed for {key!r}: {e}")
            self._finish(key, SaveState.ERROR, str(e) or e.__class__.__name__)
        else:
            logger.debug(f"Auto-saved {key!r}")
            self._finish(key, SaveState.SAVED)

    def _finish(self, key: Hashable, state: SaveState, message: str | None = None) -> None:
        # A newer edit is already waiting: keep showing it as pending
        if key in self._pending:
            return
        self._set_status(key, state, message)

    def _set_status(self, key: Hashable, state: SaveState, message: str | None = None) -> None:
        handle = self._expiry.pop(key, None)
        if handle is not None:
            handle.cancel()
        self._status[key] = SaveStatus(state=state, message=message, stamp=self._clock())
        if state != SaveState.PENDING:
            self._expiry[key] = asyncio.get_running_loop().call_later(self.status_ttl, self._expire, key)

    def _expire(self, key: Hashable) -> None:
        self._expiry.pop(key, None)
        status = self._status.get(key)
        if status is not None and status.state != SaveState.PENDING:
            del self._status[key]


def workout_field_saver(session_maker: async_sessionmaker[AsyncSession]) -> SaveFn:
    """Save function for keys of the form ``(workout_id, field_name)``.

    Runs after the scheduling request has returned, so it opens its own session.
    """

    async def save(key: tuple[uuid.UUID, str], value: Any) -> None:
        workout_id, field_name = key
        async with session_maker() as session:
            async with session.begin():
                result = await session.execute(
                    update(Workout).where(Workout.id == workout_id).values({field_name: value})
                )
                if result.rowcount == 0:
                    raise WorkoutNotFoundError(str(workout_id))

    return save
