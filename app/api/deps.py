"""Shared FastAPI dependencies."""

from fastapi import Request

from app.services.autosave import Debouncer


def get_debouncer(request: Request) -> Debouncer:
    """The process-wide auto-save debouncer created with the application."""
    return request.app.state.debouncer
