"""Shared enums for services and API."""

from enum import Enum


class TimeRange(str, Enum):
    """Look-back window for the stats view."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class SaveState(str, Enum):
    """Status of a debounced field write."""

    PENDING = "pending"
    SAVED = "saved"  # shown as "Saved"
    ERROR = "error"  # shown as "Error saving"
