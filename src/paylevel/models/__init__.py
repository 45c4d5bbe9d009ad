"""Domain records and ORM models."""

from paylevel.models.snapshot import Base, StateSnapshot
from paylevel.models.state import (
    DEFAULT_HOURLY_RATE,
    DEFAULT_JOB_NAME,
    DEFAULT_NEXT_HOURLY_RATE,
    DEFAULT_NEXT_WEEKEND_HOURLY_RATE,
    DEFAULT_TARGET_HOURS,
    DEFAULT_WEEKEND_HOURLY_RATE,
    JOB_COLORS,
    AppState,
    Job,
    PayFrequency,
    ShiftTemplate,
    Theme,
    UserSettings,
    WorkLog,
)

__all__ = [
    "Base",
    "StateSnapshot",
    "AppState",
    "Job",
    "PayFrequency",
    "ShiftTemplate",
    "Theme",
    "UserSettings",
    "WorkLog",
    "JOB_COLORS",
    "DEFAULT_JOB_NAME",
    "DEFAULT_HOURLY_RATE",
    "DEFAULT_WEEKEND_HOURLY_RATE",
    "DEFAULT_TARGET_HOURS",
    "DEFAULT_NEXT_HOURLY_RATE",
    "DEFAULT_NEXT_WEEKEND_HOURLY_RATE",
]
