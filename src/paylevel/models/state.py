"""Immutable domain records making up the application state.

Every record is a frozen dataclass. Commands never mutate a record in
place; they build a new one with ``dataclasses.replace`` and a new
``AppState`` around it, so any snapshot handed to the engine stays valid
for the whole computation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class PayFrequency(str, Enum):
    """How often the worker is paid."""

    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class Theme(str, Enum):
    """Display theme (presentation only)."""

    LIGHT = "light"
    DARK = "dark"


# Palette cycled through when new jobs are created
JOB_COLORS: tuple[str, ...] = (
    "#4F46E5",
    "#DB2777",
    "#059669",
    "#D97706",
    "#7C3AED",
    "#2563EB",
)

DEFAULT_JOB_NAME = "Main Job"
DEFAULT_HOURLY_RATE = Decimal("60")
DEFAULT_WEEKEND_HOURLY_RATE = Decimal("60")
DEFAULT_TARGET_HOURS = Decimal("1000")
DEFAULT_NEXT_HOURLY_RATE = Decimal("70")
DEFAULT_NEXT_WEEKEND_HOURLY_RATE = Decimal("70")


@dataclass(frozen=True)
class Job:
    """A pay context with its own weekday/weekend rates and promotion tier.

    Attributes:
        id: Unique identifier.
        name: Display name, e.g. "State Swim".
        color: Hex colour tag (presentation only).
        hourly_rate: Monday to Friday rate.
        weekend_hourly_rate: Saturday and Sunday rate.
        target_hours: Hours needed before the next tier is offered.
        next_hourly_rate: Weekday rate after promotion.
        next_weekend_hourly_rate: Weekend rate after promotion.
    """

    id: str
    name: str = DEFAULT_JOB_NAME
    color: str = JOB_COLORS[0]
    hourly_rate: Decimal = DEFAULT_HOURLY_RATE
    weekend_hourly_rate: Decimal = DEFAULT_WEEKEND_HOURLY_RATE
    target_hours: Decimal = DEFAULT_TARGET_HOURS
    next_hourly_rate: Decimal = DEFAULT_NEXT_HOURLY_RATE
    next_weekend_hourly_rate: Decimal = DEFAULT_NEXT_WEEKEND_HOURLY_RATE

    def __post_init__(self) -> None:
        """Validate rates and threshold."""
        if not self.id:
            raise ValueError("id is required")
        for name in (
            "hourly_rate",
            "weekend_hourly_rate",
            "next_hourly_rate",
            "next_weekend_hourly_rate",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.target_hours < 0:
            raise ValueError("target_hours must not be negative")


@dataclass(frozen=True)
class WorkLog:
    """One logged shift.

    ``start_time``/``end_time`` are ``HH:MM`` strings, or ``None`` when the
    duration was entered directly. ``job_id`` may be ``None`` or point at a
    job that no longer exists; such logs are worth nothing.
    ``timestamp`` is the creation time in epoch milliseconds.
    """

    id: str
    job_id: str | None
    date: date
    duration: Decimal
    start_time: str | None = None
    end_time: str | None = None
    notes: str = ""
    timestamp: int = 0


@dataclass(frozen=True)
class ShiftTemplate:
    """Reusable shift shape for quick entry."""

    id: str
    name: str
    job_id: str | None
    start_time: str
    end_time: str
    notes: str = ""


@dataclass(frozen=True)
class UserSettings:
    """Global, process-wide preferences."""

    currency: str = "HKD"
    user_name: str = "Employee"
    pay_frequency: PayFrequency = PayFrequency.BIWEEKLY
    tax_rate: Decimal = Decimal("0")
    theme: Theme = Theme.LIGHT
    last_backup_timestamp: int | None = None

    def __post_init__(self) -> None:
        """Validate tax rate."""
        if not Decimal("0") <= self.tax_rate <= Decimal("100"):
            raise ValueError("tax_rate must be between 0 and 100")


@dataclass(frozen=True)
class AppState:
    """Aggregate root: jobs, logs, templates and settings.

    Log order is display order only (newest first); it never affects a
    calculation.
    """

    jobs: tuple[Job, ...] = ()
    logs: tuple[WorkLog, ...] = ()
    templates: tuple[ShiftTemplate, ...] = ()
    settings: UserSettings = field(default_factory=UserSettings)

    def __post_init__(self) -> None:
        """Validate job id uniqueness."""
        ids = [j.id for j in self.jobs]
        if len(ids) != len(set(ids)):
            raise ValueError("Job ids must be unique")

    @property
    def jobs_by_id(self) -> dict[str, Job]:
        """Jobs indexed by id."""
        return {job.id: job for job in self.jobs}

    def get_job(self, job_id: str) -> Job | None:
        """Get job by id."""
        for job in self.jobs:
            if job.id == job_id:
                return job
        return None
