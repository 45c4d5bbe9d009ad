"""Type definitions for the calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from paylevel.models import Job

ZERO = Decimal("0")
CENTS = Decimal("0.01")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class RateQuote:
    """Hourly rate applicable to one job on one day."""

    regular: Decimal
    is_weekend: bool


@dataclass(frozen=True)
class PeriodTotals:
    """Summed hours and earnings over a set of logs."""

    total_hours: Decimal = ZERO
    total_earnings: Decimal = ZERO

    def __add__(self, other: PeriodTotals) -> PeriodTotals:
        return PeriodTotals(
            total_hours=self.total_hours + other.total_hours,
            total_earnings=self.total_earnings + other.total_earnings,
        )


@dataclass(frozen=True)
class DayTypeHours:
    """Hours split into weekday and weekend."""

    weekday_hours: Decimal = ZERO
    weekend_hours: Decimal = ZERO

    @property
    def total_hours(self) -> Decimal:
        return self.weekday_hours + self.weekend_hours


class BucketMode(str, Enum):
    """Chart bucketing modes."""

    RECENT = "recent"  # trailing 7 days ending at the reference date
    WEEK = "week"  # Monday to Sunday containing the reference date
    BIWEEK = "biweek"  # 14 days ending at the reference date
    MONTH = "month"  # calendar month of the reference date
    HISTORY = "history"  # 6 calendar months ending at the reference month


@dataclass(frozen=True)
class Bucket:
    """One labelled chart slot.

    ``key`` is an ISO date for daily buckets and ``YYYY-MM`` for monthly.
    """

    label: str
    key: str
    hours: Decimal
    is_weekend: bool


@dataclass(frozen=True)
class MonthlySummary:
    """Calendar month card."""

    month_key: str
    hours: Decimal
    earnings: Decimal
    net: Decimal
    previous_month_key: str
    previous_hours: Decimal


@dataclass(frozen=True)
class BiweeklySummary:
    """Fixed 14-day card with comparison against the preceding 14 days."""

    start: date
    end: date
    hours: Decimal
    earnings: Decimal
    net: Decimal
    previous_start: date
    previous_end: date
    previous_hours: Decimal

    @property
    def trend(self) -> Decimal:
        """Hours gained (positive) or lost against the previous window."""
        return self.hours - self.previous_hours


@dataclass(frozen=True)
class PromotionProgress:
    """Progress of a job toward its promotion threshold."""

    total_hours: Decimal
    target_hours: Decimal
    percent: Decimal
    eligible: bool

    @property
    def remaining_hours(self) -> Decimal:
        return max(ZERO, self.target_hours - self.total_hours)


class HourType(str, Enum):
    """Payslip hour categories."""

    WEEKDAY = "weekday"
    WEEKEND = "weekend"


class RemediationKind(str, Enum):
    """Direction of a payslip-driven adjustment."""

    BACKFILL = "backfill"  # payslip reports more than the app
    CORRECTION = "correction"  # app over-recorded relative to the payslip


@dataclass(frozen=True)
class AppPeriodTotals:
    """Engine-computed hours for one job over a payslip window."""

    job: Job
    start: date
    end: date
    weekday_hours: Decimal
    weekend_hours: Decimal

    @property
    def gross(self) -> Decimal:
        return (
            self.weekday_hours * self.job.hourly_rate
            + self.weekend_hours * self.job.weekend_hourly_rate
        )


@dataclass(frozen=True)
class PayslipInputs:
    """Figures entered from a real payslip.

    ``tax_rate`` overrides the global tax percentage when set.
    """

    weekday_hours: Decimal = ZERO
    weekend_hours: Decimal = ZERO
    allowance: Decimal = ZERO
    tax_rate: Decimal | None = None


@dataclass(frozen=True)
class Remediation:
    """A single-click compensating adjustment offered for one hour type."""

    hour_type: HourType
    hours: Decimal  # signed, slip minus app
    kind: RemediationKind


@dataclass(frozen=True)
class Reconciliation:
    """Comparison of engine totals against a payslip."""

    diff_weekday_hours: Decimal
    diff_weekend_hours: Decimal
    diff_gross_pay: Decimal
    app_gross: Decimal
    slip_gross: Decimal
    app_net: Decimal
    slip_net: Decimal
    remediations: tuple[Remediation, ...] = ()

    @property
    def is_reconciled(self) -> bool:
        """True when neither hour type needs an adjustment."""
        return not self.remediations


@dataclass(frozen=True)
class ExportRow:
    """One exported log line."""

    date: str
    job_name: str
    start_time: str
    end_time: str
    duration: Decimal
    rate: Decimal
    earnings: Decimal
    notes: str


@dataclass(frozen=True)
class JobShare:
    """Hours worked for one job within a year."""

    job_id: str
    name: str
    color: str
    hours: Decimal


@dataclass(frozen=True)
class YearlySummary:
    """Year-in-review figures."""

    year: int
    total_hours: Decimal
    total_earnings: Decimal
    top_job: JobShare
    busiest_day: str
    best_month: str
    job_shares: list[JobShare] = field(default_factory=list)
