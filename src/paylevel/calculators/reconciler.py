"""Payslip reconciliation.

Compares the hours the engine knows about for one job over a pay window
against the figures printed on a payslip, and produces the compensating
log that brings the two back in line.

Sign convention (slip minus app):
- positive: the payslip reports more than the app recorded (backfill)
- negative: the app recorded more than the payslip (correction)
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import uuid4

from paylevel.calculators.aggregator import all_of, for_job, in_range, split_hours
from paylevel.calculators.rate_resolver import is_weekend
from paylevel.calculators.tax_calculator import net_of_tax
from paylevel.calculators.types import (
    AppPeriodTotals,
    HourType,
    PayslipInputs,
    Reconciliation,
    Remediation,
    RemediationKind,
)
from paylevel.models import Job, WorkLog

PAYSLIP_PERIOD_DAYS = frozenset({14, 30})

# Diffs at or below this many hours count as reconciled
HOURS_TOLERANCE = Decimal("0.1")

DURATION_PRECISION = Decimal("0.01")


class RemediationError(ValueError):
    """Raised when a remediation cannot be applied as requested."""

    def __init__(self, hour_type: HourType, hours: Decimal, end_date: date, reason: str):
        self.hour_type = hour_type
        self.hours = hours
        self.end_date = end_date
        self.reason = reason
        super().__init__(
            f"Cannot apply {hours} {hour_type.value} hours on {end_date}: {reason}"
        )


def payslip_window(end_date: date, length: int) -> tuple[date, date]:
    """Inclusive window of ``length`` days ending at ``end_date``."""
    if length not in PAYSLIP_PERIOD_DAYS:
        raise ValueError(f"Payslip period must be one of {sorted(PAYSLIP_PERIOD_DAYS)} days")
    return end_date - timedelta(days=length - 1), end_date


def app_totals(
    logs: Iterable[WorkLog],
    job: Job,
    end_date: date,
    length: int = 14,
) -> AppPeriodTotals:
    """Weekday and weekend hours the app holds for a job over a payslip window."""
    start, end = payslip_window(end_date, length)
    split = split_hours(logs, all_of(for_job(job.id), in_range(start, end)))
    return AppPeriodTotals(
        job=job,
        start=start,
        end=end,
        weekday_hours=split.weekday_hours,
        weekend_hours=split.weekend_hours,
    )


def remediation_for(hour_type: HourType, diff: Decimal) -> Remediation | None:
    """Remediation for one hour type, or None when ``diff`` is within tolerance."""
    if abs(diff) <= HOURS_TOLERANCE:
        return None
    kind = RemediationKind.BACKFILL if diff > 0 else RemediationKind.CORRECTION
    return Remediation(hour_type=hour_type, hours=diff, kind=kind)


def check_remediation_day(end_date: date, remediation: Remediation) -> None:
    """Ensure a compensating log dated ``end_date`` counts as the right hours.

    Logs are split and valued by their own date, so a weekday remediation
    dated on a Saturday would land in weekend hours.

    Raises:
        RemediationError: If the day type of ``end_date`` differs from the
            remediation's hour type
    """
    weekend = is_weekend(end_date)
    if weekend != (remediation.hour_type == HourType.WEEKEND):
        raise RemediationError(
            remediation.hour_type,
            remediation.hours,
            end_date,
            f"{end_date} is a {'weekend' if weekend else 'weekday'} day",
        )


def offered_remediation(end_date: date, hour_type: HourType, hours: Decimal) -> Remediation:
    """Validate a remediation requested outside of ``reconcile``.

    Raises:
        RemediationError: If ``hours`` is within tolerance or ``end_date``
            falls on the other day type
    """
    remediation = remediation_for(hour_type, hours)
    if remediation is None:
        raise RemediationError(
            hour_type, hours, end_date, f"within the {HOURS_TOLERANCE} hour tolerance"
        )
    check_remediation_day(end_date, remediation)
    return remediation


def reconcile(
    totals: AppPeriodTotals,
    payslip: PayslipInputs,
    tax_rate: Decimal,
) -> Reconciliation:
    """Compare engine totals with payslip figures.

    Args:
        totals: Engine hours for the window (see ``app_totals``)
        payslip: Figures entered from the payslip
        tax_rate: Global flat tax percentage, used unless the payslip
            carries its own override

    Returns:
        Reconciliation with diffs, gross/net on both sides and the
        remediations offered for each hour type outside tolerance
    """
    job = totals.job
    effective_tax = payslip.tax_rate if payslip.tax_rate is not None else tax_rate

    app_gross = totals.gross
    slip_gross = (
        payslip.weekday_hours * job.hourly_rate
        + payslip.weekend_hours * job.weekend_hourly_rate
        + payslip.allowance
    )

    diff_weekday = payslip.weekday_hours - totals.weekday_hours
    diff_weekend = payslip.weekend_hours - totals.weekend_hours

    remediations = tuple(
        r
        for r in (
            remediation_for(HourType.WEEKDAY, diff_weekday),
            remediation_for(HourType.WEEKEND, diff_weekend),
        )
        if r is not None
    )

    return Reconciliation(
        diff_weekday_hours=diff_weekday,
        diff_weekend_hours=diff_weekend,
        diff_gross_pay=slip_gross - app_gross,
        app_gross=app_gross,
        slip_gross=slip_gross,
        app_net=net_of_tax(app_gross, effective_tax),
        slip_net=net_of_tax(slip_gross, effective_tax),
        remediations=remediations,
    )


def compensating_note(remediation: Remediation) -> str:
    """Note identifying a payslip-driven log, e.g. ``Payslip Backfill (weekday)``."""
    return f"Payslip {remediation.kind.value.capitalize()} ({remediation.hour_type.value})"


def build_compensating_log(
    job_id: str,
    end_date: date,
    remediation: Remediation,
    log_id: str | None = None,
    timestamp: int | None = None,
) -> WorkLog:
    """Create the log that applies a remediation.

    The result is an ordinary WorkLog with a signed duration; it is summed
    and valued exactly like a manually entered shift, by its own date.
    Callers that need it counted under ``remediation.hour_type`` check the
    date with ``check_remediation_day`` first.
    """
    return WorkLog(
        id=log_id or str(uuid4()),
        job_id=job_id,
        date=end_date,
        duration=remediation.hours.quantize(DURATION_PRECISION, rounding=ROUND_HALF_UP),
        start_time=None,
        end_time=None,
        notes=compensating_note(remediation),
        timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
    )
