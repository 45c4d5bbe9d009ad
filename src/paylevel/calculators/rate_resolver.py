"""Pay rate resolution by day type.

This is the single source of monetary truth: every component that turns a
log into money goes through ``value_of`` / ``next_value_of``, so dashboard,
calendar, export and payslip totals always agree.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal

from paylevel.calculators.types import ZERO, RateQuote
from paylevel.models import Job, WorkLog

# Day-of-week numbers, Sunday=0 ... Saturday=6
SUNDAY = 0
SATURDAY = 6
WEEKEND_DAYS = frozenset({SUNDAY, SATURDAY})


def day_of_week(day: date) -> int:
    """Day of week with Sunday as 0 and Saturday as 6."""
    return day.isoweekday() % 7


def is_weekend(day: date) -> bool:
    """Check if the day falls on Saturday or Sunday."""
    return day_of_week(day) in WEEKEND_DAYS


def resolve_rate(job: Job, day: date) -> RateQuote:
    """Current rate for a job on a day."""
    weekend = is_weekend(day)
    return RateQuote(
        regular=job.weekend_hourly_rate if weekend else job.hourly_rate,
        is_weekend=weekend,
    )


def resolve_next_rate(job: Job, day: date) -> RateQuote:
    """Rate a job would pay on a day after promotion."""
    weekend = is_weekend(day)
    return RateQuote(
        regular=job.next_weekend_hourly_rate if weekend else job.next_hourly_rate,
        is_weekend=weekend,
    )


def index_jobs(jobs: Iterable[Job]) -> dict[str, Job]:
    """Index jobs by id."""
    return {job.id: job for job in jobs}


def value_of(log: WorkLog, jobs_by_id: Mapping[str, Job]) -> Decimal:
    """Earnings for a log at current rates.

    Logs whose job cannot be found are worth nothing, so deleting a job out
    of band never breaks a downstream total.
    """
    job = jobs_by_id.get(log.job_id) if log.job_id is not None else None
    if job is None:
        return ZERO
    return log.duration * resolve_rate(job, log.date).regular


def next_value_of(log: WorkLog, jobs_by_id: Mapping[str, Job]) -> Decimal:
    """Earnings for a log at next-tier rates."""
    job = jobs_by_id.get(log.job_id) if log.job_id is not None else None
    if job is None:
        return ZERO
    return log.duration * resolve_next_rate(job, log.date).regular
