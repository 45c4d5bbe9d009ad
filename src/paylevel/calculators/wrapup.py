"""Year-in-review statistics."""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal
from typing import TypeVar

from paylevel.calculators.rate_resolver import day_of_week, value_of
from paylevel.calculators.types import ZERO, JobShare, YearlySummary
from paylevel.models import Job, WorkLog

# Indexed by Sunday=0 ... Saturday=6
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

K = TypeVar("K")


def _top(totals: Mapping[K, Decimal]) -> K:
    # Ties go to the later key
    best = None
    for key, value in totals.items():
        if best is None or value >= totals[best]:
            best = key
    return best


def latest_year(logs: Iterable[WorkLog], today: date) -> int:
    """Most recent year with logged work, or the current year."""
    years = [log.date.year for log in logs]
    return max(years) if years else today.year


def yearly_summary(
    logs: Iterable[WorkLog],
    jobs_by_id: Mapping[str, Job],
    year: int,
) -> YearlySummary | None:
    """Summarize a year of work.

    Hours include every log of the year. Earnings, the job breakdown, the
    busiest weekday and the best month only count logs whose job still
    exists. Returns None when there is nothing to summarize.
    """
    year_logs = [log for log in logs if log.date.year == year]
    if not year_logs:
        return None

    total_hours = sum((log.duration for log in year_logs), ZERO)
    total_earnings = ZERO
    job_hours: dict[str, Decimal] = {}
    day_hours: dict[int, Decimal] = {d: ZERO for d in range(7)}
    month_earnings: dict[int, Decimal] = {}

    for log in year_logs:
        job = jobs_by_id.get(log.job_id) if log.job_id is not None else None
        if job is None:
            continue
        earned = value_of(log, jobs_by_id)
        total_earnings += earned
        job_hours[job.id] = job_hours.get(job.id, ZERO) + log.duration
        day_hours[day_of_week(log.date)] += log.duration
        month_earnings[log.date.month] = month_earnings.get(log.date.month, ZERO) + earned

    if not job_hours:
        return None

    shares = [
        JobShare(
            job_id=job_id,
            name=jobs_by_id[job_id].name,
            color=jobs_by_id[job_id].color,
            hours=hours,
        )
        for job_id, hours in job_hours.items()
    ]
    top_job_id = _top(job_hours)
    top_job = next(s for s in shares if s.job_id == top_job_id)

    return YearlySummary(
        year=year,
        total_hours=total_hours,
        total_earnings=total_earnings,
        top_job=top_job,
        busiest_day=DAY_NAMES[_top(day_hours)],
        best_month=calendar.month_abbr[_top(dict(sorted(month_earnings.items())))],
        job_shares=shares,
    )
