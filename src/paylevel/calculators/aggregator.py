"""Period aggregation and chart bucketing.

All entry points take their reference date explicitly; nothing here reads
the wall clock.
"""

from __future__ import annotations

import calendar
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import date, timedelta
from decimal import Decimal

from paylevel.calculators.rate_resolver import is_weekend, value_of
from paylevel.calculators.tax_calculator import net_of_tax
from paylevel.calculators.types import (
    ZERO,
    BiweeklySummary,
    Bucket,
    BucketMode,
    DayTypeHours,
    MonthlySummary,
    PeriodTotals,
)
from paylevel.models import Job, PayFrequency, UserSettings, WorkLog

LogPredicate = Callable[[WorkLog], bool]

BIWEEK_DAYS = 14
RECENT_DAYS = 7
HISTORY_MONTHS = 6

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


# =============================================================================
# Predicates
# =============================================================================


def in_range(start: date, end: date) -> LogPredicate:
    """Inclusive date range membership."""
    return lambda log: start <= log.date <= end


def for_job(job_id: str | None) -> LogPredicate:
    """Logs belonging to one job; ``None`` matches every log."""
    if job_id is None:
        return lambda log: True
    return lambda log: log.job_id == job_id


def in_month(year: int, month: int) -> LogPredicate:
    """Logs dated within a calendar month."""
    return lambda log: log.date.year == year and log.date.month == month


def all_of(*predicates: LogPredicate) -> LogPredicate:
    """Conjunction of predicates."""
    return lambda log: all(p(log) for p in predicates)


# =============================================================================
# Aggregation
# =============================================================================


def aggregate(
    logs: Iterable[WorkLog],
    jobs_by_id: Mapping[str, Job],
    predicate: LogPredicate | None = None,
) -> PeriodTotals:
    """Sum hours and earnings over the logs matching ``predicate``.

    Earnings always come from the rate resolver so that a rate edit is
    reflected immediately in every total.
    """
    hours = ZERO
    earnings = ZERO
    for log in logs:
        if predicate is not None and not predicate(log):
            continue
        hours += log.duration
        earnings += value_of(log, jobs_by_id)
    return PeriodTotals(total_hours=hours, total_earnings=earnings)


def total_hours(logs: Iterable[WorkLog], predicate: LogPredicate | None = None) -> Decimal:
    """Sum durations of matching logs."""
    return sum(
        (log.duration for log in logs if predicate is None or predicate(log)),
        ZERO,
    )


def split_hours(
    logs: Iterable[WorkLog],
    predicate: LogPredicate | None = None,
) -> DayTypeHours:
    """Sum durations of matching logs split into weekday and weekend."""
    weekday = ZERO
    weekend = ZERO
    for log in logs:
        if predicate is not None and not predicate(log):
            continue
        if is_weekend(log.date):
            weekend += log.duration
        else:
            weekday += log.duration
    return DayTypeHours(weekday_hours=weekday, weekend_hours=weekend)


# =============================================================================
# Bucketing
# =============================================================================


def week_start(day: date) -> date:
    """Monday on or before the day."""
    return day - timedelta(days=day.weekday())


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move a (year, month) pair by ``offset`` months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _daily_window(mode: BucketMode, reference_date: date) -> tuple[date, int]:
    if mode == BucketMode.RECENT:
        return reference_date - timedelta(days=RECENT_DAYS - 1), RECENT_DAYS
    if mode == BucketMode.WEEK:
        return week_start(reference_date), 7
    if mode == BucketMode.BIWEEK:
        return reference_date - timedelta(days=BIWEEK_DAYS - 1), BIWEEK_DAYS
    if mode == BucketMode.MONTH:
        first = reference_date.replace(day=1)
        days = calendar.monthrange(first.year, first.month)[1]
        return first, days
    raise ValueError(f"{mode} is not a daily bucket mode")


def bucketize(
    logs: Iterable[WorkLog],
    mode: BucketMode | str,
    reference_date: date,
) -> Iterator[Bucket]:
    """Yield chart buckets for a mode.

    Every slot in the window is yielded, with zero hours when no log
    matches. Calling again with the same inputs yields the same sequence.

    Args:
        logs: Logs to bucket (pre-filter by job if needed)
        mode: One of ``BucketMode``
        reference_date: "Today" for ``recent``, the anchor day for
            ``week``/``biweek``, any day of the month for ``month`` and of
            the final month for ``history``
    """
    mode = BucketMode(mode)
    logs = list(logs)

    if mode == BucketMode.HISTORY:
        hours_by_month: dict[str, Decimal] = {}
        for log in logs:
            key = month_key(log.date.year, log.date.month)
            hours_by_month[key] = hours_by_month.get(key, ZERO) + log.duration
        for offset in range(HISTORY_MONTHS - 1, -1, -1):
            year, month = shift_month(reference_date.year, reference_date.month, -offset)
            key = month_key(year, month)
            yield Bucket(
                label=calendar.month_abbr[month],
                key=key,
                hours=hours_by_month.get(key, ZERO),
                is_weekend=False,
            )
        return

    start, days = _daily_window(mode, reference_date)
    hours_by_day: dict[date, Decimal] = {}
    for log in logs:
        hours_by_day[log.date] = hours_by_day.get(log.date, ZERO) + log.duration

    for i in range(days):
        day = start + timedelta(days=i)
        if mode == BucketMode.MONTH:
            label = str(day.day)
        else:
            label = WEEKDAY_LABELS[day.weekday()]
            if mode == BucketMode.BIWEEK and i % 7 == 0:
                label = f"{day.day}/{day.month} {label}"
        yield Bucket(
            label=label,
            key=day.isoformat(),
            hours=hours_by_day.get(day, ZERO),
            is_weekend=is_weekend(day),
        )


# =============================================================================
# Dashboard summaries
# =============================================================================


def monthly_summary(
    logs: Iterable[WorkLog],
    jobs_by_id: Mapping[str, Job],
    year: int,
    month: int,
    tax_rate: Decimal,
) -> MonthlySummary:
    """Hours, earnings and net for a calendar month, with previous month hours."""
    logs = list(logs)
    totals = aggregate(logs, jobs_by_id, in_month(year, month))
    prev_year, prev_month = shift_month(year, month, -1)
    return MonthlySummary(
        month_key=month_key(year, month),
        hours=totals.total_hours,
        earnings=totals.total_earnings,
        net=net_of_tax(totals.total_earnings, tax_rate),
        previous_month_key=month_key(prev_year, prev_month),
        previous_hours=total_hours(logs, in_month(prev_year, prev_month)),
    )


def biweekly_summary(
    logs: Iterable[WorkLog],
    jobs_by_id: Mapping[str, Job],
    end_date: date,
    tax_rate: Decimal,
) -> BiweeklySummary:
    """Fixed 14-day window ending at ``end_date`` against the 14 days before.

    The lookback is always 14 days, whatever the pay frequency.
    """
    logs = list(logs)
    start = end_date - timedelta(days=BIWEEK_DAYS - 1)
    previous_end = end_date - timedelta(days=BIWEEK_DAYS)
    previous_start = previous_end - timedelta(days=BIWEEK_DAYS - 1)

    totals = aggregate(logs, jobs_by_id, in_range(start, end_date))
    return BiweeklySummary(
        start=start,
        end=end_date,
        hours=totals.total_hours,
        earnings=totals.total_earnings,
        net=net_of_tax(totals.total_earnings, tax_rate),
        previous_start=previous_start,
        previous_end=previous_end,
        previous_hours=total_hours(logs, in_range(previous_start, previous_end)),
    )


def primary_cadence(settings: UserSettings) -> PayFrequency:
    """Summary card shown first for the configured pay frequency."""
    return PayFrequency(settings.pay_frequency)
