"""Promotion progress tracking."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from decimal import Decimal

from paylevel.calculators.aggregator import for_job, total_hours
from paylevel.calculators.rate_resolver import next_value_of
from paylevel.calculators.types import ZERO, PromotionProgress
from paylevel.models import Job, WorkLog

HUNDRED = Decimal("100")


def hours_for_job(logs: Iterable[WorkLog], job_id: str) -> Decimal:
    """All-time hours logged against a job."""
    return total_hours(logs, for_job(job_id))


def progress(job: Job, total_hours_for_job: Decimal) -> PromotionProgress:
    """Progress of a job toward its promotion threshold.

    A zero target yields 0 percent rather than a division error. The
    promotion is only offered when the next tier pays strictly more, so
    promoting can never loop on identical rates.
    """
    if job.target_hours > 0:
        percent = total_hours_for_job / job.target_hours * HUNDRED
        percent = min(HUNDRED, max(ZERO, percent))
    else:
        percent = ZERO

    eligible = (
        total_hours_for_job >= job.target_hours
        and job.hourly_rate < job.next_hourly_rate
    )
    return PromotionProgress(
        total_hours=total_hours_for_job,
        target_hours=job.target_hours,
        percent=percent,
        eligible=eligible,
    )


def promote(job: Job) -> Job:
    """Move a job onto its next tier.

    Next-tier rates are left as they are; the caller may configure a
    further tier afterwards. Callers gate this on ``progress(...).eligible``.
    """
    return dataclasses.replace(
        job,
        hourly_rate=job.next_hourly_rate,
        weekend_hourly_rate=job.next_weekend_hourly_rate,
    )


def potential_value(logs: Iterable[WorkLog], jobs_by_id: Mapping[str, Job]) -> Decimal:
    """What the logs would have earned at next-tier rates."""
    return sum((next_value_of(log, jobs_by_id) for log in logs), ZERO)
