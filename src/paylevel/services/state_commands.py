"""Copy-on-write commands over AppState.

Every command takes the current state and returns a new one; the input is
never modified. The shell (API, CLI, store) owns the single current state
and swaps it for the returned value.
"""

from __future__ import annotations

import dataclasses
import logging
import re
import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import uuid4

from paylevel.calculators.progress import promote
from paylevel.models import JOB_COLORS, AppState, Job, ShiftTemplate, UserSettings, WorkLog

logger = logging.getLogger(__name__)

BACKUP_INTERVAL = timedelta(days=7)

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
_HOURS = Decimal("0.01")


class InvalidDurationError(ValueError):
    """Raised when a shift would last zero or negative hours."""

    def __init__(self, duration: Decimal | None, reason: str | None = None):
        self.duration = duration
        self.reason = reason
        msg = f"Invalid shift duration: {duration}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class JobNotFoundError(LookupError):
    """Raised when a command names a job that does not exist."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class LastJobError(Exception):
    """Raised when deleting the only remaining job."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Cannot delete the last job: {job_id}")


class TemplateNotFoundError(LookupError):
    """Raised when a command names a shift template that does not exist."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


def _now_ms() -> int:
    return int(time.time() * 1000)


# =============================================================================
# Work logs
# =============================================================================


def _minutes(value: str) -> int:
    match = _TIME_RE.match(value)
    if match is None:
        raise InvalidDurationError(None, f"malformed time {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def shift_duration(start_time: str, end_time: str) -> Decimal:
    """Hours between two ``HH:MM`` times, wrapping past midnight.

    Rounded to two decimal places.
    """
    diff = _minutes(end_time) - _minutes(start_time)
    if diff < 0:
        diff += 24 * 60
    return (Decimal(diff) / Decimal(60)).quantize(_HOURS, rounding=ROUND_HALF_UP)


def create_work_log(
    job_id: str | None,
    day: date,
    *,
    start_time: str | None = None,
    end_time: str | None = None,
    duration: Decimal | None = None,
    notes: str = "",
    log_id: str | None = None,
    timestamp: int | None = None,
) -> WorkLog:
    """Build a new log from a start/end pair or a direct duration.

    When both times are given the duration is derived from them and any
    ``duration`` argument is ignored.

    Raises:
        InvalidDurationError: If the duration is not positive or a time is
            malformed
    """
    if start_time and end_time:
        duration = shift_duration(start_time, end_time)
    else:
        start_time = end_time = None
    if duration is None or duration <= 0:
        raise InvalidDurationError(duration, "must be greater than zero")

    return WorkLog(
        id=log_id or str(uuid4()),
        job_id=job_id,
        date=day,
        duration=duration,
        start_time=start_time,
        end_time=end_time,
        notes=notes,
        timestamp=_now_ms() if timestamp is None else timestamp,
    )


def add_log(state: AppState, log: WorkLog) -> AppState:
    """Add a log at the front (newest first)."""
    logger.info("Adding log %s: %s hours on %s", log.id, log.duration, log.date)
    return dataclasses.replace(state, logs=(log, *state.logs))


def delete_log(state: AppState, log_id: str) -> AppState:
    """Remove a log by id; unknown ids leave the state unchanged."""
    logs = tuple(log for log in state.logs if log.id != log_id)
    if len(logs) == len(state.logs):
        return state
    logger.info("Deleted log %s", log_id)
    return dataclasses.replace(state, logs=logs)


# =============================================================================
# Jobs
# =============================================================================


def require_job(state: AppState, job_id: str) -> Job:
    """Look up a job by id.

    Raises:
        JobNotFoundError: If no job has this id
    """
    job = state.get_job(job_id)
    if job is None:
        raise JobNotFoundError(job_id)
    return job


def add_job(state: AppState, job: Job) -> AppState:
    logger.info("Adding job %s (%s)", job.id, job.name)
    return dataclasses.replace(state, jobs=(*state.jobs, job))


def new_job(state: AppState, job_id: str | None = None) -> AppState:
    """Add a job with default rates, named and coloured by position."""
    count = len(state.jobs)
    job = Job(
        id=job_id or str(uuid4()),
        name=f"Job {count + 1}",
        color=JOB_COLORS[count % len(JOB_COLORS)],
    )
    return add_job(state, job)


def update_job(state: AppState, job_id: str, **changes: Any) -> AppState:
    """Replace fields of one job.

    Raises:
        JobNotFoundError: If no job has this id
    """
    job = require_job(state, job_id)
    updated = dataclasses.replace(job, **changes)
    logger.info("Updated job %s: %s", job_id, ", ".join(sorted(changes)))
    return dataclasses.replace(
        state,
        jobs=tuple(updated if j.id == job_id else j for j in state.jobs),
    )


def delete_job(state: AppState, job_id: str) -> AppState:
    """Delete a job and every log attached to it.

    Raises:
        JobNotFoundError: If no job has this id
        LastJobError: If it is the only job left
    """
    require_job(state, job_id)
    if len(state.jobs) <= 1:
        raise LastJobError(job_id)

    logs = tuple(log for log in state.logs if log.job_id != job_id)
    logger.info(
        "Deleted job %s and %d log(s)", job_id, len(state.logs) - len(logs)
    )
    return dataclasses.replace(
        state,
        jobs=tuple(j for j in state.jobs if j.id != job_id),
        logs=logs,
    )


def apply_promotion(state: AppState, job_id: str) -> AppState:
    """Move a job onto its next tier rates."""
    job = require_job(state, job_id)
    promoted = promote(job)
    logger.info(
        "Promoted job %s: %s -> %s", job_id, job.hourly_rate, promoted.hourly_rate
    )
    return dataclasses.replace(
        state,
        jobs=tuple(promoted if j.id == job_id else j for j in state.jobs),
    )


def apply_remediation(state: AppState, log: WorkLog) -> AppState:
    """Append a compensating log produced by payslip reconciliation."""
    logger.info(
        "Applying payslip remediation for job %s: %s hours on %s",
        log.job_id,
        log.duration,
        log.date,
    )
    return add_log(state, log)


# =============================================================================
# Settings
# =============================================================================


def update_settings(state: AppState, **changes: Any) -> AppState:
    settings = dataclasses.replace(state.settings, **changes)
    logger.info("Updated settings: %s", ", ".join(sorted(changes)))
    return dataclasses.replace(state, settings=settings)


def mark_backup(state: AppState, now: datetime | None = None) -> AppState:
    """Record that a backup was just taken."""
    stamp = int(now.timestamp() * 1000) if now is not None else _now_ms()
    return update_settings(state, last_backup_timestamp=stamp)


def backup_overdue(settings: UserSettings, now: datetime | None = None) -> bool:
    """True when the last backup is more than seven days old, or never happened."""
    now_ms = int(now.timestamp() * 1000) if now is not None else _now_ms()
    last = settings.last_backup_timestamp or 0
    return now_ms - last > BACKUP_INTERVAL / timedelta(milliseconds=1)


# =============================================================================
# Templates
# =============================================================================


@dataclass(frozen=True)
class LogDraft:
    """Prefilled log fields awaiting a date confirmation."""

    job_id: str | None
    day: date
    start_time: str
    end_time: str
    notes: str = ""

    def to_log(self, **kwargs: Any) -> WorkLog:
        """Finish the draft through ``create_work_log``."""
        return create_work_log(
            self.job_id,
            self.day,
            start_time=self.start_time,
            end_time=self.end_time,
            notes=self.notes,
            **kwargs,
        )


def require_template(state: AppState, template_id: str) -> ShiftTemplate:
    """Look up a template by id.

    Raises:
        TemplateNotFoundError: If no template has this id
    """
    for template in state.templates:
        if template.id == template_id:
            return template
    raise TemplateNotFoundError(template_id)


def create_template(
    name: str,
    job_id: str | None,
    start_time: str,
    end_time: str,
    notes: str = "",
    template_id: str | None = None,
) -> ShiftTemplate:
    """Build a template whose times would make a valid shift.

    Raises:
        InvalidDurationError: If a time is malformed or the shift is empty
    """
    duration = shift_duration(start_time, end_time)
    if duration <= 0:
        raise InvalidDurationError(duration, "must be greater than zero")
    return ShiftTemplate(
        id=template_id or str(uuid4()),
        name=name,
        job_id=job_id,
        start_time=start_time,
        end_time=end_time,
        notes=notes,
    )


def add_template(state: AppState, template: ShiftTemplate) -> AppState:
    logger.info("Saved template %s (%s)", template.id, template.name)
    return dataclasses.replace(state, templates=(*state.templates, template))


def delete_template(state: AppState, template_id: str) -> AppState:
    return dataclasses.replace(
        state,
        templates=tuple(t for t in state.templates if t.id != template_id),
    )


def apply_template(template: ShiftTemplate, day: date) -> LogDraft:
    """Prefill a log draft from a template for the given day."""
    return LogDraft(
        job_id=template.job_id,
        day=day,
        start_time=template.start_time,
        end_time=template.end_time,
        notes=template.notes,
    )


def replace_state(state: AppState, incoming: AppState) -> AppState:
    """Swap the whole state for an imported one."""
    logger.info(
        "Replacing state: %d job(s), %d log(s) -> %d job(s), %d log(s)",
        len(state.jobs),
        len(state.logs),
        len(incoming.jobs),
        len(incoming.logs),
    )
    return incoming
