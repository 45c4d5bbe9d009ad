"""Persisted state parsing and schema migration.

Persisted blobs come in two known shapes:

- v1: a single implicit job whose rates live on the settings object
  (``hourlyRate``, ``weekendHourlyRate``, ``targetHours``,
  ``nextHourlyRate``, ``nextWeekendHourlyRate``); logs may lack ``jobId``.
- v2: an explicit, non-empty ``jobs`` collection.

A blob is tagged v2 when it carries jobs and v1 otherwise, then lifted
through one migration function per version step. The result is always a
v2 blob, converted into the immutable domain ``AppState``.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Annotated, Any, Literal
from uuid import NAMESPACE_URL, uuid4, uuid5

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from paylevel.models import (
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

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2

# Stable id for the job synthesized from v1 settings, so that migrating the
# same blob twice yields the same state.
MAIN_JOB_ID = str(uuid5(NAMESPACE_URL, "paylevel:main-job"))

# Placeholder the v1/v2 blobs use for "no time of day"
NO_TIME = "-"


class StateMigrationError(Exception):
    """Raised when a persisted blob cannot be parsed or migrated.

    This is recoverable: callers fall back to a fresh state and leave the
    in-memory state untouched.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Cannot load persisted state: {reason}")


class ImportValidationError(StateMigrationError):
    """Raised when an imported file lacks the required sections."""


def _coerce_decimal(value: Any) -> Any:
    # Floats go through str so 3.08 stays 3.08
    if isinstance(value, float):
        return Decimal(str(value))
    return value


BlobDecimal = Annotated[
    Decimal,
    BeforeValidator(_coerce_decimal),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class _BlobModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class JobBlob(_BlobModel):
    id: str
    name: str = DEFAULT_JOB_NAME
    color: str = JOB_COLORS[0]
    hourly_rate: BlobDecimal = DEFAULT_HOURLY_RATE
    weekend_hourly_rate: BlobDecimal = DEFAULT_WEEKEND_HOURLY_RATE
    target_hours: BlobDecimal = DEFAULT_TARGET_HOURS
    next_hourly_rate: BlobDecimal = DEFAULT_NEXT_HOURLY_RATE
    next_weekend_hourly_rate: BlobDecimal = DEFAULT_NEXT_WEEKEND_HOURLY_RATE


class WorkLogBlob(_BlobModel):
    id: str
    job_id: str | None = None
    date: dt.date
    start_time: str | None = None
    end_time: str | None = None
    duration: BlobDecimal
    notes: str = ""
    timestamp: int = 0

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _no_time(cls, value: Any) -> Any:
        if value in (NO_TIME, ""):
            return None
        return value


class TemplateBlob(_BlobModel):
    id: str
    name: str = ""
    job_id: str | None = None
    start_time: str
    end_time: str
    notes: str = ""


class SettingsBlob(_BlobModel):
    currency: str = "HKD"
    user_name: str = "Employee"
    pay_frequency: PayFrequency = PayFrequency.BIWEEKLY
    tax_rate: BlobDecimal = Decimal("0")
    theme: Theme = Theme.LIGHT
    last_backup_timestamp: int | None = None

    @field_validator("tax_rate", mode="before")
    @classmethod
    def _missing_tax(cls, value: Any) -> Any:
        return 0 if value is None else value


class LegacySettingsBlob(SettingsBlob):
    hourly_rate: BlobDecimal | None = None
    weekend_hourly_rate: BlobDecimal | None = None
    target_hours: BlobDecimal | None = None
    next_hourly_rate: BlobDecimal | None = None
    next_weekend_hourly_rate: BlobDecimal | None = None


class StateBlobV1(_BlobModel):
    """Single-job schema."""

    schema_version: Literal[1] = 1
    logs: list[WorkLogBlob] = Field(default_factory=list)
    templates: list[TemplateBlob] = Field(default_factory=list)
    settings: LegacySettingsBlob = Field(default_factory=LegacySettingsBlob)


class StateBlobV2(_BlobModel):
    """Multi-job schema."""

    schema_version: Literal[2] = 2
    jobs: list[JobBlob] = Field(min_length=1)
    logs: list[WorkLogBlob] = Field(default_factory=list)
    templates: list[TemplateBlob] = Field(default_factory=list)
    settings: SettingsBlob = Field(default_factory=SettingsBlob)


BLOB_SCHEMAS: dict[int, type[_BlobModel]] = {
    1: StateBlobV1,
    2: StateBlobV2,
}


# =============================================================================
# Version steps
# =============================================================================


def _first(*values: Decimal | None) -> Decimal:
    """First non-empty, non-zero value; the last value is the default."""
    for value in values[:-1]:
        if value:
            return value
    return values[-1]


def _v1_to_v2(blob: StateBlobV1) -> StateBlobV2:
    legacy = blob.settings
    main_job = JobBlob(
        id=MAIN_JOB_ID,
        name=DEFAULT_JOB_NAME,
        color=JOB_COLORS[0],
        hourly_rate=_first(legacy.hourly_rate, DEFAULT_HOURLY_RATE),
        weekend_hourly_rate=_first(
            legacy.weekend_hourly_rate, legacy.hourly_rate, DEFAULT_WEEKEND_HOURLY_RATE
        ),
        target_hours=_first(legacy.target_hours, DEFAULT_TARGET_HOURS),
        next_hourly_rate=_first(legacy.next_hourly_rate, DEFAULT_NEXT_HOURLY_RATE),
        next_weekend_hourly_rate=_first(
            legacy.next_weekend_hourly_rate,
            legacy.next_hourly_rate,
            DEFAULT_NEXT_WEEKEND_HOURLY_RATE,
        ),
    )
    logger.info(
        "Migrating single-job state: created %r for %d log(s)",
        main_job.name,
        sum(1 for log in blob.logs if log.job_id is None),
    )
    return StateBlobV2(
        jobs=[main_job],
        logs=[
            log if log.job_id is not None else log.model_copy(update={"job_id": main_job.id})
            for log in blob.logs
        ],
        templates=[
            t if t.job_id is not None else t.model_copy(update={"job_id": main_job.id})
            for t in blob.templates
        ],
        settings=SettingsBlob.model_validate(
            legacy.model_dump(include=set(SettingsBlob.model_fields))
        ),
    )


MIGRATIONS: dict[int, Callable[[Any], _BlobModel]] = {
    1: _v1_to_v2,
}


# =============================================================================
# Parsing
# =============================================================================


def _parse_raw(blob: str | bytes | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(blob, (str, bytes, bytearray)):
        try:
            raw = json.loads(blob, parse_float=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StateMigrationError(f"invalid JSON: {e}") from e
    else:
        raw = blob
    if not isinstance(raw, Mapping):
        raise StateMigrationError("top-level value must be an object")
    return dict(raw)


def detect_version(raw: Mapping[str, Any]) -> int:
    """Schema version of a raw blob.

    An empty jobs collection always means the single-job schema, whatever
    the blob declares.
    """
    declared = raw.get("schemaVersion")
    if isinstance(declared, int) and declared > CURRENT_SCHEMA_VERSION:
        raise StateMigrationError(f"unsupported schema version {declared}")
    return CURRENT_SCHEMA_VERSION if raw.get("jobs") else 1


def _to_domain(blob: StateBlobV2) -> AppState:
    settings = blob.settings
    return AppState(
        jobs=tuple(
            Job(
                id=j.id,
                name=j.name,
                color=j.color,
                hourly_rate=j.hourly_rate,
                weekend_hourly_rate=j.weekend_hourly_rate,
                target_hours=j.target_hours,
                next_hourly_rate=j.next_hourly_rate,
                next_weekend_hourly_rate=j.next_weekend_hourly_rate,
            )
            for j in blob.jobs
        ),
        logs=tuple(
            WorkLog(
                id=log.id,
                job_id=log.job_id,
                date=log.date,
                duration=log.duration,
                start_time=log.start_time,
                end_time=log.end_time,
                notes=log.notes,
                timestamp=log.timestamp,
            )
            for log in blob.logs
        ),
        templates=tuple(
            ShiftTemplate(
                id=t.id,
                name=t.name,
                job_id=t.job_id,
                start_time=t.start_time,
                end_time=t.end_time,
                notes=t.notes,
            )
            for t in blob.templates
        ),
        settings=UserSettings(
            currency=settings.currency,
            user_name=settings.user_name,
            pay_frequency=settings.pay_frequency,
            tax_rate=settings.tax_rate,
            theme=settings.theme,
            last_backup_timestamp=settings.last_backup_timestamp,
        ),
    )


def migrate(blob: str | bytes | Mapping[str, Any]) -> AppState:
    """Parse a persisted blob of any known vintage into an AppState.

    Migration only happens when there are no jobs; a log that already
    carries a ``jobId`` is never reassigned, so running this over its own
    output is a no-op.

    Raises:
        StateMigrationError: If the blob cannot be parsed or is invalid
    """
    raw = _parse_raw(blob)
    version = detect_version(raw)
    try:
        model: Any = BLOB_SCHEMAS[version].model_validate(
            {**raw, "schemaVersion": version}
        )
        while version < CURRENT_SCHEMA_VERSION:
            model = MIGRATIONS[version](model)
            version += 1
        return _to_domain(model)
    except ValidationError as e:
        raise StateMigrationError(f"{e.error_count()} validation error(s): {e}") from e
    except ValueError as e:
        raise StateMigrationError(str(e)) from e


def import_state(blob: str | bytes | Mapping[str, Any]) -> AppState:
    """Parse a user-supplied backup file.

    Stricter than ``migrate``: the file must contain both ``logs`` and
    ``settings``.
    """
    raw = _parse_raw(blob)
    missing = [key for key in ("logs", "settings") if key not in raw]
    if missing:
        raise ImportValidationError(f"missing section(s): {', '.join(missing)}")
    return migrate(raw)


def fresh_state(job_id: str | None = None) -> AppState:
    """State for a new user: one default job and nothing else."""
    return AppState(jobs=(Job(id=job_id or str(uuid4())),))


def load_or_fresh(blob: str | bytes | Mapping[str, Any] | None) -> AppState:
    """Load persisted state, falling back to a fresh state on failure."""
    if blob is None:
        return fresh_state()
    try:
        return migrate(blob)
    except StateMigrationError as e:
        logger.warning("Falling back to fresh state: %s", e.reason)
        return fresh_state()


def dump_state(state: AppState) -> dict[str, Any]:
    """Serialize state as a current-version JSON-ready blob."""
    blob = StateBlobV2(
        jobs=[
            JobBlob(
                id=j.id,
                name=j.name,
                color=j.color,
                hourly_rate=j.hourly_rate,
                weekend_hourly_rate=j.weekend_hourly_rate,
                target_hours=j.target_hours,
                next_hourly_rate=j.next_hourly_rate,
                next_weekend_hourly_rate=j.next_weekend_hourly_rate,
            )
            for j in state.jobs
        ],
        logs=[
            WorkLogBlob(
                id=log.id,
                job_id=log.job_id,
                date=log.date,
                start_time=log.start_time,
                end_time=log.end_time,
                duration=log.duration,
                notes=log.notes,
                timestamp=log.timestamp,
            )
            for log in state.logs
        ],
        templates=[
            TemplateBlob(
                id=t.id,
                name=t.name,
                job_id=t.job_id,
                start_time=t.start_time,
                end_time=t.end_time,
                notes=t.notes,
            )
            for t in state.templates
        ],
        settings=SettingsBlob(
            currency=state.settings.currency,
            user_name=state.settings.user_name,
            pay_frequency=state.settings.pay_frequency,
            tax_rate=state.settings.tax_rate,
            theme=state.settings.theme,
            last_backup_timestamp=state.settings.last_backup_timestamp,
        ),
    )
    data = blob.model_dump(mode="json", by_alias=True)
    for log in data["logs"]:
        log["startTime"] = log["startTime"] or NO_TIME
        log["endTime"] = log["endTime"] or NO_TIME
    return data
