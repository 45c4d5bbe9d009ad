"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from paylevel.calculators.types import BucketMode, HourType, RemediationKind
from paylevel.models import PayFrequency, Theme


class ErrorResponse(BaseModel):
    """Error body returned for domain failures."""

    detail: str
    code: str


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Job schemas
# ============================================================================


class JobResponse(_FromDomain):
    id: str
    name: str
    color: str
    hourly_rate: Decimal
    weekend_hourly_rate: Decimal
    target_hours: Decimal
    next_hourly_rate: Decimal
    next_weekend_hourly_rate: Decimal


class JobUpdate(BaseModel):
    """Partial job update; omitted fields are left unchanged."""

    name: str | None = None
    color: str | None = None
    hourly_rate: Decimal | None = Field(default=None, ge=0)
    weekend_hourly_rate: Decimal | None = Field(default=None, ge=0)
    target_hours: Decimal | None = Field(default=None, ge=0)
    next_hourly_rate: Decimal | None = Field(default=None, ge=0)
    next_weekend_hourly_rate: Decimal | None = Field(default=None, ge=0)


class RateCardRequest(BaseModel):
    role: str
    level: str
    age: str


class ProgressResponse(_FromDomain):
    """Promotion progress for one job."""

    job_id: str
    total_hours: Decimal
    target_hours: Decimal
    percent: Decimal
    eligible: bool
    remaining_hours: Decimal


# ============================================================================
# Log schemas
# ============================================================================


class LogCreate(BaseModel):
    """New shift, either as a start/end pair or a direct duration."""

    job_id: str | None
    date: date
    start_time: str | None = None
    end_time: str | None = None
    duration: Decimal | None = None
    notes: str = ""


class LogResponse(_FromDomain):
    id: str
    job_id: str | None
    date: date
    start_time: str | None
    end_time: str | None
    duration: Decimal
    notes: str
    timestamp: int


# ============================================================================
# Settings schemas
# ============================================================================


class SettingsResponse(_FromDomain):
    currency: str
    user_name: str
    pay_frequency: PayFrequency
    tax_rate: Decimal
    theme: Theme
    last_backup_timestamp: int | None
    backup_overdue: bool = False


class SettingsUpdate(BaseModel):
    currency: str | None = None
    user_name: str | None = None
    pay_frequency: PayFrequency | None = None
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100)
    theme: Theme | None = None


# ============================================================================
# Stats schemas
# ============================================================================


class TotalsResponse(BaseModel):
    """Hours and earnings over an inclusive date range."""

    start: date
    end: date
    job_id: str | None = None
    total_hours: Decimal
    total_earnings: Decimal


class BucketResponse(_FromDomain):
    label: str
    key: str
    hours: Decimal
    is_weekend: bool


class BucketListResponse(BaseModel):
    mode: BucketMode
    reference_date: date
    items: list[BucketResponse]


class MonthlySummaryResponse(_FromDomain):
    month_key: str
    hours: Decimal
    earnings: Decimal
    net: Decimal
    previous_month_key: str
    previous_hours: Decimal


class BiweeklySummaryResponse(_FromDomain):
    start: date
    end: date
    hours: Decimal
    earnings: Decimal
    net: Decimal
    previous_start: date
    previous_end: date
    previous_hours: Decimal
    trend: Decimal


class SummaryResponse(BaseModel):
    """Dashboard cards; ``primary`` names the one matching the pay frequency."""

    primary: PayFrequency
    monthly: MonthlySummaryResponse
    biweekly: BiweeklySummaryResponse
    potential_value: Decimal


class JobShareResponse(_FromDomain):
    job_id: str
    name: str
    color: str
    hours: Decimal


class YearlySummaryResponse(_FromDomain):
    year: int
    total_hours: Decimal
    total_earnings: Decimal
    top_job: JobShareResponse
    busiest_day: str
    best_month: str
    job_shares: list[JobShareResponse]


# ============================================================================
# Payslip schemas
# ============================================================================


class ReconcileRequest(BaseModel):
    """Figures copied from a payslip."""

    job_id: str
    end_date: date
    period_days: Literal[14, 30] = 14
    weekday_hours: Decimal = Decimal("0")
    weekend_hours: Decimal = Decimal("0")
    allowance: Decimal = Decimal("0")
    tax_rate: Decimal | None = Field(default=None, ge=0, le=100)


class RemediationResponse(_FromDomain):
    hour_type: HourType
    hours: Decimal
    kind: RemediationKind


class ReconciliationResponse(_FromDomain):
    start: date
    end: date
    app_weekday_hours: Decimal
    app_weekend_hours: Decimal
    diff_weekday_hours: Decimal
    diff_weekend_hours: Decimal
    diff_gross_pay: Decimal
    app_gross: Decimal
    slip_gross: Decimal
    app_net: Decimal
    slip_net: Decimal
    is_reconciled: bool
    remediations: list[RemediationResponse]


class RemediateRequest(BaseModel):
    """Apply one offered remediation as a compensating log."""

    job_id: str
    end_date: date
    hour_type: HourType
    hours: Decimal


# ============================================================================
# Template schemas
# ============================================================================


class TemplateCreate(BaseModel):
    """Reusable shift shape; times are ``HH:MM``."""

    name: str
    job_id: str | None = None
    start_time: str
    end_time: str
    notes: str = ""


class TemplateResponse(_FromDomain):
    id: str
    name: str
    job_id: str | None
    start_time: str
    end_time: str
    notes: str


class TemplateApply(BaseModel):
    date: date


class LogDraftResponse(BaseModel):
    """Log fields prefilled from a template, not yet saved."""

    job_id: str | None
    date: date
    start_time: str
    end_time: str
    duration: Decimal
    notes: str
