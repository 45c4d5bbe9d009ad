"""Payroll aggregation and reconciliation engine."""

from paylevel.calculators.aggregator import (
    aggregate,
    all_of,
    biweekly_summary,
    bucketize,
    for_job,
    in_month,
    in_range,
    monthly_summary,
    primary_cadence,
    split_hours,
)
from paylevel.calculators.export import render_csv, to_export_rows
from paylevel.calculators.progress import hours_for_job, potential_value, progress, promote
from paylevel.calculators.rate_resolver import (
    index_jobs,
    is_weekend,
    next_value_of,
    resolve_next_rate,
    resolve_rate,
    value_of,
)
from paylevel.calculators.reconciler import (
    RemediationError,
    app_totals,
    build_compensating_log,
    check_remediation_day,
    offered_remediation,
    reconcile,
    remediation_for,
)
from paylevel.calculators.tax_calculator import net_of_tax
from paylevel.calculators.types import (
    Bucket,
    BucketMode,
    HourType,
    PayslipInputs,
    PeriodTotals,
    Reconciliation,
    Remediation,
    RemediationKind,
)
from paylevel.calculators.wrapup import latest_year, yearly_summary

__all__ = [
    "aggregate",
    "all_of",
    "app_totals",
    "biweekly_summary",
    "bucketize",
    "build_compensating_log",
    "check_remediation_day",
    "for_job",
    "hours_for_job",
    "in_month",
    "in_range",
    "index_jobs",
    "is_weekend",
    "latest_year",
    "monthly_summary",
    "net_of_tax",
    "next_value_of",
    "offered_remediation",
    "potential_value",
    "primary_cadence",
    "progress",
    "promote",
    "reconcile",
    "remediation_for",
    "render_csv",
    "resolve_next_rate",
    "resolve_rate",
    "split_hours",
    "to_export_rows",
    "value_of",
    "yearly_summary",
    "Bucket",
    "BucketMode",
    "HourType",
    "PayslipInputs",
    "PeriodTotals",
    "Reconciliation",
    "Remediation",
    "RemediationError",
    "RemediationKind",
]
