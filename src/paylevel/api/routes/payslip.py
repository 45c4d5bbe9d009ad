"""Payslip reconciliation endpoints."""

from fastapi import APIRouter, status

from paylevel.api.dependencies import CurrentState, Store
from paylevel.api.schemas import (
    ErrorResponse,
    LogResponse,
    ReconcileRequest,
    ReconciliationResponse,
    RemediateRequest,
    RemediationResponse,
)
from paylevel.calculators.reconciler import (
    app_totals,
    build_compensating_log,
    offered_remediation,
    reconcile,
)
from paylevel.calculators.types import PayslipInputs
from paylevel.services.state_commands import apply_remediation, require_job

router = APIRouter(prefix="/payslip", tags=["payslip"])


@router.post(
    "/reconcile",
    response_model=ReconciliationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def reconcile_payslip(
    state: CurrentState, payload: ReconcileRequest
) -> ReconciliationResponse:
    """Compare a payslip against the hours logged for one job."""
    job = require_job(state, payload.job_id)
    totals = app_totals(state.logs, job, payload.end_date, payload.period_days)
    result = reconcile(
        totals,
        PayslipInputs(
            weekday_hours=payload.weekday_hours,
            weekend_hours=payload.weekend_hours,
            allowance=payload.allowance,
            tax_rate=payload.tax_rate,
        ),
        state.settings.tax_rate,
    )
    return ReconciliationResponse(
        start=totals.start,
        end=totals.end,
        app_weekday_hours=totals.weekday_hours,
        app_weekend_hours=totals.weekend_hours,
        diff_weekday_hours=result.diff_weekday_hours,
        diff_weekend_hours=result.diff_weekend_hours,
        diff_gross_pay=result.diff_gross_pay,
        app_gross=result.app_gross,
        slip_gross=result.slip_gross,
        app_net=result.app_net,
        slip_net=result.slip_net,
        is_reconciled=result.is_reconciled,
        remediations=[RemediationResponse.model_validate(r) for r in result.remediations],
    )


@router.post(
    "/remediate",
    response_model=LogResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def remediate(store: Store, payload: RemediateRequest) -> LogResponse:
    """Add the compensating log for one remediation.

    The hours must be outside the reconciliation tolerance and the end date
    must fall on the remediation's day type, so the log lands in the hours
    it corrects.
    """
    remediation = offered_remediation(payload.end_date, payload.hour_type, payload.hours)
    log = build_compensating_log(payload.job_id, payload.end_date, remediation)

    def command(state):
        require_job(state, payload.job_id)
        return apply_remediation(state, log)

    await store.update(command)
    return LogResponse.model_validate(log)
