"""Aggregation, chart bucket, dashboard summary and wrap-up endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from paylevel.api.dependencies import CurrentState, Today
from paylevel.api.schemas import (
    BiweeklySummaryResponse,
    BucketListResponse,
    BucketResponse,
    MonthlySummaryResponse,
    SummaryResponse,
    TotalsResponse,
    YearlySummaryResponse,
)
from paylevel.calculators.aggregator import (
    aggregate,
    all_of,
    biweekly_summary,
    bucketize,
    for_job,
    in_range,
    monthly_summary,
    primary_cadence,
)
from paylevel.calculators.progress import potential_value
from paylevel.calculators.types import BucketMode
from paylevel.calculators.wrapup import latest_year, yearly_summary

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/totals", response_model=TotalsResponse)
async def get_totals(
    state: CurrentState,
    start: date,
    end: date,
    job_id: str | None = None,
) -> TotalsResponse:
    """Hours and earnings over an inclusive range, optionally for one job."""
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start must not be after end",
        )
    totals = aggregate(
        state.logs, state.jobs_by_id, all_of(in_range(start, end), for_job(job_id))
    )
    return TotalsResponse(
        start=start,
        end=end,
        job_id=job_id,
        total_hours=totals.total_hours,
        total_earnings=totals.total_earnings,
    )


@router.get("/buckets", response_model=BucketListResponse)
async def get_buckets(
    state: CurrentState,
    today: Today,
    mode: BucketMode = BucketMode.RECENT,
    reference_date: date | None = None,
    job_id: str | None = None,
) -> BucketListResponse:
    """Chart buckets for a view mode, zero-filled, optionally for one job."""
    reference = reference_date or today
    logs = filter(for_job(job_id), state.logs)
    return BucketListResponse(
        mode=mode,
        reference_date=reference,
        items=[
            BucketResponse.model_validate(bucket)
            for bucket in bucketize(logs, mode, reference)
        ],
    )


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    state: CurrentState,
    today: Today,
    reference_date: date | None = None,
    job_id: str | None = None,
) -> SummaryResponse:
    """Monthly and 14-day dashboard cards, optionally for one job."""
    reference = reference_date or today
    logs = tuple(filter(for_job(job_id), state.logs))
    jobs_by_id = state.jobs_by_id
    tax_rate = state.settings.tax_rate
    return SummaryResponse(
        primary=primary_cadence(state.settings),
        monthly=MonthlySummaryResponse.model_validate(
            monthly_summary(logs, jobs_by_id, reference.year, reference.month, tax_rate)
        ),
        biweekly=BiweeklySummaryResponse.model_validate(
            biweekly_summary(logs, jobs_by_id, reference, tax_rate)
        ),
        potential_value=potential_value(logs, jobs_by_id),
    )


@router.get(
    "/wrapup",
    response_model=YearlySummaryResponse,
    responses={404: {"description": "No work logged for the year"}},
)
async def get_wrapup(
    state: CurrentState,
    today: Today,
    year: Annotated[int | None, Query(ge=1)] = None,
) -> YearlySummaryResponse:
    """Year in review; defaults to the latest year with logged work."""
    target_year = year or latest_year(state.logs, today)
    summary = yearly_summary(state.logs, state.jobs_by_id, target_year)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No work logged in {target_year}",
        )
    return YearlySummaryResponse.model_validate(summary)
