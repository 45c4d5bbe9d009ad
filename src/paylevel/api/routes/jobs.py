"""Job endpoints, including promotion and rate card presets."""

from typing import Annotated

from fastapi import APIRouter, Path, Response, status

from paylevel.api.dependencies import CurrentState, Store
from paylevel.api.schemas import (
    ErrorResponse,
    JobResponse,
    JobUpdate,
    ProgressResponse,
    RateCardRequest,
)
from paylevel.calculators.progress import hours_for_job, progress
from paylevel.calculators.rate_card import apply_rate_card
from paylevel.services.state_commands import (
    apply_promotion,
    delete_job,
    new_job,
    require_job,
    update_job,
)

router = APIRouter(prefix="/jobs", tags=["jobs"])

JobId = Annotated[str, Path()]


@router.get("", response_model=list[JobResponse])
async def list_jobs(state: CurrentState) -> list[JobResponse]:
    return [JobResponse.model_validate(job) for job in state.jobs]


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(store: Store) -> JobResponse:
    """Add a job with default rates."""
    state = await store.update(new_job)
    return JobResponse.model_validate(state.jobs[-1])


@router.patch(
    "/{job_id}",
    response_model=JobResponse,
    responses={404: {"model": ErrorResponse}},
)
async def patch_job(store: Store, job_id: JobId, payload: JobUpdate) -> JobResponse:
    changes = payload.model_dump(exclude_none=True)
    state = await store.update(lambda current: update_job(current, job_id, **changes))
    return JobResponse.model_validate(require_job(state, job_id))


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def remove_job(store: Store, job_id: JobId) -> Response:
    """Delete a job and its logs. The last job cannot be deleted."""
    await store.update(lambda state: delete_job(state, job_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{job_id}/progress",
    response_model=ProgressResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_progress(state: CurrentState, job_id: JobId) -> ProgressResponse:
    """Progress toward the job's promotion threshold."""
    job = require_job(state, job_id)
    result = progress(job, hours_for_job(state.logs, job.id))
    return ProgressResponse(
        job_id=job.id,
        total_hours=result.total_hours,
        target_hours=result.target_hours,
        percent=result.percent,
        eligible=result.eligible,
        remaining_hours=result.remaining_hours,
    )


@router.post(
    "/{job_id}/promote",
    response_model=JobResponse,
    responses={404: {"model": ErrorResponse}},
)
async def promote_job(store: Store, job_id: JobId) -> JobResponse:
    """Move the job onto its next tier rates."""
    state = await store.update(lambda current: apply_promotion(current, job_id))
    return JobResponse.model_validate(require_job(state, job_id))


@router.post(
    "/{job_id}/rate-card",
    response_model=JobResponse,
    responses={404: {"model": ErrorResponse}},
)
async def apply_card(store: Store, job_id: JobId, payload: RateCardRequest) -> JobResponse:
    """Fill the job's rates from the casual pay rate card."""

    def command(state):
        job = apply_rate_card(
            require_job(state, job_id), payload.role, payload.level, payload.age
        )
        return update_job(
            state,
            job_id,
            name=job.name,
            hourly_rate=job.hourly_rate,
            weekend_hourly_rate=job.weekend_hourly_rate,
            target_hours=job.target_hours,
            next_hourly_rate=job.next_hourly_rate,
            next_weekend_hourly_rate=job.next_weekend_hourly_rate,
        )

    state = await store.update(command)
    return JobResponse.model_validate(require_job(state, job_id))
