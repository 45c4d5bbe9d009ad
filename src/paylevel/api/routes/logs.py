"""Work log endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Response, status

from paylevel.api.dependencies import CurrentState, Store
from paylevel.api.schemas import ErrorResponse, LogCreate, LogResponse
from paylevel.services.state_commands import add_log, create_work_log, delete_log

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=list[LogResponse])
async def list_logs(state: CurrentState) -> list[LogResponse]:
    """All logs, newest first."""
    return [LogResponse.model_validate(log) for log in state.logs]


@router.post(
    "",
    response_model=LogResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_log(store: Store, payload: LogCreate) -> LogResponse:
    """Log a shift from start/end times or a direct duration."""
    log = create_work_log(
        payload.job_id,
        payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        duration=payload.duration,
        notes=payload.notes,
    )
    await store.update(lambda state: add_log(state, log))
    return LogResponse.model_validate(log)


@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_log(store: Store, log_id: Annotated[str, Path()]) -> Response:
    await store.update(lambda state: delete_log(state, log_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
