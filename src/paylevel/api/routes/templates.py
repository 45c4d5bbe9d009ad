"""Shift template endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Path, Response, status

from paylevel.api.dependencies import CurrentState, Store
from paylevel.api.schemas import (
    ErrorResponse,
    LogDraftResponse,
    LogResponse,
    TemplateApply,
    TemplateCreate,
    TemplateResponse,
)
from paylevel.services.state_commands import (
    add_log,
    add_template,
    apply_template,
    create_template,
    delete_template,
    require_template,
    shift_duration,
)

router = APIRouter(prefix="/templates", tags=["templates"])

TemplateId = Annotated[str, Path()]


@router.get("", response_model=list[TemplateResponse])
async def list_templates(state: CurrentState) -> list[TemplateResponse]:
    return [TemplateResponse.model_validate(t) for t in state.templates]


@router.post(
    "",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create(store: Store, payload: TemplateCreate) -> TemplateResponse:
    """Save a template; the times must make a valid shift."""
    template = create_template(
        payload.name,
        payload.job_id,
        payload.start_time,
        payload.end_time,
        payload.notes,
    )
    await store.update(lambda state: add_template(state, template))
    return TemplateResponse.model_validate(template)


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove(store: Store, template_id: TemplateId) -> Response:
    await store.update(lambda state: delete_template(state, template_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{template_id}/draft",
    response_model=LogDraftResponse,
    responses={404: {"model": ErrorResponse}},
)
async def draft(
    state: CurrentState, template_id: TemplateId, day: date
) -> LogDraftResponse:
    """Prefill a log for ``day`` without saving it."""
    prefill = apply_template(require_template(state, template_id), day)
    return LogDraftResponse(
        job_id=prefill.job_id,
        date=prefill.day,
        start_time=prefill.start_time,
        end_time=prefill.end_time,
        duration=shift_duration(prefill.start_time, prefill.end_time),
        notes=prefill.notes,
    )


@router.post(
    "/{template_id}/apply",
    response_model=LogResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def apply(
    state: CurrentState, store: Store, template_id: TemplateId, payload: TemplateApply
) -> LogResponse:
    """Log a shift on the given day from a template."""
    log = apply_template(require_template(state, template_id), payload.date).to_log()
    await store.update(lambda current: add_log(current, log))
    return LogResponse.model_validate(log)
