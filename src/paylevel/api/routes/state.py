"""Whole-state and settings endpoints."""

from typing import Any

from fastapi import APIRouter, Body, status

from paylevel.api.dependencies import CurrentState, Store
from paylevel.api.schemas import ErrorResponse, SettingsResponse, SettingsUpdate
from paylevel.models import AppState
from paylevel.services import dump_state, import_state
from paylevel.services.state_commands import (
    backup_overdue,
    mark_backup,
    replace_state,
    update_settings,
)

router = APIRouter(tags=["state"])


def _settings_response(state: AppState) -> SettingsResponse:
    response = SettingsResponse.model_validate(state.settings)
    response.backup_overdue = backup_overdue(state.settings)
    return response


@router.get("/state")
async def get_state(state: CurrentState) -> dict[str, Any]:
    """Current state as a v2 blob."""
    return dump_state(state)


@router.put(
    "/state",
    responses={400: {"model": ErrorResponse}},
)
async def put_state(
    store: Store,
    blob: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Replace the whole state with an imported backup (any schema version)."""
    incoming = import_state(blob)
    state = await store.update(lambda current: replace_state(current, incoming))
    return dump_state(state)


@router.get("/backup", status_code=status.HTTP_200_OK)
async def download_backup(store: Store) -> dict[str, Any]:
    """Export the full state as JSON and record the backup time."""
    state = await store.update(mark_backup)
    return dump_state(state)


@router.get("/settings", response_model=SettingsResponse)
async def get_settings_view(state: CurrentState) -> SettingsResponse:
    return _settings_response(state)


@router.patch(
    "/settings",
    response_model=SettingsResponse,
    responses={422: {"model": ErrorResponse}},
)
async def patch_settings(store: Store, payload: SettingsUpdate) -> SettingsResponse:
    """Update global settings."""
    changes = payload.model_dump(exclude_none=True)
    state = await store.update(lambda current: update_settings(current, **changes))
    return _settings_response(state)
