"""CSV export endpoint."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from paylevel.api.dependencies import CurrentState, Today
from paylevel.calculators.export import render_csv, to_export_rows

router = APIRouter(prefix="/export", tags=["export"])


@router.get("/csv", response_class=PlainTextResponse)
async def export_csv(state: CurrentState, today: Today) -> PlainTextResponse:
    """All logs as CSV, one row per log."""
    body = render_csv(to_export_rows(state.logs, state.jobs_by_id))
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="work_logs_{today.isoformat()}.csv"'
        },
    )
