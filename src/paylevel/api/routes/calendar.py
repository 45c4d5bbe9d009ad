"""Calendar range selection totals."""

from datetime import date

from fastapi import APIRouter

from paylevel.api.dependencies import CurrentState
from paylevel.api.schemas import TotalsResponse
from paylevel.services.calendar_selection import EMPTY_SELECTION, range_totals, select_date

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("/range", response_model=TotalsResponse)
async def get_range_totals(
    state: CurrentState,
    first: date,
    second: date | None = None,
    job_id: str | None = None,
) -> TotalsResponse:
    """Totals for the days selected by clicking ``first`` then ``second``.

    The two clicks may come in either order.
    """
    selection = select_date(EMPTY_SELECTION, first)
    if second is not None:
        selection = select_date(selection, second)
    start, end = selection.bounds()
    totals = range_totals(selection, state.logs, state.jobs_by_id, job_id)
    return TotalsResponse(
        start=start,
        end=end,
        job_id=job_id,
        total_hours=totals.total_hours,
        total_earnings=totals.total_earnings,
    )
