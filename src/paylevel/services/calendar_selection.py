"""Two-click calendar range selection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum

from paylevel.calculators.aggregator import aggregate, all_of, for_job, in_range
from paylevel.calculators.types import PeriodTotals
from paylevel.models import Job, WorkLog


class SelectionState(str, Enum):
    """Calendar selection states."""

    EMPTY = "empty"
    SINGLE_SELECTED = "single_selected"
    RANGE_SELECTED = "range_selected"


@dataclass(frozen=True)
class RangeSelection:
    """Selected calendar days.

    Transitions on clicking a day:
    - empty → single_selected (start = day)
    - range_selected → single_selected (previous range discarded)
    - single_selected → range_selected (end = day, swapped with start when
      the day precedes it, so start <= end always holds)
    """

    start: date | None = None
    end: date | None = None

    @property
    def state(self) -> SelectionState:
        if self.start is None:
            return SelectionState.EMPTY
        if self.end is None:
            return SelectionState.SINGLE_SELECTED
        return SelectionState.RANGE_SELECTED

    def bounds(self) -> tuple[date, date] | None:
        """Resolved inclusive bounds; a single day selects itself."""
        if self.start is None:
            return None
        return self.start, self.end or self.start


EMPTY_SELECTION = RangeSelection()


def select_date(selection: RangeSelection, day: date) -> RangeSelection:
    """Apply a click on ``day``."""
    if selection.state != SelectionState.SINGLE_SELECTED:
        return RangeSelection(start=day)
    if day < selection.start:
        return RangeSelection(start=day, end=selection.start)
    return RangeSelection(start=selection.start, end=day)


def is_in_range(selection: RangeSelection, day: date) -> bool:
    """Check if a day is covered by the selection."""
    bounds = selection.bounds()
    if bounds is None:
        return False
    return bounds[0] <= day <= bounds[1]


def clear_selection() -> RangeSelection:
    """Return to the empty selection."""
    return EMPTY_SELECTION


def range_totals(
    selection: RangeSelection,
    logs: Iterable[WorkLog],
    jobs_by_id: Mapping[str, Job],
    job_id: str | None = None,
) -> PeriodTotals | None:
    """Totals over the selected days, or None when nothing is selected."""
    bounds = selection.bounds()
    if bounds is None:
        return None
    return aggregate(logs, jobs_by_id, all_of(in_range(*bounds), for_job(job_id)))
