"""Stateful shell around the engine: selection, migration, commands, storage."""

from paylevel.services.calendar_selection import (
    EMPTY_SELECTION,
    RangeSelection,
    SelectionState,
    clear_selection,
    is_in_range,
    range_totals,
    select_date,
)
from paylevel.services.migration import (
    ImportValidationError,
    StateMigrationError,
    dump_state,
    fresh_state,
    import_state,
    load_or_fresh,
    migrate,
)
from paylevel.services.state_commands import (
    InvalidDurationError,
    JobNotFoundError,
    LastJobError,
    TemplateNotFoundError,
)
from paylevel.services.state_store import StateStore

__all__ = [
    "EMPTY_SELECTION",
    "ImportValidationError",
    "InvalidDurationError",
    "JobNotFoundError",
    "LastJobError",
    "RangeSelection",
    "SelectionState",
    "StateMigrationError",
    "StateStore",
    "TemplateNotFoundError",
    "clear_selection",
    "dump_state",
    "fresh_state",
    "import_state",
    "is_in_range",
    "load_or_fresh",
    "migrate",
    "range_totals",
    "select_date",
]
