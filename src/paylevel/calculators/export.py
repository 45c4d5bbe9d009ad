"""Export projection of work logs.

File framing (download, file names) belongs to the caller; this module
only produces the rows and their CSV text.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping

from paylevel.calculators.rate_resolver import resolve_rate, value_of
from paylevel.calculators.types import ZERO, ExportRow, round_to_cents
from paylevel.models import Job, WorkLog

EXPORT_HEADER: tuple[str, ...] = (
    "Date",
    "Job Name",
    "Start Time",
    "End Time",
    "Duration (Hours)",
    "Hourly Rate",
    "Earnings",
    "Notes",
)

UNKNOWN_JOB = "Unknown"
NO_TIME = "-"


def escape_quotes(text: str) -> str:
    """Double embedded quote characters for CSV quoting."""
    return text.replace('"', '""')


def to_export_rows(
    logs: Iterable[WorkLog],
    jobs_by_id: Mapping[str, Job],
) -> list[ExportRow]:
    """Project logs into export rows, one per log, in log order."""
    rows: list[ExportRow] = []
    for log in logs:
        job = jobs_by_id.get(log.job_id) if log.job_id is not None else None
        rate = resolve_rate(job, log.date).regular if job is not None else ZERO
        rows.append(
            ExportRow(
                date=log.date.isoformat(),
                job_name=job.name if job is not None else UNKNOWN_JOB,
                start_time=log.start_time or NO_TIME,
                end_time=log.end_time or NO_TIME,
                duration=log.duration,
                rate=rate,
                earnings=round_to_cents(value_of(log, jobs_by_id)),
                notes=escape_quotes(log.notes),
            )
        )
    return rows


def unescape_quotes(text: str) -> str:
    """Undo ``escape_quotes``."""
    return text.replace('""', '"')


def render_csv(rows: Iterable[ExportRow]) -> str:
    """Render rows as CSV text with a header line.

    Notes arrive with quotes already doubled by ``to_export_rows``; they are
    restored before ``csv.writer`` applies its own quoting.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for row in rows:
        writer.writerow([
            row.date,
            row.job_name,
            row.start_time,
            row.end_time,
            str(row.duration),
            str(row.rate),
            str(row.earnings),
            unescape_quotes(row.notes),
        ])
    return output.getvalue().removesuffix("\n")
