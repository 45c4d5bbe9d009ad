"""PayLevel Command Line Interface.

Runs the engine over a JSON state file (a backup downloaded from the app,
of any schema version):
- Schema migration
- Dashboard summaries and chart buckets
- Promotion progress
- Payslip reconciliation
- CSV export
- Yearly wrap-up

Usage:
    python -m paylevel.cli migrate --state backup.json --output state.json
    python -m paylevel.cli summary --state state.json --date 2024-06-14
    python -m paylevel.cli buckets --state state.json --mode history
    python -m paylevel.cli reconcile --state state.json --job-id X \\
        --end-date 2024-06-14 --weekday-hours 20 --weekend-hours 8
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable

from paylevel.calculators.aggregator import (
    biweekly_summary,
    bucketize,
    monthly_summary,
    primary_cadence,
)
from paylevel.calculators.export import render_csv, to_export_rows
from paylevel.calculators.progress import hours_for_job, progress
from paylevel.calculators.reconciler import (
    PAYSLIP_PERIOD_DAYS,
    RemediationError,
    app_totals,
    build_compensating_log,
    check_remediation_day,
    reconcile,
)
from paylevel.calculators.types import BucketMode, PayslipInputs, round_to_cents
from paylevel.calculators.wrapup import latest_year, yearly_summary
from paylevel.config import get_settings
from paylevel.models import AppState
from paylevel.services import StateMigrationError, dump_state, migrate
from paylevel.services.state_commands import apply_remediation

logger = logging.getLogger(__name__)


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    try:
        return date.fromisoformat(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date: {s!r}") from e


def fmt_hours(value: Decimal) -> Decimal:
    """Hours to two decimal places for display."""
    return round_to_cents(value)


def parse_decimal(s: str) -> Decimal:
    """Parse decimal string."""
    try:
        return Decimal(s)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"invalid number: {s!r}") from e


class PayLevelCli:
    """PayLevel Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m paylevel.cli",
            description="PayLevel payroll tools",
        )
        parser.add_argument(
            "--log-level",
            type=str,
            default=None,
            help="Logging level (default: LOG_LEVEL or INFO)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        state_file = argparse.ArgumentParser(add_help=False)
        state_file.add_argument(
            "--state",
            type=Path,
            required=True,
            help="Path to the JSON state file",
        )

        # migrate command
        migrate_cmd = subparsers.add_parser(
            "migrate",
            parents=[state_file],
            help="Upgrade a state file to the current schema",
        )
        migrate_cmd.add_argument(
            "--output",
            type=Path,
            help="Write the migrated state here (default: stdout)",
        )

        # summary command
        summary = subparsers.add_parser(
            "summary",
            parents=[state_file],
            help="Monthly and 14-day dashboard figures",
        )
        summary.add_argument(
            "--date",
            type=parse_date,
            help="Reference date (default: today)",
        )

        # buckets command
        buckets = subparsers.add_parser(
            "buckets",
            parents=[state_file],
            help="Chart buckets for a view mode",
        )
        buckets.add_argument(
            "--mode",
            type=BucketMode,
            choices=list(BucketMode),
            default=BucketMode.RECENT,
            help="View mode (default: recent)",
        )
        buckets.add_argument(
            "--date",
            type=parse_date,
            help="Reference date (default: today)",
        )

        # progress command
        progress_cmd = subparsers.add_parser(
            "progress",
            parents=[state_file],
            help="Promotion progress per job",
        )
        progress_cmd.add_argument(
            "--job-id",
            type=str,
            help="Only this job",
        )

        # reconcile command
        reconcile_cmd = subparsers.add_parser(
            "reconcile",
            parents=[state_file],
            help="Compare a payslip against logged hours",
        )
        reconcile_cmd.add_argument("--job-id", type=str, required=True)
        reconcile_cmd.add_argument("--end-date", type=parse_date, required=True)
        reconcile_cmd.add_argument(
            "--period-days",
            type=int,
            choices=sorted(PAYSLIP_PERIOD_DAYS),
            default=14,
        )
        reconcile_cmd.add_argument("--weekday-hours", type=parse_decimal, default=Decimal("0"))
        reconcile_cmd.add_argument("--weekend-hours", type=parse_decimal, default=Decimal("0"))
        reconcile_cmd.add_argument("--allowance", type=parse_decimal, default=Decimal("0"))
        reconcile_cmd.add_argument(
            "--tax-rate",
            type=parse_decimal,
            help="Override the global tax percentage",
        )
        reconcile_cmd.add_argument(
            "--apply",
            action="store_true",
            help=(
                "Write compensating logs back to the state file; remediations "
                "whose hour type differs from the end date's day type are skipped"
            ),
        )

        # export-csv command
        export = subparsers.add_parser(
            "export-csv",
            parents=[state_file],
            help="Export all logs as CSV",
        )
        export.add_argument(
            "--output",
            type=Path,
            help="Output file path (default: stdout)",
        )

        # wrapup command
        wrapup = subparsers.add_parser(
            "wrapup",
            parents=[state_file],
            help="Year in review",
        )
        wrapup.add_argument(
            "--year",
            type=int,
            help="Year (default: latest year with logged work)",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        logging.basicConfig(
            level=(parsed.log_level or get_settings().log_level).upper(),
            format="%(levelname)s %(name)s: %(message)s",
        )

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "migrate": self._cmd_migrate,
            "summary": self._cmd_summary,
            "buckets": self._cmd_buckets,
            "progress": self._cmd_progress,
            "reconcile": self._cmd_reconcile,
            "export-csv": self._cmd_export_csv,
            "wrapup": self._cmd_wrapup,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except (StateMigrationError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    # =========================================================================
    # Helpers
    # =========================================================================

    def _load(self, path: Path) -> AppState:
        state = migrate(path.read_bytes())
        logger.info("Loaded %s: %d job(s), %d log(s)", path, len(state.jobs), len(state.logs))
        return state

    def _write_state(self, state: AppState, path: Path) -> None:
        path.write_text(json.dumps(dump_state(state), indent=2))

    def _today(self, value: date | None) -> date:
        return value or get_settings().today()

    def _emit(self, text: str, output: Path | None) -> None:
        if output is None:
            print(text)
        else:
            output.write_text(text)
            print(f"Wrote {output}", file=sys.stderr)

    # =========================================================================
    # Commands
    # =========================================================================

    def _cmd_migrate(self, args: argparse.Namespace) -> int:
        """Upgrade a state file."""
        state = self._load(args.state)
        self._emit(json.dumps(dump_state(state), indent=2), args.output)
        return 0

    def _cmd_summary(self, args: argparse.Namespace) -> int:
        """Print dashboard figures."""
        state = self._load(args.state)
        reference = self._today(args.date)
        currency = state.settings.currency
        tax_rate = state.settings.tax_rate

        monthly = monthly_summary(
            state.logs, state.jobs_by_id, reference.year, reference.month, tax_rate
        )
        biweekly = biweekly_summary(state.logs, state.jobs_by_id, reference, tax_rate)
        primary = primary_cadence(state.settings)

        print(f"PayLevel Summary ({reference.isoformat()}, primary: {primary.value})")
        print("=" * 40)
        print(f"\nMonth {monthly.month_key}:")
        print(f"  Hours:    {fmt_hours(monthly.hours)}")
        print(f"  Earnings: {currency} {round_to_cents(monthly.earnings)}")
        print(f"  Net:      {currency} {round_to_cents(monthly.net)}")
        print(f"  Previous ({monthly.previous_month_key}): {fmt_hours(monthly.previous_hours)} h")
        print(f"\n14 days {biweekly.start.isoformat()} to {biweekly.end.isoformat()}:")
        print(f"  Hours:    {fmt_hours(biweekly.hours)}")
        print(f"  Earnings: {currency} {round_to_cents(biweekly.earnings)}")
        print(f"  Net:      {currency} {round_to_cents(biweekly.net)}")
        print(f"  Trend:    {fmt_hours(biweekly.trend):+} h")
        return 0

    def _cmd_buckets(self, args: argparse.Namespace) -> int:
        """Print chart buckets."""
        state = self._load(args.state)
        for bucket in bucketize(state.logs, args.mode, self._today(args.date)):
            marker = "*" if bucket.is_weekend else " "
            print(f"{bucket.key:<10} {bucket.label:>9}{marker} {fmt_hours(bucket.hours)}")
        return 0

    def _cmd_progress(self, args: argparse.Namespace) -> int:
        """Print promotion progress."""
        state = self._load(args.state)
        jobs = state.jobs
        if args.job_id:
            jobs = tuple(j for j in jobs if j.id == args.job_id)
            if not jobs:
                print(f"Job not found: {args.job_id}", file=sys.stderr)
                return 1

        for job in jobs:
            result = progress(job, hours_for_job(state.logs, job.id))
            status = "ELIGIBLE" if result.eligible else f"{fmt_hours(result.remaining_hours)} h to go"
            print(
                f"{job.name}: {fmt_hours(result.total_hours)}/{fmt_hours(result.target_hours)} h "
                f"({result.percent.quantize(Decimal('0.1'))}%) {status}"
            )
        return 0

    def _cmd_reconcile(self, args: argparse.Namespace) -> int:
        """Reconcile a payslip and optionally apply remediations."""
        state = self._load(args.state)
        job = state.get_job(args.job_id)
        if job is None:
            print(f"Job not found: {args.job_id}", file=sys.stderr)
            return 1

        totals = app_totals(state.logs, job, args.end_date, args.period_days)
        result = reconcile(
            totals,
            PayslipInputs(
                weekday_hours=args.weekday_hours,
                weekend_hours=args.weekend_hours,
                allowance=args.allowance,
                tax_rate=args.tax_rate,
            ),
            state.settings.tax_rate,
        )

        currency = state.settings.currency
        print(f"Payslip check for {job.name}: {totals.start} to {totals.end}")
        print("=" * 40)
        print(
            f"  Weekday hours: app {fmt_hours(totals.weekday_hours)}, "
            f"diff {fmt_hours(result.diff_weekday_hours):+}"
        )
        print(
            f"  Weekend hours: app {fmt_hours(totals.weekend_hours)}, "
            f"diff {fmt_hours(result.diff_weekend_hours):+}"
        )
        print(f"  Gross: app {currency} {round_to_cents(result.app_gross)}, "
              f"slip {currency} {round_to_cents(result.slip_gross)}")
        print(f"  Net:   app {currency} {round_to_cents(result.app_net)}, "
              f"slip {currency} {round_to_cents(result.slip_net)}")

        if result.is_reconciled:
            print("\nReconciled.")
            return 0

        for remediation in result.remediations:
            print(
                f"\n  {remediation.kind.value}: {fmt_hours(remediation.hours):+} "
                f"{remediation.hour_type.value} hours"
            )

        if args.apply:
            applied = skipped = 0
            for remediation in result.remediations:
                try:
                    check_remediation_day(args.end_date, remediation)
                except RemediationError as e:
                    print(f"Skipped: {e}", file=sys.stderr)
                    skipped += 1
                    continue
                log = build_compensating_log(job.id, args.end_date, remediation)
                state = apply_remediation(state, log)
                applied += 1
            if applied:
                self._write_state(state, args.state)
            print(f"\nApplied {applied} remediation(s) to {args.state}")
            return 2 if skipped else 0
        return 2

    def _cmd_export_csv(self, args: argparse.Namespace) -> int:
        """Export logs as CSV."""
        state = self._load(args.state)
        self._emit(render_csv(to_export_rows(state.logs, state.jobs_by_id)), args.output)
        return 0

    def _cmd_wrapup(self, args: argparse.Namespace) -> int:
        """Print the year in review."""
        state = self._load(args.state)
        year = args.year or latest_year(state.logs, get_settings().today())
        summary = yearly_summary(state.logs, state.jobs_by_id, year)
        if summary is None:
            print(f"No work logged in {year}")
            return 1

        currency = state.settings.currency
        print(f"{year} Wrap-up")
        print("=" * 40)
        print(f"  Total hours:    {fmt_hours(summary.total_hours)}")
        print(f"  Total earnings: {currency} {round_to_cents(summary.total_earnings)}")
        print(f"  Top job:        {summary.top_job.name} ({fmt_hours(summary.top_job.hours)} h)")
        print(f"  Busiest day:    {summary.busiest_day}")
        print(f"  Best month:     {summary.best_month}")
        for share in summary.job_shares:
            print(f"    - {share.name}: {fmt_hours(share.hours)} h")
        return 0


def main() -> int:
    """CLI entry point."""
    cli = PayLevelCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
