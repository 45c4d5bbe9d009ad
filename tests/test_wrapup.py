"""Tests for the yearly wrap-up."""

from datetime import date
from decimal import Decimal

from paylevel.calculators.rate_resolver import index_jobs
from paylevel.calculators.wrapup import latest_year, yearly_summary

from .conftest import make_log


class TestYearlySummary:
    """Year in review."""

    def test_summary(self, sample_logs, swim_job, cafe_job):
        summary = yearly_summary(sample_logs, index_jobs([swim_job, cafe_job]), 2024)
        assert summary.year == 2024
        assert summary.total_hours == Decimal("17")
        assert summary.total_earnings == Decimal("850")
        assert summary.top_job.job_id == swim_job.id
        assert summary.top_job.hours == Decimal("10")
        assert summary.best_month == "Jun"
        assert [s.job_id for s in summary.job_shares] == [swim_job.id, cafe_job.id]

    def test_busiest_day_tie_goes_to_later_day(self, sample_logs, swim_job, cafe_job):
        """Saturday and Tuesday both have 5 hours."""
        summary = yearly_summary(sample_logs, index_jobs([swim_job, cafe_job]), 2024)
        assert summary.busiest_day == "Saturday"

    def test_best_month_by_earnings(self, swim_job):
        logs = [
            make_log(swim_job.id, date(2024, 3, 5), "10", log_id="mar"),
            make_log(swim_job.id, date(2024, 4, 6), "9", log_id="apr"),
        ]
        summary = yearly_summary(logs, index_jobs([swim_job]), 2024)
        # 10h weekday at 60 < 9h Saturday at 70
        assert summary.best_month == "Apr"

    def test_empty_year(self, sample_logs, swim_job):
        assert yearly_summary(sample_logs, index_jobs([swim_job]), 2019) is None

    def test_only_dangling_logs(self, swim_job):
        logs = [make_log("gone", date(2024, 3, 5), "2")]
        assert yearly_summary(logs, index_jobs([swim_job]), 2024) is None

    def test_latest_year(self, sample_logs):
        assert latest_year(sample_logs, date(2026, 1, 1)) == 2024
        assert latest_year([], date(2026, 1, 1)) == 2026
