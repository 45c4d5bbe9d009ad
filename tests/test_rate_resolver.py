"""Tests for the day-type rate resolver."""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import given, strategies as st

from paylevel.calculators.rate_resolver import (
    day_of_week,
    index_jobs,
    is_weekend,
    next_value_of,
    resolve_next_rate,
    resolve_rate,
    value_of,
)
from paylevel.models import Job

from .conftest import FRIDAY, SATURDAY, SUNDAY, TUESDAY, make_log


class TestDayType:
    """Weekend detection."""

    def test_sunday_is_day_zero(self):
        assert day_of_week(SUNDAY) == 0
        assert day_of_week(SATURDAY) == 6

    def test_weekend_days(self):
        assert is_weekend(SATURDAY)
        assert is_weekend(SUNDAY)
        assert not is_weekend(FRIDAY)
        assert not is_weekend(TUESDAY)
        assert not is_weekend(SUNDAY + timedelta(days=1))

    @given(st.dates())
    def test_weekend_matches_calendar(self, day: date):
        """Saturday and Sunday, nothing else."""
        assert is_weekend(day) == (day.weekday() >= 5)


class TestResolveRate:
    """Rate selection for a job on a day."""

    def test_weekday_rate(self, swim_job):
        quote = resolve_rate(swim_job, TUESDAY)
        assert quote.regular == Decimal("60")
        assert quote.is_weekend is False

    def test_weekend_rate(self, swim_job):
        quote = resolve_rate(swim_job, SATURDAY)
        assert quote.regular == Decimal("70")
        assert quote.is_weekend is True

    def test_next_rates(self, swim_job):
        assert resolve_next_rate(swim_job, TUESDAY).regular == Decimal("80")
        assert resolve_next_rate(swim_job, SUNDAY).regular == Decimal("90")

    @given(
        day=st.dates(),
        weekday_rate=st.decimals(min_value=0, max_value=500, places=2),
        weekend_rate=st.decimals(min_value=0, max_value=500, places=2),
    )
    def test_rate_is_deterministic(self, day, weekday_rate, weekend_rate):
        """Same job and day always give the same rate."""
        job = Job(id="j", hourly_rate=weekday_rate, weekend_hourly_rate=weekend_rate)
        first = resolve_rate(job, day)
        assert first == resolve_rate(job, day)
        assert first.regular == (weekend_rate if is_weekend(day) else weekday_rate)


class TestValueOf:
    """Log valuation."""

    def test_saturday_shift(self, swim_job):
        log = make_log(swim_job.id, SATURDAY, "5")
        assert value_of(log, index_jobs([swim_job])) == Decimal("350")

    def test_tuesday_shift(self, swim_job):
        log = make_log(swim_job.id, TUESDAY, "5")
        assert value_of(log, index_jobs([swim_job])) == Decimal("300")

    def test_dangling_job_is_worth_nothing(self, swim_job):
        log = make_log("job-gone", TUESDAY, "5")
        assert value_of(log, index_jobs([swim_job])) == Decimal("0")
        assert next_value_of(log, index_jobs([swim_job])) == Decimal("0")

    def test_log_without_job_is_worth_nothing(self, swim_job):
        log = make_log(None, TUESDAY, "5")
        assert value_of(log, index_jobs([swim_job])) == Decimal("0")

    def test_next_value(self, swim_job):
        log = make_log(swim_job.id, SATURDAY, "2.5")
        assert next_value_of(log, index_jobs([swim_job])) == Decimal("225")

    def test_rate_edit_applies_to_existing_logs(self, swim_job):
        """Earnings follow the job's current rates."""
        log = make_log(swim_job.id, TUESDAY, "2")
        raised = Job(id=swim_job.id, hourly_rate=Decimal("65"))
        assert value_of(log, index_jobs([swim_job])) == Decimal("120")
        assert value_of(log, index_jobs([raised])) == Decimal("130")
