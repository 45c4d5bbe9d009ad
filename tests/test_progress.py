"""Tests for promotion progress tracking."""

from decimal import Decimal

from paylevel.calculators.progress import hours_for_job, potential_value, progress, promote
from paylevel.calculators.rate_resolver import index_jobs, value_of
from paylevel.models import Job

from .conftest import SATURDAY, TUESDAY, make_log


class TestProgress:
    """Progress toward the promotion threshold."""

    def test_partial_progress(self, swim_job):
        result = progress(swim_job, Decimal("25"))
        assert result.percent == Decimal("25")
        assert result.eligible is False
        assert result.remaining_hours == Decimal("75")

    def test_percent_is_clamped(self, swim_job):
        result = progress(swim_job, Decimal("250"))
        assert result.percent == Decimal("100")
        assert result.remaining_hours == Decimal("0")

    def test_negative_hours_clamp_to_zero(self, swim_job):
        assert progress(swim_job, Decimal("-5")).percent == Decimal("0")

    def test_eligible_at_threshold(self, swim_job):
        assert progress(swim_job, Decimal("100")).eligible is True

    def test_zero_target_gives_zero_percent(self, cafe_job):
        result = progress(cafe_job, Decimal("40"))
        assert result.percent == Decimal("0")

    def test_not_eligible_when_next_rate_is_not_higher(self, cafe_job):
        """Equal next rate never offers a promotion."""
        assert progress(cafe_job, Decimal("40")).eligible is False

    def test_hours_for_job(self, sample_logs, swim_job):
        assert hours_for_job(sample_logs, swim_job.id) == Decimal("10")
        assert hours_for_job(sample_logs, "nobody") == Decimal("0")


class TestPromote:
    """Tier change."""

    def test_promote_copies_next_rates(self, swim_job):
        promoted = promote(swim_job)
        assert promoted.hourly_rate == Decimal("80")
        assert promoted.weekend_hourly_rate == Decimal("90")
        assert promoted.next_hourly_rate == Decimal("80")
        assert promoted.next_weekend_hourly_rate == Decimal("90")
        assert swim_job.hourly_rate == Decimal("60")

    def test_promoted_job_is_no_longer_eligible(self, swim_job):
        promoted = promote(swim_job)
        assert progress(promoted, Decimal("150")).eligible is False

    def test_promotion_revalues_existing_logs(self, swim_job):
        logs = [make_log(swim_job.id, TUESDAY, "5")]
        assert value_of(logs[0], index_jobs([swim_job])) == Decimal("300")
        promoted = promote(swim_job)
        assert value_of(logs[0], index_jobs([promoted])) == Decimal("400")


class TestPotentialValue:
    """Earnings at next-tier rates."""

    def test_potential_value(self, swim_job):
        logs = [make_log(swim_job.id, SATURDAY, "5"), make_log(swim_job.id, TUESDAY, "5")]
        assert potential_value(logs, index_jobs([swim_job])) == Decimal("850")

    def test_dangling_logs_add_nothing(self):
        job = Job(id="j")
        logs = [make_log("other", TUESDAY, "5")]
        assert potential_value(logs, index_jobs([job])) == Decimal("0")
