"""
Unit tests for SLA deadline arithmetic and compliance.

Tests cover:
- Business-day deadline counting (weekend skipping, end-of-day time)
- Timezone handling of aware and naive inputs
- Rejection of invalid lead times
- Expiry helpers
- Compliance rate eligibility and the compliance breakdown
"""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from core.config import ReportSettings
from core.exceptions import InvalidArgument
from db.enums import DemandStatus, Priority
from services.sla_service import (
    SLAComplianceCalculator,
    SLADeadlineCalculator,
    hours_until_deadline,
    is_sla_expired,
)
from tests.factories import DemandFactory

FORTALEZA = ZoneInfo("America/Fortaleza")


@pytest.fixture
def calculator() -> SLADeadlineCalculator:
    return SLADeadlineCalculator(timezone="America/Fortaleza", end_of_day_hour=18)


class TestDeadline:
    """Tests for SLADeadlineCalculator.deadline()."""

    def test_friday_plus_one_is_monday_evening(self, calculator):
        """A Friday demand with one business day is due Monday 18:00."""
        friday = datetime(2025, 3, 7, 10, 0)
        assert calculator.deadline(friday, 1) == datetime(2025, 3, 10, 18, 0)

    def test_friday_evening_plus_one_is_monday(self, calculator):
        """Creation time of day does not matter, even after the end of day."""
        friday_evening = datetime(2025, 3, 7, 21, 30)
        assert calculator.deadline(friday_evening, 1) == datetime(2025, 3, 10, 18, 0)

    def test_saturday_plus_one_is_monday(self, calculator):
        saturday = datetime(2025, 3, 8, 9, 0)
        assert calculator.deadline(saturday, 1) == datetime(2025, 3, 10, 18, 0)

    def test_monday_plus_five_is_next_monday(self, calculator):
        monday = datetime(2025, 3, 10, 8, 0)
        assert calculator.deadline(monday, 5) == datetime(2025, 3, 17, 18, 0)

    def test_wednesday_plus_ten_spans_two_weekends(self, calculator):
        wednesday = datetime(2025, 3, 12, 14, 0)
        assert calculator.deadline(wednesday, 10) == datetime(2025, 3, 26, 18, 0)

    def test_time_is_exactly_end_of_day(self, calculator):
        """Seconds and microseconds of the input are discarded."""
        created = datetime(2025, 3, 11, 9, 41, 17, 123456)
        due = calculator.deadline(created, 3)
        assert (due.hour, due.minute, due.second, due.microsecond) == (18, 0, 0, 0)

    def test_deadline_always_on_weekday_and_after_creation(self, calculator):
        """Every deadline falls Monday-Friday and strictly after creation."""
        start = datetime(2025, 3, 1, 7, 0)
        for offset in range(14):
            created = start + timedelta(days=offset, hours=offset)
            for lead_days in (1, 2, 3, 7, 15):
                due = calculator.deadline(created, lead_days)
                assert due.weekday() < 5
                assert due > created

    def test_aware_input_is_converted_to_local_zone(self, calculator):
        """13:00 UTC on Friday is 10:00 in Fortaleza; result is aware local time."""
        created = datetime(2025, 3, 7, 13, 0, tzinfo=timezone.utc)
        due = calculator.deadline(created, 1)
        assert due == datetime(2025, 3, 10, 18, 0, tzinfo=FORTALEZA)
        assert due.tzinfo is not None

    def test_aware_input_crossing_local_midnight(self, calculator):
        """02:00 UTC Saturday is still Friday evening in Fortaleza."""
        created = datetime(2025, 3, 8, 2, 0, tzinfo=timezone.utc)
        assert calculator.deadline(created, 1) == datetime(2025, 3, 10, 18, 0, tzinfo=FORTALEZA)

    def test_custom_end_of_day_hour(self):
        calc = SLADeadlineCalculator(timezone="UTC", end_of_day_hour=17)
        assert calc.deadline(datetime(2025, 3, 7, 10, 0), 1) == datetime(2025, 3, 10, 17, 0)

    def test_from_settings_uses_configured_zone_and_hour(self):
        """Thursday 23:00 in Fortaleza is already Friday in UTC."""
        created = datetime(2025, 3, 7, 2, 0, tzinfo=timezone.utc)

        configured = SLADeadlineCalculator.from_settings(
            ReportSettings(timezone="UTC", sla_end_of_day_hour=9)
        )
        default = SLADeadlineCalculator.from_settings(
            ReportSettings(timezone="America/Fortaleza", sla_end_of_day_hour=18)
        )

        assert configured.deadline(created, 1) == datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
        assert default.deadline(created, 1) == datetime(2025, 3, 7, 18, 0, tzinfo=FORTALEZA)

    @pytest.mark.parametrize("lead_days", [0, -1, 1.5, "2", True, None])
    def test_invalid_lead_days_rejected(self, calculator, lead_days):
        with pytest.raises(InvalidArgument) as exc_info:
            calculator.deadline(datetime(2025, 3, 7, 10, 0), lead_days)
        assert exc_info.value.field == "lead_days"

    def test_invalid_lead_days_is_value_error(self, calculator):
        with pytest.raises(ValueError):
            calculator.deadline(datetime(2025, 3, 7, 10, 0), 0)


class TestExpiryHelpers:
    """Tests for is_sla_expired() and hours_until_deadline()."""

    def test_not_expired_before_deadline(self):
        deadline = datetime(2025, 3, 10, 18, 0)
        assert is_sla_expired(deadline, datetime(2025, 3, 10, 17, 59)) is False

    def test_not_expired_at_deadline(self):
        deadline = datetime(2025, 3, 10, 18, 0)
        assert is_sla_expired(deadline, deadline) is False

    def test_expired_after_deadline(self):
        deadline = datetime(2025, 3, 10, 18, 0)
        assert is_sla_expired(deadline, datetime(2025, 3, 10, 18, 1)) is True

    def test_missing_deadline_never_expires(self):
        assert is_sla_expired(None, datetime(2030, 1, 1)) is False

    def test_aware_now_compared_in_utc(self):
        deadline = datetime(2025, 3, 10, 18, 0)
        now = datetime(2025, 3, 10, 16, 0, tzinfo=FORTALEZA)  # 19:00 UTC
        assert is_sla_expired(deadline, now) is True

    def test_hours_until_deadline_floors(self):
        deadline = datetime(2025, 3, 10, 18, 0)
        assert hours_until_deadline(deadline, datetime(2025, 3, 10, 12, 30)) == 5

    def test_hours_until_deadline_negative_when_overdue(self):
        deadline = datetime(2025, 3, 10, 18, 0)
        assert hours_until_deadline(deadline, datetime(2025, 3, 10, 19, 30)) == -2


class TestComplianceRate:
    """Tests for SLAComplianceCalculator.compliance_rate()."""

    def test_empty_is_zero(self):
        assert SLAComplianceCalculator.compliance_rate([]) == 0.0

    def test_no_eligible_records_is_zero(self):
        records = [
            DemandFactory.create(status=DemandStatus.OPEN, sla_deadline=datetime(2025, 3, 20)),
            DemandFactory.resolved(hours=4),  # no deadline
        ]
        assert SLAComplianceCalculator.compliance_rate(records) == 0.0

    def test_resolution_at_deadline_is_compliant(self):
        deadline = datetime(2025, 3, 12, 18, 0)
        demand = DemandFactory.create(
            status=DemandStatus.RESOLVED, resolved_at=deadline, sla_deadline=deadline
        )
        assert SLAComplianceCalculator.compliance_rate([demand]) == 100.0

    def test_rate_over_eligible_only(self):
        deadline = datetime(2025, 3, 12, 18, 0)
        records = [
            DemandFactory.create(
                status=DemandStatus.RESOLVED,
                resolved_at=deadline - timedelta(hours=1),
                sla_deadline=deadline,
            ),
            DemandFactory.create(
                status=DemandStatus.CLOSED,
                resolved_at=deadline - timedelta(days=1),
                sla_deadline=deadline,
            ),
            DemandFactory.create(
                status=DemandStatus.RESOLVED,
                resolved_at=deadline + timedelta(seconds=1),
                sla_deadline=deadline,
            ),
            # Excluded: not resolved, even though it has both timestamps
            DemandFactory.create(
                status=DemandStatus.IN_PROGRESS,
                resolved_at=deadline + timedelta(days=3),
                sla_deadline=deadline,
            ),
            # Excluded: resolved without deadline
            DemandFactory.resolved(hours=200),
        ]
        assert SLAComplianceCalculator.compliance_rate(records) == 66.7

    def test_rate_bounds(self):
        deadline = datetime(2025, 3, 12, 18, 0)
        late = [
            DemandFactory.create(
                status=DemandStatus.RESOLVED,
                resolved_at=deadline + timedelta(hours=1),
                sla_deadline=deadline,
            )
            for _ in range(3)
        ]
        assert SLAComplianceCalculator.compliance_rate(late) == 0.0


class TestComplianceMetrics:
    """Tests for SLAComplianceCalculator.compliance_metrics()."""

    def test_breakdown(self):
        deadline = datetime(2025, 3, 12, 18, 0)
        on_time = deadline - timedelta(hours=2)
        late = deadline + timedelta(hours=2)
        records = [
            DemandFactory.create(
                status=DemandStatus.RESOLVED, priority=Priority.HIGH,
                resolved_at=on_time, sla_deadline=deadline,
            ),
            DemandFactory.create(
                status=DemandStatus.RESOLVED, priority=Priority.HIGH,
                resolved_at=late, sla_deadline=deadline,
            ),
            DemandFactory.create(
                status=DemandStatus.CLOSED, priority=Priority.LOW,
                resolved_at=on_time, sla_deadline=deadline,
            ),
            DemandFactory.resolved(hours=5),  # excluded, no deadline
            DemandFactory.create(status=DemandStatus.OPEN, sla_deadline=deadline),
        ]

        metrics = SLAComplianceCalculator.compliance_metrics(records)

        assert metrics.total == 3
        assert metrics.within_sla == 2
        assert metrics.outside_sla == 1
        assert metrics.excluded == 1
        assert metrics.compliance_rate == 66.7
        assert [p.priority for p in metrics.by_priority] == ["LOW", "HIGH"]
        high = metrics.by_priority[1]
        assert (high.label, high.total, high.within_sla, high.compliance_rate) == ("High", 2, 1, 50.0)

    def test_rate_matches_compliance_rate(self):
        deadline = datetime(2025, 3, 12, 18, 0)
        records = [
            DemandFactory.create(
                status=DemandStatus.RESOLVED,
                resolved_at=deadline + timedelta(hours=h),
                sla_deadline=deadline,
            )
            for h in (-5, -1, 0, 1, 7)
        ]
        metrics = SLAComplianceCalculator.compliance_metrics(records)
        assert metrics.compliance_rate == SLAComplianceCalculator.compliance_rate(records) == 60.0

    def test_empty(self):
        metrics = SLAComplianceCalculator.compliance_metrics([])
        assert metrics.total == 0
        assert metrics.compliance_rate == 0.0
        assert metrics.by_priority == ()
