"""
SLA arithmetic and compliance.

Deadlines are counted in business days (Monday to Friday, no holiday
calendar) and always expire at the configured end-of-day hour, local time.
Compliance is measured only over resolved demands that carry both a
resolution time and a deadline.
"""

import logging
import math
from collections import defaultdict
from datetime import datetime, time, timedelta
from typing import Dict, Iterable, Optional
from zoneinfo import ZoneInfo

from core.config import ReportSettings
from core.exceptions import InvalidArgument
from core.schema_base import as_utc_naive
from db.enums import RESOLVED_STATUSES, Priority
from db.models import Demand, utc_now
from schemas.reports.reports import PriorityCompliance, SLAMetrics
from services.report_math import percentage

logger = logging.getLogger(__name__)


class SLADeadlineCalculator:
    """Computes SLA deadlines from a creation time and a lead time in business days."""

    def __init__(self, timezone: str = "America/Fortaleza", end_of_day_hour: int = 18):
        self.zone = ZoneInfo(timezone)
        self.end_of_day = time(hour=end_of_day_hour)

    @classmethod
    def from_settings(cls, report_settings: ReportSettings) -> "SLADeadlineCalculator":
        """Calculator for the configured local zone and end-of-day hour."""
        return cls(
            timezone=report_settings.timezone,
            end_of_day_hour=report_settings.sla_end_of_day_hour,
        )

    def deadline(self, created_at: datetime, lead_days: int) -> datetime:
        """
        Deadline for a demand created at `created_at`.

        Walks forward one calendar day at a time, counting only days that
        land on Monday to Friday, and stops after `lead_days` of them. The
        time of day is then set to the end-of-day hour; the original time is
        discarded. A demand created on Friday evening with one day of lead
        time is due Monday at the end-of-day hour.

        An aware `created_at` is converted to the local zone first and the
        result is aware in that zone. A naive value is taken as local wall
        time and the result is naive.

        Raises:
            InvalidArgument: If lead_days is not a positive integer
        """
        if isinstance(lead_days, bool) or not isinstance(lead_days, int) or lead_days <= 0:
            raise InvalidArgument(
                f"SLA lead time must be a positive number of business days, got {lead_days!r}",
                field="lead_days",
            )

        local = created_at.astimezone(self.zone) if created_at.tzinfo else created_at

        day = local.date()
        remaining = lead_days
        while remaining > 0:
            day += timedelta(days=1)
            if day.weekday() < 5:
                remaining -= 1

        due = datetime.combine(day, self.end_of_day)
        if created_at.tzinfo:
            due = due.replace(tzinfo=self.zone)
        return due


def is_sla_expired(deadline: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True once `now` is past the deadline. A missing deadline never expires."""
    if deadline is None:
        return False
    now = as_utc_naive(now) if now is not None else utc_now()
    return now > as_utc_naive(deadline)


def hours_until_deadline(deadline: datetime, now: Optional[datetime] = None) -> int:
    """Whole hours left until the deadline, negative once it has passed."""
    now = as_utc_naive(now) if now is not None else utc_now()
    seconds = (as_utc_naive(deadline) - now).total_seconds()
    return math.floor(seconds / 3600)


class SLAComplianceCalculator:
    """Compliance rate and breakdown over a set of demands."""

    @staticmethod
    def is_eligible(demand: Demand) -> bool:
        return (
            demand.status in RESOLVED_STATUSES
            and demand.resolved_at is not None
            and demand.sla_deadline is not None
        )

    @staticmethod
    def within_sla(demand: Demand) -> bool:
        # Resolving exactly at the deadline is compliant.
        return as_utc_naive(demand.resolved_at) <= as_utc_naive(demand.sla_deadline)

    @classmethod
    def compliance_rate(cls, records: Iterable[Demand]) -> float:
        """
        Percentage of eligible demands resolved on time, one decimal.

        Returns 0.0 when no demand is eligible.
        """
        eligible = 0
        on_time = 0
        for demand in records:
            if cls.is_eligible(demand):
                eligible += 1
                if cls.within_sla(demand):
                    on_time += 1
        return percentage(on_time, eligible)

    @classmethod
    def compliance_metrics(cls, records: Iterable[Demand]) -> SLAMetrics:
        """Compliance breakdown: totals, exclusions and per-priority rates."""
        total = 0
        within = 0
        excluded = 0
        per_priority: Dict[Priority, list] = defaultdict(lambda: [0, 0])

        for demand in records:
            if demand.status not in RESOLVED_STATUSES:
                continue
            if demand.resolved_at is None or demand.sla_deadline is None:
                excluded += 1
                continue

            total += 1
            counts = per_priority[Priority(demand.priority)]
            counts[0] += 1
            if cls.within_sla(demand):
                within += 1
                counts[1] += 1

        by_priority = [
            PriorityCompliance(
                priority=priority.value,
                label=priority.label,
                total=per_priority[priority][0],
                within_sla=per_priority[priority][1],
                compliance_rate=percentage(per_priority[priority][1], per_priority[priority][0]),
            )
            for priority in Priority
            if priority in per_priority
        ]

        if excluded:
            logger.debug(f"{excluded} resolved demand(s) excluded from SLA compliance")

        return SLAMetrics(
            total=total,
            within_sla=within,
            outside_sla=total - within,
            excluded=excluded,
            compliance_rate=percentage(within, total),
            by_priority=by_priority,
        )
