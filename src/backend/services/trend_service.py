"""Monthly created/resolved trend over a trailing window."""

import calendar
from collections import Counter
from datetime import datetime
from typing import Iterable, List

from core.schema_base import as_utc_naive
from db.enums import RESOLVED_STATUSES
from db.models import Demand
from schemas.reports.reports import MonthlyTrendPoint


def subtract_months(moment: datetime, months: int) -> datetime:
    """Same day and time `months` calendar months earlier, clamped to the month's last day."""
    index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class TrendAnalyzer:
    """Sparse per-month counts of created and resolved demands."""

    def __init__(self, months: int = 6):
        self.months = months

    def window_start(self, now: datetime) -> datetime:
        return subtract_months(as_utc_naive(now), self.months)

    def monthly_trend(self, records: Iterable[Demand], now: datetime) -> List[MonthlyTrendPoint]:
        """
        Created/resolved counts per "YYYY-MM", oldest month first.

        Only demands created inside the window are counted. `created` goes to
        the creation month; `resolved` goes to the resolution month of
        resolved or closed demands, when that month is inside the window too.
        Months with no activity are omitted.
        """
        start = self.window_start(now)
        created: Counter = Counter()
        resolved: Counter = Counter()

        for demand in records:
            created_at = as_utc_naive(demand.created_at)
            if created_at is None or created_at < start:
                continue
            created[created_at.strftime("%Y-%m")] += 1

            resolved_at = as_utc_naive(demand.resolved_at)
            if demand.status in RESOLVED_STATUSES and resolved_at is not None and resolved_at >= start:
                resolved[resolved_at.strftime("%Y-%m")] += 1

        return [
            MonthlyTrendPoint(month=month, created=created[month], resolved=resolved[month])
            for month in sorted(set(created) | set(resolved))
        ]
