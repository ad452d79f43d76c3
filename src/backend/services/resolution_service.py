"""Resolution time statistics."""

from datetime import datetime
from typing import Iterable, List

from core.schema_base import as_utc_naive
from db.models import Demand
from schemas.reports.reports import ResolutionHistogram
from services.report_math import elapsed_hours


class ResolutionStatistics:
    """
    Mean resolution time and the resolution time histogram.

    A demand is eligible when it has both a creation and a resolution time.
    The mean is taken over at most `sample_size` eligible demands, the most
    recently resolved ones.
    """

    def __init__(self, sample_size: int = 1000):
        self.sample_size = sample_size

    @staticmethod
    def eligible(records: Iterable[Demand]) -> List[Demand]:
        return [d for d in records if d.created_at is not None and d.resolved_at is not None]

    def average_resolution_hours(self, records: Iterable[Demand]) -> float:
        """Mean hours from creation to resolution, one decimal; 0.0 if nothing is eligible."""
        eligible = self.eligible(records)
        if not eligible:
            return 0.0

        eligible.sort(key=lambda d: as_utc_naive(d.resolved_at) or datetime.min, reverse=True)
        sample = eligible[: self.sample_size]
        total_hours = sum(elapsed_hours(d.created_at, d.resolved_at) for d in sample)
        return round(total_hours / len(sample), 1)

    @classmethod
    def bucket_histogram(cls, records: Iterable[Demand]) -> ResolutionHistogram:
        """Count eligible demands into the <24h, 24-48h, 48-72h, 3-7 days and >7 days buckets."""
        buckets = [0, 0, 0, 0, 0]
        for demand in cls.eligible(records):
            hours = elapsed_hours(demand.created_at, demand.resolved_at)
            if hours < 24:
                buckets[0] += 1
            elif hours < 48:
                buckets[1] += 1
            elif hours < 72:
                buckets[2] += 1
            elif hours < 168:
                buckets[3] += 1
            else:
                buckets[4] += 1

        return ResolutionHistogram(
            less_than_24h=buckets[0],
            between_24_and_48h=buckets[1],
            between_48_and_72h=buckets[2],
            between_3_and_7_days=buckets[3],
            more_than_7_days=buckets[4],
        )
