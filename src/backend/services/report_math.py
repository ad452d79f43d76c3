"""Small numeric helpers shared by the report calculators."""

from datetime import datetime
from typing import Optional

from core.schema_base import as_utc_naive


def percentage(part: int, whole: int) -> float:
    """`part / whole * 100` rounded to one decimal; 0.0 when `whole` is 0."""
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def elapsed_hours(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    """
    Hours from `start` to `end`, or None if either is missing.

    An `end` earlier than `start` counts as zero hours.
    """
    if start is None or end is None:
        return None
    seconds = (as_utc_naive(end) - as_utc_naive(start)).total_seconds()
    return max(seconds, 0.0) / 3600
