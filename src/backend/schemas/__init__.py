"""
Schemas package for report validation and serialization.
"""
from .reports import (
    DistributionDimension,
    FilterCriteria,
    GeneralReport,
    NeighborhoodReport,
    PerformanceReport,
    UnitReport,
)

__all__ = [
    "DistributionDimension",
    "FilterCriteria",
    "GeneralReport",
    "NeighborhoodReport",
    "PerformanceReport",
    "UnitReport",
]
