"""Reports and Analytics schemas."""

from .filters import DistributionDimension, FilterCriteria
from .reports import (
    # Building blocks
    DistributionItem,
    MonthlyTrendPoint,
    OperatorRankingItem,
    PriorityCompliance,
    ResolutionHistogram,
    SLAMetrics,
    UnitRankingItem,

    # General report
    GeneralDistributions,
    GeneralReport,
    GeneralSummary,

    # Unit report
    UnitDistributions,
    UnitInfo,
    UnitReport,
    UnitSummary,

    # Performance and neighborhood reports
    NeighborhoodDetail,
    NeighborhoodReport,
    PerformanceReport,
)

__all__ = [
    "DistributionDimension",
    "DistributionItem",
    "FilterCriteria",
    "GeneralDistributions",
    "GeneralReport",
    "GeneralSummary",
    "MonthlyTrendPoint",
    "NeighborhoodDetail",
    "NeighborhoodReport",
    "OperatorRankingItem",
    "PerformanceReport",
    "PriorityCompliance",
    "ResolutionHistogram",
    "SLAMetrics",
    "UnitDistributions",
    "UnitInfo",
    "UnitRankingItem",
    "UnitReport",
    "UnitSummary",
]
