"""
Report computation services.
"""
from .distribution_service import DistributionAggregator
from .performance_service import PerformanceRanker
from .reporting_service import ReportingService
from .resolution_service import ResolutionStatistics
from .sla_service import SLAComplianceCalculator, SLADeadlineCalculator
from .trend_service import TrendAnalyzer

__all__ = [
    "DistributionAggregator",
    "PerformanceRanker",
    "ReportingService",
    "ResolutionStatistics",
    "SLAComplianceCalculator",
    "SLADeadlineCalculator",
    "TrendAnalyzer",
]
