"""Report value schemas.

Every report is a frozen model built once per request. Field names are
snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from pydantic import Field

from core.schema_base import ReportSchemaModel
from schemas.reports.filters import FilterCriteria


# =============================================================================
# Building blocks
# =============================================================================


class DistributionItem(ReportSchemaModel):
    """One group of a distribution."""
    key: Optional[str] = Field(None, description="Grouping value; null for the placeholder bucket")
    label: str
    count: int
    percentage: float = Field(..., description="Share of the filtered record count")


class ResolutionHistogram(ReportSchemaModel):
    """Resolution time buckets, in hours since creation."""
    less_than_24h: int = 0
    between_24_and_48h: int = 0
    between_48_and_72h: int = 0
    between_3_and_7_days: int = 0
    more_than_7_days: int = 0

    @property
    def total(self) -> int:
        return (
            self.less_than_24h
            + self.between_24_and_48h
            + self.between_48_and_72h
            + self.between_3_and_7_days
            + self.more_than_7_days
        )


class MonthlyTrendPoint(ReportSchemaModel):
    """Created/resolved counts for one calendar month ("YYYY-MM")."""
    month: str
    created: int
    resolved: int


class OperatorRankingItem(ReportSchemaModel):
    """Workload and resolution figures of one operator."""
    operator_id: UUID
    name: str
    assigned: int
    resolved: int
    resolution_rate_percent: float


class UnitRankingItem(ReportSchemaModel):
    """Workload and resolution figures of one organizational unit."""
    unit_id: Optional[int] = None
    name: str
    total_demands: int
    resolved: int
    resolution_rate_percent: float
    avg_resolution_time_hours: float


class PriorityCompliance(ReportSchemaModel):
    """SLA compliance of one priority level."""
    priority: str
    label: str
    total: int
    within_sla: int
    compliance_rate: float


class SLAMetrics(ReportSchemaModel):
    """SLA compliance breakdown over resolved demands with a deadline."""
    total: int = Field(..., description="Eligible demands: resolved, with resolution time and deadline")
    within_sla: int
    outside_sla: int
    excluded: int = Field(..., description="Resolved demands lacking a resolution time or deadline")
    compliance_rate: float
    by_priority: Tuple[PriorityCompliance, ...] = ()


# =============================================================================
# General report
# =============================================================================


class GeneralSummary(ReportSchemaModel):
    total_demands: int
    avg_resolution_time_hours: float
    sla_compliance_rate: float


class GeneralDistributions(ReportSchemaModel):
    by_status: Tuple[DistributionItem, ...] = ()
    by_priority: Tuple[DistributionItem, ...] = ()
    by_source: Tuple[DistributionItem, ...] = ()
    by_organizational_unit: Tuple[DistributionItem, ...] = ()
    by_category: Tuple[DistributionItem, ...] = ()
    by_neighborhood: Tuple[DistributionItem, ...] = ()


class GeneralReport(ReportSchemaModel):
    generated_at: datetime
    filters: FilterCriteria
    summary: GeneralSummary
    distributions: GeneralDistributions


# =============================================================================
# Unit report
# =============================================================================


class UnitInfo(ReportSchemaModel):
    id: int
    name: str
    acronym: Optional[str] = None


class UnitSummary(ReportSchemaModel):
    total_demands: int
    total_categories: int
    total_operators: int
    avg_resolution_time_hours: float
    sla_compliance_rate: float


class UnitDistributions(ReportSchemaModel):
    by_status: Tuple[DistributionItem, ...] = ()
    by_category: Tuple[DistributionItem, ...] = ()
    by_priority: Tuple[DistributionItem, ...] = ()


class UnitReport(ReportSchemaModel):
    generated_at: datetime
    unit: UnitInfo
    filters: FilterCriteria
    summary: UnitSummary
    distributions: UnitDistributions
    monthly_trend: Tuple[MonthlyTrendPoint, ...] = ()
    top_operators: Tuple[OperatorRankingItem, ...] = ()


# =============================================================================
# Performance report
# =============================================================================


class PerformanceReport(ReportSchemaModel):
    generated_at: datetime
    filters: FilterCriteria
    operator_performance: Tuple[OperatorRankingItem, ...] = ()
    unit_performance: Tuple[UnitRankingItem, ...] = ()
    resolution_times: ResolutionHistogram
    sla_metrics: SLAMetrics


# =============================================================================
# Neighborhood report
# =============================================================================


class NeighborhoodDetail(ReportSchemaModel):
    neighborhood: str
    total_demands: int
    by_status: Tuple[DistributionItem, ...] = ()
    by_category: Tuple[DistributionItem, ...] = ()


class NeighborhoodReport(ReportSchemaModel):
    generated_at: datetime
    filters: FilterCriteria
    total_neighborhoods: int
    details: Tuple[NeighborhoodDetail, ...] = ()
