"""
Reporting service: assembles the general, unit, performance and neighborhood
reports and the tabular export.

Every report fans its independent reads and aggregations out concurrently
and joins them before building one immutable report value. If any part
fails the whole report fails; no partial report is returned.
"""

import logging
import time
from datetime import datetime
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

from core.async_utils import gather_all, run_blocking
from core.config import ReportSettings, settings
from core.logging_config import ReportLogger
from db.models import utc_now
from repositories.demand_repository import DemandReader
from repositories.name_lookup import ReferenceLookups
from schemas.reports.filters import DistributionDimension, FilterCriteria
from schemas.reports.reports import (
    GeneralDistributions,
    GeneralReport,
    GeneralSummary,
    NeighborhoodDetail,
    NeighborhoodReport,
    PerformanceReport,
    UnitDistributions,
    UnitInfo,
    UnitReport,
    UnitSummary,
)
from services.csv_export import build_rows, render_csv
from services.distribution_service import DistributionAggregator
from services.performance_service import PerformanceRanker
from services.resolution_service import ResolutionStatistics
from services.sla_service import SLAComplianceCalculator, SLADeadlineCalculator
from services.trend_service import TrendAnalyzer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReportingService:
    """Service for generating reports and analytics over demands."""

    def __init__(
        self,
        repository: DemandReader,
        lookups: ReferenceLookups,
        report_settings: Optional[ReportSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.lookups = lookups
        self.settings = report_settings or settings.reports
        self.clock = clock

        self.distributions = DistributionAggregator(
            lookups,
            unknown_label=self.settings.unknown_label,
            unspecified_label=self.settings.unspecified_label,
        )
        self.resolution = ResolutionStatistics(self.settings.resolution_sample_size)
        self.sla = SLADeadlineCalculator.from_settings(self.settings)
        self.trends = TrendAnalyzer(self.settings.trend_months)
        self.ranker = PerformanceRanker(
            lookups, self.resolution, unknown_label=self.settings.unknown_label
        )
        self.report_logger = ReportLogger()

    async def _tracked(
        self,
        report: str,
        criteria: FilterCriteria,
        build: Callable[[], Awaitable[Tuple[T, int]]],
    ) -> T:
        self.report_logger.report_started(report, criteria.describe())
        started = time.perf_counter()
        try:
            result, record_count = await build()
        except Exception as exc:
            self.report_logger.report_failed(report, exc)
            raise
        self.report_logger.report_generated(
            report, (time.perf_counter() - started) * 1000, record_count
        )
        return result

    # =========================================================================
    # General report
    # =========================================================================

    async def generate_general_report(
        self, filters: Optional[FilterCriteria] = None
    ) -> GeneralReport:
        """Totals, distributions, mean resolution time and SLA compliance."""
        criteria = filters or FilterCriteria()
        return await self._tracked(
            "general", criteria, lambda: self._build_general_report(criteria)
        )

    async def _build_general_report(
        self, criteria: FilterCriteria
    ) -> Tuple[GeneralReport, int]:
        total, records, resolved_sample = await gather_all(
            self.repository.count_demands(criteria),
            self.repository.list_demands(criteria),
            self.repository.list_resolved_demands(
                criteria, limit=self.settings.resolution_sample_size
            ),
        )

        (
            by_status,
            by_priority,
            by_source,
            by_unit,
            by_category,
            by_neighborhood,
        ) = await gather_all(
            self.distributions.distribution(records, DistributionDimension.STATUS),
            self.distributions.distribution(records, DistributionDimension.PRIORITY),
            self.distributions.distribution(records, DistributionDimension.SOURCE),
            self.distributions.distribution(records, DistributionDimension.ORGANIZATIONAL_UNIT),
            self.distributions.distribution(
                records,
                DistributionDimension.CATEGORY,
                limit=self.settings.category_distribution_limit,
            ),
            self.distributions.distribution(
                records,
                DistributionDimension.NEIGHBORHOOD,
                limit=self.settings.neighborhood_distribution_limit,
            ),
        )

        report = GeneralReport(
            generated_at=self.clock(),
            filters=criteria,
            summary=GeneralSummary(
                total_demands=total,
                avg_resolution_time_hours=self.resolution.average_resolution_hours(
                    resolved_sample
                ),
                sla_compliance_rate=SLAComplianceCalculator.compliance_rate(records),
            ),
            distributions=GeneralDistributions(
                by_status=by_status,
                by_priority=by_priority,
                by_source=by_source,
                by_organizational_unit=by_unit,
                by_category=by_category,
                by_neighborhood=by_neighborhood,
            ),
        )
        return report, len(records)

    # =========================================================================
    # Organizational unit report
    # =========================================================================

    async def generate_unit_report(
        self, unit_id: int, filters: Optional[FilterCriteria] = None
    ) -> UnitReport:
        """Report restricted to one organizational unit, with trend and top operators."""
        criteria = (filters or FilterCriteria()).for_unit(unit_id)
        return await self._tracked(
            f"unit:{unit_id}", criteria, lambda: self._build_unit_report(unit_id, criteria)
        )

    async def _build_unit_report(
        self, unit_id: int, criteria: FilterCriteria
    ) -> Tuple[UnitReport, int]:
        now = self.clock()
        trend_criteria = criteria.created_since(self.trends.window_start(now))

        (
            unit,
            total,
            total_categories,
            total_operators,
            records,
            resolved_sample,
            trend_records,
        ) = await gather_all(
            self.repository.get_organizational_unit(unit_id),
            self.repository.count_demands(criteria),
            self.repository.count_unit_categories(unit_id),
            self.repository.count_active_unit_operators(unit_id),
            self.repository.list_demands(criteria),
            self.repository.list_resolved_demands(
                criteria, limit=self.settings.resolution_sample_size
            ),
            self.repository.list_demands(trend_criteria),
        )

        by_status, by_category, by_priority, top_operators = await gather_all(
            self.distributions.distribution(records, DistributionDimension.STATUS),
            self.distributions.distribution(records, DistributionDimension.CATEGORY),
            self.distributions.distribution(records, DistributionDimension.PRIORITY),
            self.ranker.top_operators(records, self.settings.unit_top_operators_limit),
        )

        if unit is None:
            logger.debug(f"Organizational unit {unit_id} not found; reporting as unknown")
            unit_info = UnitInfo(id=unit_id, name=self.settings.unknown_label)
        else:
            unit_info = UnitInfo(id=unit.id, name=unit.name, acronym=unit.acronym)

        report = UnitReport(
            generated_at=now,
            unit=unit_info,
            filters=criteria,
            summary=UnitSummary(
                total_demands=total,
                total_categories=total_categories,
                total_operators=total_operators,
                avg_resolution_time_hours=self.resolution.average_resolution_hours(
                    resolved_sample
                ),
                sla_compliance_rate=SLAComplianceCalculator.compliance_rate(records),
            ),
            distributions=UnitDistributions(
                by_status=by_status,
                by_category=by_category,
                by_priority=by_priority,
            ),
            monthly_trend=self.trends.monthly_trend(trend_records, now),
            top_operators=top_operators,
        )
        return report, len(records)

    # =========================================================================
    # Performance report
    # =========================================================================

    async def generate_performance_report(
        self, filters: Optional[FilterCriteria] = None
    ) -> PerformanceReport:
        """Operator and unit rankings, resolution histogram and SLA breakdown."""
        criteria = filters or FilterCriteria()
        return await self._tracked(
            "performance", criteria, lambda: self._build_performance_report(criteria)
        )

    async def _build_performance_report(
        self, criteria: FilterCriteria
    ) -> Tuple[PerformanceReport, int]:
        records, resolved = await gather_all(
            self.repository.list_demands(criteria),
            self.repository.list_resolved_demands(criteria),
        )

        limit = self.settings.performance_ranking_limit
        operator_performance, unit_performance = await gather_all(
            self.ranker.top_operators(records, limit),
            self.ranker.top_organizational_units(records, limit),
        )

        report = PerformanceReport(
            generated_at=self.clock(),
            filters=criteria,
            operator_performance=operator_performance,
            unit_performance=unit_performance,
            resolution_times=ResolutionStatistics.bucket_histogram(resolved),
            sla_metrics=SLAComplianceCalculator.compliance_metrics(records),
        )
        return report, len(records)

    # =========================================================================
    # Neighborhood report
    # =========================================================================

    async def generate_neighborhood_report(
        self, filters: Optional[FilterCriteria] = None
    ) -> NeighborhoodReport:
        """Distinct neighborhood count and a drill-down of the busiest ones."""
        criteria = filters or FilterCriteria()
        return await self._tracked(
            "neighborhood", criteria, lambda: self._build_neighborhood_report(criteria)
        )

    async def _build_neighborhood_report(
        self, criteria: FilterCriteria
    ) -> Tuple[NeighborhoodReport, int]:
        records = await self.repository.list_demands(criteria)

        by_neighborhood = [
            item
            for item in await self.distributions.distribution(
                records, DistributionDimension.NEIGHBORHOOD
            )
            if item.key is not None
        ]
        busiest = by_neighborhood[: self.settings.neighborhood_report_limit]

        details = await gather_all(
            *(self._neighborhood_detail(criteria, item.key) for item in busiest)
        )

        report = NeighborhoodReport(
            generated_at=self.clock(),
            filters=criteria,
            total_neighborhoods=len(by_neighborhood),
            details=details,
        )
        return report, len(records)

    async def _neighborhood_detail(
        self, criteria: FilterCriteria, neighborhood: str
    ) -> NeighborhoodDetail:
        records = await self.repository.list_demands(criteria, exact_neighborhood=neighborhood)
        by_status, by_category = await gather_all(
            self.distributions.distribution(records, DistributionDimension.STATUS),
            self.distributions.distribution(
                records,
                DistributionDimension.CATEGORY,
                limit=self.settings.neighborhood_category_limit,
            ),
        )
        return NeighborhoodDetail(
            neighborhood=neighborhood,
            total_demands=len(records),
            by_status=by_status,
            by_category=by_category,
        )

    # =========================================================================
    # Tabular export
    # =========================================================================

    async def export_tabular(self, filters: Optional[FilterCriteria] = None) -> str:
        """All matching demands as CSV text, newest first."""
        criteria = filters or FilterCriteria()
        return await self._tracked("export", criteria, lambda: self._build_export(criteria))

    async def _build_export(self, criteria: FilterCriteria) -> Tuple[str, int]:
        records = await self.repository.list_demands(criteria)

        unit_names, category_names, operator_names = await gather_all(
            self.lookups.export_units.resolve(
                {d.organizational_unit_id for d in records if d.organizational_unit_id is not None}
            ),
            self.lookups.categories.resolve(
                {d.category_id for d in records if d.category_id is not None}
            ),
            self.lookups.operators.resolve(
                {d.assigned_operator_id for d in records if d.assigned_operator_id is not None}
            ),
        )

        rows = build_rows(
            records,
            unit_names,
            category_names,
            operator_names,
            unknown_label=self.settings.unknown_label,
        )
        text = await run_blocking(render_csv, rows, include_bom=self.settings.csv_include_bom)
        return text, len(records)
