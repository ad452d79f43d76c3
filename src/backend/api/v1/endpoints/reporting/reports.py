"""
Reports API endpoints for demand analytics.

Provides endpoints for the general, organizational unit, performance and
neighborhood reports and for the CSV export of demands.

**Key Features:**
- Distributions by status, priority, source, unit, category and neighborhood
- Mean resolution time and SLA compliance
- Operator and unit rankings with resolution time histogram
- Monthly created/resolved trend per unit
- Neighborhood drill-down
- CSV export with spreadsheet-friendly encoding

All filter parameters are optional; omitting them reports over every demand.
Invalid filter values are answered with 400.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from core.dependencies import get_reporting_service
from db.models import utc_now
from schemas.reports import (
    FilterCriteria,
    GeneralReport,
    NeighborhoodReport,
    PerformanceReport,
    UnitReport,
)
from services.csv_export import export_filename
from services.reporting_service import ReportingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports & Analytics"])


def build_filters(
    start_date: Optional[str] = Query(None, description="Created on or after (YYYY-MM-DD or ISO 8601)"),
    end_date: Optional[str] = Query(None, description="Created on or before (YYYY-MM-DD or ISO 8601)"),
    organizational_unit_id: Optional[str] = Query(None, description="Organizational unit ID"),
    category_id: Optional[str] = Query(None, description="Category ID"),
    status: Optional[str] = Query(None, description="Demand status, e.g. RESOLVED"),
    priority: Optional[str] = Query(None, description="Demand priority, e.g. HIGH"),
    source: Optional[str] = Query(None, description="Demand source, e.g. WHATSAPP"),
    neighborhood: Optional[str] = Query(None, description="Neighborhood (case-insensitive substring)"),
) -> FilterCriteria:
    """
    Build FilterCriteria from query parameters.

    Values are validated by FilterCriteria; a bad value raises
    InvalidArgument, which the application maps to 400.
    """
    return FilterCriteria.parse(
        start_date=start_date,
        end_date=end_date,
        organizational_unit_id=organizational_unit_id,
        category_id=category_id,
        status=status,
        priority=priority,
        source=source,
        neighborhood=neighborhood,
    )


# =============================================================================
# REPORT ENDPOINTS
# =============================================================================


@router.get(
    "/general",
    response_model=GeneralReport,
    response_model_by_alias=True,
    summary="Get General Report",
    description="Returns totals, distributions, mean resolution time and SLA compliance.",
)
async def get_general_report(
    filters: FilterCriteria = Depends(build_filters),
    service: ReportingService = Depends(get_reporting_service),
):
    """
    Get the general report.

    Returns:
    - Total demands
    - Distributions by status, priority, source and organizational unit
    - Top 15 categories and top 20 neighborhoods
    - Average resolution time (hours)
    - SLA compliance rate (%)

    Raises:
        HTTPException 400: Invalid filter value
        HTTPException 503: Record store unavailable
    """
    return await service.generate_general_report(filters)


@router.get(
    "/unit/{unit_id}",
    response_model=UnitReport,
    response_model_by_alias=True,
    summary="Get Organizational Unit Report",
    description="Returns the report of one organizational unit.",
)
async def get_unit_report(
    unit_id: int,
    filters: FilterCriteria = Depends(build_filters),
    service: ReportingService = Depends(get_reporting_service),
):
    """
    Get the report of one organizational unit.

    Includes unit totals, distributions by status, category and priority,
    the monthly created/resolved trend of the last six months and the top
    operators of the unit. An unknown unit ID yields an empty report with
    the unit named "Unknown".
    """
    return await service.generate_unit_report(unit_id, filters)


@router.get(
    "/performance",
    response_model=PerformanceReport,
    response_model_by_alias=True,
    summary="Get Performance Report",
    description="Returns operator and unit rankings, resolution time histogram and SLA metrics.",
)
async def get_performance_report(
    filters: FilterCriteria = Depends(build_filters),
    service: ReportingService = Depends(get_reporting_service),
):
    """Get operator and unit rankings with resolution time and SLA breakdowns."""
    return await service.generate_performance_report(filters)


@router.get(
    "/neighborhoods",
    response_model=NeighborhoodReport,
    response_model_by_alias=True,
    summary="Get Neighborhood Report",
    description="Returns the distinct neighborhood count and a drill-down of the busiest ones.",
)
async def get_neighborhood_report(
    filters: FilterCriteria = Depends(build_filters),
    service: ReportingService = Depends(get_reporting_service),
):
    """Get the neighborhood report with status and category breakdown per neighborhood."""
    return await service.generate_neighborhood_report(filters)


# =============================================================================
# EXPORT ENDPOINTS
# =============================================================================


@router.get(
    "/export/csv",
    summary="Export Demands as CSV",
    description="Returns every matching demand as a CSV attachment, newest first.",
    response_class=Response,
)
async def export_csv(
    filters: FilterCriteria = Depends(build_filters),
    service: ReportingService = Depends(get_reporting_service),
):
    """
    Export matching demands as CSV.

    The file starts with a UTF-8 byte order mark so spreadsheet tools
    detect the encoding.
    """
    text = await service.export_tabular(filters)
    filename = export_filename(utc_now().date())
    logger.info(f"CSV export generated: {filename}")

    return Response(
        content=text.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
