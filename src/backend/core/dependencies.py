"""
FastAPI dependencies for the reporting API.
"""

from functools import lru_cache

from core.config import get_settings
from core.database import AsyncSessionLocal
from repositories.demand_repository import SQLDemandRepository
from services.reporting_service import ReportingService


@lru_cache(maxsize=1)
def get_reporting_service() -> ReportingService:
    """
    Reporting service over the configured record store.

    The service holds no per-request state, so one instance serves every
    request. Each query it issues opens its own session.
    """
    repository = SQLDemandRepository(AsyncSessionLocal)
    return ReportingService(
        repository=repository,
        lookups=repository.lookups(),
        report_settings=get_settings().reports,
    )
