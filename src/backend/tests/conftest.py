"""
Pytest configuration and fixtures for testing.

Provides:
- Report settings with the default limits and labels
- In-memory demand store fixtures
- File-backed SQLite database fixtures for repository tests

Usage:
    pytest src/backend/tests -v
"""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from core.config import ReportSettings
from core.database import build_session_factory
from repositories.demand_repository import InMemoryDemandRepository
from services.reporting_service import ReportingService
from tests.factories import BASE_TIME


# ============================================================================
# Report Fixtures
# ============================================================================

@pytest.fixture
def report_settings() -> ReportSettings:
    """Default report settings, independent of the environment."""
    return ReportSettings(
        timezone="America/Fortaleza",
        sla_end_of_day_hour=18,
        unknown_label="Unknown",
        unspecified_label="Unspecified",
        resolution_sample_size=1000,
        trend_months=6,
        csv_include_bom=True,
    )


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed instant shortly after BASE_TIME."""
    return lambda: BASE_TIME


@pytest.fixture
def make_service(report_settings, fixed_clock):
    """Build a ReportingService over an in-memory snapshot."""

    def _make(demands=(), units=(), categories=(), operators=()) -> ReportingService:
        repository = InMemoryDemandRepository(demands, units, categories, operators)
        return ReportingService(
            repository=repository,
            lookups=repository.lookups(),
            report_settings=report_settings,
            clock=fixed_clock,
        )

    return _make


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """SQLite engine on a temporary file with every table created.

    A file database (not :memory:) is used so that concurrent sessions see
    the same data.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'reports.db'}",
        poolclass=NullPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine):
    """Session factory bound to the test engine."""
    return build_session_factory(test_engine)
