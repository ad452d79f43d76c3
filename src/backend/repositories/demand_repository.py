"""
Read access to demands for the reporting engine.

DemandReader is the query capability reports depend on. SQLDemandRepository
reads the SQL record store, opening a fresh session per query so that the
concurrent sub-queries of one report never share a session.
InMemoryDemandRepository serves a fixed snapshot.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.decorators import log_database_operation, upstream_query
from db.models import Category, Demand, OrganizationalUnit, User
from repositories.name_lookup import ReferenceLookups, StaticNameLookup
from schemas.reports.filters import FilterCriteria

logger = logging.getLogger(__name__)


class DemandReader(ABC):
    """Read-only queries over demands and the references reports need."""

    @abstractmethod
    async def list_demands(
        self,
        criteria: FilterCriteria,
        *,
        exact_neighborhood: Optional[str] = None,
    ) -> List[Demand]:
        """Demands matching the criteria, newest first."""

    @abstractmethod
    async def list_resolved_demands(
        self,
        criteria: FilterCriteria,
        *,
        limit: Optional[int] = None,
    ) -> List[Demand]:
        """Demands matching the criteria that have a resolution time, most recently resolved first."""

    @abstractmethod
    async def count_demands(self, criteria: FilterCriteria) -> int:
        """Number of demands matching the criteria."""

    @abstractmethod
    async def get_organizational_unit(self, unit_id: int) -> Optional[OrganizationalUnit]:
        """The unit with this id, or None."""

    @abstractmethod
    async def count_unit_categories(self, unit_id: int) -> int:
        """Number of categories owned by the unit."""

    @abstractmethod
    async def count_active_unit_operators(self, unit_id: int) -> int:
        """Number of active operators of the unit."""


def build_conditions(
    criteria: FilterCriteria,
    exact_neighborhood: Optional[str] = None,
) -> list:
    """Translate filter criteria into SQLAlchemy where-clauses on Demand."""
    conditions = []

    if criteria.start_date:
        conditions.append(Demand.created_at >= criteria.start_date)
    if criteria.end_date:
        conditions.append(Demand.created_at <= criteria.end_date)
    if criteria.organizational_unit_id is not None:
        conditions.append(Demand.organizational_unit_id == criteria.organizational_unit_id)
    if criteria.category_id is not None:
        conditions.append(Demand.category_id == criteria.category_id)
    if criteria.status is not None:
        conditions.append(Demand.status == criteria.status)
    if criteria.priority is not None:
        conditions.append(Demand.priority == criteria.priority)
    if criteria.source is not None:
        conditions.append(Demand.source == criteria.source)
    if criteria.neighborhood:
        pattern = (
            criteria.neighborhood.replace("\\", "\\\\")
            .replace("%", "\\%")
            .replace("_", "\\_")
        )
        conditions.append(Demand.neighborhood.ilike(f"%{pattern}%", escape="\\"))
    if exact_neighborhood is not None:
        conditions.append(Demand.neighborhood == exact_neighborhood)

    return conditions


class SQLDemandRepository(DemandReader):
    """DemandReader over the SQL record store."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    def lookups(self) -> ReferenceLookups:
        """Name lookups reading the same database."""
        return ReferenceLookups.from_session_factory(self._session_factory)

    @upstream_query("list demands")
    @log_database_operation("demand listing", level="debug")
    async def list_demands(
        self,
        criteria: FilterCriteria,
        *,
        exact_neighborhood: Optional[str] = None,
    ) -> List[Demand]:
        stmt = (
            select(Demand)
            .where(*build_conditions(criteria, exact_neighborhood))
            .order_by(Demand.created_at.desc(), Demand.id)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    @upstream_query("list resolved demands")
    @log_database_operation("resolved demand listing", level="debug")
    async def list_resolved_demands(
        self,
        criteria: FilterCriteria,
        *,
        limit: Optional[int] = None,
    ) -> List[Demand]:
        stmt = (
            select(Demand)
            .where(*build_conditions(criteria), Demand.resolved_at.is_not(None))
            .order_by(Demand.resolved_at.desc(), Demand.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    @upstream_query("count demands")
    @log_database_operation("demand count", level="debug")
    async def count_demands(self, criteria: FilterCriteria) -> int:
        stmt = select(func.count(Demand.id)).where(*build_conditions(criteria))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    @upstream_query("get organizational unit")
    @log_database_operation("organizational unit retrieval", level="debug")
    async def get_organizational_unit(self, unit_id: int) -> Optional[OrganizationalUnit]:
        async with self._session_factory() as session:
            return await session.get(OrganizationalUnit, unit_id)

    @upstream_query("count unit categories")
    @log_database_operation("unit category count", level="debug")
    async def count_unit_categories(self, unit_id: int) -> int:
        stmt = select(func.count(Category.id)).where(
            Category.organizational_unit_id == unit_id
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    @upstream_query("count unit operators")
    @log_database_operation("unit operator count", level="debug")
    async def count_active_unit_operators(self, unit_id: int) -> int:
        stmt = select(func.count(User.id)).where(
            User.organizational_unit_id == unit_id,
            User.is_active == True,  # noqa: E712
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0


class InMemoryDemandRepository(DemandReader):
    """DemandReader over a fixed snapshot of rows."""

    def __init__(
        self,
        demands: Iterable[Demand],
        units: Iterable[OrganizationalUnit] = (),
        categories: Iterable[Category] = (),
        operators: Iterable[User] = (),
    ):
        self._demands = list(demands)
        self._units = {u.id: u for u in units}
        self._categories = list(categories)
        self._operators = list(operators)

    def lookups(self) -> ReferenceLookups:
        """Name lookups over the snapshot's reference rows."""
        return ReferenceLookups(
            units=StaticNameLookup({u.id: u.name for u in self._units.values()}),
            categories=StaticNameLookup({c.id: c.name for c in self._categories}),
            operators=StaticNameLookup({o.id: o.name for o in self._operators}),
            unit_acronyms=StaticNameLookup({u.id: u.acronym for u in self._units.values()}),
        )

    async def list_demands(
        self,
        criteria: FilterCriteria,
        *,
        exact_neighborhood: Optional[str] = None,
    ) -> List[Demand]:
        matching = [d for d in self._demands if criteria.matches(d, exact_neighborhood)]
        matching.sort(key=lambda d: str(d.id))
        matching.sort(key=lambda d: d.created_at, reverse=True)
        return matching

    async def list_resolved_demands(
        self,
        criteria: FilterCriteria,
        *,
        limit: Optional[int] = None,
    ) -> List[Demand]:
        resolved = [
            d for d in self._demands
            if d.resolved_at is not None and criteria.matches(d)
        ]
        resolved.sort(key=lambda d: str(d.id))
        resolved.sort(key=lambda d: d.resolved_at, reverse=True)
        return resolved if limit is None else resolved[:limit]

    async def count_demands(self, criteria: FilterCriteria) -> int:
        return sum(1 for d in self._demands if criteria.matches(d))

    async def get_organizational_unit(self, unit_id: int) -> Optional[OrganizationalUnit]:
        return self._units.get(unit_id)

    async def count_unit_categories(self, unit_id: int) -> int:
        return sum(1 for c in self._categories if c.organizational_unit_id == unit_id)

    async def count_active_unit_operators(self, unit_id: int) -> int:
        return sum(
            1 for o in self._operators
            if o.organizational_unit_id == unit_id and o.is_active
        )
