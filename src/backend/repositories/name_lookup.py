"""
Batch id -> display name lookups for report rendering.

A lookup receives the set of ids present in a result set and returns the
names it knows. Ids it cannot resolve are simply absent from the returned
mapping; callers render them with a placeholder label.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.decorators import log_database_operation, upstream_query
from db.models import Category, OrganizationalUnit, User

logger = logging.getLogger(__name__)


class NameLookup(ABC):
    """Resolves many identifiers to display names in one call."""

    @abstractmethod
    async def resolve(self, ids: Iterable[Hashable]) -> Dict[Any, str]:
        """Return a mapping id -> name for the ids that exist."""


class StaticNameLookup(NameLookup):
    """Lookup over an in-memory mapping (snapshots, caches, tests)."""

    def __init__(self, names: Mapping[Any, str]):
        self._names = dict(names)

    async def resolve(self, ids: Iterable[Hashable]) -> Dict[Any, str]:
        return {i: self._names[i] for i in set(ids) if i is not None and i in self._names}


class SQLNameLookup(NameLookup):
    """Lookup backed by one table: `SELECT id, <label> WHERE id IN (...)`."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: Any,
        label_column: str = "name",
    ):
        self._session_factory = session_factory
        self._model = model
        self._label_column = label_column

    @upstream_query("reference name lookup")
    @log_database_operation("reference name lookup", level="debug")
    async def resolve(self, ids: Iterable[Hashable]) -> Dict[Any, str]:
        wanted = {i for i in ids if i is not None}
        if not wanted:
            return {}

        id_column = self._model.id
        label_column = getattr(self._model, self._label_column)
        stmt = select(id_column, label_column).where(id_column.in_(wanted))

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.all()

        names = {row[0]: row[1] for row in rows}
        missing = len(wanted) - len(names)
        if missing:
            logger.debug(
                f"{missing} {self._model.__tablename__} reference(s) not found; "
                "rendering placeholder"
            )
        return names


@dataclass(frozen=True)
class ReferenceLookups:
    """The reference lookups a report needs.

    `unit_acronyms` labels units in the tabular export; without it the export
    falls back to unit names.
    """

    units: NameLookup
    categories: NameLookup
    operators: NameLookup
    unit_acronyms: Optional[NameLookup] = None

    @property
    def export_units(self) -> NameLookup:
        if self.unit_acronyms is not None:
            return self.unit_acronyms
        return self.units

    @classmethod
    def from_session_factory(
        cls, session_factory: async_sessionmaker[AsyncSession]
    ) -> "ReferenceLookups":
        return cls(
            units=SQLNameLookup(session_factory, OrganizationalUnit),
            categories=SQLNameLookup(session_factory, Category),
            operators=SQLNameLookup(session_factory, User),
            unit_acronyms=SQLNameLookup(session_factory, OrganizationalUnit, label_column="acronym"),
        )
