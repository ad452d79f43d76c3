"""
Repository layer for record store reads.

This package contains all data access logic isolated from report
computation. Nothing here writes to the record store.
"""

from repositories.demand_repository import (
    DemandReader,
    InMemoryDemandRepository,
    SQLDemandRepository,
)
from repositories.name_lookup import (
    NameLookup,
    ReferenceLookups,
    SQLNameLookup,
    StaticNameLookup,
)

__all__ = [
    "DemandReader",
    "InMemoryDemandRepository",
    "NameLookup",
    "ReferenceLookups",
    "SQLDemandRepository",
    "SQLNameLookup",
    "StaticNameLookup",
]
