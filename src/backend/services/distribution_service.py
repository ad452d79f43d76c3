"""
Distribution breakdowns of a demand set by one dimension.

Enum dimensions are labelled from the enum itself. Organizational unit and
category ids are labelled through one bulk lookup of the ids present;
missing or unresolvable ids share a single placeholder bucket.
"""

import logging
from collections import Counter
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from db.enums import DemandSource, DemandStatus, Priority
from db.models import Demand
from repositories.name_lookup import NameLookup, ReferenceLookups
from schemas.reports.filters import DistributionDimension
from schemas.reports.reports import DistributionItem
from services.report_math import percentage

logger = logging.getLogger(__name__)

_ENUM_DIMENSIONS = {
    DistributionDimension.STATUS: ("status", DemandStatus),
    DistributionDimension.PRIORITY: ("priority", Priority),
    DistributionDimension.SOURCE: ("source", DemandSource),
}


class DistributionAggregator:
    """Groups demands and produces ordered, labelled distribution items."""

    def __init__(
        self,
        lookups: ReferenceLookups,
        unknown_label: str = "Unknown",
        unspecified_label: str = "Unspecified",
    ):
        self.lookups = lookups
        self.unknown_label = unknown_label
        self.unspecified_label = unspecified_label

    async def distribution(
        self,
        records: Sequence[Demand],
        dimension: DistributionDimension,
        limit: Optional[int] = None,
    ) -> List[DistributionItem]:
        """
        Counts per value of `dimension`, largest group first.

        Ties are ordered by label, then key. `limit` keeps the first groups
        after sorting; the rest are dropped, never merged. Percentages are
        relative to all records, including dropped groups.
        """
        dimension = DistributionDimension(dimension)

        if dimension in _ENUM_DIMENSIONS:
            groups = self._enum_groups(records, *_ENUM_DIMENSIONS[dimension])
        elif dimension == DistributionDimension.NEIGHBORHOOD:
            groups = self._neighborhood_groups(records)
        elif dimension == DistributionDimension.ORGANIZATIONAL_UNIT:
            groups = await self._reference_groups(
                records, "organizational_unit_id", self.lookups.units
            )
        else:
            groups = await self._reference_groups(records, "category_id", self.lookups.categories)

        total = len(records)
        items = [
            DistributionItem(key=key, label=label, count=count, percentage=percentage(count, total))
            for (key, label), count in groups.items()
        ]
        items.sort(key=lambda item: (-item.count, item.label, item.key or ""))
        return items if limit is None else items[:limit]

    @staticmethod
    def _enum_groups(records: Sequence[Demand], attribute: str, enum_cls) -> Counter:
        groups: Counter = Counter()
        for demand in records:
            member = enum_cls(getattr(demand, attribute))
            groups[(member.value, member.label)] += 1
        return groups

    def _neighborhood_groups(self, records: Sequence[Demand]) -> Counter:
        groups: Counter = Counter()
        for demand in records:
            name = demand.neighborhood
            if name and name.strip():
                groups[(name, name)] += 1
            else:
                groups[(None, self.unspecified_label)] += 1
        return groups

    async def _reference_groups(
        self, records: Sequence[Demand], attribute: str, lookup: NameLookup
    ) -> Counter:
        ids: Counter = Counter(getattr(demand, attribute) for demand in records)
        present = {i for i in ids if i is not None}
        names: Dict[Hashable, str] = await lookup.resolve(present) if present else {}

        groups: Counter = Counter()
        for ref_id, count in ids.items():
            group: Tuple[Optional[str], str]
            if ref_id is not None and ref_id in names:
                group = (str(ref_id), names[ref_id])
            else:
                group = (None, self.unknown_label)
            groups[group] += count

        unresolved = len(present - set(names))
        if unresolved:
            logger.debug(f"{unresolved} {attribute} value(s) grouped under '{self.unknown_label}'")
        return groups
