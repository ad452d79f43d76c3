"""Operator and organizational unit rankings."""

from collections import defaultdict
from typing import Dict, List, Sequence

from db.enums import RESOLVED_STATUSES
from db.models import Demand
from repositories.name_lookup import ReferenceLookups
from schemas.reports.reports import OperatorRankingItem, UnitRankingItem
from services.report_math import percentage
from services.resolution_service import ResolutionStatistics


class PerformanceRanker:
    """
    Ranks operators and units by workload.

    Order is assigned (or total) demands descending, then resolved
    descending, then name ascending, then id. Names are resolved in bulk;
    an id without a name is shown with the placeholder label.
    """

    def __init__(
        self,
        lookups: ReferenceLookups,
        resolution: ResolutionStatistics,
        unknown_label: str = "Unknown",
    ):
        self.lookups = lookups
        self.resolution = resolution
        self.unknown_label = unknown_label

    async def top_operators(self, records: Sequence[Demand], limit: int) -> List[OperatorRankingItem]:
        """Ranking over demands with an assigned operator."""
        assigned: Dict = defaultdict(int)
        resolved: Dict = defaultdict(int)
        for demand in records:
            if demand.assigned_operator_id is None:
                continue
            assigned[demand.assigned_operator_id] += 1
            if demand.status in RESOLVED_STATUSES:
                resolved[demand.assigned_operator_id] += 1

        if not assigned:
            return []

        names = await self.lookups.operators.resolve(set(assigned))
        items = [
            OperatorRankingItem(
                operator_id=operator_id,
                name=names.get(operator_id, self.unknown_label),
                assigned=count,
                resolved=resolved[operator_id],
                resolution_rate_percent=percentage(resolved[operator_id], count),
            )
            for operator_id, count in assigned.items()
        ]
        items.sort(key=lambda i: (-i.assigned, -i.resolved, i.name, str(i.operator_id)))
        return items[:limit]

    async def top_organizational_units(
        self, records: Sequence[Demand], limit: int
    ) -> List[UnitRankingItem]:
        """Ranking over demands with an organizational unit, with mean resolution hours per unit."""
        by_unit: Dict[int, List[Demand]] = defaultdict(list)
        for demand in records:
            if demand.organizational_unit_id is not None:
                by_unit[demand.organizational_unit_id].append(demand)

        if not by_unit:
            return []

        names = await self.lookups.units.resolve(set(by_unit))
        items = []
        for unit_id, unit_records in by_unit.items():
            resolved = sum(1 for d in unit_records if d.status in RESOLVED_STATUSES)
            items.append(
                UnitRankingItem(
                    unit_id=unit_id,
                    name=names.get(unit_id, self.unknown_label),
                    total_demands=len(unit_records),
                    resolved=resolved,
                    resolution_rate_percent=percentage(resolved, len(unit_records)),
                    avg_resolution_time_hours=self.resolution.average_resolution_hours(unit_records),
                )
            )
        items.sort(key=lambda i: (-i.total_demands, -i.resolved, i.name, i.unit_id))
        return items[:limit]
