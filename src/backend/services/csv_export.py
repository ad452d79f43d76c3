"""Tabular CSV export of demands."""

import csv
import io
from typing import Any, Iterable, List, Mapping, Optional

from core.schema_base import serialize_datetime
from db.models import Demand

CSV_COLUMNS = (
    "Protocol",
    "Title",
    "Status",
    "Priority",
    "Unit",
    "Category",
    "Neighborhood",
    "Requester",
    "Assignee",
    "CreatedAt",
    "ResolvedAt",
    "SLADeadline",
)

UTF8_BOM = "\ufeff"


def _reference_name(ref_id: Any, names: Mapping[Any, str], unknown_label: str) -> str:
    # Absent reference or label -> empty cell; dangling reference -> placeholder
    if ref_id is None:
        return ""
    if ref_id not in names:
        return unknown_label
    return names[ref_id] or ""


def _enum_value(value: Any) -> str:
    return getattr(value, "value", value) or ""


def build_rows(
    records: Iterable[Demand],
    unit_names: Mapping[Any, str],
    category_names: Mapping[Any, str],
    operator_names: Mapping[Any, str],
    unknown_label: str = "Unknown",
) -> List[List[str]]:
    """One row per demand, in the order given, with columns as in CSV_COLUMNS."""
    return [
        [
            demand.protocol or "",
            demand.title or "",
            _enum_value(demand.status),
            _enum_value(demand.priority),
            _reference_name(demand.organizational_unit_id, unit_names, unknown_label),
            _reference_name(demand.category_id, category_names, unknown_label),
            demand.neighborhood or "",
            demand.requester_name or "",
            _reference_name(demand.assigned_operator_id, operator_names, unknown_label),
            serialize_datetime(demand.created_at) or "",
            serialize_datetime(demand.resolved_at) or "",
            serialize_datetime(demand.sla_deadline) or "",
        ]
        for demand in records
    ]


def render_csv(rows: Iterable[List[str]], include_bom: bool = True) -> str:
    """
    Serialize rows under the CSV_COLUMNS header.

    Fields containing commas, quotes or line breaks are quoted, with inner
    quotes doubled. Lines end with "\\n".
    """
    # The writer only quotes characters of its own line terminator, so rows are
    # written with "\r\n" (quoting both \r and \n) and re-terminated with "\n".
    scratch = io.StringIO()
    writer = csv.writer(scratch, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")

    def render_row(row) -> str:
        scratch.seek(0)
        scratch.truncate()
        writer.writerow(row)
        return scratch.getvalue()[:-2] + "\n"

    buffer = io.StringIO()
    if include_bom:
        buffer.write(UTF8_BOM)
    buffer.write(render_row(CSV_COLUMNS))
    for row in rows:
        buffer.write(render_row(row))
    return buffer.getvalue()


def export_filename(day: Optional[Any] = None, prefix: str = "demands") -> str:
    """Attachment name of an export, e.g. demands_2025-01-31.csv."""
    if day is None:
        return f"{prefix}.csv"
    return f"{prefix}_{day.strftime('%Y-%m-%d')}.csv"

