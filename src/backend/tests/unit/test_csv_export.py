"""
Unit tests for the CSV export.

Tests cover:
- Header and column order
- Quoting of titles with commas, quotes and line breaks
- Empty cells versus placeholder names
- Timestamp format, BOM and line terminator
"""

import csv
import io
from datetime import date, datetime
from uuid import uuid4

from db.enums import DemandStatus, Priority
from services.csv_export import CSV_COLUMNS, UTF8_BOM, build_rows, export_filename, render_csv
from tests.factories import DemandFactory


def _parse(text: str) -> list:
    return list(csv.reader(io.StringIO(text.lstrip(UTF8_BOM))))


class TestBuildRows:
    """Tests for build_rows()."""

    def test_full_row(self):
        operator = uuid4()
        demand = DemandFactory.create(
            protocol="2025000042",
            title="Poste apagado",
            status=DemandStatus.RESOLVED,
            priority=Priority.HIGH,
            organizational_unit_id=1,
            category_id=10,
            neighborhood="Centro",
            requester_name="Maria",
            assigned_operator_id=operator,
            created_at=datetime(2025, 3, 10, 12, 0),
            resolved_at=datetime(2025, 3, 11, 9, 30),
            sla_deadline=datetime(2025, 3, 14, 21, 0),
        )

        [row] = build_rows([demand], {1: "Obras"}, {10: "Iluminacao"}, {operator: "Ana"})

        assert row == [
            "2025000042",
            "Poste apagado",
            "RESOLVED",
            "HIGH",
            "Obras",
            "Iluminacao",
            "Centro",
            "Maria",
            "Ana",
            "2025-03-10T12:00:00Z",
            "2025-03-11T09:30:00Z",
            "2025-03-14T21:00:00Z",
        ]

    def test_absent_values_are_empty(self):
        demand = DemandFactory.create()
        [row] = build_rows([demand], {}, {}, {})
        row_by_column = dict(zip(CSV_COLUMNS, row))
        for column in ("Unit", "Category", "Neighborhood", "Requester", "Assignee", "ResolvedAt", "SLADeadline"):
            assert row_by_column[column] == ""

    def test_unresolvable_references_use_placeholder(self):
        demand = DemandFactory.create(
            organizational_unit_id=9, category_id=99, assigned_operator_id=uuid4()
        )
        [row] = build_rows([demand], {}, {}, {}, unknown_label="Unknown")
        row_by_column = dict(zip(CSV_COLUMNS, row))
        assert row_by_column["Unit"] == "Unknown"
        assert row_by_column["Category"] == "Unknown"
        assert row_by_column["Assignee"] == "Unknown"


class TestRenderCsv:
    """Tests for render_csv()."""

    def test_header_bom_and_terminator(self):
        text = render_csv([])
        assert text.startswith(UTF8_BOM)
        assert text == UTF8_BOM + ",".join(CSV_COLUMNS) + "\n"
        assert "\r" not in text

    def test_without_bom(self):
        assert not render_csv([], include_bom=False).startswith(UTF8_BOM)

    def test_special_characters_round_trip(self):
        titles = ['Buraco, na "via" principal', "Linha 1\nLinha 2", "Simples"]
        rows = build_rows([DemandFactory.create(title=t) for t in titles], {}, {}, {})

        text = render_csv(rows)
        parsed = _parse(text)

        assert parsed[0] == list(CSV_COLUMNS)
        assert [r[1] for r in parsed[1:]] == titles
        assert '"Buraco, na ""via"" principal"' in text

    def test_carriage_returns_are_quoted(self):
        titles = ["Poste\rapagado", "Fio\r\nsolto"]
        rows = build_rows([DemandFactory.create(title=t) for t in titles], {}, {}, {})

        text = render_csv(rows)
        parsed = _parse(text)

        assert '"Poste\rapagado"' in text
        assert '"Fio\r\nsolto"' in text
        assert len(parsed) == 3
        assert [r[1] for r in parsed[1:]] == titles
        assert text.endswith("\n") and not text.endswith("\r\n")

    def test_row_count(self):
        rows = build_rows([DemandFactory.create() for _ in range(3)], {}, {}, {})
        assert len(_parse(render_csv(rows))) == 4


class TestExportFilename:
    def test_dated_name(self):
        assert export_filename(date(2025, 1, 31)) == "demands_2025-01-31.csv"

    def test_undated_name(self):
        assert export_filename() == "demands.csv"
