# =============================================================================
# tests/test_placement_parser.py - Placement spreadsheet parsing
# =============================================================================

from datetime import date, datetime

import pandas as pd
import pytest

from studentpath.services.placement_service import (
    parse_count, parse_date, parse_placement_workbook, parse_sheet, placement_status, to_on_campus_card,
)


class TestParseDate:

    @pytest.mark.parametrize("value, expected", [
        ("15/08/2024", "2024-08-15"),
        ("5-8-2024", "2024-08-05"),
        ("2024-08-15", "2024-08-15"),
        (datetime(2024, 8, 15, 10, 30), "2024-08-15"),
        (45000, "2023-03-15"),
        ("", None),
        (None, None),
        ("next week", None),
    ])
    def test_formats(self, value, expected):
        assert parse_date(value) == expected


class TestParseCount:

    @pytest.mark.parametrize("value, expected", [
        ("12 students", 12),
        (7, 7),
        (3.0, 3),
        ("N/A", 0),
        ("", 0),
        (None, 0),
    ])
    def test_leading_integer(self, value, expected):
        assert parse_count(value) == expected


class TestParseSheet:

    def test_aliases_are_case_insensitive(self):
        df = pd.DataFrame([{
            " company ": "Acme",
            "CTC": "6 LPA",
            "Streams": "CSE, IT",
            "Drive Date": "01/02/2025",
            "Placed": "4 offers",
            "Designation": "SDE",
        }])

        rows = parse_sheet("2024-25", df)

        assert len(rows) == 1
        row = rows[0]
        assert row.company_name == "Acme"
        assert row.package == "6 LPA"
        assert row.eligibility == "CSE, IT"
        assert row.drive_date == "2025-02-01"
        assert row.students_selected == 4
        assert row.role == "SDE"
        assert row.academic_year == "2024-25"

    def test_rows_without_company_are_dropped(self):
        df = pd.DataFrame({"Company": ["Acme", None, ""], "Role": ["SDE", "QA", "Ops"]})
        assert [r.company_name for r in parse_sheet("2023-24", df)] == ["Acme"]

    def test_sheet_without_company_header_is_skipped(self):
        df = pd.DataFrame({"Foo": ["x"], "Bar": ["y"]})
        assert parse_sheet("Notes", df) == []

    def test_empty_sheet_is_skipped(self):
        assert parse_sheet("Empty", pd.DataFrame()) == []


class TestParseWorkbook:

    def test_csv_uses_filename_as_year(self):
        content = b"Company Name,CTC,Date,Selected\nAcme,6 LPA,15/08/2024,4\n,,,\n"

        rows = parse_placement_workbook(content, "2024-25.csv")

        assert len(rows) == 1
        assert rows[0].academic_year == "2024-25"
        assert rows[0].drive_date == "2024-08-15"
        assert rows[0].students_selected == 4


class TestPlacementCard:

    def test_status_by_drive_date(self):
        today = date(2025, 1, 10)
        assert placement_status(date(2025, 1, 9), today) == "Completed"
        assert placement_status(date(2025, 1, 10), today) == "Upcoming"
        assert placement_status(None, today) == "Upcoming"

    def test_card_defaults(self):
        card = to_on_campus_card(
            {"id": 3, "company_name": "Acme", "drive_date": date(2024, 1, 5)},
            today=date(2025, 1, 1),
        )
        assert card["logo"] == "🏢"
        assert card["roleTitle"] == "Not Specified"
        assert card["registrationDeadline"] == "2024-01-05"
        assert card["status"] == "Completed"
        assert card["requiredSkills"] == []
        assert card["aiConfidenceScore"] is None
