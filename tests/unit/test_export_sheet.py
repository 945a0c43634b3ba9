"""Unit tests for the spreadsheet export activity.

Workbooks are generated with openpyxl at test time; the exported text
is read back with the csv module.
"""

from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from pathlib import Path

import pytest

from site_geojson.activities.export_sheet import (
    export_first_sheet,
    read_first_sheet,
    render_cell,
)
from site_geojson.core.exceptions import ArtifactIOError, SpreadsheetDecodeError


def _read_csv(path: Path, delimiter: str = ";") -> list[list[str]]:
    with path.open(encoding="utf-8", newline="") as fh:
        return list(csv.reader(fh, delimiter=delimiter))


class TestRenderCell:
    """Cell values render to the text a spreadsheet export would show."""

    def test_none_is_empty(self) -> None:
        assert render_cell(None) == ""

    def test_integral_float_drops_fraction(self) -> None:
        assert render_cell(10115.0) == "10115"

    def test_fractional_float_kept(self) -> None:
        assert render_cell(397100.5) == "397100.5"

    def test_int(self) -> None:
        assert render_cell(392000) == "392000"

    def test_bool(self) -> None:
        assert render_cell(True) == "TRUE"
        assert render_cell(False) == "FALSE"

    def test_dates_iso(self) -> None:
        assert render_cell(date(2023, 5, 1)) == "2023-05-01"
        assert render_cell(datetime(2023, 5, 1, 8, 30)) == "2023-05-01T08:30:00"

    def test_text_unchanged(self) -> None:
        assert render_cell("Straße 1") == "Straße 1"


class TestExportFirstSheet:
    """Export of the first worksheet to delimited text."""

    def test_writes_header_and_rows(
        self, sites_xlsx: Path, tmp_path: Path, header: list[str]
    ) -> None:
        target = tmp_path / "work" / "sites.csv"
        count = export_first_sheet(sites_xlsx, target)

        assert count == 3
        rows = _read_csv(target)
        assert rows[0] == header
        assert rows[1] == [
            "1", "Library A", "Main St", "10115", "Berlin", "City", "392000", "5819000"
        ]
        assert len(rows) == 4

    def test_uses_requested_delimiter(self, sites_xlsx: Path, tmp_path: Path) -> None:
        target = tmp_path / "sites.csv"
        export_first_sheet(sites_xlsx, target, delimiter="|")
        first_line = target.read_text(encoding="utf-8").splitlines()[0]
        assert first_line.startswith("Lfd. Nr.|Name |Straße|")

    def test_header_only(self, header_only_xlsx: Path, tmp_path: Path, header: list[str]) -> None:
        target = tmp_path / "empty.csv"
        assert export_first_sheet(header_only_xlsx, target) == 0
        assert _read_csv(target) == [header]

    def test_only_first_sheet(self, make_workbook, tmp_path: Path, header: list[str]) -> None:
        xlsx = make_workbook("two.xlsx", [header], extra_sheet=True)
        target = tmp_path / "two.csv"
        export_first_sheet(xlsx, target)
        assert "not" not in target.read_text(encoding="utf-8")

    def test_short_rows_padded(self, make_workbook, tmp_path: Path, header: list[str]) -> None:
        xlsx = make_workbook("short.xlsx", [header, [7, "Only name"]])
        target = tmp_path / "short.csv"
        export_first_sheet(xlsx, target)
        rows = _read_csv(target)
        assert rows[1] == ["7", "Only name", "", "", "", "", "", ""]

    def test_blank_rows_dropped(self, make_workbook, tmp_path: Path, header: list[str]) -> None:
        row = [1, "A", "B", 1, "C", "D", 392000, 5819000]
        xlsx = make_workbook("gaps.xlsx", [header, row, [None] * 8, row, [None] * 8])
        target = tmp_path / "gaps.csv"
        assert export_first_sheet(xlsx, target) == 2

    def test_dropped_blank_rows_logged(
        self,
        make_workbook,
        tmp_path: Path,
        header: list[str],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        row = [1, "A", "B", 1, "C", "D", 392000, 5819000]
        xlsx = make_workbook("gap.xlsx", [header, row, [None] * 8, row])
        with caplog.at_level(logging.DEBUG, logger="site_geojson.activities.export_sheet"):
            export_first_sheet(xlsx, tmp_path / "gap.csv")
        assert "Blank rows dropped | count=1" in caplog.text

    def test_value_containing_delimiter_is_quoted(
        self, make_workbook, tmp_path: Path, header: list[str]
    ) -> None:
        row = [1, "A; B", "Main St", 10115, "Berlin", "City", 392000, 5819000]
        xlsx = make_workbook("semi.xlsx", [header, row])
        target = tmp_path / "semi.csv"
        export_first_sheet(xlsx, target)
        assert _read_csv(target)[1][1] == "A; B"

    def test_empty_workbook(self, make_workbook, tmp_path: Path) -> None:
        xlsx = make_workbook("blank.xlsx", [])
        target = tmp_path / "blank.csv"
        assert export_first_sheet(xlsx, target) == 0
        assert target.read_text(encoding="utf-8") == ""


class TestExportErrors:
    """Unreadable input surfaces as typed conversion errors."""

    def test_not_a_workbook(self, tmp_path: Path) -> None:
        fake = tmp_path / "fake.xlsx"
        fake.write_text("Lfd. Nr.;Name \n1;x\n", encoding="utf-8")
        with pytest.raises(SpreadsheetDecodeError):
            read_first_sheet(fake)

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        other = tmp_path / "sites.txt"
        other.write_text("hello", encoding="utf-8")
        with pytest.raises(SpreadsheetDecodeError):
            read_first_sheet(other)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises((ArtifactIOError, SpreadsheetDecodeError)):
            read_first_sheet(tmp_path / "absent.xlsx")

    def test_unwritable_target(self, sites_xlsx: Path, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        with pytest.raises(ArtifactIOError) as exc:
            export_first_sheet(sites_xlsx, blocker / "sites.csv")
        assert exc.value.stage == "export_sheet"
