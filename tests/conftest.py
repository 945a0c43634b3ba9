"""Shared pytest fixtures for the site_geojson test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from site_geojson.core.config import ConversionConfig, RowErrorPolicy

# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

HEADER = [
    "Lfd. Nr.",
    "Name ",
    "Straße",
    "PLZ",
    "Ort",
    "Träger bzw. Verantwortlicher",
    "X-Koordinate",
    "Y-Koordinate",
]

# Central Berlin, UTM zone 33N
LIBRARY_A = [1, "Library A", "Main St", 10115, "Berlin", "City", 392000, 5819000]
BOOKSHELF_B = [
    2,
    "Bücherbox Lichtenberg",
    "Möllendorffstraße 6",
    10367,
    "Berlin",
    "Bezirksamt Lichtenberg",
    397100.5,
    5821950.25,
]
SHELF_C = [3, "Shelf C", "Frankfurter Allee 1", 10247, "Berlin", "Verein e.V.", 393500, 5819800]


def write_workbook(path: Path, rows: list[list[object]], *, extra_sheet: bool = False) -> Path:
    """Write ``rows`` to the first worksheet of a new workbook at ``path``."""
    from openpyxl import Workbook

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Standorte"
    for row in rows:
        sheet.append(row)
    if extra_sheet:
        other = workbook.create_sheet("Ignored")
        other.append(["not", "used"])
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    return path


# ---------------------------------------------------------------------------
# Workbook fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def header() -> list[str]:
    """The site directory header row."""
    return list(HEADER)


@pytest.fixture()
def make_workbook(tmp_path: Path):
    """Factory writing ``rows`` to ``tmp_path / "in" / name``."""

    def _make(name: str, rows: list[list[object]], *, extra_sheet: bool = False) -> Path:
        return write_workbook(tmp_path / "in" / name, rows, extra_sheet=extra_sheet)

    return _make


@pytest.fixture()
def sites_xlsx(tmp_path: Path) -> Path:
    """Workbook with three valid sites."""
    return write_workbook(tmp_path / "in" / "sites.xlsx", [HEADER, LIBRARY_A, BOOKSHELF_B, SHELF_C])


@pytest.fixture()
def header_only_xlsx(tmp_path: Path) -> Path:
    """Workbook with a header row and no data."""
    return write_workbook(tmp_path / "in" / "empty.xlsx", [HEADER])


@pytest.fixture()
def bad_easting_xlsx(tmp_path: Path) -> Path:
    """Workbook whose second row has a non-numeric ``X-Koordinate``."""
    bad_row = [2, "Broken", "Nowhere 1", 10000, "Berlin", "Nobody", "n/a", 5819000]
    return write_workbook(tmp_path / "in" / "bad.xlsx", [HEADER, LIBRARY_A, bad_row, SHELF_C])


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config(tmp_path: Path) -> ConversionConfig:
    """Configuration with all artifact roots under ``tmp_path``."""
    return ConversionConfig(
        work_dir=tmp_path / "work",
        output_dir=tmp_path / "output",
        upload_dir=tmp_path / "uploads",
    )


@pytest.fixture()
def skip_config(tmp_path: Path) -> ConversionConfig:
    """Like ``config`` but skipping unconvertible rows."""
    return ConversionConfig(
        work_dir=tmp_path / "work",
        output_dir=tmp_path / "output",
        upload_dir=tmp_path / "uploads",
        row_error_policy=RowErrorPolicy.SKIP,
    )
