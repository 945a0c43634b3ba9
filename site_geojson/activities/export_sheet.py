"""Spreadsheet export activity.

Reads the first worksheet of an OOXML workbook and writes it out as
delimited text, one line per non-empty row with the header first. This
is the entry point of the conversion: everything downstream works on
the text artifact.

Rendering rules:
- Empty cells become empty fields.
- Integral floats are written without a fractional part (``10115.0`` -> ``10115``).
- Dates and times are written in ISO 8601.
- Rows are padded or truncated to the header width.
- Trailing blank rows are dropped.
"""

from __future__ import annotations

import csv
import logging
import zipfile
from datetime import date, datetime, time
from typing import TYPE_CHECKING

from site_geojson.core.constants import DEFAULT_SOURCE_DELIMITER, DEFAULT_TEXT_ENCODING
from site_geojson.core.exceptions import ArtifactIOError, SpreadsheetDecodeError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

logger = logging.getLogger("site_geojson.activities.export_sheet")


def export_first_sheet(
    xlsx_path: Path,
    csv_path: Path,
    *,
    delimiter: str = DEFAULT_SOURCE_DELIMITER,
    encoding: str = DEFAULT_TEXT_ENCODING,
) -> int:
    """Write the first worksheet of ``xlsx_path`` to ``csv_path``.

    Args:
        xlsx_path: Workbook on disk.
        csv_path: Destination text file (parent directories are created).
        delimiter: Field separator for the text artifact.
        encoding: Text encoding of the artifact.

    Returns:
        Number of data rows written (header excluded).

    Raises:
        SpreadsheetDecodeError: If the workbook is corrupt, not OOXML,
            or has no worksheet.
        ArtifactIOError: If the workbook cannot be read or the artifact
            cannot be written.
    """
    rows = read_first_sheet(xlsx_path)

    try:
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        with csv_path.open("w", encoding=encoding, newline="") as fh:
            writer = csv.writer(fh, delimiter=delimiter, lineterminator="\n")
            writer.writerows(rows)
    except OSError as exc:
        msg = f"Cannot write delimited text to {csv_path.name}: {exc}"
        raise ArtifactIOError(msg, stage="export_sheet") from exc

    data_rows = max(len(rows) - 1, 0)
    logger.info(
        "Sheet exported | source=%s | target=%s | rows=%d",
        xlsx_path.name,
        csv_path.name,
        data_rows,
    )
    return data_rows


def read_first_sheet(xlsx_path: Path) -> list[list[str]]:
    """Return the rendered cells of the first worksheet, header first.

    An empty worksheet yields an empty list.

    Raises:
        SpreadsheetDecodeError: If the workbook cannot be decoded.
        ArtifactIOError: If the file cannot be read.
    """
    from openpyxl import load_workbook
    from openpyxl.utils.exceptions import InvalidFileException

    try:
        workbook = load_workbook(xlsx_path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as exc:
        msg = f"Not a readable workbook: {xlsx_path.name} ({exc})"
        raise SpreadsheetDecodeError(msg) from exc
    except OSError as exc:
        msg = f"Cannot read workbook {xlsx_path.name}: {exc}"
        raise ArtifactIOError(msg, stage="export_sheet") from exc

    try:
        if not workbook.worksheets:
            msg = f"Workbook {xlsx_path.name} has no worksheet"
            raise SpreadsheetDecodeError(msg)
        sheet = workbook.worksheets[0]
        raw_rows = [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()

    return _render_rows(raw_rows)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _render_rows(raw_rows: Sequence[Sequence[object]]) -> list[list[str]]:
    """Render cell values to text and trim to the populated area."""
    rendered = [[render_cell(value) for value in row] for row in raw_rows]

    while rendered and not any(rendered[-1]):
        rendered.pop()
    if not rendered:
        return []

    header = _trim_trailing_empty(rendered[0])
    width = len(header)
    rows = [header]
    blank = 0
    for row in rendered[1:]:
        if not any(row):
            blank += 1
            continue
        rows.append(_fit(row, width))
    if blank:
        logger.debug("Blank rows dropped | count=%d", blank)
    return rows


def render_cell(value: object) -> str:
    """Render a single openpyxl cell value as text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    return str(value)


def _trim_trailing_empty(row: Iterable[str]) -> list[str]:
    cells = list(row)
    while cells and not cells[-1]:
        cells.pop()
    return cells


def _fit(row: list[str], width: int) -> list[str]:
    if len(row) >= width:
        return row[:width]
    return row + [""] * (width - len(row))
