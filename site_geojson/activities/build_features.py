"""Feature building activity.

Maps each Source Row of the site directory to a ``SiteFeature``:

1. Read ``X-Koordinate`` / ``Y-Koordinate`` as a projected coordinate.
2. Reproject it to WGS 84.
3. Compose the text properties (id, name, multi-line address, owner).

Row error policy:
- ``abort`` (default): the first bad row raises and the conversion fails.
- ``skip``: bad rows are logged and omitted; their row numbers are
  reported in ``FeatureBuildReport.skipped_rows``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from site_geojson.core.config import RowErrorPolicy
from site_geojson.core.constants import (
    COLUMN_CITY,
    COLUMN_EASTING,
    COLUMN_ID,
    COLUMN_NAME,
    COLUMN_NORTHING,
    COLUMN_OWNER,
    COLUMN_POSTAL_CODE,
    COLUMN_STREET,
)
from site_geojson.core.exceptions import (
    FieldError,
    FieldMissingError,
    FieldUnparsableError,
    ReprojectionError,
)
from site_geojson.models.site import ProjectedCoordinate, SiteFeature

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from site_geojson.activities.reproject import CoordinateReprojector

logger = logging.getLogger("site_geojson.activities.build_features")


@dataclass(slots=True)
class FeatureBuildReport:
    """Features built from a row sequence, plus the rows left out."""

    features: list[SiteFeature] = field(default_factory=list)
    skipped_rows: list[int] = field(default_factory=list)


def build_feature(
    row: Mapping[str, object],
    reprojector: CoordinateReprojector,
    *,
    row_number: int = 0,
) -> SiteFeature:
    """Build one ``SiteFeature`` from a Source Row.

    Args:
        row: Column name to cell value mapping.
        reprojector: Transforms the projected coordinate to WGS 84.
        row_number: One-based data row number, for error context.

    Raises:
        FieldMissingError: If a required column is absent.
        FieldUnparsableError: If a coordinate cell is empty, not numeric,
            or not finite.
        ReprojectionError: If the coordinate cannot be transformed.
    """
    projected = ProjectedCoordinate(
        easting=_number(row, COLUMN_EASTING, row_number),
        northing=_number(row, COLUMN_NORTHING, row_number),
    )
    geometry = reprojector.reproject(projected)

    street = _text(row, COLUMN_STREET, row_number)
    postal_code = _text(row, COLUMN_POSTAL_CODE, row_number)
    city = _text(row, COLUMN_CITY, row_number)

    return SiteFeature(
        geometry=geometry,
        site_id=_text(row, COLUMN_ID, row_number),
        name=_text(row, COLUMN_NAME, row_number),
        address=f"{street}\n{postal_code} {city}",
        owner=_text(row, COLUMN_OWNER, row_number),
        row_number=row_number,
    )


def build_features(
    rows: Iterable[Mapping[str, object]],
    reprojector: CoordinateReprojector,
    *,
    policy: RowErrorPolicy = RowErrorPolicy.ABORT,
    on_row: Callable[[int], None] | None = None,
) -> FeatureBuildReport:
    """Build features for every row, honouring the row error policy.

    Args:
        rows: Source Rows, consumed once.
        reprojector: Shared reprojector for the whole sequence.
        policy: ``ABORT`` re-raises the first row error, ``SKIP`` omits
            the row and records its number.
        on_row: Called with each row number before it is processed
            (the orchestrator uses it to enforce its deadline).

    Returns:
        A ``FeatureBuildReport`` with features in input order.

    Raises:
        FieldError: Under ``ABORT``, for the first bad row.
        ReprojectionError: Under ``ABORT``, for the first bad coordinate.
    """
    report = FeatureBuildReport()

    for row_number, row in enumerate(rows, start=1):
        if on_row is not None:
            on_row(row_number)
        try:
            report.features.append(build_feature(row, reprojector, row_number=row_number))
        except (FieldError, ReprojectionError) as exc:
            if policy is RowErrorPolicy.ABORT:
                raise
            logger.warning(
                "Skipping row | row=%d | code=%s | reason=%s",
                row_number,
                exc.code,
                exc.message,
            )
            report.skipped_rows.append(row_number)

    return report


# ---------------------------------------------------------------------------
# Column access
# ---------------------------------------------------------------------------


def _text(row: Mapping[str, object], column: str, row_number: int) -> str:
    if column not in row:
        msg = f"Required column {column!r} is missing in row {row_number}"
        raise FieldMissingError(msg, column=column, row_number=row_number)
    value = row[column]
    return "" if value is None else str(value)


def _number(row: Mapping[str, object], column: str, row_number: int) -> float:
    raw = _text(row, column, row_number).strip()
    try:
        value = float(raw)
    except ValueError as exc:
        msg = f"Column {column!r} in row {row_number} is not numeric: {raw!r}"
        raise FieldUnparsableError(msg, column=column, row_number=row_number) from exc
    if not math.isfinite(value):
        msg = f"Column {column!r} in row {row_number} is not finite: {raw!r}"
        raise FieldUnparsableError(msg, column=column, row_number=row_number)
    return value
