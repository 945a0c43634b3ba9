"""Shared conversion constants: single source of truth.

Centralises the spreadsheet column names, coordinate reference system
definitions, delimiters, and artifact suffixes used across the
activities, the orchestrator, and the HTTP boundary.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Coordinate reference systems
# ---------------------------------------------------------------------------

UTM33N_PROJ4: str = "+proj=utm +zone=33 +datum=WGS84 +units=m +no_defs"
"""Projected source CRS of the site directory (EPSG:32633)."""

WGS84_PROJ4: str = "+proj=longlat +datum=WGS84 +no_defs"
"""Geographic target CRS of the emitted GeoJSON (EPSG:4326)."""

# ---------------------------------------------------------------------------
# Spreadsheet columns (header text must match exactly)
# ---------------------------------------------------------------------------

COLUMN_EASTING = "X-Koordinate"
COLUMN_NORTHING = "Y-Koordinate"
COLUMN_ID = "Lfd. Nr."
COLUMN_NAME = "Name "  # trailing space is part of the source header
COLUMN_STREET = "Straße"
COLUMN_POSTAL_CODE = "PLZ"
COLUMN_CITY = "Ort"
COLUMN_OWNER = "Träger bzw. Verantwortlicher"

# ---------------------------------------------------------------------------
# Delimited text
# ---------------------------------------------------------------------------

DEFAULT_SOURCE_DELIMITER = ";"
"""Separator written by the spreadsheet export (locale convention)."""

DEFAULT_TARGET_DELIMITER = ","
"""Separator expected by the tabular decoder."""

DEFAULT_TEXT_ENCODING = "utf-8"

QUOTE_CHAR = '"'

# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

INTERMEDIATE_SUFFIX = ".csv"
OUTPUT_SUFFIX = ".geojson"
