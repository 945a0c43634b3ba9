"""Data model for a converted site.

A ``SiteFeature`` represents one spreadsheet row after reprojection: a
point in WGS 84 plus the four text properties shown on the map. It is
the output of the build_features activity and the input to
``site_geojson.models.geojson``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


class ProjectedCoordinate(NamedTuple):
    """Easting/northing pair in metres in the projected source CRS."""

    easting: float
    northing: float


class GeographicCoordinate(NamedTuple):
    """Longitude/latitude pair in degrees in the geographic target CRS."""

    longitude: float
    latitude: float


@dataclass(frozen=True, slots=True)
class SiteFeature:
    """A single site extracted from the spreadsheet.

    Attributes:
        geometry: Reprojected position as ``(lon, lat)``.
        site_id: Value of the ``Lfd. Nr.`` column.
        name: Value of the ``Name `` column.
        address: ``"<street>\\n<postal code> <city>"``.
        owner: Value of the ``Träger bzw. Verantwortlicher`` column.
        row_number: One-based data row this feature came from.
    """

    geometry: GeographicCoordinate
    site_id: str
    name: str
    address: str
    owner: str
    row_number: int = 0

    @property
    def properties(self) -> dict[str, str]:
        """GeoJSON properties in output key order."""
        return {
            "id": self.site_id,
            "name": self.name,
            "address": self.address,
            "owner": self.owner,
        }
