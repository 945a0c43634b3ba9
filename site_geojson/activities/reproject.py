"""Coordinate reprojection activity.

Converts projected easting/northing pairs (UTM zone 33N by default) to
geographic longitude/latitude (WGS 84 by default) with pyproj.

The transform is pure: no I/O and no shared state. Each reprojector owns
its pyproj ``Transformer``; transformers are not shared between threads,
so concurrent conversions each build their own. Non-finite input
or output never leaks into a feature; it raises ``ReprojectionError``.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from site_geojson.core.constants import UTM33N_PROJ4, WGS84_PROJ4
from site_geojson.core.exceptions import ReprojectionError
from site_geojson.models.site import GeographicCoordinate, ProjectedCoordinate

if TYPE_CHECKING:
    from pyproj import Transformer

logger = logging.getLogger("site_geojson.activities.reproject")

# WGS 84 coordinate bounds
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0


class CoordinateReprojector:
    """Transforms coordinates between a fixed pair of reference systems.

    Args:
        source_crs: Projected CRS definition (proj string, EPSG code, WKT).
        target_crs: Geographic CRS definition.

    Raises:
        ReprojectionError: If either definition is not understood by pyproj.
    """

    __slots__ = ("_transformer", "source_crs", "target_crs")

    def __init__(self, source_crs: str = UTM33N_PROJ4, target_crs: str = WGS84_PROJ4) -> None:
        self.source_crs = source_crs
        self.target_crs = target_crs
        self._transformer = _build_transformer(source_crs, target_crs)

    def reproject(self, coordinate: ProjectedCoordinate) -> GeographicCoordinate:
        """Return the geographic position of ``coordinate``.

        Raises:
            ReprojectionError: If the input or the result is not finite,
                or the result lies outside WGS 84 bounds.
        """
        easting, northing = coordinate
        if not (math.isfinite(easting) and math.isfinite(northing)):
            msg = f"Non-finite projected coordinate ({easting!r}, {northing!r})"
            raise ReprojectionError(msg)

        lon, lat = self._transformer.transform(easting, northing)

        if not (math.isfinite(lon) and math.isfinite(lat)):
            msg = (
                f"Coordinate ({easting}, {northing}) is outside the domain of "
                f"{self.source_crs!r}"
            )
            raise ReprojectionError(msg)
        if not (MIN_LONGITUDE <= lon <= MAX_LONGITUDE and MIN_LATITUDE <= lat <= MAX_LATITUDE):
            msg = f"Reprojected coordinate ({lon}, {lat}) is outside WGS 84 bounds"
            raise ReprojectionError(msg)

        return GeographicCoordinate(longitude=lon, latitude=lat)

    def __repr__(self) -> str:
        return f"CoordinateReprojector({self.source_crs!r}, {self.target_crs!r})"


def reproject_utm_to_wgs84(coordinate: ProjectedCoordinate) -> GeographicCoordinate:
    """Reproject with the default UTM 33N -> WGS 84 pair."""
    return CoordinateReprojector().reproject(coordinate)


def _build_transformer(source_crs: str, target_crs: str) -> Transformer:
    """Build an axis-order-safe (x=easting/longitude first) pyproj transformer."""
    from pyproj import Transformer
    from pyproj.exceptions import CRSError

    try:
        transformer = Transformer.from_crs(source_crs, target_crs, always_xy=True)
    except CRSError as exc:
        msg = f"Unsupported CRS pair {source_crs!r} -> {target_crs!r}: {exc}"
        raise ReprojectionError(msg) from exc

    logger.debug("Transformer created | %s -> %s", source_crs, target_crs)
    return transformer
