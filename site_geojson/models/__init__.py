"""Data models and schemas.

Defines the data structures used throughout the pipeline:
- ProjectedCoordinate / GeographicCoordinate: coordinate pairs
- SiteFeature: one reprojected spreadsheet row
- FeatureCollection: the GeoJSON output document
- ConversionResult: explicit success-or-failure outcome of a conversion
"""

from site_geojson.models.geojson import FeatureCollection, GeoJsonFeature, PointGeometry
from site_geojson.models.result import ConversionResult, ConversionState
from site_geojson.models.site import GeographicCoordinate, ProjectedCoordinate, SiteFeature

__all__ = [
    "ConversionResult",
    "ConversionState",
    "FeatureCollection",
    "GeoJsonFeature",
    "GeographicCoordinate",
    "PointGeometry",
    "ProjectedCoordinate",
    "SiteFeature",
]
