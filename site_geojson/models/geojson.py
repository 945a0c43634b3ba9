"""Pydantic models for the GeoJSON document written per conversion.

Only the subset of RFC 7946 the converter emits is modelled: a
``FeatureCollection`` of ``Point`` features with string properties.
The models validate on construction, so an artifact on disk always has
the documented shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Iterable

    from site_geojson.models.site import SiteFeature


class PointGeometry(BaseModel):
    """GeoJSON ``Point`` geometry, coordinates as ``[lon, lat]``."""

    type: Literal["Point"] = "Point"
    coordinates: list[float] = Field(min_length=2, max_length=2)


class SiteProperties(BaseModel):
    """Properties attached to every site feature."""

    id: str
    name: str
    address: str
    owner: str


class GeoJsonFeature(BaseModel):
    """GeoJSON ``Feature`` wrapping a point and its site properties."""

    type: Literal["Feature"] = "Feature"
    geometry: PointGeometry
    properties: SiteProperties

    @classmethod
    def from_site(cls, site: SiteFeature) -> GeoJsonFeature:
        """Build the GeoJSON representation of a ``SiteFeature``."""
        return cls(
            geometry=PointGeometry(
                coordinates=[site.geometry.longitude, site.geometry.latitude]
            ),
            properties=SiteProperties(**site.properties),
        )


class FeatureCollection(BaseModel):
    """GeoJSON ``FeatureCollection``: the conversion output document."""

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[GeoJsonFeature] = Field(default_factory=list)

    @classmethod
    def from_sites(cls, sites: Iterable[SiteFeature]) -> FeatureCollection:
        """Build a collection preserving the order of ``sites``."""
        return cls(features=[GeoJsonFeature.from_site(site) for site in sites])

    def to_json(self) -> str:
        """Serialise with two-space indentation, non-ASCII kept verbatim."""
        return self.model_dump_json(indent=2)
