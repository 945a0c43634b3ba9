"""Site directory spreadsheet to GeoJSON converter.

Azure Functions service that accepts an ``.xlsx`` site directory with
UTM zone 33N coordinates, reprojects every site to WGS 84, and returns a
GeoJSON FeatureCollection of point features for map rendering.
"""

__version__ = "0.1.0"
