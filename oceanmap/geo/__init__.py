"""
Coordinate conversion and feature construction

Modules:
- coordinates: Degrees-minutes text -> decimal degrees
- geometry: Decimal pairs -> points tagged with a datum
- features: Records + points + tow flags -> FeatureCollection
"""

from .coordinates import (
    ParsedCoordinate,
    detect_separator,
    parse_degrees_minutes,
    parse_coordinate_batch,
    parse_station_coordinates,
)
from .geometry import PointGeometry, build_point, build_points
from .features import (
    StationFeature,
    FeatureCollection,
    derive_tow_flags,
    assemble_features,
)

__all__ = [
    "ParsedCoordinate",
    "detect_separator",
    "parse_degrees_minutes",
    "parse_coordinate_batch",
    "parse_station_coordinates",
    "PointGeometry",
    "build_point",
    "build_points",
    "StationFeature",
    "FeatureCollection",
    "derive_tow_flags",
    "assemble_features",
]
