"""
Point geometries tagged with a geodetic datum.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from shapely.geometry import Point

from ..exceptions import GeometryError

DEFAULT_CRS = "EPSG:4326"


@dataclass(frozen=True)
class PointGeometry:
    """A shapely Point in (lon, lat) order plus the CRS it is expressed in."""
    point: Point
    crs: str = DEFAULT_CRS

    @property
    def longitude(self) -> float:
        return self.point.x

    @property
    def latitude(self) -> float:
        return self.point.y

    @property
    def coords(self) -> Tuple[float, float]:
        return self.point.x, self.point.y


def build_point(
    longitude: float,
    latitude: float,
    crs: str = DEFAULT_CRS,
    row_index: Optional[int] = None,
) -> PointGeometry:
    """
    Build a PointGeometry from a decimal (longitude, latitude) pair.

    Raises:
        GeometryError: If either value is non-finite or outside
            [-180, 180] longitude / [-90, 90] latitude
    """
    try:
        lon = float(longitude)
        lat = float(latitude)
    except (TypeError, ValueError) as e:
        raise GeometryError(row_index, longitude, latitude, "not numeric") from e

    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise GeometryError(row_index, longitude, latitude, "non-finite coordinate")
    if not -180.0 <= lon <= 180.0:
        raise GeometryError(row_index, longitude, latitude, "longitude outside [-180, 180]")
    if not -90.0 <= lat <= 90.0:
        raise GeometryError(row_index, longitude, latitude, "latitude outside [-90, 90]")

    return PointGeometry(point=Point(lon, lat), crs=crs)


def build_points(
    coordinates: Iterable,
    crs: str = DEFAULT_CRS,
    row_indices: Optional[Iterable[int]] = None,
) -> Tuple[PointGeometry, ...]:
    """Map ParsedCoordinates to PointGeometries, one per input, same order."""
    coordinates = list(coordinates)
    indices = list(row_indices) if row_indices is not None else range(len(coordinates))
    if len(indices) != len(coordinates):
        raise ValueError("row_indices must match coordinates in length")
    return tuple(
        build_point(c.longitude, c.latitude, crs=crs, row_index=i)
        for c, i in zip(coordinates, indices)
    )
