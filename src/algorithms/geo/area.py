"""
Planar area of a closed latitude/longitude polygon.

Vertices are projected with an equirectangular approximation anchored at the
coordinate origin (no recentering), then fed to the shoelace formula. The
projection is not equal-area; distortion grows with the polygon's angular
extent and its distance from the equator, which is negligible for a polygon
tens of meters across.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from models.errors import InsufficientPointsError
from models.geo import GeoPoint

from .distance import EARTH_RADIUS_M, haversine_m


MIN_POLYGON_POINTS = 3


def project(point: GeoPoint) -> Tuple[float, float]:
    """Project a point to planar (x, y) meters."""
    lat = math.radians(point.lat)
    lon = math.radians(point.lon)
    return (EARTH_RADIUS_M * lon * math.cos(lat), EARTH_RADIUS_M * lat)


def shoelace_area(xy: Sequence[Tuple[float, float]]) -> float:
    """Unsigned area of a cyclic planar polygon; the last vertex joins the first."""
    n = len(xy)
    signed = 0.0
    for i in range(n):
        x1, y1 = xy[i]
        x2, y2 = xy[(i + 1) % n]
        signed += x1 * y2 - x2 * y1
    return abs(signed) / 2.0


def estimate_area(points: Sequence[GeoPoint]) -> float:
    """
    Estimate the enclosed area of a polygon in square meters.

    The polygon is implicitly closed; do not repeat the first point at the end.
    The result does not depend on winding direction or starting vertex.

    Args:
        points: Polygon vertices in walk order.

    Returns:
        Non-negative area in square meters. Collinear input gives 0.

    Raises:
        InsufficientPointsError: Fewer than three points were supplied.
    """
    if len(points) < MIN_POLYGON_POINTS:
        raise InsufficientPointsError(len(points), MIN_POLYGON_POINTS)

    projected: List[Tuple[float, float]] = [project(p) for p in points]
    return shoelace_area(projected)


def perimeter_m(points: Sequence[GeoPoint]) -> float:
    """Length of the closed ring through all points, in meters."""
    n = len(points)
    if n < 2:
        return 0.0
    return sum(haversine_m(points[i], points[(i + 1) % n]) for i in range(n))
