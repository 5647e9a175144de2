"""
Great-circle distance on a spherical Earth.

Shared by boundary-point deduplication and perimeter measurement.
"""

from __future__ import annotations

import math

from models.geo import GeoPoint


# Mean Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """
    Haversine distance in meters between two points.

    Spherical approximation; good enough for lawn-scale spacing, not for survey work.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1 for near-antipodal points
    h = min(max(h, 0.0), 1.0)
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))
