"""
Geospatial algorithms for lawn area estimation.

- haversine_m: great-circle distance, the single distance primitive
- offer / PointCollector: minimum-spacing boundary point collection
- estimate_area: equirectangular projection + shoelace polygon area
"""

from .distance import EARTH_RADIUS_M, haversine_m
from .area import MIN_POLYGON_POINTS, estimate_area, perimeter_m, project, shoelace_area
from .collector import DEFAULT_MIN_SPACING_M, PointCollector, offer

__all__ = [
    "EARTH_RADIUS_M",
    "haversine_m",
    "MIN_POLYGON_POINTS",
    "estimate_area",
    "perimeter_m",
    "project",
    "shoelace_area",
    "DEFAULT_MIN_SPACING_M",
    "PointCollector",
    "offer",
]
