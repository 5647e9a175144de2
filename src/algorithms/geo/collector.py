"""
Boundary point collection with a minimum-spacing policy.

Samples closer than the spacing threshold to the last accepted point are
rejected, so a stationary device does not pile up duplicate vertices.
"""

from __future__ import annotations

from dataclasses import dataclass

from models.geo import GeoPoint
from models.session import BoundaryTrace

from .distance import haversine_m


DEFAULT_MIN_SPACING_M = 2.0


def offer(point: GeoPoint, trace: BoundaryTrace, min_spacing_m: float = DEFAULT_MIN_SPACING_M) -> bool:
    """
    Append ``point`` to ``trace`` if it is far enough from the last point.

    The first point of an empty trace is always accepted. The point is not
    validated here; callers pass GeoPoints that already satisfy the range invariant.

    Returns:
        True if the point was appended, False if it was rejected as a near-duplicate.
    """
    if not trace:
        trace.append(point)
        return True

    if haversine_m(trace[-1], point) > min_spacing_m:
        trace.append(point)
        return True

    return False


@dataclass(frozen=True)
class PointCollector:
    """
    ``offer`` bound to a configured minimum spacing.

    Example:
        collector = PointCollector(min_spacing_m=2.0)
        collector.offer(GeoPoint(53.35, -6.26), trace)
    """
    min_spacing_m: float = DEFAULT_MIN_SPACING_M

    def offer(self, point: GeoPoint, trace: BoundaryTrace) -> bool:
        return offer(point, trace, self.min_spacing_m)
