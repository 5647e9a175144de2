"""
Geographic point model.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class GeoPoint:
    """
    A latitude/longitude pair in decimal degrees.

    The plain constructor does not validate; use ``GeoPoint.validated`` at
    the edges where raw coordinates enter the system (CSV rows, HTTP bodies).

    Attributes:
        lat: Latitude in degrees, [-90, 90].
        lon: Longitude in degrees, [-180, 180].
    """
    lat: float
    lon: float

    @classmethod
    def validated(cls, lat: float, lon: float) -> "GeoPoint":
        """Create a GeoPoint, raising ValueError for out-of-range coordinates."""
        lat = float(lat)
        lon = float(lon)
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise ValueError(f"Coordinates must be finite, got ({lat}, {lon})")
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"Latitude {lat} out of range [-90, 90]")
        if not -180.0 <= lon <= 180.0:
            raise ValueError(f"Longitude {lon} out of range [-180, 180]")
        return cls(lat=lat, lon=lon)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lon)

    def as_lonlat(self) -> Tuple[float, float]:
        """GeoJSON coordinate order."""
        return (self.lon, self.lat)

    def to_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lon": self.lon}
