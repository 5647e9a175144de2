"""
GeoJSON rendering of a finished boundary polygon.

Produces a FeatureCollection with one closed Polygon feature (area and
perimeter in its properties) plus one Point feature per boundary marker.
Coordinates are in GeoJSON [lon, lat] order.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional, Protocol, Sequence

from models.geo import GeoPoint


class RenderSink(Protocol):
    def render(
        self,
        polygon: Sequence[GeoPoint],
        markers: Sequence[GeoPoint],
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        ...


def to_feature_collection(
    polygon: Sequence[GeoPoint],
    markers: Sequence[GeoPoint],
    properties: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build a GeoJSON FeatureCollection dict; the polygon ring is closed explicitly."""
    features = []
    if polygon:
        ring = [list(p.as_lonlat()) for p in polygon]
        ring.append(list(polygon[0].as_lonlat()))
        features.append({
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": [ring]},
            "properties": dict(properties or {}),
        })
    for i, p in enumerate(markers):
        features.append({
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": list(p.as_lonlat())},
            "properties": {"index": i},
        })
    return {"type": "FeatureCollection", "features": features}


class GeoJsonRenderSink(RenderSink):
    """Writes each rendered polygon to a GeoJSON file, replacing the previous one."""

    def __init__(self, path: str):
        self.path = path

    def render(
        self,
        polygon: Sequence[GeoPoint],
        markers: Sequence[GeoPoint],
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        out_dir = os.path.dirname(self.path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(to_feature_collection(polygon, markers, properties), f, indent=2)
        logging.info(f"Boundary polygon written to {self.path}")


class WebStateRenderSink(RenderSink):
    """Publishes the rendered polygon to the shared web state for the HTTP API."""

    def __init__(self, web_state: Any):
        self._web_state = web_state

    def render(
        self,
        polygon: Sequence[GeoPoint],
        markers: Sequence[GeoPoint],
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._web_state.set_geojson(to_feature_collection(polygon, markers, properties))
