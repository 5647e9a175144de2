"""
Render sinks for finished boundary polygons.
"""

from .geojson import GeoJsonRenderSink, RenderSink, WebStateRenderSink, to_feature_collection

__all__ = [
    "RenderSink",
    "GeoJsonRenderSink",
    "WebStateRenderSink",
    "to_feature_collection",
]
