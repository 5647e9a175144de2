"""
Position layer for pluggable geolocation providers.

Each source implements the PositionSource protocol and reports GeoPoints
(or LocationUnavailableError) through callbacks.
"""

from __future__ import annotations

from models.config import PositionConfig

from .base import OnPosition, OnPositionError, PositionSource
from .latest import LatestFixPositionSource
from .replay import ReplayPositionSource


def create_position_source_from_config(position: PositionConfig) -> PositionSource:
    """
    Factory: build a position source from the ``position`` config section.

    - source: "replay" requires replay_path (CSV of lat,lon rows)
    - source: "web" (default) accepts fixes pushed through the HTTP API
    """
    if position.source == "replay":
        if not position.replay_path:
            raise ValueError("position.replay_path is required when position.source is 'replay'")
        return ReplayPositionSource.from_csv(position.replay_path, loop=position.loop)
    if position.source == "web":
        return LatestFixPositionSource(max_age_s=position.max_age_s)
    raise ValueError(f"Unknown position source: {position.source}")


__all__ = [
    "OnPosition",
    "OnPositionError",
    "PositionSource",
    "LatestFixPositionSource",
    "ReplayPositionSource",
    "create_position_source_from_config",
]
