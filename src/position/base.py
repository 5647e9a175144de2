"""
PositionSource interface for pluggable geolocation providers.

A request is fire-and-forget: the source calls exactly one of the two
callbacks, possibly later and possibly from another thread. Callers must not
assume results arrive in request order.
"""

from __future__ import annotations

from typing import Callable, Protocol

from models.geo import GeoPoint


OnPosition = Callable[[GeoPoint], None]
OnPositionError = Callable[[Exception], None]


class PositionSource(Protocol):
    def request(self, on_result: OnPosition, on_error: OnPositionError) -> None:
        ...
