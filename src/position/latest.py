"""
Latest-fix position source.

Holds the most recent fix pushed from outside (e.g. the operator's phone
posting browser geolocation to the HTTP API) and answers requests with it.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Tuple

from models.errors import LocationUnavailableError
from models.geo import GeoPoint

from .base import OnPosition, OnPositionError, PositionSource


class LatestFixPositionSource(PositionSource):
    """
    Thread-safe holder for the newest position fix.

    ``update`` may be called from web handler threads while the pipeline
    thread calls ``request``.

    Attributes:
        max_age_s: Fixes older than this are treated as unavailable. None disables the check.
    """

    def __init__(self, max_age_s: Optional[float] = 10.0, clock: Callable[[], float] = time.time):
        self.max_age_s = max_age_s
        self._clock = clock
        self._fix: Optional[Tuple[GeoPoint, float]] = None
        self._lock = threading.Lock()

    def update(self, point: GeoPoint) -> None:
        with self._lock:
            self._fix = (point, self._clock())

    def latest(self) -> Optional[GeoPoint]:
        with self._lock:
            return self._fix[0] if self._fix else None

    def fix_age(self) -> Optional[float]:
        with self._lock:
            if self._fix is None:
                return None
            return self._clock() - self._fix[1]

    def request(self, on_result: OnPosition, on_error: OnPositionError) -> None:
        with self._lock:
            fix = self._fix
            now = self._clock()

        if fix is None:
            on_error(LocationUnavailableError("No position fix received yet"))
            return

        point, ts = fix
        age = now - ts
        if self.max_age_s is not None and age > self.max_age_s:
            on_error(LocationUnavailableError(f"Latest fix is stale ({age:.1f}s old)"))
            return

        on_result(point)
