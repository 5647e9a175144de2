"""
Replay position source.

Plays back recorded fixes, one per request. Useful for walking a recorded
video against the GPS log captured with it, and for tests.

CSV format: one ``lat,lon`` pair per row; a header row is skipped if present.
"""

from __future__ import annotations

import csv
import logging
import threading
from typing import Iterable, List

from models.errors import LocationUnavailableError
from models.geo import GeoPoint

from .base import OnPosition, OnPositionError, PositionSource


class ReplayPositionSource(PositionSource):
    """
    Resolves each request synchronously with the next recorded fix.

    Once the recording is exhausted every request fails with
    LocationUnavailableError, unless ``loop`` is set.
    """

    def __init__(self, points: Iterable[GeoPoint], loop: bool = False):
        self._points: List[GeoPoint] = list(points)
        self._loop = loop
        self._pos = 0
        self._lock = threading.Lock()

    @classmethod
    def from_csv(cls, path: str, loop: bool = False) -> "ReplayPositionSource":
        points: List[GeoPoint] = []
        first_row = True
        with open(path, "r", newline="") as f:
            for line_no, row in enumerate(csv.reader(f), start=1):
                if not row or not "".join(row).strip():
                    continue
                is_first, first_row = first_row, False
                try:
                    points.append(GeoPoint.validated(row[0], row[1]))
                except (ValueError, IndexError) as e:
                    if is_first:
                        continue  # header
                    raise ValueError(f"{path}:{line_no}: invalid position row {row!r}: {e}") from e
        logging.info(f"Loaded {len(points)} recorded positions from {path}")
        return cls(points, loop=loop)

    @property
    def remaining(self) -> int:
        with self._lock:
            return max(len(self._points) - self._pos, 0)

    def request(self, on_result: OnPosition, on_error: OnPositionError) -> None:
        with self._lock:
            if self._pos >= len(self._points) and self._loop and self._points:
                self._pos = 0
            if self._pos >= len(self._points):
                point = None
            else:
                point = self._points[self._pos]
                self._pos += 1

        if point is None:
            on_error(LocationUnavailableError("Recorded positions exhausted"))
        else:
            on_result(point)
