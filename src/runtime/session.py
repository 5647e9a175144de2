"""
Tracking session controller.

Owns the SessionState and is the only code that mutates the boundary trace.
Position requests go out tagged with the session generation; their results
come back through a thread-safe channel that is drained on the controller's
thread, and only applied while tracking and only for the current generation.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any, Dict, List, Optional, Sequence

from algorithms.geo import PointCollector, estimate_area, perimeter_m
from models.errors import InsufficientPointsError, SessionStateError
from models.geo import GeoPoint
from models.session import PositionResult, SessionResult, SessionState, SessionStatus
from models.signal import DetectionSignal
from position.base import PositionSource
from render.geojson import RenderSink


class SessionController:
    """
    Drives one tracking session at a time through IDLE -> TRACKING -> STOPPED.

    Example:
        controller = SessionController(position_source, PointCollector(2.0), [sink])
        controller.start()
        # Each frame:
        controller.handle_signal(signal)
        controller.drain()
        # When the operator is done:
        result = controller.stop()
        print(result.formatted_area())
    """

    def __init__(
        self,
        position_source: PositionSource,
        collector: Optional[PointCollector] = None,
        sinks: Optional[Sequence[RenderSink]] = None,
    ):
        self._position_source = position_source
        self._collector = collector or PointCollector()
        self._sinks: List[RenderSink] = list(sinks or [])
        self._state = SessionState()
        self._results: "queue.Queue[PositionResult]" = queue.Queue()
        self._last_result: Optional[SessionResult] = None
        # Serializes commands issued from web threads against the frame loop
        self._lock = threading.RLock()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def last_result(self) -> Optional[SessionResult]:
        return self._last_result

    def points(self) -> List[GeoPoint]:
        with self._lock:
            return list(self._state.trace)

    def start(self) -> None:
        """Begin a new session, discarding any previous trace and pending results."""
        with self._lock:
            self._discard_pending()
            self._state.reset()
            logging.info(f"Tracking session {self._state.generation} started")

    def stop(self) -> SessionResult:
        """
        Freeze the trace and compute the enclosed area.

        Fewer than three points is reported in the result, not raised; the
        trace is discarded in that case.

        Raises:
            SessionStateError: No session is currently tracking.
        """
        with self._lock:
            if not self._state.is_tracking:
                raise SessionStateError(f"Cannot stop: session is {self._state.status.value}")

            self.drain()
            self._state.status = SessionStatus.STOPPED
            self._state.stopped_at = time.time()
            generation = self._state.generation
            points = tuple(self._state.trace)

            try:
                area = estimate_area(points)
            except InsufficientPointsError as e:
                logging.warning(f"Session {generation} stopped: cannot compute area ({e})")
                self._state.trace = []
                result = SessionResult(generation=generation, error=str(e))
                self._last_result = result
                return result

            result = SessionResult(
                generation=generation,
                points=points,
                area_m2=area,
                perimeter_m=perimeter_m(points),
            )
            self._last_result = result
            logging.info(
                f"Session {generation} stopped: {len(points)} points, "
                f"area={result.formatted_area()}, perimeter={result.perimeter_m:.1f} m"
            )

        self._render(result)
        return result

    def toggle(self) -> Optional[SessionResult]:
        """Start if not tracking, otherwise stop and return the result."""
        with self._lock:
            if self._state.is_tracking:
                return self.stop()
            self.start()
            return None

    def handle_signal(self, signal: DetectionSignal) -> bool:
        """
        React to one frame's detection signal.

        Returns:
            True if a position request was issued.
        """
        if not signal or not self._state.is_tracking:
            return False

        generation = self._state.generation
        self._position_source.request(
            lambda point: self._results.put(PositionResult(generation=generation, point=point)),
            lambda error: self._results.put(PositionResult(generation=generation, error=error)),
        )
        return True

    def drain(self) -> int:
        """
        Apply queued position results in arrival order.

        Returns:
            Number of points appended to the trace.
        """
        added = 0
        with self._lock:
            while True:
                try:
                    result = self._results.get_nowait()
                except queue.Empty:
                    break
                if self._apply(result):
                    added += 1
        return added

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            state = self._state
            return {
                "status": state.status.value,
                "generation": state.generation,
                "point_count": len(state.trace),
                "points": [p.to_dict() for p in state.trace],
                "started_at": state.started_at,
                "stopped_at": state.stopped_at,
                "last_result": self._last_result.to_dict() if self._last_result else None,
            }

    def _apply(self, result: PositionResult) -> bool:
        if not self._state.is_tracking or result.generation != self._state.generation:
            logging.debug(
                f"Dropping stale position result (generation {result.generation}, "
                f"current {self._state.generation}, status {self._state.status.value})"
            )
            return False

        if not result.ok:
            logging.warning(f"Position unavailable: {result.error}")
            return False

        accepted = self._collector.offer(result.point, self._state.trace)
        if accepted:
            logging.debug(
                f"Boundary point {len(self._state.trace)} added: "
                f"({result.point.lat:.6f}, {result.point.lon:.6f})"
            )
        return accepted

    def _discard_pending(self) -> None:
        while True:
            try:
                self._results.get_nowait()
            except queue.Empty:
                return

    def _render(self, result: SessionResult) -> None:
        properties = {
            "area_m2": result.area_m2,
            "perimeter_m": result.perimeter_m,
            "generation": result.generation,
        }
        for sink in self._sinks:
            try:
                sink.render(result.points, result.points, properties)
            except Exception as e:
                logging.warning(f"Render sink {type(sink).__name__} failed: {e}")
