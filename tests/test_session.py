"""
Tests for the tracking session controller.
"""

import threading
from unittest.mock import MagicMock

import pytest

from algorithms.geo import PointCollector
from models.errors import LocationUnavailableError, SessionStateError
from models.session import SessionStatus
from models.signal import DetectionSignal
from position.replay import ReplayPositionSource
from runtime.session import SessionController

HIT = DetectionSignal(detected=True, pixel_count=400)
MISS = DetectionSignal(detected=False, pixel_count=3)


class DeferredPositionSource:
    """Holds requests until the test resolves them, like an async geolocation API."""

    def __init__(self):
        self.pending = []

    def request(self, on_result, on_error):
        self.pending.append((on_result, on_error))

    def resolve(self, index, point):
        on_result, _ = self.pending[index]
        on_result(point)

    def fail(self, index, error):
        _, on_error = self.pending[index]
        on_error(error)


def _walk(controller, points):
    for _ in points:
        controller.handle_signal(HIT)
        controller.drain()


class TestLifecycle:
    def test_initially_idle(self):
        controller = SessionController(ReplayPositionSource([]))
        assert controller.status == SessionStatus.IDLE
        assert controller.points() == []

    def test_start_enters_tracking(self):
        controller = SessionController(ReplayPositionSource([]))
        controller.start()
        assert controller.status == SessionStatus.TRACKING
        assert controller.state.generation == 1

    def test_stop_without_start_raises(self):
        controller = SessionController(ReplayPositionSource([]))
        with pytest.raises(SessionStateError):
            controller.stop()

    def test_stop_twice_raises(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        _walk(controller, square_10m)
        controller.stop()
        with pytest.raises(SessionStateError):
            controller.stop()

    def test_restart_clears_trace(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        _walk(controller, square_10m[:2])
        assert len(controller.points()) == 2

        controller.stop()
        controller.start()
        assert controller.points() == []
        assert controller.state.generation == 2

    def test_toggle(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        assert controller.toggle() is None
        assert controller.status == SessionStatus.TRACKING
        _walk(controller, square_10m)
        result = controller.toggle()
        assert result is not None and result.ok
        assert controller.status == SessionStatus.STOPPED

    def test_toggle_blocks_concurrent_stop(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        _walk(controller, square_10m)
        stop = controller.stop
        outcomes = []

        def api_stop():
            try:
                outcomes.append(stop())
            except SessionStateError as e:
                outcomes.append(e)

        def stop_while_api_stops():
            api_thread.start()
            # The API request must wait until toggle has finished
            api_thread.join(timeout=0.2)
            return stop()

        api_thread = threading.Thread(target=api_stop)
        controller.stop = stop_while_api_stops

        result = controller.toggle()
        api_thread.join()

        assert result.ok
        assert len(outcomes) == 1
        assert isinstance(outcomes[0], SessionStateError)


class TestSignals:
    def test_signal_ignored_when_idle(self, square_10m):
        source = ReplayPositionSource(square_10m)
        controller = SessionController(source)
        assert controller.handle_signal(HIT) is False
        assert source.remaining == 4

    def test_negative_signal_does_not_request(self, square_10m):
        source = ReplayPositionSource(square_10m)
        controller = SessionController(source)
        controller.start()
        assert controller.handle_signal(MISS) is False
        assert source.remaining == 4

    def test_positive_signal_adds_point(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        assert controller.handle_signal(HIT) is True
        assert controller.drain() == 1
        assert controller.points() == [square_10m[0]]

    def test_results_apply_only_on_drain(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        controller.handle_signal(HIT)
        assert controller.points() == []
        controller.drain()
        assert len(controller.points()) == 1

    def test_duplicate_positions_rejected(self, offset):
        fixes = [offset(0, 0), offset(0.5, 0), offset(1, 0), offset(3, 0)]
        controller = SessionController(ReplayPositionSource(fixes), PointCollector(2.0))
        controller.start()
        _walk(controller, fixes)
        assert controller.points() == [offset(0, 0), offset(3, 0)]

    def test_position_failure_does_not_abort(self, square_10m):
        source = DeferredPositionSource()
        controller = SessionController(source)
        controller.start()
        controller.handle_signal(HIT)
        controller.handle_signal(HIT)
        source.fail(0, LocationUnavailableError("no fix"))
        source.resolve(1, square_10m[0])
        assert controller.drain() == 1
        assert controller.status == SessionStatus.TRACKING

    def test_results_applied_in_arrival_order(self, offset):
        source = DeferredPositionSource()
        controller = SessionController(source)
        controller.start()
        controller.handle_signal(HIT)
        controller.handle_signal(HIT)
        source.resolve(1, offset(10, 0))
        source.resolve(0, offset(0, 0))
        controller.drain()
        assert controller.points() == [offset(10, 0), offset(0, 0)]


class TestStaleResults:
    def test_result_after_stop_ignored(self, square_10m, offset):
        source = DeferredPositionSource()
        controller = SessionController(source)
        controller.start()
        for p in square_10m:
            controller.handle_signal(HIT)
        for i, p in enumerate(square_10m):
            source.resolve(i, p)
        controller.handle_signal(HIT)
        result = controller.stop()
        assert len(result.points) == 4

        source.resolve(4, offset(50, 50))
        assert controller.drain() == 0
        assert len(controller.points()) == 4

    def test_result_from_previous_session_ignored(self, offset):
        source = DeferredPositionSource()
        controller = SessionController(source)
        controller.start()
        controller.handle_signal(HIT)
        controller.start()
        # Request issued under generation 1 resolves during generation 2
        source.resolve(0, offset(0, 0))
        assert controller.drain() == 0
        assert controller.points() == []

    def test_pending_results_discarded_on_restart(self, offset):
        source = DeferredPositionSource()
        controller = SessionController(source)
        controller.start()
        controller.handle_signal(HIT)
        source.resolve(0, offset(0, 0))
        controller.start()
        assert controller.drain() == 0
        assert controller.points() == []


class TestStop:
    def test_area_computed(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        _walk(controller, square_10m)
        result = controller.stop()
        assert result.ok
        assert result.area_m2 == pytest.approx(100.0, rel=0.03)
        assert result.perimeter_m == pytest.approx(40.0, rel=0.01)
        assert result.points == tuple(square_10m)
        assert result.formatted_area().endswith(" m²")
        assert controller.last_result is result

    def test_stop_drains_pending_results(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        for _ in square_10m:
            controller.handle_signal(HIT)
        result = controller.stop()
        assert len(result.points) == 4

    def test_insufficient_points_reported(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        _walk(controller, square_10m[:2])
        result = controller.stop()
        assert not result.ok
        assert result.area_m2 is None
        assert "at least 3" in result.error
        assert result.formatted_area() == "n/a"
        # Session data is discarded
        assert controller.points() == []
        assert controller.status == SessionStatus.STOPPED

    def test_insufficient_points_not_rendered(self, square_10m):
        sink = MagicMock()
        controller = SessionController(ReplayPositionSource(square_10m), sinks=[sink])
        controller.start()
        controller.stop()
        sink.render.assert_not_called()

    def test_polygon_rendered(self, square_10m):
        sink = MagicMock()
        controller = SessionController(ReplayPositionSource(square_10m), sinks=[sink])
        controller.start()
        _walk(controller, square_10m)
        result = controller.stop()
        sink.render.assert_called_once()
        polygon, markers, properties = sink.render.call_args[0]
        assert list(polygon) == square_10m
        assert list(markers) == square_10m
        assert properties["area_m2"] == result.area_m2

    def test_render_failure_does_not_lose_result(self, square_10m):
        sink = MagicMock()
        sink.render.side_effect = OSError("disk full")
        controller = SessionController(ReplayPositionSource(square_10m), sinks=[sink])
        controller.start()
        _walk(controller, square_10m)
        assert controller.stop().ok


class TestSnapshot:
    def test_snapshot_fields(self, square_10m):
        controller = SessionController(ReplayPositionSource(square_10m))
        controller.start()
        _walk(controller, square_10m[:2])
        snap = controller.snapshot()
        assert snap["status"] == "tracking"
        assert snap["generation"] == 1
        assert snap["point_count"] == 2
        assert snap["points"][0] == {"lat": square_10m[0].lat, "lon": square_10m[0].lon}
        assert snap["last_result"] is None
