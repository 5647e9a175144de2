"""
Tests for center-window surface detection.
"""

import numpy as np
import pytest

from algorithms.surface import SurfaceDetector
from models.config import SurfaceConfig
from models.errors import MalformedSegmentationError

GRASS = 21


def _labels(width=640, height=480, fill=0):
    return np.full((height, width), fill, dtype=np.int32)


class TestSurfaceConfig:
    def test_defaults(self):
        cfg = SurfaceConfig()
        assert cfg.target_label == 21
        assert cfg.window_size == 40
        assert cfg.min_pixels == 200

    def test_from_dict(self):
        cfg = SurfaceConfig.from_dict({"target_label": 9, "min_pixels": 50})
        assert cfg.target_label == 9
        assert cfg.window_size == 40
        assert cfg.min_pixels == 50


class TestWindowBounds:
    def test_centered(self):
        detector = SurfaceDetector()
        assert detector.window_bounds(640, 480) == (300, 220, 340, 260)

    def test_clipped_for_tiny_frame(self):
        detector = SurfaceDetector()
        x1, y1, x2, y2 = detector.window_bounds(20, 10)
        assert (x1, y1) == (0, 0)
        assert (x2, y2) == (20, 10)


class TestDetect:
    def test_full_grass_detected(self):
        detector = SurfaceDetector()
        signal = detector.detect(_labels(fill=GRASS), 640, 480, frame_index=7)
        assert signal
        assert signal.pixel_count == 40 * 40
        assert signal.frame_index == 7

    def test_no_grass(self):
        detector = SurfaceDetector()
        signal = detector.detect(_labels(), 640, 480)
        assert not signal
        assert signal.pixel_count == 0

    def test_grass_outside_window_ignored(self):
        labels = _labels()
        labels[:100, :] = GRASS
        signal = SurfaceDetector().detect(labels, 640, 480)
        assert not signal

    def test_threshold_is_inclusive(self):
        labels = _labels()
        # 10 rows x 20 columns inside the window = exactly 200 pixels
        labels[220:230, 300:320] = GRASS
        signal = SurfaceDetector().detect(labels, 640, 480)
        assert signal.pixel_count == 200
        assert signal.detected is True

    def test_just_below_threshold(self):
        labels = _labels()
        labels[220:230, 300:319] = GRASS
        signal = SurfaceDetector().detect(labels, 640, 480)
        assert signal.pixel_count == 190
        assert signal.detected is False

    def test_flat_buffer_accepted(self):
        flat = _labels(fill=GRASS).ravel()
        assert SurfaceDetector().detect(flat, 640, 480)

    def test_custom_label(self):
        detector = SurfaceDetector(SurfaceConfig(target_label=3))
        assert detector.detect(_labels(fill=3), 640, 480)
        assert not detector.detect(_labels(fill=GRASS), 640, 480)


class TestMalformed:
    def test_none_buffer(self):
        with pytest.raises(MalformedSegmentationError):
            SurfaceDetector().detect(None, 640, 480)

    def test_shape_mismatch(self):
        with pytest.raises(MalformedSegmentationError):
            SurfaceDetector().detect(_labels(320, 240), 640, 480)

    def test_flat_size_mismatch(self):
        with pytest.raises(MalformedSegmentationError):
            SurfaceDetector().detect(np.zeros(100), 640, 480)

    def test_three_dimensional(self):
        with pytest.raises(MalformedSegmentationError):
            SurfaceDetector().detect(np.zeros((480, 640, 3)), 640, 480)
