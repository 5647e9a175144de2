"""
Tests for observation layer.
"""

import time
import pytest
import numpy as np
from unittest.mock import MagicMock, patch

from observation import create_source_from_config
from observation.base import ObservationSource, ObservationConfig
from observation.opencv_source import OpenCVSource, OpenCVSourceConfig
from models.config import CameraConfig
from models.frame import FrameData


class MockSource(ObservationSource):
    """Mock observation source for testing."""

    def __init__(self, config: ObservationConfig, frames: list = None):
        super().__init__(config)
        self._frames = frames or []
        self._pos = 0

    def open(self) -> None:
        self._is_open = True
        self._pos = 0
        self._frame_index = 0

    def read(self) -> FrameData | None:
        if not self._is_open or self._pos >= len(self._frames):
            return None

        frame = self._frames[self._pos]
        self._pos += 1
        self._frame_index += 1
        return FrameData.from_numpy(frame, timestamp=time.time(), frame_index=self._frame_index, source=self.source_id)

    def close(self) -> None:
        self._is_open = False


class TestFrameData:
    def test_from_numpy(self):
        fd = FrameData.from_numpy(np.zeros((480, 640, 3), dtype=np.uint8), timestamp=1.0)
        assert fd.size == (640, 480)
        assert fd.center == (320, 240)


class TestOpenCVSourceConfig:
    def test_from_camera_config(self):
        camera = CameraConfig.from_dict({
            "device_id": "walk.mp4",
            "resolution": [1280, 720],
            "fps": 30,
            "rotate": 90,
            "max_retries": 5,
        })
        config = OpenCVSourceConfig.from_camera_config(camera, source_id="walk-cam")

        assert config.source_id == "walk-cam"
        assert config.device_id == "walk.mp4"
        assert config.resolution == (1280, 720)
        assert config.fps == 30
        assert config.rotate == 90
        assert config.max_retries == 5

    def test_factory(self):
        source = create_source_from_config(CameraConfig(device_id=1), source_id="cam")
        assert isinstance(source, OpenCVSource)
        assert source.device_id == 1
        assert not source.is_open


class TestOpenCVSource:
    def test_reads_and_rotates(self):
        cap = MagicMock()
        cap.isOpened.return_value = True
        cap.read.return_value = (True, np.zeros((480, 640, 3), dtype=np.uint8))

        with patch("observation.opencv_source.cv2.VideoCapture", return_value=cap):
            source = OpenCVSource(OpenCVSourceConfig(device_id="missing.mp4", rotate=90))
            source.open()
            fd = source.read()
            source.close()

        assert fd.width == 480 and fd.height == 640
        assert fd.frame_index == 1
        cap.release.assert_called_once()

    def test_open_failure_raises(self):
        cap = MagicMock()
        cap.isOpened.return_value = False

        with patch("observation.opencv_source.cv2.VideoCapture", return_value=cap), patch("time.sleep"):
            source = OpenCVSource(OpenCVSourceConfig(device_id=0, max_retries=2))
            with pytest.raises(RuntimeError):
                source.open()

    def test_read_failure_returns_none(self):
        cap = MagicMock()
        cap.isOpened.return_value = True
        cap.read.return_value = (False, None)

        with patch("observation.opencv_source.cv2.VideoCapture", return_value=cap):
            source = OpenCVSource(OpenCVSourceConfig(device_id=0))
            source.open()
            assert source.read() is None


class TestMockSource:
    def test_source_lifecycle(self):
        config = ObservationConfig(source_id="test")
        frames = [np.zeros((100, 100, 3), dtype=np.uint8) for _ in range(3)]
        source = MockSource(config, frames)

        assert not source.is_open
        source.open()
        assert source.is_open
        assert source.frame_index == 0

        fd = source.read()
        assert fd is not None
        assert fd.source == "test"
        assert fd.frame_index == 1

        source.close()
        assert not source.is_open

    def test_context_manager(self):
        frames = [np.zeros((50, 50, 3), dtype=np.uint8) for _ in range(2)]

        with MockSource(ObservationConfig(source_id="ctx-test"), frames) as source:
            assert source.is_open
            count = sum(1 for _ in source)
            assert count == 2

        assert not source.is_open

    def test_iterate_closed_source_raises(self):
        source = MockSource(ObservationConfig(), [])
        with pytest.raises(RuntimeError):
            list(source)
