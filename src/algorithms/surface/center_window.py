"""
Center-window surface detection.

Turns a per-pixel segmentation label buffer into one DetectionSignal per
frame: is the device currently pointed at the target surface?
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

import numpy as np

from models.config import SurfaceConfig
from models.errors import MalformedSegmentationError
from models.signal import DetectionSignal


class SurfaceDetector:
    """
    Counts target-surface pixels in a window centered on the frame.

    Example:
        detector = SurfaceDetector(SurfaceConfig(target_label=21))
        signal = detector.detect(labels, width=640, height=480)
        if signal:
            controller.handle_signal(signal)
    """

    def __init__(self, config: Optional[SurfaceConfig] = None):
        self._config = config or SurfaceConfig()

    @property
    def config(self) -> SurfaceConfig:
        return self._config

    def window_bounds(self, width: int, height: int) -> Tuple[int, int, int, int]:
        """Return (x1, y1, x2, y2) of the center window, clipped to the frame."""
        half = self._config.window_size // 2
        cx, cy = width // 2, height // 2
        x1 = max(cx - half, 0)
        y1 = max(cy - half, 0)
        x2 = min(x1 + self._config.window_size, width)
        y2 = min(y1 + self._config.window_size, height)
        return x1, y1, x2, y2

    def detect(self, labels: Any, width: int, height: int, frame_index: int = 0) -> DetectionSignal:
        """
        Derive the detection signal for one frame.

        Args:
            labels: Label buffer, shaped (height, width) or flat with width*height entries.
            width: Frame width in pixels.
            height: Frame height in pixels.
            frame_index: Index of the frame, carried into the signal.

        Raises:
            MalformedSegmentationError: The buffer is missing or does not match the frame size.
        """
        grid = self._as_grid(labels, width, height)
        x1, y1, x2, y2 = self.window_bounds(width, height)
        window = grid[y1:y2, x1:x2]
        count = int(np.count_nonzero(window == self._config.target_label))
        return DetectionSignal(
            detected=count >= self._config.min_pixels,
            pixel_count=count,
            frame_index=frame_index,
        )

    @staticmethod
    def _as_grid(labels: Any, width: int, height: int) -> np.ndarray:
        if labels is None:
            raise MalformedSegmentationError("Segmentation returned no label buffer")
        if width <= 0 or height <= 0:
            raise MalformedSegmentationError(f"Invalid frame size {width}x{height}")

        arr = np.asarray(labels)
        if arr.ndim == 1:
            if arr.size != width * height:
                raise MalformedSegmentationError(
                    f"Label buffer has {arr.size} entries, expected {width * height}"
                )
            return arr.reshape(height, width)
        if arr.ndim == 2 and arr.shape == (height, width):
            return arr
        raise MalformedSegmentationError(
            f"Label buffer shape {arr.shape} does not match frame {height}x{width}"
        )
