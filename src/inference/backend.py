"""
Segmentation backend interface.

Backends return a per-pixel integer label buffer in the original frame
coordinate system: shape (height, width), one class label per pixel.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


# Label for pixels no mask covers
BACKGROUND_LABEL = -1


class SegmentationBackend(Protocol):
    def segment(self, frame: np.ndarray) -> np.ndarray:
        ...
