from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from algorithms.surface import SurfaceDetector
from inference.backend import SegmentationBackend
from models.config import Config
from runtime.session import SessionController


@dataclass
class RuntimeContext:
    """Holds runtime state and service references; avoids global singletons."""

    config: Config
    segmenter: SegmentationBackend
    surface_detector: SurfaceDetector
    session: SessionController
    web_state: Any = None
    position_source: Any = None

    def record_frame(self, fps: float) -> None:
        """Publish frame liveness for the health endpoint."""
        if self.web_state is not None:
            self.web_state.update_system_stats({"fps": fps, "last_frame_ts": time.time()})
