"""
Observation layer for pluggable video sources.

This layer abstracts where frames come from (live camera, recorded walk)
from the processing pipeline. Each source implements the ObservationSource
interface and returns FrameData objects.
"""

from __future__ import annotations

from models.config import CameraConfig

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig


def create_source_from_config(camera: CameraConfig, source_id: str = "camera") -> ObservationSource:
    """Factory: build an OpenCV source from the ``camera`` config section."""
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(camera, source_id=source_id))


__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "create_source_from_config",
]
