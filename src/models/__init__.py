"""
Typed models for the lawn area estimator.

Plain dataclasses shared by the algorithms, the session controller and the
web layer. Use the from_dict/to_dict adapters to move between YAML/JSON and
typed values.
"""

from .frame import FrameData
from .geo import GeoPoint
from .signal import DetectionSignal
from .session import (
    BoundaryTrace,
    PositionResult,
    SessionResult,
    SessionState,
    SessionStatus,
)
from .errors import (
    LawnAreaError,
    InsufficientPointsError,
    MalformedSegmentationError,
    LocationUnavailableError,
    SessionStateError,
)
from .config import (
    Config,
    CameraConfig,
    SegmentationConfig,
    SurfaceConfig,
    CollectorConfig,
    PositionConfig,
    OutputConfig,
    WebConfig,
    PipelineConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Geo
    "GeoPoint",
    "BoundaryTrace",
    # Detection
    "DetectionSignal",
    # Session
    "PositionResult",
    "SessionResult",
    "SessionState",
    "SessionStatus",
    # Errors
    "LawnAreaError",
    "InsufficientPointsError",
    "MalformedSegmentationError",
    "LocationUnavailableError",
    "SessionStateError",
    # Config
    "Config",
    "CameraConfig",
    "SegmentationConfig",
    "SurfaceConfig",
    "CollectorConfig",
    "PositionConfig",
    "OutputConfig",
    "WebConfig",
    "PipelineConfig",
]
