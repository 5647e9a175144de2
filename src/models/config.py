"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    fps: int = 15
    max_retries: int = 3
    rotate: int = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [640, 480]),
            fps=d.get("fps", 15),
            max_retries=d.get("max_retries", 3),
            rotate=d.get("rotate", 0) or 0,
            flip_horizontal=d.get("flip_horizontal", False),
            flip_vertical=d.get("flip_vertical", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "max_retries": self.max_retries,
            "rotate": self.rotate,
            "flip_horizontal": self.flip_horizontal,
            "flip_vertical": self.flip_vertical,
        }


@dataclass
class SegmentationConfig:
    """Segmentation model configuration."""
    backend: str = "ultralytics"
    model: str = ""
    conf_threshold: float = 0.25
    classes: Optional[List[int]] = None
    label_offset: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SegmentationConfig":
        return cls(
            backend=d.get("backend", "ultralytics"),
            model=d.get("model", ""),
            conf_threshold=float(d.get("conf_threshold", 0.25)),
            classes=d.get("classes"),
            label_offset=d.get("label_offset", 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "model": self.model,
            "conf_threshold": self.conf_threshold,
            "classes": self.classes,
            "label_offset": self.label_offset,
        }


@dataclass
class SurfaceConfig:
    """Center-window surface detection thresholds."""
    target_label: int = 21
    window_size: int = 40
    min_pixels: int = 200

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SurfaceConfig":
        return cls(
            target_label=int(d.get("target_label", 21)),
            window_size=int(d.get("window_size", 40)),
            min_pixels=int(d.get("min_pixels", 200)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_label": self.target_label,
            "window_size": self.window_size,
            "min_pixels": self.min_pixels,
        }


@dataclass
class CollectorConfig:
    """Boundary point collection policy."""
    min_spacing_m: float = 2.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CollectorConfig":
        return cls(min_spacing_m=float(d.get("min_spacing_m", 2.0)))

    def to_dict(self) -> Dict[str, Any]:
        return {"min_spacing_m": self.min_spacing_m}


@dataclass
class PositionConfig:
    """Position source configuration."""
    source: str = "web"
    replay_path: Optional[str] = None
    loop: bool = False
    # None disables the staleness check for pushed fixes
    max_age_s: Optional[float] = 10.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PositionConfig":
        return cls(
            source=d.get("source", "web"),
            replay_path=d.get("replay_path"),
            loop=bool(d.get("loop", False)),
            max_age_s=d.get("max_age_s", 10.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "source": self.source,
            "loop": self.loop,
            "max_age_s": self.max_age_s,
        }
        if self.replay_path is not None:
            d["replay_path"] = self.replay_path
        return d


@dataclass
class OutputConfig:
    """Rendered output locations."""
    geojson_path: Optional[str] = "output/lawn.geojson"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OutputConfig":
        return cls(geojson_path=d.get("geojson_path", "output/lawn.geojson"))

    def to_dict(self) -> Dict[str, Any]:
        return {"geojson_path": self.geojson_path}


@dataclass
class WebConfig:
    """Control API server settings."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class PipelineConfig:
    """
    Frame loop settings.

    Attributes:
        max_consecutive_failures: Max frame read failures before stopping.
        stats_log_interval: Seconds between status log messages.
        display: Enable cv2 display window (command line only).
        stop_session_on_exit: Stop a still-tracking session when the loop ends.
    """
    max_consecutive_failures: int = 10
    stats_log_interval: float = 30.0
    display: bool = False
    stop_session_on_exit: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineConfig":
        return cls(
            max_consecutive_failures=int(d.get("max_consecutive_failures", 10)),
            stats_log_interval=float(d.get("stats_log_interval", 30.0)),
            stop_session_on_exit=bool(d.get("stop_session_on_exit", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_consecutive_failures": self.max_consecutive_failures,
            "stats_log_interval": self.stats_log_interval,
            "stop_session_on_exit": self.stop_session_on_exit,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    surface: SurfaceConfig = field(default_factory=SurfaceConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    position: PositionConfig = field(default_factory=PositionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    web: WebConfig = field(default_factory=WebConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    log_path: str = "logs/lawn_area.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera", {}) or {}),
            segmentation=SegmentationConfig.from_dict(d.get("segmentation", {}) or {}),
            surface=SurfaceConfig.from_dict(d.get("surface", {}) or {}),
            collector=CollectorConfig.from_dict(d.get("collector", {}) or {}),
            position=PositionConfig.from_dict(d.get("position", {}) or {}),
            output=OutputConfig.from_dict(d.get("output", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            pipeline=PipelineConfig.from_dict(d.get("pipeline", {}) or {}),
            log_path=d.get("log_path", "logs/lawn_area.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "camera": self.camera.to_dict(),
            "segmentation": self.segmentation.to_dict(),
            "surface": self.surface.to_dict(),
            "collector": self.collector.to_dict(),
            "position": self.position.to_dict(),
            "output": self.output.to_dict(),
            "web": self.web.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
