"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.geo import GeoPoint  # noqa: E402


# One meter of latitude/longitude in degrees near 53°N (Dublin)
LAT0 = 53.35
LON0 = -6.26
DEG_PER_M_LAT = 1.0 / 111_195.0
DEG_PER_M_LON = DEG_PER_M_LAT / 0.5966


def _offset(north_m: float, east_m: float) -> GeoPoint:
    return GeoPoint(LAT0 + north_m * DEG_PER_M_LAT, LON0 + east_m * DEG_PER_M_LON)


@pytest.fixture
def offset():
    """Build a point displaced from (LAT0, LON0) by (north_m, east_m) meters."""
    return _offset


@pytest.fixture
def square_10m():
    """Vertices of a ~10 m x 10 m plot, counter-clockwise."""
    return [_offset(0, 0), _offset(0, 10), _offset(10, 10), _offset(10, 0)]


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  fps: 15

segmentation:
  backend: "ultralytics"
  model: "models/lawn-seg.pt"

surface:
  target_label: 21
  window_size: 40
  min_pixels: 200

collector:
  min_spacing_m: 2.0

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [640, 480],
            "fps": 15,
        },
        "segmentation": {
            "backend": "ultralytics",
            "model": "models/lawn-seg.pt",
            "conf_threshold": 0.25,
        },
        "surface": {
            "target_label": 21,
            "window_size": 40,
            "min_pixels": 200,
        },
        "collector": {"min_spacing_m": 2.0},
        "position": {"source": "web", "max_age_s": 10.0},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
