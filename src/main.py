"""
Lawn area estimator.

Walk the edge of a lawn with the camera pointed at the grass boundary. Each
frame is segmented; while grass fills the center of the view, the current
position is sampled into the boundary trace. Stopping the session closes
the polygon and reports its area.

Usage:
    python src/main.py --config config/config.yaml --display
    python src/main.py --video walk.mp4 --positions walk.csv --auto-start

Arguments:
    --config: Path to configuration file
    --display: Enable visual display ('s' start/stop, 'q' quit)
    --video: Use a recorded video instead of the live camera
    --positions: Replay recorded lat,lon fixes from a CSV file
    --auto-start: Start tracking as soon as the pipeline runs
"""

import os
import sys
import argparse
import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

import yaml
import uvicorn

from algorithms.geo import PointCollector
from algorithms.surface import SurfaceDetector
from inference.cpu_backend import UltralyticsSegmentationBackend, CpuSegmentationConfig
from models.config import Config
from ops.logging import setup_logging
from pipeline.engine import create_engine_from_config
from position import create_position_source_from_config
from render.geojson import GeoJsonRenderSink, WebStateRenderSink
from runtime.context import RuntimeContext
from runtime.session import SessionController
from web.app import create_app
from web.state import state as web_state


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['camera', 'segmentation', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Camera
    camera = config.get('camera', {})
    if 'device_id' not in camera:
        return False, "Missing camera.device_id"
    if not isinstance(camera['device_id'], (int, str)) or isinstance(camera['device_id'], bool):
        return False, "camera.device_id must be an integer (index) or string (file path)"
    if isinstance(camera['device_id'], int) and camera['device_id'] < 0:
        return False, "camera.device_id integer must be non-negative"
    if 'resolution' in camera:
        res = camera['resolution']
        if not isinstance(res, list) or len(res) != 2 or not all(isinstance(x, int) and x > 0 for x in res):
            return False, "camera.resolution must be a list of two positive integers [width, height]"
    if 'fps' in camera and (not isinstance(camera['fps'], int) or camera['fps'] <= 0):
        return False, "camera.fps must be a positive integer"
    if camera.get('rotate', 0) not in (0, 90, 180, 270):
        return False, "camera.rotate must be one of: 0, 90, 180, 270"

    # Segmentation
    segmentation = config.get('segmentation', {}) or {}
    backend = segmentation.get('backend', 'ultralytics')
    if backend != 'ultralytics':
        return False, "segmentation.backend must be: ultralytics"
    if not isinstance(segmentation.get('model'), str) or not segmentation.get('model'):
        return False, "segmentation.model is required"
    if 'conf_threshold' in segmentation:
        conf = segmentation['conf_threshold']
        if not isinstance(conf, (int, float)) or not (0 < conf <= 1):
            return False, "segmentation.conf_threshold must be between 0 and 1"

    # Surface detection thresholds
    surface = config.get('surface', {}) or {}
    if 'target_label' in surface and not isinstance(surface['target_label'], int):
        return False, "surface.target_label must be an integer"
    if 'window_size' in surface and (not isinstance(surface['window_size'], int) or surface['window_size'] <= 0):
        return False, "surface.window_size must be a positive integer"
    if 'min_pixels' in surface and (not isinstance(surface['min_pixels'], int) or surface['min_pixels'] <= 0):
        return False, "surface.min_pixels must be a positive integer"
    window = surface.get('window_size', 40)
    if isinstance(window, int) and surface.get('min_pixels', 200) > window * window:
        return False, "surface.min_pixels cannot exceed window_size squared"

    # Collector
    collector = config.get('collector', {}) or {}
    if 'min_spacing_m' in collector:
        spacing = collector['min_spacing_m']
        if not isinstance(spacing, (int, float)) or isinstance(spacing, bool) or spacing < 0:
            return False, "collector.min_spacing_m must be a non-negative number"

    # Position source
    position = config.get('position', {}) or {}
    source = position.get('source', 'web')
    if source not in ('web', 'replay'):
        return False, "position.source must be one of: web, replay"
    if source == 'replay' and not position.get('replay_path'):
        return False, "position.replay_path is required when position.source is 'replay'"
    if 'max_age_s' in position and position['max_age_s'] is not None and not _is_positive_number(position['max_age_s']):
        return False, "position.max_age_s must be a positive number"

    # Web
    web = config.get('web', {}) or {}
    if 'port' in web and (not isinstance(web['port'], int) or not (0 < web['port'] < 65536)):
        return False, "web.port must be a valid TCP port"

    # Pipeline
    pipeline = config.get('pipeline', {}) or {}
    if 'max_consecutive_failures' in pipeline and (
        not isinstance(pipeline['max_consecutive_failures'], int) or pipeline['max_consecutive_failures'] <= 0
    ):
        return False, "pipeline.max_consecutive_failures must be a positive integer"
    if 'stats_log_interval' in pipeline and not _is_positive_number(pipeline['stats_log_interval']):
        return False, "pipeline.stats_log_interval must be a positive number"

    # Logging
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def apply_cli_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Fold command-line overrides into the loaded config."""
    if args.video:
        config.setdefault('camera', {})['device_id'] = args.video
    if args.positions:
        position = config.setdefault('position', {})
        position['source'] = 'replay'
        position['replay_path'] = args.positions
    if args.no_web:
        config.setdefault('web', {})['enabled'] = False
    return config


def build_context(config: Config) -> RuntimeContext:
    """Wire segmenter, surface detector, position source, render sinks and session."""
    seg = config.segmentation
    segmenter = UltralyticsSegmentationBackend(
        CpuSegmentationConfig(
            model=seg.model,
            conf_threshold=seg.conf_threshold,
            classes=seg.classes,
            label_offset=seg.label_offset,
        )
    )
    position_source = create_position_source_from_config(config.position)

    sinks = [WebStateRenderSink(web_state)]
    if config.output.geojson_path:
        sinks.append(GeoJsonRenderSink(config.output.geojson_path))

    session = SessionController(
        position_source,
        PointCollector(min_spacing_m=config.collector.min_spacing_m),
        sinks,
    )
    web_state.attach(session, position_source)

    return RuntimeContext(
        config=config,
        segmenter=segmenter,
        surface_detector=SurfaceDetector(config.surface),
        session=session,
        web_state=web_state,
        position_source=position_source,
    )


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Lawn area estimator')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--display', action='store_true',
                        help="Enable visual display ('s' start/stop, 'q' quit)")
    parser.add_argument('--video', type=str, default=None,
                        help='Recorded walk video to use instead of the live camera')
    parser.add_argument('--positions', type=str, default=None,
                        help='CSV of recorded lat,lon fixes to replay')
    parser.add_argument('--auto-start', action='store_true',
                        help='Start tracking immediately')
    parser.add_argument('--no-web', action='store_true',
                        help='Do not start the control API server')
    args = parser.parse_args()

    config = apply_cli_overrides(load_config(args.config), args)

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    cfg = Config.from_dict(config)
    setup_logging(cfg.log_path, cfg.log_level)
    logging.info("Starting lawn area estimator")

    try:
        ctx = build_context(cfg)
    except (ImportError, OSError, ValueError) as e:
        logging.error(f"Failed to initialize: {e}")
        sys.exit(1)

    web_state.update_system_stats({"start_time": time.time()})

    if cfg.web.enabled:
        host, port = cfg.web.host, cfg.web.port

        def run_web_app():
            uvicorn.run(create_app(), host=host, port=port, log_level="info")

        web_thread = threading.Thread(target=run_web_app, daemon=True)
        web_thread.start()
        logging.info(f"Control API started on port {port}")

    if args.auto_start:
        ctx.session.start()

    engine = create_engine_from_config(cfg, ctx, display=args.display)
    engine.run()

    result = ctx.session.last_result
    if result is None:
        print("No tracking session was completed.")
        return 0
    if result.ok:
        print(f"Estimated lawn area: {result.formatted_area()} ({len(result.points)} points)")
        return 0
    print(f"Cannot compute area: {result.error}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
