"""
Pipeline module for the lawn area estimator.

The pipeline orchestrates the per-frame flow:
- Frame acquisition from observation sources
- Segmentation and center-window surface detection
- Forwarding detection signals to the tracking session
- Web state updates
"""

from .engine import PipelineEngine, PipelineConfig, PipelineStats, create_engine_from_config

__all__ = [
    "PipelineEngine",
    "PipelineConfig",
    "PipelineStats",
    "create_engine_from_config",
]
