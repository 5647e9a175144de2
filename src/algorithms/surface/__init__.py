"""
Surface detection from segmentation output.
"""

from .center_window import SurfaceDetector

__all__ = [
    "SurfaceDetector",
]
