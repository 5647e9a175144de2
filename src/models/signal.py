"""
DetectionSignal model: the per-frame "surface at frame center" event.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DetectionSignal:
    """
    Result of checking one frame for the target surface at its center.

    Truthiness follows ``detected`` so callers can write ``if signal:``.

    Attributes:
        detected: True if enough target pixels were found in the center window.
        pixel_count: Number of target pixels counted in the window.
        frame_index: Index of the frame the signal was derived from.
    """
    detected: bool
    pixel_count: int = 0
    frame_index: int = 0

    def __bool__(self) -> bool:
        return self.detected
