"""
Exceptions raised by the lawn area estimator.

All of them are recoverable at the frame or session level; the pipeline
logs and continues rather than terminating the process.
"""

from __future__ import annotations


class LawnAreaError(Exception):
    """Base class for all lawn area errors."""


class InsufficientPointsError(LawnAreaError):
    """A polygon needs at least three vertices to enclose an area."""

    def __init__(self, count: int, required: int = 3):
        self.count = count
        self.required = required
        super().__init__(
            f"Need at least {required} points to compute an area, got {count}"
        )


class MalformedSegmentationError(LawnAreaError):
    """Segmentation output does not match the frame it was computed for."""


class LocationUnavailableError(LawnAreaError):
    """The position source could not supply a fix."""


class SessionStateError(LawnAreaError):
    """A session command was issued in a state that does not accept it."""
