"""
Tracking session models.

A session walks through IDLE -> TRACKING -> STOPPED. The BoundaryTrace lives
for exactly one session: cleared on start, grown while tracking, frozen on stop.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .geo import GeoPoint


# Ordered, append-only list of walked boundary points
BoundaryTrace = List[GeoPoint]


class SessionStatus(str, Enum):
    """Lifecycle state of a tracking session."""
    IDLE = "idle"
    TRACKING = "tracking"
    STOPPED = "stopped"


@dataclass
class SessionState:
    """
    Mutable state of the current tracking session.

    Owned by a single SessionController; nothing else mutates it.

    Attributes:
        status: Current lifecycle state.
        trace: Boundary points collected so far, in walk order.
        generation: Incremented on every start; tags position requests so
            results from an earlier session can be recognized and dropped.
        started_at: Unix timestamp of the last start command.
        stopped_at: Unix timestamp of the last stop command.
    """
    status: SessionStatus = SessionStatus.IDLE
    trace: BoundaryTrace = field(default_factory=list)
    generation: int = 0
    started_at: Optional[float] = None
    stopped_at: Optional[float] = None

    @property
    def is_tracking(self) -> bool:
        return self.status == SessionStatus.TRACKING

    def reset(self) -> None:
        """Begin a fresh session: empty trace, next generation."""
        self.trace = []
        self.generation += 1
        self.status = SessionStatus.TRACKING
        self.started_at = time.time()
        self.stopped_at = None


@dataclass(frozen=True)
class PositionResult:
    """
    A resolved position request travelling back to the controller.

    Exactly one of ``point`` and ``error`` is set.
    """
    generation: int
    point: Optional[GeoPoint] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.point is not None


@dataclass(frozen=True)
class SessionResult:
    """
    Outcome of stopping a session.

    Attributes:
        generation: Session the result belongs to.
        points: Frozen boundary trace (empty when discarded).
        area_m2: Enclosed area in square meters, None if it could not be computed.
        perimeter_m: Closed-ring perimeter in meters, None with the area.
        error: Operator-facing reason when no area was computed.
    """
    generation: int
    points: Tuple[GeoPoint, ...] = ()
    area_m2: Optional[float] = None
    perimeter_m: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.area_m2 is not None

    def formatted_area(self) -> str:
        if self.area_m2 is None:
            return "n/a"
        return f"{self.area_m2:.1f} m²"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "points": [p.to_dict() for p in self.points],
            "point_count": len(self.points),
            "area_m2": self.area_m2,
            "area_display": self.formatted_area(),
            "perimeter_m": self.perimeter_m,
            "error": self.error,
        }
