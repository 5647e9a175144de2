from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PositionFix(BaseModel):
    """A geolocation fix pushed by the operator's browser."""
    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in degrees")
    accuracy_m: Optional[float] = Field(None, ge=0, description="Reported horizontal accuracy")


class PointModel(BaseModel):
    lat: float
    lon: float


class SessionResultResponse(BaseModel):
    generation: int
    points: List[PointModel]
    point_count: int
    area_m2: Optional[float]
    area_display: str
    perimeter_m: Optional[float]
    error: Optional[str]


class SessionStatusResponse(BaseModel):
    status: str = Field(..., description="idle|tracking|stopped")
    generation: int
    point_count: int
    points: List[PointModel]
    started_at: Optional[float]
    stopped_at: Optional[float]
    last_result: Optional[SessionResultResponse]


class HealthResponse(BaseModel):
    running: bool = Field(..., description="True if frames arrived recently")
    fps: float
    last_frame_age_s: Optional[float] = Field(None, description="Seconds since last frame")
    uptime_seconds: Optional[int]
    session_status: Optional[str]
    position_fix_age_s: Optional[float] = Field(None, description="Age of the latest pushed fix")
    timestamp: float
    extra: Dict[str, Any] = Field(default_factory=dict)
