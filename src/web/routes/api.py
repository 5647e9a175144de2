from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException

from models.errors import SessionStateError
from models.geo import GeoPoint

from ..api_models import HealthResponse, PositionFix, SessionResultResponse, SessionStatusResponse
from ..state import state

router = APIRouter()


def _require_session():
    if state.session is None:
        raise HTTPException(status_code=503, detail="Tracking session not initialized")
    return state.session


def _is_running(last_frame_age_s: Optional[float]) -> bool:
    """Frames older than 10s mean the camera loop is not running."""
    return last_frame_age_s is not None and last_frame_age_s <= 10


@router.get("/health", response_model=HealthResponse)
def health():
    now = time.time()
    sys_stats = state.get_system_stats_copy()
    start_time = sys_stats.get("start_time") or None
    last_frame_ts = sys_stats.get("last_frame_ts")
    last_frame_age = now - last_frame_ts if last_frame_ts else None

    fix_age = None
    if state.position_source is not None and hasattr(state.position_source, "fix_age"):
        fix_age = state.position_source.fix_age()

    return {
        "running": _is_running(last_frame_age),
        "fps": float(sys_stats.get("fps", 0) or 0),
        "last_frame_age_s": last_frame_age,
        "uptime_seconds": int(now - start_time) if start_time else None,
        "session_status": state.session.status.value if state.session is not None else None,
        "position_fix_age_s": fix_age,
        "timestamp": now,
    }


@router.get("/session", response_model=SessionStatusResponse)
def session_status():
    return _require_session().snapshot()


@router.post("/session/start", response_model=SessionStatusResponse)
def session_start():
    session = _require_session()
    session.start()
    return session.snapshot()


@router.post("/session/stop", response_model=SessionResultResponse)
def session_stop():
    session = _require_session()
    try:
        result = session.stop()
    except SessionStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return result.to_dict()


@router.get("/session/geojson")
def session_geojson():
    geojson = state.get_geojson()
    if geojson is None:
        raise HTTPException(status_code=404, detail="No boundary polygon rendered yet")
    return geojson


@router.post("/position", status_code=202)
def push_position(fix: PositionFix):
    """Accept a browser geolocation fix; used when position.source is 'web'."""
    source = state.position_source
    if source is None or not hasattr(source, "update"):
        raise HTTPException(status_code=409, detail="Position source does not accept pushed fixes")
    try:
        point = GeoPoint.validated(fix.lat, fix.lon)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    source.update(point)
    logging.debug(f"Position fix received: ({point.lat:.6f}, {point.lon:.6f}) accuracy={fix.accuracy_m}")
    return {"accepted": True}
