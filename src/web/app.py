"""
FastAPI application factory for the lawn area estimator.

Routes:
- /api/health -> liveness, fps, last frame age
- /api/session* -> start/stop/status of the tracking session
- /api/position -> browser geolocation fixes
- /static/* -> optional static map page (Leaflet etc.), if present
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .routes import api


def create_app() -> FastAPI:
    """Create the FastAPI app and wire routes/static assets."""
    app = FastAPI(
        title="Lawn Area",
        version="0.1.0",
        description="Estimate lawn area by walking its perimeter",
    )

    # The operator's phone browser is served from a different origin during development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")

    static_path = Path("src/web/static")
    if static_path.exists():
        app.mount("/static", StaticFiles(directory=str(static_path), html=True), name="static")

    return app


# Exported application instance for uvicorn
app = create_app()
