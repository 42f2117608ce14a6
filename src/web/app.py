"""
FastAPI application factory for the object eraser preview.

Routes:
- /api/mode, /api/mode/toggle -> removal toggle
- /api/frame.jpg, /api/stream -> latest synthesized frame (JPEG / MJPEG)
- /api/status -> pipeline status
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import api


def create_app() -> FastAPI:
    """Create the FastAPI app and wire routes."""
    app = FastAPI(
        title="Object Eraser",
        version="0.1.0",
        description="Live object annotation and removal preview",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")
    return app


# Exported application instance for uvicorn
app = create_app()
