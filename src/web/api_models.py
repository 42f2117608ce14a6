from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field


class ModeResponse(BaseModel):
    mode: str = Field(..., description="annotate|remove")
    removal_enabled: bool


class StatusResponse(BaseModel):
    """Compact status for polling clients."""
    running: bool = Field(..., description="True if results are arriving")
    mode: str = Field(..., description="annotate|remove")
    last_frame_age_s: Optional[float] = Field(None, description="Seconds since last published result")
    fps: float = Field(0.0, description="Published results per second")
    uptime_seconds: int = 0
    frames_submitted: int = 0
    results_applied: int = 0
    stale_results: int = 0
    last_method: Optional[str] = Field(None, description="inpaint|patch|annotate|passthrough")
    last_failure: Optional[str] = Field(None, description="Inpainting failure behind the last fallback")
    last_regions: int = 0
    warnings: list[str] = Field(default_factory=list)
    frame_size: Optional[Dict[str, int]] = None
