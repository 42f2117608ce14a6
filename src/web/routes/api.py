from __future__ import annotations

import time
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response, StreamingResponse

from ..api_models import ModeResponse, StatusResponse
from ..services.frame_service import FrameService
from ..state import state

router = APIRouter()

STALE_AFTER_S = 2.0
OFFLINE_AFTER_S = 10.0


def _compute_warnings(last_frame_age_s: Optional[float]) -> List[str]:
    """
    Thresholds: no result or >10s => pipeline_offline; >2s => pipeline_stale.
    """
    if last_frame_age_s is None or last_frame_age_s > OFFLINE_AFTER_S:
        return ["pipeline_offline"]
    if last_frame_age_s > STALE_AFTER_S:
        return ["pipeline_stale"]
    return []


def _mode_response() -> ModeResponse:
    mode = state.current_mode()
    return ModeResponse(mode=mode.value, removal_enabled=state.removal_enabled)


@router.get("/mode", response_model=ModeResponse)
def get_mode():
    return _mode_response()


@router.post("/mode/toggle", response_model=ModeResponse)
def toggle_mode():
    state.toggle_removal()
    return _mode_response()


@router.get("/frame.jpg")
def latest_frame():
    jpg = FrameService.snapshot_jpeg(state)
    if jpg is None:
        raise HTTPException(status_code=404, detail="No frame processed yet")
    return Response(content=jpg, media_type="image/jpeg")


@router.get("/stream")
def stream():
    return StreamingResponse(
        FrameService.mjpeg_stream(state, fps=state.stream_fps),
        media_type="multipart/x-mixed-replace; boundary=frame",
    )


@router.get("/status", response_model=StatusResponse)
def status():
    stats = state.get_system_stats_copy()
    age = state.last_frame_age()
    warnings = _compute_warnings(age)
    result = state.get_result()

    return StatusResponse(
        running="pipeline_offline" not in warnings,
        mode=state.current_mode().value,
        last_frame_age_s=age,
        fps=float(stats.get("fps", 0) or 0),
        uptime_seconds=int(time.time() - stats.get("start_time", time.time())),
        frames_submitted=stats.get("frames_submitted", 0),
        results_applied=stats.get("results_applied", 0),
        stale_results=stats.get("stale_results", 0),
        last_method=result.method.value if result else None,
        last_failure=result.failure.value if result and result.failure else None,
        last_regions=result.regions if result else 0,
        warnings=warnings,
        frame_size={"width": result.width, "height": result.height} if result else None,
    )
