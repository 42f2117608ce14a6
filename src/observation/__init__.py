"""
Observation layer for pluggable frame sources.

This layer abstracts where frames come from (camera, video file) from the
processing pipeline. Each source implements the ObservationSource interface
and returns FrameData objects.
"""

from models.config import CameraConfig

from .base import ObservationSource, ObservationConfig
from .opencv_source import OpenCVSource, OpenCVSourceConfig, apply_transforms


def create_source_from_config(camera: CameraConfig, source_id: str = "camera") -> ObservationSource:
    """Build the configured frame source."""
    if camera.backend != "opencv":
        raise ValueError(f"Unsupported camera backend: {camera.backend}")
    return OpenCVSource(OpenCVSourceConfig.from_camera_config(camera, source_id=source_id))


__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "OpenCVSource",
    "OpenCVSourceConfig",
    "apply_transforms",
    "create_source_from_config",
]
