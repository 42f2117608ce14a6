"""
Typed models for the object eraser application.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .synthesis import (
    InpaintFailure,
    InpaintResult,
    RemovalMode,
    SynthesisMethod,
    SynthesizedFrame,
)
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    YoloConfig,
    RemovalConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # Synthesis
    "InpaintFailure",
    "InpaintResult",
    "RemovalMode",
    "SynthesisMethod",
    "SynthesizedFrame",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "YoloConfig",
    "RemovalConfig",
    "WebConfig",
]
