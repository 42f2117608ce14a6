"""
Object Eraser - Detection Module

Detector interface, label/confidence filters, the asynchronous runner and
the backend factory.
"""

from __future__ import annotations

from models.config import DetectionConfig

from .base import DetectionResult, Detector, DetectorUnavailable
from .filter import DetectionFilter, mask_filter, strict_filter
from .async_detector import AsyncDetector


def create_detector_from_config(cfg: DetectionConfig) -> Detector:
    """
    Build the configured detector backend.

    Raises:
        DetectorUnavailable: If the backend is unknown or fails to load.
    """
    if cfg.backend == "yolo":
        from inference.cpu_backend import CpuYoloConfig, UltralyticsCpuBackend

        yolo = cfg.yolo
        return UltralyticsCpuBackend(
            CpuYoloConfig(
                model=yolo.model,
                conf_threshold=yolo.conf_threshold,
                iou_threshold=yolo.iou_threshold,
                max_results=yolo.max_results,
                classes=yolo.classes,
                class_name_overrides=yolo.class_name_overrides,
            )
        )
    raise DetectorUnavailable(f"Unknown detection backend: {cfg.backend}")


__all__ = [
    "AsyncDetector",
    "DetectionFilter",
    "DetectionResult",
    "Detector",
    "DetectorUnavailable",
    "create_detector_from_config",
    "mask_filter",
    "strict_filter",
]
