"""
Detection interfaces.

We keep this lightweight so the project can support multiple backends:
- YOLO (CPU via Ultralytics) for dev machines
- stub detectors in tests
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

from models.detection import Detection


class DetectorUnavailable(RuntimeError):
    """Raised when a detector backend cannot be constructed."""


@dataclass(frozen=True)
class DetectionResult:
    """
    Detections for one submitted frame.

    generation identifies the submission so a late result can be recognised
    as stale.
    """

    detections: List[Detection] = field(default_factory=list)
    timestamp: float = 0.0
    generation: int = 0
    frame_index: int = 0


class Detector:
    """Detector interface returning detections in pixel-space."""

    def detect(self, frame: np.ndarray) -> List[Detection]:
        raise NotImplementedError

    def close(self) -> None:
        pass
