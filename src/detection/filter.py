"""
Detection filtering by label and confidence.

Two filters are used on purpose:
- the inpainting mask is built from label matches only,
- the patch fallback and the annotation overlay additionally require
  confidence > min_confidence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from models.config import RemovalConfig
from models.detection import Detection


@dataclass(frozen=True)
class DetectionFilter:
    """
    Select detections whose label contains `label_substring` (case-insensitive)
    and, when `min_confidence` is set, whose confidence is strictly above it.
    """

    label_substring: str
    min_confidence: Optional[float] = None

    def matches(self, detection: Detection) -> bool:
        if self.label_substring.lower() not in detection.label.lower():
            return False
        if self.min_confidence is not None and not detection.confidence > self.min_confidence:
            return False
        return True

    def select(self, detections: Optional[Iterable[Detection]]) -> List[Detection]:
        """Return the ordered subsequence of matching detections."""
        if not detections:
            return []
        return [d for d in detections if self.matches(d)]


def mask_filter(cfg: RemovalConfig) -> DetectionFilter:
    """Label-only filter used when building the inpainting mask."""
    return DetectionFilter(label_substring=cfg.target_label)


def strict_filter(cfg: RemovalConfig) -> DetectionFilter:
    """Label and confidence filter used for patch fallback and annotation."""
    return DetectionFilter(label_substring=cfg.target_label, min_confidence=cfg.min_confidence)
