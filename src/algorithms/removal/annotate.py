"""
Detection overlay for annotation mode.
"""

from __future__ import annotations

import math
from typing import Iterable, Tuple

import cv2
import numpy as np

from models.detection import Detection

# Colors (BGR)
COLOR_BOX = (0, 0, 255)      # Red
COLOR_TEXT = (0, 255, 255)   # Yellow

BOX_THICKNESS = 4
LABEL_OFFSET_PX = 10


def format_label(detection: Detection) -> str:
    """Label text, e.g. "bottle (87%)". Halves round up."""
    percent = int(math.floor(detection.confidence * 100 + 0.5))
    return f"{detection.label} ({percent}%)"


def draw_annotations(frame: np.ndarray, detections: Iterable[Detection]) -> Tuple[np.ndarray, int]:
    """
    Draw box outlines and labels on a copy of `frame`.

    Returns:
        (annotated frame, number of detections drawn)
    """
    annotated = frame.copy()
    count = 0
    for detection in detections:
        x1, y1, x2, y2 = detection.bbox.as_int_tuple()
        cv2.rectangle(annotated, (x1, y1), (x2, y2), COLOR_BOX, BOX_THICKNESS)
        cv2.putText(
            annotated,
            format_label(detection),
            (x1, y1 - LABEL_OFFSET_PX),
            cv2.FONT_HERSHEY_SIMPLEX,
            1.0,
            COLOR_TEXT,
            2,
        )
        count += 1
    return annotated, count
