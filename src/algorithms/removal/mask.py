"""
Mask construction from detection boxes.

A region is a detection box truncated to integer pixels, expanded by a
margin and clamped to the frame. The mask marks every region pixel with 255.
"""

from __future__ import annotations

from typing import Iterable, List

import cv2
import numpy as np

from models.detection import BoundingBox, Detection

MASK_FOREGROUND = 255


def padded_region(bbox: BoundingBox, margin: int, width: int, height: int) -> BoundingBox:
    """
    Compute the removal region for a box.

    Args:
        bbox: Detection box in pixel coordinates.
        margin: Padding in pixels added on every side.
        width: Frame width.
        height: Frame height.

    Returns:
        Integer box clamped to [0, width] x [0, height], right/bottom exclusive.
    """
    return bbox.to_int().expand(margin).clamp(width, height)


def regions_for(
    detections: Iterable[Detection], margin: int, width: int, height: int
) -> List[BoundingBox]:
    return [padded_region(d.bbox, margin, width, height) for d in detections]


def build_mask(
    width: int,
    height: int,
    detections: Iterable[Detection],
    margin: int = 10,
) -> np.ndarray:
    """
    Build a single-channel binary mask for the given detections.

    Overlapping regions union. An empty detection sequence yields an
    all-background mask.
    """
    mask = np.zeros((height, width), dtype=np.uint8)
    for region in regions_for(detections, margin, width, height):
        if region.is_empty:
            continue
        x1, y1, x2, y2 = region.as_int_tuple()
        mask[y1:y2, x1:x2] = MASK_FOREGROUND
    return mask


def mask_is_empty(mask: np.ndarray) -> bool:
    if mask.size == 0:
        return True
    if mask.ndim > 2:
        return not np.any(mask)
    return cv2.countNonZero(mask) == 0
