"""
Neighbour-patch fallback for object removal.

Each region is covered with a same-size block copied from next to it. The
candidates are tried in a fixed order (right, left, top, bottom), each offset
by the region's own width or height and clamped to the frame; the first one
that keeps exactly the region's size wins. Regions without such a donor are
left untouched.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

import numpy as np

from models.detection import BoundingBox, Detection
from .mask import padded_region


def donor_candidates(region: BoundingBox, width: int, height: int) -> List[BoundingBox]:
    """Return clamped donor candidates in priority order: right, left, top, bottom."""
    x1, y1, x2, y2 = region.as_int_tuple()
    w = x2 - x1
    h = y2 - y1
    return [
        BoundingBox(x2, y1, min(width, x2 + w), y2),
        BoundingBox(max(0, x1 - w), y1, x1, y2),
        BoundingBox(x1, max(0, y1 - h), x2, y1),
        BoundingBox(x1, y2, x2, min(height, y2 + h)),
    ]


def find_donor_patch(region: BoundingBox, width: int, height: int) -> Optional[BoundingBox]:
    """First candidate whose clamped size equals the region size, or None."""
    if region.is_empty:
        return None
    for candidate in donor_candidates(region, width, height):
        if candidate.width == region.width and candidate.height == region.height:
            return candidate
    return None


class PatchSynthesizer:
    """Covers removal regions with neighbouring pixels from the source frame."""

    def __init__(self, margin: int = 10):
        self.margin = margin

    def synthesize(
        self, frame: np.ndarray, detections: Iterable[Detection]
    ) -> Tuple[np.ndarray, int]:
        """
        Patch every detection region that has a donor.

        Donor pixels are always read from the unmodified input frame.

        Returns:
            (output frame, number of regions patched)
        """
        height, width = frame.shape[:2]
        result = frame.copy()
        patched = 0

        for detection in detections:
            region = padded_region(detection.bbox, self.margin, width, height)
            donor = find_donor_patch(region, width, height)
            if donor is None:
                logging.debug(f"No donor patch for region {region.as_int_tuple()}, left unmodified")
                continue

            rx1, ry1, rx2, ry2 = region.as_int_tuple()
            dx1, dy1, dx2, dy2 = donor.as_int_tuple()
            result[ry1:ry2, rx1:rx2] = frame[dy1:dy2, dx1:dx2]
            patched += 1

        return result, patched
