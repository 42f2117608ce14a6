"""
Frame and detection builders shared by the tests.
"""

import time

import numpy as np

from models.detection import Detection
from models.frame import FrameData


def make_frame(width: int = 100, height: int = 100, frame_index: int = 1) -> FrameData:
    """
    Frame whose pixels encode their own position: B = x, G = y, R = x + y.

    Lets tests check exactly where copied pixels came from.
    """
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.stack([xs, ys, (xs + ys) % 256], axis=-1).astype(np.uint8)
    return FrameData.from_numpy(pixels, timestamp=time.time(), frame_index=frame_index)


def bottle(x1, y1, x2, y2, confidence=0.9, label="bottle") -> Detection:
    return Detection.from_xyxy(x1, y1, x2, y2, confidence=confidence, class_name=label)
