"""
FrameData model for captured video frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass
class FrameData:
    """
    Metadata and payload for a captured video frame.

    The pixel array is never written in place by the pipeline; every
    synthesis path works on a copy.

    Attributes:
        frame: The raw frame data as a numpy array (BGR, BGRA or grayscale).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix timestamp when frame was captured.
        frame_index: Sequential frame number since start.
        source: Identifier for the camera/video source.
        rotation_degrees: Rotation hint reported by the source (0, 90, 180, 270).
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None
    rotation_degrees: int = 0

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
        rotation_degrees: int = 0,
    ) -> "FrameData":
        """Create FrameData from a numpy array."""
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
            rotation_degrees=rotation_degrees,
        )

    @property
    def shape(self) -> Tuple[int, ...]:
        """Return the array shape, (height, width[, channels])."""
        return self.frame.shape

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)

    @property
    def channels(self) -> int:
        """Channel count; 1 for a 2-D grayscale array."""
        return 1 if self.frame.ndim == 2 else self.frame.shape[2]

    def copy_pixels(self) -> np.ndarray:
        """Independent copy of the pixel array for output frames."""
        return self.frame.copy()
