"""
Inpainting engine.

Wraps an OpenCV-style inpainting primitive (cv2.inpaint by default) and
reports failures as an InpaintResult instead of raising:
- MASK_EMPTY when the mask has no foreground, checked before running,
- INPAINT_EXECUTION_ERROR for any conversion or primitive error.
"""

from __future__ import annotations

from typing import Callable, Optional

import cv2
import numpy as np

from models.synthesis import InpaintResult
from .mask import mask_is_empty

InpaintPrimitive = Callable[[np.ndarray, np.ndarray, float, int], np.ndarray]

INPAINT_METHODS = {
    "telea": cv2.INPAINT_TELEA,
    "ns": cv2.INPAINT_NS,
}


def _to_bgr(frame: np.ndarray) -> np.ndarray:
    """Convert a frame to 3-channel BGR for the primitive."""
    if frame.ndim == 2:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    channels = frame.shape[2]
    if channels == 3:
        return frame
    if channels == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)
    if channels == 1:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    raise ValueError(f"Unsupported channel count: {channels}")


def _restore_layout(result: np.ndarray, like: np.ndarray) -> np.ndarray:
    """Convert a BGR result back to the channel layout of the input frame."""
    if like.ndim == 2:
        return cv2.cvtColor(result, cv2.COLOR_BGR2GRAY)
    channels = like.shape[2]
    if channels == 4:
        out = cv2.cvtColor(result, cv2.COLOR_BGR2BGRA)
        # Keep the source alpha channel.
        out[:, :, 3] = like[:, :, 3]
        return out
    if channels == 1:
        return cv2.cvtColor(result, cv2.COLOR_BGR2GRAY)[:, :, np.newaxis]
    return result


class InpaintingEngine:
    """
    Diffusion-based hole filling over a binary mask.

    Attributes:
        radius: Neighbourhood radius considered around each filled pixel.
        method: "telea" (fast marching) or "ns" (Navier-Stokes).
    """

    def __init__(
        self,
        radius: float = 10.0,
        method: str = "telea",
        primitive: Optional[InpaintPrimitive] = None,
    ):
        if method not in INPAINT_METHODS:
            raise ValueError(f"Unknown inpaint method '{method}', expected one of {sorted(INPAINT_METHODS)}")
        self.radius = radius
        self.method = method
        self._flags = INPAINT_METHODS[method]
        self._primitive: InpaintPrimitive = primitive or cv2.inpaint

    def inpaint(self, frame: np.ndarray, mask: np.ndarray) -> InpaintResult:
        """
        Fill the mask's foreground pixels of `frame`.

        Returns:
            InpaintResult with the filled frame (same shape as `frame`), or a
            tagged failure.
        """
        if mask.shape[:2] != frame.shape[:2]:
            return InpaintResult.execution_error(
                f"mask shape {mask.shape[:2]} does not match frame shape {frame.shape[:2]}"
            )
        if mask_is_empty(mask):
            return InpaintResult.mask_empty()

        try:
            src = _to_bgr(frame)
            hole = mask if mask.ndim == 2 else cv2.cvtColor(mask, cv2.COLOR_BGR2GRAY)
            filled = self._primitive(src, hole, self.radius, self._flags)
            if filled is None or filled.shape[:2] != frame.shape[:2]:
                got = None if filled is None else filled.shape[:2]
                return InpaintResult.execution_error(
                    f"inpaint returned shape {got}, expected {frame.shape[:2]}"
                )
            return InpaintResult.success(_restore_layout(filled, frame))
        except Exception as e:
            return InpaintResult.execution_error(f"{type(e).__name__}: {e}")
