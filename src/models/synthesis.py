"""
Synthesis result models.

InpaintResult carries either an inpainted frame or a tagged failure so the
caller decides when to route to the patch fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class RemovalMode(str, Enum):
    """Output mode of the synthesis stage."""
    ANNOTATE = "annotate"
    REMOVE = "remove"


class InpaintFailure(str, Enum):
    """Reasons the inpainting engine did not produce a frame."""
    MASK_EMPTY = "mask_empty"
    INPAINT_EXECUTION_ERROR = "inpaint_execution_error"


class SynthesisMethod(str, Enum):
    """How a SynthesizedFrame was produced."""
    INPAINT = "inpaint"
    PATCH = "patch"
    ANNOTATE = "annotate"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class InpaintResult:
    """
    Outcome of a single inpainting attempt.

    Exactly one of `frame` or `failure` is set.
    """
    frame: Optional[np.ndarray] = None
    failure: Optional[InpaintFailure] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.frame is not None

    @classmethod
    def success(cls, frame: np.ndarray) -> "InpaintResult":
        return cls(frame=frame)

    @classmethod
    def mask_empty(cls) -> "InpaintResult":
        return cls(failure=InpaintFailure.MASK_EMPTY, error="mask has no foreground pixels")

    @classmethod
    def execution_error(cls, error: str) -> "InpaintResult":
        return cls(failure=InpaintFailure.INPAINT_EXECUTION_ERROR, error=error)


@dataclass(frozen=True)
class SynthesizedFrame:
    """
    Output of one pipeline run; always the same shape as the input frame.

    Attributes:
        frame: Output pixels.
        mode: Mode the frame was produced in.
        method: Which path produced the pixels.
        failure: Inpainting failure that triggered the fallback, if any.
        regions: Regions patched (patch), annotated (annotate) or masked (inpaint).
        frame_index: Index of the source frame.
        timestamp: Capture timestamp of the source frame.
    """
    frame: np.ndarray
    mode: RemovalMode
    method: SynthesisMethod
    failure: Optional[InpaintFailure] = None
    regions: int = 0
    frame_index: int = 0
    timestamp: float = 0.0

    @property
    def width(self) -> int:
        return self.frame.shape[1]

    @property
    def height(self) -> int:
        return self.frame.shape[0]
