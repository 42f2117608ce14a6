"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates.

    Right and bottom edges are exclusive when the box is used to index pixels.

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate.
        y2: Bottom edge y coordinate.
    """
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (x1, y1, x2, y2) tuple (truncated toward zero)."""
        return (int(self.x1), int(self.y1), int(self.x2), int(self.y2))

    def to_int(self) -> "BoundingBox":
        return BoundingBox.from_tuple(self.as_int_tuple())

    def expand(self, margin: float) -> "BoundingBox":
        """Grow the box by `margin` pixels on every side."""
        return BoundingBox(
            x1=self.x1 - margin,
            y1=self.y1 - margin,
            x2=self.x2 + margin,
            y2=self.y2 + margin,
        )

    def clamp(self, width: int, height: int) -> "BoundingBox":
        """
        Clamp to the frame extent [0, width] x [0, height].

        A box entirely outside the frame collapses to zero area rather than
        inverting.
        """
        x1 = min(max(0, self.x1), width)
        y1 = min(max(0, self.y1), height)
        x2 = min(max(x1, self.x2), width)
        y2 = min(max(y1, self.y2), height)
        return BoundingBox(x1=x1, y1=y1, x2=x2, y2=y2)

    @classmethod
    def from_tuple(cls, t: Tuple[float, float, float, float]) -> "BoundingBox":
        """Create from (x1, y1, x2, y2) tuple."""
        return cls(x1=t[0], y1=t[1], x2=t[2], y2=t[3])


@dataclass(frozen=True)
class Detection:
    """
    A single detection from an object detector.

    Attributes:
        bbox: Bounding box in pixel coordinates.
        confidence: Detection confidence score (0-1).
        class_id: Optional class ID from the detector.
        class_name: Optional human-readable class name (the label).
    """
    bbox: BoundingBox
    confidence: float = 1.0
    class_id: Optional[int] = None
    class_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.class_name or ""

    @classmethod
    def from_xyxy(
        cls,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        confidence: float = 1.0,
        class_id: Optional[int] = None,
        class_name: Optional[str] = None,
    ) -> "Detection":
        """Create Detection from x1, y1, x2, y2 coordinates."""
        return cls(
            bbox=BoundingBox(x1=x1, y1=y1, x2=x2, y2=y2),
            confidence=confidence,
            class_id=class_id,
            class_name=class_name,
        )
