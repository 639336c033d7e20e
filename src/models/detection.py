"""
Detection models for subject detection results.

Boxes are normalized to [0, 1] with the origin at the bottom-left of the
frame. Raster frames are top-left origin, so adapters flip the y axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    An axis-aligned box in normalized frame coordinates.

    Attributes:
        min_x: Left edge (0 = left of frame).
        min_y: Bottom edge (0 = bottom of frame).
        max_x: Right edge.
        max_y: Top edge.
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def mid_x(self) -> float:
        return (self.min_x + self.max_x) / 2

    @property
    def mid_y(self) -> float:
        return (self.min_y + self.max_y) / 2

    @property
    def area(self) -> float:
        return self.width * self.height

    @classmethod
    def from_pixels(
        cls,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        frame_width: int,
        frame_height: int,
    ) -> "BoundingBox":
        """
        Create from top-left origin pixel coordinates (x1, y1, x2, y2).

        Args:
            x1, y1: Top-left corner in pixels.
            x2, y2: Bottom-right corner in pixels.
            frame_width: Frame width in pixels.
            frame_height: Frame height in pixels.
        """
        return cls(
            min_x=x1 / frame_width,
            min_y=1.0 - y2 / frame_height,
            max_x=x2 / frame_width,
            max_y=1.0 - y1 / frame_height,
        )

    def to_pixels(self, frame_width: int, frame_height: int) -> Tuple[int, int, int, int]:
        """Return top-left origin integer pixel coordinates (x1, y1, x2, y2)."""
        return (
            int(round(self.min_x * frame_width)),
            int(round((1.0 - self.max_y) * frame_height)),
            int(round(self.max_x * frame_width)),
            int(round((1.0 - self.min_y) * frame_height)),
        )


@dataclass(frozen=True)
class Detection:
    """
    A single detected subject.

    Attributes:
        bbox: Normalized bounding box.
        confidence: Detection confidence score (0-1).
        class_id: Optional class ID from the detector.
        class_name: Optional human-readable class name.
    """
    bbox: BoundingBox
    confidence: float = 1.0
    class_id: Optional[int] = None
    class_name: Optional[str] = None

    @classmethod
    def from_bounds(
        cls,
        min_x: float,
        min_y: float,
        max_x: float,
        max_y: float,
        confidence: float = 1.0,
        class_id: Optional[int] = None,
        class_name: Optional[str] = None,
    ) -> "Detection":
        """Create Detection from normalized bounds."""
        return cls(
            bbox=BoundingBox(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y),
            confidence=confidence,
            class_id=class_id,
            class_name=class_name,
        )


@dataclass(frozen=True)
class ClassifiedDetection:
    """
    A detection tagged against the tracking region.

    Attributes:
        detection: The underlying detection.
        in_region: Whether the box center lies inside the tracking region.
        is_likely_adult: Whether the box is much taller than its peers.
        is_likely_ref: Whether the torso shows a striped referee jersey.
            Overrides the other labels.
    """
    detection: Detection
    in_region: bool
    is_likely_adult: bool = False
    is_likely_ref: bool = False

    @property
    def bbox(self) -> BoundingBox:
        return self.detection.bbox

    @property
    def label(self) -> str:
        if self.is_likely_ref:
            return "REF"
        if self.in_region:
            return "ADULT?" if self.is_likely_adult else "PLAYER"
        return "COACH" if self.is_likely_adult else "BENCH"

